"""
Execution Plan

Packages a resolved workflow into an ordered plan an agent can execute in one
go. The plan carries structure only; template substitution is left to the
agent, guided by the instructions bundled with the plan.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .definition import StepType
from .guidance import all_guidance, format_bullets, guidance_for, DATA_FLOW_RULES, TEMPLATE_RULES
from .resolver import ResolvedStep, ResolvedWorkflow

DESCRIPTION_PREVIEW_LENGTH = 60


def short_description(step: Dict[str, Any]) -> str:
    """
    One-line description of a step.

    Uses the explicit description, else the start of a prompt step's template,
    else a generic fallback.
    """
    description = step.get("description")
    if isinstance(description, str) and description.strip():
        return description

    template = step.get("template")
    if step.get("type") == StepType.PROMPT and isinstance(template, str) and template:
        if len(template) > DESCRIPTION_PREVIEW_LENGTH:
            return template[:DESCRIPTION_PREVIEW_LENGTH] + "..."
        return template

    return "No description"


@dataclass
class PlanEntry:
    """One numbered line of an execution plan."""

    index: int
    type: str
    description: str
    source: Optional[str] = None

    def render(self) -> str:
        source = f" (from {self.source})" if self.source else ""
        return f"{self.index}. [{self.type.upper()}] {self.description}{source}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "type": self.type,
            "description": self.description,
            "source": self.source,
        }


@dataclass
class ExecutionPlan:
    """Full-plan view of a resolved workflow."""

    workflow_name: str
    description: str
    entries: List[PlanEntry] = field(default_factory=list)
    steps: List[Dict[str, Any]] = field(default_factory=list)
    initial_data: Any = None
    expected_outputs: Any = None
    guidance: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def total_steps(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.workflow_name,
            "description": self.description,
            "totalSteps": self.total_steps,
            "plan": [entry.to_dict() for entry in self.entries],
            "steps": self.steps,
            "initialData": self.initial_data,
            "expectedOutputs": self.expected_outputs,
            "guidance": self.guidance,
        }

    def render(self) -> str:
        """Render the plan as instructions for the executing agent."""
        expected = (
            json.dumps(self.expected_outputs)
            if self.expected_outputs is not None
            else "Not specified"
        )
        plan_lines = "\n".join(entry.render() for entry in self.entries)

        step_blocks = []
        for entry, payload in zip(self.entries, self.steps):
            block = [f"**Step {entry.index}: {entry.type.upper()}**"]
            if entry.source:
                block.append(f"Source: {entry.source}")
            block.append(json.dumps(payload, indent=2, default=str))
            step_blocks.append("\n".join(block))

        return f"""Execute workflow '{self.workflow_name}': {self.description}

**Execution Plan ({self.total_steps} steps):**
{plan_lines}

**Initial Data:**
{json.dumps(self.initial_data, indent=2, default=str)}

**Expected Final Outputs:** {expected}

---

**EXECUTION INSTRUCTIONS:**

Execute ALL steps sequentially. For each step:

**PROMPT STEPS:**
{format_bullets(guidance_for(StepType.PROMPT.value))}

**MCP STEPS:**
{format_bullets(guidance_for(StepType.MCP.value))}

**DATA FLOW:**
{format_bullets(DATA_FLOW_RULES)}

**TEMPLATE SUBSTITUTION:**
{format_bullets(TEMPLATE_RULES)}

Execute all {self.total_steps} steps now and return the final data object.

**STEPS TO EXECUTE:**

{chr(10).join(step_blocks)}

Begin execution now."""


def build_plan(resolved: ResolvedWorkflow, initial_data: Any = None) -> ExecutionPlan:
    """
    Build the execution plan of a resolved workflow.

    Args:
        resolved: Workflow with flattened steps
        initial_data: Caller-supplied inputs, echoed unchanged

    Returns:
        ExecutionPlan
    """
    entries = []
    payloads = []
    for index, step in enumerate(resolved.flattened_steps, 1):
        entries.append(_plan_entry(index, step))
        payloads.append(step.to_dict())

    return ExecutionPlan(
        workflow_name=resolved.name,
        description=resolved.description,
        entries=entries,
        steps=payloads,
        initial_data=initial_data,
        expected_outputs=resolved.expected_outputs,
        guidance=all_guidance(),
    )


def _plan_entry(index: int, step: ResolvedStep) -> PlanEntry:
    return PlanEntry(
        index=index,
        type=str(step.type) if step.type else "unknown",
        description=short_description(step.step),
        source=step.source_workflow if step.is_inlined else None,
    )
