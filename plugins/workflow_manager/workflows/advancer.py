"""
Stepwise Advancer

Hands out a workflow one step at a time. The advancer is a pointer into the
step array: given a workflow name, a 1-based step index and the data
accumulated so far, it returns the step to run next, a completion notice once
the index runs past the end, or a failure result. It keeps no state between
calls; the caller carries the index and data forward.
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import InvalidStepIndexError, WorkflowError, WorkflowErrorKind
from .guidance import format_bullets, guidance_for, step_placeholders
from .resolver import WorkflowResolver, get_step_list
from .store import WorkflowStore


class AdvancerState(str, Enum):
    """State a workflow run is in after an advance call."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class NextStepInstruction:
    """Instructions for running one step."""

    workflow_name: str
    step_index: int
    total_steps: int
    step: Dict[str, Any]
    current_data: Any
    guidance: List[str]
    next_index: int
    placeholders: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    state: AdvancerState = AdvancerState.RUNNING
    previous_state: AdvancerState = AdvancerState.RUNNING
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "state": self.state.value,
            "previousState": self.previous_state.value,
            "workflow": self.workflow_name,
            "stepIndex": self.step_index,
            "totalSteps": self.total_steps,
            "step": self.step,
            "currentData": self.current_data,
            "guidance": self.guidance,
            "placeholders": self.placeholders,
            "missingFields": self.missing_fields,
            "nextIndex": self.next_index,
        }

    def render(self) -> str:
        missing = ""
        if self.missing_fields:
            missing = (
                "\n**Note:** these template fields are not in the current data yet: "
                f"{', '.join(self.missing_fields)}. Continue with the available data.\n"
            )
        return f"""You are running step {self.step_index} of {self.total_steps} in workflow '{self.workflow_name}'.

**Step Definition:**
{json.dumps(self.step, indent=2, default=str)}

**Current Inputs:**
{json.dumps(self.current_data, indent=2, default=str)}
{missing}
**How to execute this step:**
{format_bullets(self.guidance)}

**Instructions:**
1. Execute the current step based on its type and definition
2. Transform the inputs according to the step's requirements
3. Generate outputs that match the step's output schema
4. After completing this step, run workflow '{self.workflow_name}' again with step={self.next_index} and the full data object (previous fields plus the new outputs)

Please execute this step now."""


@dataclass
class CompletionNotice:
    """Terminal result once every step has run. The data is echoed verbatim."""

    workflow_name: str
    total_steps: int
    final_data: Any
    state: AdvancerState = AdvancerState.COMPLETE
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "state": self.state.value,
            "workflow": self.workflow_name,
            "totalSteps": self.total_steps,
            "finalData": self.final_data,
        }

    def render(self) -> str:
        return (
            f"Workflow '{self.workflow_name}' run successfully. All {self.total_steps} "
            f"steps have been completed. Final outputs are: "
            f"{json.dumps(self.final_data, default=str)}"
        )


@dataclass
class FailureResult:
    """A failure reported as data rather than raised."""

    kind: WorkflowErrorKind
    workflow_name: Optional[str]
    message: str
    hints: List[str] = field(default_factory=list)
    state: AdvancerState = AdvancerState.FAILED
    success: bool = False

    @classmethod
    def from_error(
        cls, error: WorkflowError, workflow_name: Optional[str], store_root: Optional[str] = None
    ) -> "FailureResult":
        return cls(
            kind=error.kind,
            # Report the workflow the caller asked for; the message names the culprit
            workflow_name=workflow_name or error.workflow_name,
            message=error.message,
            hints=error.remediation_hints(store_root),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "state": self.state.value,
            "kind": self.kind.value,
            "workflow": self.workflow_name,
            "error": self.message,
            "hints": self.hints,
        }

    def render(self, action: str = "running") -> str:
        hints = "\n".join(f"{i}. {hint}" for i, hint in enumerate(self.hints, 1))
        text = f"Error {action} workflow '{self.workflow_name}': {self.message}"
        if hints:
            text += f"\n\n**Troubleshooting:**\n{hints}"
        return text


AdvanceResult = Union[NextStepInstruction, CompletionNotice, FailureResult]


def parse_step_index(step_index: Any) -> int:
    """
    Normalize a requested step index.

    ``None`` and empty strings mean the first step. Strings are parsed as
    integers, as MCP prompt arguments always arrive as text.

    Raises:
        InvalidStepIndexError: If the index is not an integer or is below 1
    """
    if step_index is None or (isinstance(step_index, str) and not step_index.strip()):
        return 1

    if isinstance(step_index, bool):
        raise InvalidStepIndexError(f"Step number must be an integer, got {step_index!r}")

    if isinstance(step_index, str):
        try:
            step_index = int(step_index.strip())
        except ValueError:
            raise InvalidStepIndexError(
                f"Step number must be an integer, got {step_index!r}"
            )
    elif isinstance(step_index, float):
        if not step_index.is_integer():
            raise InvalidStepIndexError(
                f"Step number must be an integer, got {step_index!r}"
            )
        step_index = int(step_index)
    elif not isinstance(step_index, int):
        raise InvalidStepIndexError(f"Step number must be an integer, got {step_index!r}")

    if step_index < 1:
        raise InvalidStepIndexError("Step number must be greater than 0.")
    return step_index


class StepwiseAdvancer:
    """
    Incremental workflow driver.

    By default steps are indexed over the workflow's own top-level ``steps``
    array, so a workflow step is handed out as a single step that the agent
    runs by driving the sub-workflow. With ``flatten=True`` the index runs over
    the resolver's flattened sequence instead, matching the full-plan view.
    """

    def __init__(self, store: WorkflowStore, flatten: bool = False):
        self.store = store
        self.flatten = flatten
        self.logger = logging.getLogger(__name__)

    def advance(
        self,
        workflow_name: str,
        step_index: Any = None,
        current_data: Any = None,
    ) -> AdvanceResult:
        """
        Move a run forward by one step.

        Args:
            workflow_name: Workflow to run
            step_index: 1-based index of the step to run, defaults to 1
            current_data: Data accumulated so far, passed through unchanged

        Returns:
            NextStepInstruction, CompletionNotice or FailureResult
        """
        try:
            index = parse_step_index(step_index)
            steps = self._load_steps(workflow_name)
        except WorkflowError as e:
            self.logger.warning(f"Cannot advance workflow '{workflow_name}': {e.message}")
            location = self.store.describe_location(e.workflow_name or workflow_name)
            return FailureResult.from_error(e, workflow_name, location)

        total = len(steps)
        if index > total:
            self.logger.info(
                f"Workflow '{workflow_name}' complete after {total} steps"
            )
            return CompletionNotice(
                workflow_name=workflow_name,
                total_steps=total,
                final_data=current_data,
            )

        step = steps[index - 1]
        placeholders = step_placeholders(step)
        available = current_data if isinstance(current_data, dict) else {}
        missing = [name for name in placeholders if name not in available]

        self.logger.debug(
            f"Advancing workflow '{workflow_name}' to step {index}/{total} ({step.get('type')})"
        )
        return NextStepInstruction(
            workflow_name=workflow_name,
            step_index=index,
            total_steps=total,
            step=step,
            current_data=current_data,
            guidance=guidance_for(step.get("type")),
            next_index=index + 1,
            placeholders=placeholders,
            missing_fields=missing,
            previous_state=AdvancerState.IDLE if index == 1 else AdvancerState.RUNNING,
        )

    def _load_steps(self, workflow_name: str) -> List[Dict[str, Any]]:
        if self.flatten:
            resolved = WorkflowResolver(self.store).resolve(workflow_name)
            return [step.to_dict() for step in resolved.flattened_steps]

        data = self.store.load(workflow_name)
        return [dict(step) for step in get_step_list(workflow_name, data)]
