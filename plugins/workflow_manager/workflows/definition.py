"""
Workflow Definition

Parse, validate, and represent workflow definitions stored as JSON.
"""

import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .errors import WorkflowParseError

WORKFLOW_NAME_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def is_valid_workflow_name(name: Any) -> bool:
    """Check that a workflow name is kebab-case."""
    return isinstance(name, str) and bool(WORKFLOW_NAME_PATTERN.match(name))


class StepType(str, Enum):
    """Workflow step types."""

    PROMPT = "prompt"
    MCP = "mcp"
    WORKFLOW = "workflow"


@dataclass
class StepSpec:
    """Workflow step definition."""

    type: str
    description: Optional[str] = None

    # Prompt step specific
    template: Optional[str] = None
    outputs: Any = None
    hints: Optional[str] = None

    # MCP step specific
    tool: Optional[str] = None
    input_mapping: Dict[str, Any] = field(default_factory=dict)

    # Workflow step specific
    workflow: Optional[str] = None

    # Original mapping, every field preserved
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StepSpec":
        """
        Create from dictionary.

        Both spellings found in stored definitions are accepted:
        ``outputs``/``expectedOutputs`` and ``inputMapping``/``inputs``.

        Args:
            data: Step definition dictionary

        Returns:
            StepSpec instance
        """
        outputs = data.get("outputs")
        if outputs is None:
            outputs = data.get("expectedOutputs")

        input_mapping = data.get("inputMapping")
        if input_mapping is None:
            input_mapping = data.get("inputs", {})

        return cls(
            type=data.get("type", ""),
            description=data.get("description"),
            template=data.get("template"),
            outputs=outputs,
            hints=data.get("hints"),
            tool=data.get("tool"),
            input_mapping=input_mapping if isinstance(input_mapping, dict) else {},
            workflow=data.get("workflow"),
            raw=dict(data),
        )

    def validate(self, position: Optional[int] = None) -> List[str]:
        """
        Validate the structural shape of the step.

        Args:
            position: 1-based position used to label errors

        Returns:
            List of validation errors (empty if valid)
        """
        label = f"Step {position}" if position is not None else "Step"
        valid_types = [t.value for t in StepType]

        if self.type not in valid_types:
            return [
                f"{label} has invalid type '{self.type}'. "
                f"Must be one of: {', '.join(valid_types)}"
            ]

        errors = []
        if self.type == StepType.PROMPT:
            if not isinstance(self.template, str) or not self.template.strip():
                errors.append(f"{label}: prompt step must specify 'template'")
        elif self.type == StepType.MCP:
            if not isinstance(self.tool, str) or not self.tool.strip():
                errors.append(f"{label}: mcp step must specify 'tool'")
            if "workflow" in self.raw:
                errors.append(f"{label}: mcp step cannot also reference a workflow")
        elif self.type == StepType.WORKFLOW:
            if not isinstance(self.workflow, str) or not self.workflow.strip():
                errors.append(f"{label}: workflow step must specify 'workflow'")
            if "tool" in self.raw:
                errors.append(f"{label}: workflow step cannot also call a tool")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Return the step exactly as it was defined."""
        return dict(self.raw) if self.raw else {"type": self.type}


@dataclass
class WorkflowDefinition:
    """
    Workflow definition.

    Represents a complete workflow parsed from its stored JSON document.
    """

    name: str
    description: str = ""
    inputs: Dict[str, Any] = field(default_factory=dict)
    expected_outputs: Any = None
    steps: List[StepSpec] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, json_str: str, name: Optional[str] = None) -> "WorkflowDefinition":
        """
        Parse workflow from a JSON string.

        Args:
            json_str: JSON workflow definition
            name: Name the workflow is stored under, used when the document has none

        Returns:
            WorkflowDefinition instance

        Raises:
            WorkflowParseError: If the JSON is invalid or not an object
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise WorkflowParseError(f"Invalid JSON: {e}", name)

        if not isinstance(data, dict):
            raise WorkflowParseError("Workflow definition must be a JSON object", name)

        if name and not data.get("name"):
            data = {**data, "name": name}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowDefinition":
        """
        Create from dictionary.

        Args:
            data: Workflow definition dictionary

        Returns:
            WorkflowDefinition instance
        """
        expected_outputs = data.get("expectedOutputs")
        if expected_outputs is None:
            expected_outputs = data.get("outputs")

        inputs = data.get("inputs")
        if inputs is None:
            inputs = data.get("initialInputs", {})

        raw_steps = data.get("steps")
        steps = []
        if isinstance(raw_steps, list):
            steps = [
                StepSpec.from_dict(step_data)
                for step_data in raw_steps
                if isinstance(step_data, dict)
            ]

        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            inputs=inputs if isinstance(inputs, dict) else {},
            expected_outputs=expected_outputs,
            steps=steps,
            raw=dict(data),
        )

    def validate(self) -> List[str]:
        """
        Validate workflow definition.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.name:
            errors.append("Workflow must have a name")
        elif not is_valid_workflow_name(self.name):
            errors.append(f"Workflow name '{self.name}' must be kebab-case")

        raw_steps = self.raw.get("steps", self.steps) if self.raw else self.steps
        if not isinstance(raw_steps, list):
            errors.append("Workflow 'steps' must be an array")
            return errors
        if not raw_steps:
            errors.append("Workflow must have at least one step")

        # Positions follow the stored array, including entries that are not objects
        for position, step_data in enumerate(raw_steps, 1):
            if isinstance(step_data, StepSpec):
                step = step_data
            elif isinstance(step_data, dict):
                step = StepSpec.from_dict(step_data)
            else:
                errors.append(f"Step {position} must be an object")
                continue

            errors.extend(step.validate(position))
            if step.type == StepType.WORKFLOW and step.workflow == self.name:
                errors.append(
                    f"Step {position} references the workflow '{self.name}' itself"
                )

        return errors

    def get_sub_workflow_names(self) -> List[str]:
        """Names of workflows referenced directly by workflow steps, in order."""
        return [
            step.workflow
            for step in self.steps
            if step.type == StepType.WORKFLOW and isinstance(step.workflow, str)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Returns:
            Dictionary representation
        """
        if self.raw:
            return dict(self.raw)

        result: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "steps": [step.to_dict() for step in self.steps],
        }
        if self.inputs:
            result["inputs"] = self.inputs
        if self.expected_outputs is not None:
            result["expectedOutputs"] = self.expected_outputs
        return result

    def __repr__(self) -> str:
        """String representation."""
        return f"WorkflowDefinition(name='{self.name}', steps={len(self.steps)})"
