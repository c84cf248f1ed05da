"""
Workflow Resolver

Loads a workflow and recursively inlines its sub-workflow steps into a single
flat step sequence, annotating every step with the workflow it came from.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .definition import StepType
from .errors import CircularWorkflowError, InvalidWorkflowDefinitionError
from .store import WorkflowStore

# Deepest chain of nested sub-workflows that is expanded
MAX_NESTING_DEPTH = 64


@dataclass
class ResolvedStep:
    """A leaf step annotated with its provenance."""

    step: Dict[str, Any]
    source_workflow: str
    parent_description: Optional[str] = None
    workflow_path: Tuple[str, ...] = ()

    @property
    def type(self) -> str:
        return self.step.get("type", "")

    @property
    def description(self) -> Optional[str]:
        return self.step.get("description")

    @property
    def is_inlined(self) -> bool:
        """True when the step came from a sub-workflow rather than the root."""
        return len(self.workflow_path) > 1

    def to_dict(self) -> Dict[str, Any]:
        """Step payload with provenance fields added."""
        result = dict(self.step)
        result["sourceWorkflow"] = self.source_workflow
        if self.parent_description is not None:
            result["parentDescription"] = self.parent_description
        if self.is_inlined:
            result["workflowPath"] = list(self.workflow_path)
        return result


@dataclass
class ResolvedWorkflow:
    """A workflow with all sub-workflow steps inlined."""

    name: str
    description: str = ""
    expected_outputs: Any = None
    flattened_steps: List[ResolvedStep] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "expectedOutputs": self.expected_outputs,
            "flattenedSteps": [step.to_dict() for step in self.flattened_steps],
        }


def get_step_list(name: str, data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Get the top-level steps of a loaded definition.

    Raises:
        InvalidWorkflowDefinitionError: If steps are missing, not an array, or empty
    """
    steps = data.get("steps")
    if not isinstance(steps, list):
        raise InvalidWorkflowDefinitionError(
            f"Invalid workflow '{name}': missing or invalid steps array", name
        )
    if not steps:
        raise InvalidWorkflowDefinitionError(
            f"Invalid workflow '{name}': steps array is empty", name
        )
    for position, step in enumerate(steps, 1):
        if not isinstance(step, dict):
            raise InvalidWorkflowDefinitionError(
                f"Invalid workflow '{name}': step {position} must be an object", name
            )
    return steps


class WorkflowResolver:
    """
    Flattens nested workflows.

    Resolution is a pure function of the store's current content. Each branch
    of the expansion carries its own immutable set of visited names, so a
    workflow referenced by two sibling steps is inlined twice, while a
    workflow that references itself through any chain is rejected.
    """

    def __init__(self, store: WorkflowStore):
        self.store = store
        self.logger = logging.getLogger(__name__)

    def resolve(
        self, workflow_name: str, visited: FrozenSet[str] = frozenset()
    ) -> ResolvedWorkflow:
        """
        Resolve a workflow into its flat step sequence.

        Args:
            workflow_name: Name of the workflow to resolve
            visited: Names already on the current resolution path

        Returns:
            ResolvedWorkflow with flattened steps in depth-first order

        Raises:
            WorkflowNotFoundError: If this or a referenced workflow does not exist
            WorkflowParseError: If a definition is not valid JSON
            InvalidWorkflowDefinitionError: If a definition has no usable steps
                or sub-workflows nest deeper than MAX_NESTING_DEPTH
            CircularWorkflowError: If the workflow references itself
        """
        return self._resolve(workflow_name, frozenset(visited), ())

    def _resolve(
        self, workflow_name: str, visited: FrozenSet[str], path: Tuple[str, ...]
    ) -> ResolvedWorkflow:
        if workflow_name in visited:
            raise CircularWorkflowError(workflow_name, list(path))
        if len(path) >= MAX_NESTING_DEPTH:
            raise InvalidWorkflowDefinitionError(
                f"Workflow nesting exceeds {MAX_NESTING_DEPTH} levels at '{workflow_name}' "
                f"(nested under '{path[0]}')",
                workflow_name,
            )

        data = self.store.load(workflow_name)
        steps = get_step_list(workflow_name, data)

        branch_visited = visited | {workflow_name}
        branch_path = path + (workflow_name,)

        flattened: List[ResolvedStep] = []
        for position, step in enumerate(steps, 1):
            if step.get("type") != StepType.WORKFLOW:
                flattened.append(
                    ResolvedStep(
                        step=dict(step),
                        source_workflow=workflow_name,
                        workflow_path=branch_path,
                    )
                )
                continue

            sub_name = step.get("workflow")
            if not isinstance(sub_name, str) or not sub_name:
                raise InvalidWorkflowDefinitionError(
                    f"Invalid workflow '{workflow_name}': step {position} is a "
                    f"workflow step without a 'workflow' name",
                    workflow_name,
                )

            self.logger.debug(
                f"Inlining sub-workflow '{sub_name}' into '{workflow_name}' at step {position}"
            )
            sub_workflow = self._resolve(sub_name, branch_visited, branch_path)
            for sub_step in sub_workflow.flattened_steps:
                flattened.append(
                    ResolvedStep(
                        step=sub_step.step,
                        source_workflow=sub_name,
                        parent_description=step.get("description"),
                        workflow_path=sub_step.workflow_path,
                    )
                )

        expected_outputs = data.get("expectedOutputs")
        if expected_outputs is None:
            expected_outputs = data.get("outputs")

        self.logger.debug(
            f"Resolved workflow '{workflow_name}' into {len(flattened)} steps"
        )
        return ResolvedWorkflow(
            name=data.get("name") or workflow_name,
            description=data.get("description", ""),
            expected_outputs=expected_outputs,
            flattened_steps=flattened,
        )
