"""
Workflow Engine

Public entry points for resolving, planning, validating and advancing
workflows. Every operation returns a result object; workflow errors are
logged and reported as FailureResult data, never raised to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .advancer import AdvanceResult, FailureResult, StepwiseAdvancer
from .definition import WorkflowDefinition
from .errors import WorkflowError
from .plan import ExecutionPlan, build_plan
from .resolver import ResolvedWorkflow, WorkflowResolver
from .store import WorkflowStore


@dataclass
class ResolutionResult:
    """Outcome of resolving a workflow."""

    workflow_name: str
    workflow: Optional[ResolvedWorkflow] = None
    failure: Optional[FailureResult] = None

    @property
    def success(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        if self.failure:
            return self.failure.to_dict()
        return {"success": True, **self.workflow.to_dict()}


@dataclass
class PlanResult:
    """Outcome of building a full execution plan."""

    workflow_name: str
    plan: Optional[ExecutionPlan] = None
    failure: Optional[FailureResult] = None

    @property
    def success(self) -> bool:
        return self.failure is None

    def to_dict(self) -> Dict[str, Any]:
        if self.failure:
            return self.failure.to_dict()
        return {"success": True, **self.plan.to_dict()}

    def render(self) -> str:
        if self.failure:
            return self.failure.render("loading")
        return self.plan.render()


@dataclass
class ValidationResult:
    """Structural check of a workflow and everything it references."""

    workflow_name: str
    errors: List[str] = field(default_factory=list)
    step_count: int = 0
    flattened_step_count: int = 0
    sub_workflows: List[str] = field(default_factory=list)
    failure: Optional[FailureResult] = None

    @property
    def success(self) -> bool:
        return self.failure is None and not self.errors

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "success": self.success,
            "workflow": self.workflow_name,
            "valid": self.success,
            "errors": self.errors,
            "stepCount": self.step_count,
            "flattenedStepCount": self.flattened_step_count,
            "subWorkflows": self.sub_workflows,
        }
        if self.failure:
            result["kind"] = self.failure.kind.value
            result["error"] = self.failure.message
            result["hints"] = self.failure.hints
        elif self.errors:
            result["error"] = "; ".join(self.errors)
        return result


class WorkflowEngine:
    """
    Workflow orchestration engine.

    Resolves nested workflows, builds execution plans, and advances runs one
    step at a time. The engine holds no state besides its store; every call
    reads the current definitions.
    """

    def __init__(self, store: WorkflowStore):
        self.store = store
        self.resolver = WorkflowResolver(store)
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_env(cls) -> "WorkflowEngine":
        return cls(WorkflowStore.from_env())

    def _failure(self, error: WorkflowError, workflow_name: str) -> FailureResult:
        self.logger.warning(
            f"Workflow '{workflow_name}' failed ({error.kind.value}): {error.message}"
        )
        return FailureResult.from_error(
            error,
            workflow_name,
            self.store.describe_location(error.workflow_name or workflow_name),
        )

    def resolve(self, workflow_name: str) -> ResolutionResult:
        """
        Flatten a workflow and its sub-workflows.

        Args:
            workflow_name: Workflow to resolve

        Returns:
            ResolutionResult with the resolved workflow or a failure
        """
        try:
            workflow = self.resolver.resolve(workflow_name)
        except WorkflowError as e:
            return ResolutionResult(workflow_name, failure=self._failure(e, workflow_name))
        return ResolutionResult(workflow_name, workflow=workflow)

    def plan(self, workflow_name: str, initial_data: Any = None) -> PlanResult:
        """
        Build the full execution plan of a workflow.

        Args:
            workflow_name: Workflow to plan
            initial_data: Inputs of the run, echoed unchanged in the plan

        Returns:
            PlanResult with the plan or a failure
        """
        resolution = self.resolve(workflow_name)
        if not resolution.success:
            return PlanResult(workflow_name, failure=resolution.failure)

        plan = build_plan(resolution.workflow, initial_data)
        self.logger.info(
            f"Built plan for workflow '{workflow_name}' with {plan.total_steps} steps"
        )
        return PlanResult(workflow_name, plan=plan)

    def advance(
        self,
        workflow_name: str,
        step_index: Any = None,
        current_data: Any = None,
        flatten: bool = False,
    ) -> AdvanceResult:
        """Advance a run by one step. See StepwiseAdvancer.advance."""
        advancer = StepwiseAdvancer(self.store, flatten=flatten)
        return advancer.advance(workflow_name, step_index, current_data)

    def validate(self, workflow_name: str) -> ValidationResult:
        """
        Check a workflow's structure, its sub-workflows and cycles.

        Shape problems are collected for the workflow and every workflow it
        reaches. Load and resolution failures are reported as the failure.
        """
        result = ValidationResult(workflow_name)

        pending = [workflow_name]
        seen = set()
        while pending:
            name = pending.pop(0)
            if name in seen:
                continue
            seen.add(name)

            try:
                data = self.store.load(name)
            except WorkflowError as e:
                result.failure = self._failure(e, workflow_name)
                return result

            definition = WorkflowDefinition.from_dict(
                {**data, "name": data.get("name") or name}
            )
            prefix = "" if name == workflow_name else f"{name}: "
            result.errors.extend(prefix + error for error in definition.validate())

            sub_names = definition.get_sub_workflow_names()
            if name == workflow_name:
                result.step_count = len(definition.steps)
                result.sub_workflows = list(dict.fromkeys(sub_names))
            pending.extend(sub_names)

        resolution = self.resolve(workflow_name)
        if not resolution.success:
            result.failure = resolution.failure
            return result

        result.flattened_step_count = len(resolution.workflow.flattened_steps)
        return result
