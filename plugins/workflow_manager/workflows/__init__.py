"""Workflow resolution and execution orchestration."""

from .errors import (
    WorkflowErrorKind,
    WorkflowError,
    WorkflowNotFoundError,
    WorkflowParseError,
    InvalidWorkflowDefinitionError,
    CircularWorkflowError,
    InvalidStepIndexError,
)
from .definition import StepType, StepSpec, WorkflowDefinition, is_valid_workflow_name
from .store import WorkflowStore
from .resolver import ResolvedStep, ResolvedWorkflow, WorkflowResolver
from .plan import ExecutionPlan, PlanEntry, build_plan
from .advancer import (
    AdvancerState,
    AdvanceResult,
    CompletionNotice,
    FailureResult,
    NextStepInstruction,
    StepwiseAdvancer,
)
from .engine import PlanResult, ResolutionResult, ValidationResult, WorkflowEngine

__all__ = [
    "WorkflowErrorKind",
    "WorkflowError",
    "WorkflowNotFoundError",
    "WorkflowParseError",
    "InvalidWorkflowDefinitionError",
    "CircularWorkflowError",
    "InvalidStepIndexError",
    "StepType",
    "StepSpec",
    "WorkflowDefinition",
    "is_valid_workflow_name",
    "WorkflowStore",
    "ResolvedStep",
    "ResolvedWorkflow",
    "WorkflowResolver",
    "ExecutionPlan",
    "PlanEntry",
    "build_plan",
    "AdvancerState",
    "AdvanceResult",
    "CompletionNotice",
    "FailureResult",
    "NextStepInstruction",
    "StepwiseAdvancer",
    "PlanResult",
    "ResolutionResult",
    "ValidationResult",
    "WorkflowEngine",
]
