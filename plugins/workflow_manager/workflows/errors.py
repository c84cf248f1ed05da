"""
Workflow Errors

Error kinds raised while loading, resolving and advancing workflows.
"""

from enum import Enum
from typing import List, Optional


class WorkflowErrorKind(str, Enum):
    """Kinds of workflow failures reported to callers."""

    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    INVALID_DEFINITION = "invalid_definition"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INVALID_STEP_INDEX = "invalid_step_index"


class WorkflowError(Exception):
    """Base class for workflow errors."""

    kind: WorkflowErrorKind

    def __init__(self, message: str, workflow_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.workflow_name = workflow_name

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        """
        Suggestions for fixing the error.

        Args:
            store_root: Directory holding workflow definitions, used in the hints

        Returns:
            List of human-readable hints
        """
        return []


class WorkflowNotFoundError(WorkflowError):
    kind = WorkflowErrorKind.NOT_FOUND

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        location = store_root or "the workflow directory"
        return [
            f"Check that the workflow file for '{self.workflow_name}' exists in {location}",
            "Ensure all referenced sub-workflows exist",
            f"List the files in {location} (or use workflow_list) to see available workflows",
        ]


class WorkflowParseError(WorkflowError):
    kind = WorkflowErrorKind.PARSE_ERROR

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        return [
            f"Verify that the definition of '{self.workflow_name}' is valid JSON",
            "Re-save the workflow with workflow_save after fixing the syntax",
        ]


class InvalidWorkflowDefinitionError(WorkflowError):
    kind = WorkflowErrorKind.INVALID_DEFINITION

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        return [
            f"Make sure '{self.workflow_name}' has a non-empty 'steps' array",
            "Each step must be an object with a 'type' of prompt, mcp or workflow",
            "Use workflow_define to see the expected format",
        ]


class CircularWorkflowError(WorkflowError):
    """A workflow transitively references itself.

    ``workflow_name`` is the workflow whose second visit closed the cycle.
    """

    kind = WorkflowErrorKind.CIRCULAR_DEPENDENCY

    def __init__(self, workflow_name: str, path: Optional[List[str]] = None):
        self.path = list(path or []) + [workflow_name]
        chain = " -> ".join(self.path)
        super().__init__(
            f"Circular workflow dependency detected: {workflow_name} ({chain})",
            workflow_name,
        )

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        return [
            f"Check for circular dependencies: '{self.workflow_name}' is referenced "
            f"again by one of its own sub-workflows",
            "Remove or replace the workflow step that points back up the chain",
        ]


class InvalidStepIndexError(WorkflowError):
    kind = WorkflowErrorKind.INVALID_STEP_INDEX

    def remediation_hints(self, store_root: Optional[str] = None) -> List[str]:
        return [
            "Step numbers start at 1; omit the step to start from the beginning",
        ]
