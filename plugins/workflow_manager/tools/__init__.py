"""MCP tools of the workflow manager plugin."""

from .workflow_define_tool import WorkflowDefineTool
from .workflow_store_tools import WorkflowSaveTool, WorkflowListTool, WorkflowValidateTool
from .workflow_execution_tools import WorkflowExecuteTool, WorkflowRunTool
from .prompt_library_tool import PromptLibraryTool

__all__ = [
    "WorkflowDefineTool",
    "WorkflowSaveTool",
    "WorkflowListTool",
    "WorkflowValidateTool",
    "WorkflowExecuteTool",
    "WorkflowRunTool",
    "PromptLibraryTool",
]
