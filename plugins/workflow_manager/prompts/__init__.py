"""MCP prompts of the workflow manager plugin."""

from .workflow_prompts import WorkflowCreatePrompt, WorkflowExecutePrompt, WorkflowRunPrompt

__all__ = ["WorkflowCreatePrompt", "WorkflowExecutePrompt", "WorkflowRunPrompt"]
