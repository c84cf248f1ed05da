"""Workflow Manager Plugin.

This plugin lets an agent define, store and drive multi-step workflows
through the Model Context Protocol, and manages a library of reusable
prompt templates.
"""

from .workflows import WorkflowEngine, WorkflowStore
from .prompt_library import PromptLibrary

__all__ = ["WorkflowEngine", "WorkflowStore", "PromptLibrary"]
