"""Workflow Tools - plugin system for the workflow MCP server."""

from workflow_tools.interfaces import ToolInterface, PromptInterface
from workflow_tools.plugin import (
    register_tool,
    register_prompt,
    registry,
    discover_and_register_tools,
    PluginRegistry,
)

__version__ = "0.1.0"

__all__ = [
    "ToolInterface",
    "PromptInterface",
    "register_tool",
    "register_prompt",
    "registry",
    "discover_and_register_tools",
    "PluginRegistry",
]
