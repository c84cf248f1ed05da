"""MCP Plugins Package.

This package contains plugins that extend the MCP toolset.
Each subdirectory contains a separate plugin implementation.
"""

from plugins import workflow_manager

__all__ = ["workflow_manager"]
