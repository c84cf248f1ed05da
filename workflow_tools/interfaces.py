"""Interfaces for workflow MCP tools and prompts.

This module defines the core interfaces that tools and prompts must implement
to be served by the workflow MCP server.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List


class ToolInterface(ABC):
    """Base interface for all tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the tool name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the tool description."""
        pass

    @property
    @abstractmethod
    def input_schema(self) -> Dict[str, Any]:
        """Get the JSON schema for the tool input."""
        pass

    @abstractmethod
    async def execute_tool(self, arguments: Dict[str, Any]) -> Any:
        """Execute the tool with the provided arguments.

        Args:
            arguments: Dictionary of arguments for the tool

        Returns:
            Tool execution result
        """
        pass


class PromptInterface(ABC):
    """Base interface for MCP prompts.

    A prompt renders a list of messages from string arguments. Unlike tools,
    prompts produce instructions for the calling agent instead of results.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the prompt name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Get the prompt description."""
        pass

    @property
    @abstractmethod
    def arguments(self) -> List[Dict[str, Any]]:
        """Get the prompt arguments as dicts with name, description and required."""
        pass

    @abstractmethod
    async def render(self, arguments: Dict[str, str]) -> List[Dict[str, str]]:
        """Render the prompt.

        Args:
            arguments: Prompt arguments, always passed as strings by MCP clients

        Returns:
            List of messages, each a dict with "role" and "text"
        """
        pass
