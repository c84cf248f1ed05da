"""Prompt library tool."""

import logging
from enum import Enum
from typing import Any, Dict

from workflow_tools.interfaces import ToolInterface
from workflow_tools.plugin import register_tool
from plugins.workflow_manager.arguments import decode_json_argument
from plugins.workflow_manager.prompt_library import PromptLibrary


class PromptLibraryOperation(str, Enum):
    """Operations supported by the prompt library tool."""

    LOAD = "load"
    LIST = "list"
    GET = "get"
    EXECUTE = "execute"


@register_tool
class PromptLibraryTool(ToolInterface):
    """Loads, lists, shows and renders prompt templates from the project."""

    def __init__(self):
        super().__init__()
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return "prompt_library"

    @property
    def description(self) -> str:
        return (
            "Manage reusable prompt templates stored in the project's prompts "
            "directory: reload them, list them, show one, or render one with "
            "{{argument}} substitution."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "operation": {
                    "type": "string",
                    "description": "The prompt library operation to perform",
                    "enum": [op.value for op in PromptLibraryOperation],
                },
                "name": {
                    "type": "string",
                    "description": "Prompt name (for get and execute operations)",
                },
                "arguments": {
                    "type": "object",
                    "description": "Values for the prompt's placeholders (for execute operation)",
                },
            },
            "required": ["operation"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        operation = arguments.get("operation")
        if not operation:
            return {"success": False, "error": "Missing required parameter: operation"}

        try:
            operation = PromptLibraryOperation(operation)
        except ValueError:
            return {"success": False, "error": f"Unknown prompt library operation: {operation}"}

        name = arguments.get("name")
        if operation in (PromptLibraryOperation.GET, PromptLibraryOperation.EXECUTE) and not name:
            return {"success": False, "error": "Missing required parameter: name"}

        try:
            library = PromptLibrary.from_env()
        except OSError as e:
            self.logger.error(f"Error opening prompt library: {e}")
            return {"success": False, "error": f"Error loading prompts: {e}"}

        match operation:
            case PromptLibraryOperation.LOAD:
                prompts = library.list()
                return {
                    "success": True,
                    "text": (
                        f"Successfully loaded {len(prompts)} prompts: "
                        f"{', '.join(prompt.name for prompt in prompts)}"
                    ),
                }

            case PromptLibraryOperation.LIST:
                return {"success": True, "text": self._format_list(library)}

            case PromptLibraryOperation.GET:
                prompt = library.get(name)
                if prompt is None:
                    return {
                        "success": False,
                        "error": f"Prompt '{name}' not found. Use the list operation to see available prompts.",
                    }
                return {"success": True, "text": self._format_prompt(prompt)}

            case PromptLibraryOperation.EXECUTE:
                values = decode_json_argument(arguments.get("arguments")) or {}
                if not isinstance(values, dict):
                    return {
                        "success": False,
                        "error": "Prompt arguments must be an object of name/value pairs",
                    }
                return library.execute(name, values)

    def _format_list(self, library: PromptLibrary) -> str:
        prompts = library.list()
        if not prompts:
            return (
                "No prompts available. Add .yaml, .yml or .json files to "
                f"{library.prompts_dir} and use the load operation."
            )
        lines = [
            f"- **{prompt.name}**: {prompt.description or 'No description'}\n"
            f"  Arguments: {len(prompt.arguments)}"
            for prompt in prompts
        ]
        return f"Available Prompts ({len(prompts)}):\n\n" + "\n\n".join(lines)

    def _format_prompt(self, prompt) -> str:
        if prompt.arguments:
            arguments = "\n".join(
                f"- **{arg.get('name')}** ({arg.get('type', 'string')}): "
                f"{arg.get('description') or 'No description'}"
                for arg in prompt.arguments
            )
        else:
            arguments = "No arguments"
        return (
            f"**Name:** {prompt.name}\n\n"
            f"**Description:** {prompt.description or 'No description'}\n\n"
            f"**Content:**\n```\n{prompt.content}\n```\n\n"
            f"**Arguments:**\n{arguments}"
        )
