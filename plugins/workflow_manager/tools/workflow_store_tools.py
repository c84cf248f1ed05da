"""Tools for saving, listing and validating stored workflows."""

import json
import logging
from typing import Any, Dict

from workflow_tools.interfaces import ToolInterface
from workflow_tools.plugin import register_tool
from plugins.workflow_manager.workflows import (
    WorkflowDefinition,
    WorkflowEngine,
    WorkflowError,
    WorkflowStore,
)


@register_tool
class WorkflowSaveTool(ToolInterface):
    """Validates a workflow definition and writes it to the project."""

    def __init__(self):
        super().__init__()
        self.logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return "workflow_save"

    @property
    def description(self) -> str:
        return "Saves a workflow definition to the project directory."

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the workflow, user defined in kebab-case, string only.",
                },
                "content": {
                    "type": "string",
                    "description": "Workflow execution flow in JSON format.",
                },
            },
            "required": ["name", "content"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        name = arguments.get("name")
        content = arguments.get("content")
        if not name:
            return {"success": False, "error": "Missing required parameter: name"}
        if content is None:
            return {"success": False, "error": "Missing required parameter: content"}
        if not isinstance(content, str):
            content = json.dumps(content, indent=2)

        store = WorkflowStore.from_env()
        try:
            definition = WorkflowDefinition.from_json(content, name)
            errors = definition.validate()
            if errors:
                return {
                    "success": False,
                    "error": f"Invalid workflow '{name}': " + "; ".join(errors),
                    "errors": errors,
                }
            path = store.save(name, content)
        except WorkflowError as e:
            self.logger.warning(f"Error saving workflow '{name}': {e.message}")
            return {
                "success": False,
                "error": f"Error saving workflow '{name}': {e.message}",
                "hints": e.remediation_hints(str(store.root)),
            }
        except OSError as e:
            self.logger.error(f"Error writing workflow '{name}': {e}")
            return {"success": False, "error": f"Error saving workflow '{name}': {e}"}

        return {
            "success": True,
            "text": f"Workflow '{name}' saved successfully to {path}.",
            "path": str(path),
        }


@register_tool
class WorkflowListTool(ToolInterface):
    """Lists the workflows stored in the project."""

    @property
    def name(self) -> str:
        return "workflow_list"

    @property
    def description(self) -> str:
        return (
            "List all available workflows in the project with their descriptions "
            "and metadata."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "detailed": {
                    "type": "boolean",
                    "description": "Include step counts, expected outputs and file names",
                    "default": False,
                },
            },
            "required": [],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        store = WorkflowStore.from_env()
        try:
            workflows = store.list_workflows()
        except OSError as e:
            return {
                "success": False,
                "error": f"Error listing workflows in {store.root}: {e}",
            }

        if not workflows:
            return {
                "success": True,
                "text": (
                    "No workflows found in the project.\n\n"
                    "To create a workflow, use the workflow-create prompt or the "
                    "workflow_save tool."
                ),
            }

        if not arguments.get("detailed", False):
            workflows = [
                {"name": item["name"], "description": item["description"]}
                for item in workflows
            ]
        return {"success": True, "text": json.dumps(workflows, indent=2)}


@register_tool
class WorkflowValidateTool(ToolInterface):
    """Checks a stored workflow, its sub-workflows and their references."""

    @property
    def name(self) -> str:
        return "workflow_validate"

    @property
    def description(self) -> str:
        return (
            "Validate a stored workflow: step structure, referenced sub-workflows, "
            "circular dependencies and the number of steps once flattened."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the workflow to validate.",
                },
            },
            "required": ["name"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        name = arguments.get("name")
        if not name:
            return {"success": False, "error": "Missing required parameter: name"}

        return WorkflowEngine.from_env().validate(name).to_dict()
