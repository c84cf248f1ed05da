"""Tools that drive workflow execution.

``workflow_execute`` hands the agent the whole flattened plan at once;
``workflow_run`` hands out one step per call.
"""

from typing import Any, Dict

from workflow_tools.interfaces import ToolInterface
from workflow_tools.plugin import register_tool
from plugins.workflow_manager.arguments import decode_json_argument
from plugins.workflow_manager.workflows import WorkflowEngine

OUTPUT_FORMATS = ["json", "text"]


def _output_format_schema() -> Dict[str, Any]:
    return {
        "type": "string",
        "description": "Return structured JSON or the rendered agent instructions",
        "enum": OUTPUT_FORMATS,
        "default": "json",
    }


def _format_result(result, output_format: str) -> Dict[str, Any]:
    data = result.to_dict()
    if output_format == "text":
        data["text"] = result.render()
    return data


@register_tool
class WorkflowExecuteTool(ToolInterface):
    """Builds the full execution plan of a workflow."""

    @property
    def name(self) -> str:
        return "workflow_execute"

    @property
    def description(self) -> str:
        return (
            "Execute a complete workflow with flattened steps. Returns every step, "
            "with sub-workflows expanded inline, plus execution guidance."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the workflow to execute.",
                },
                "inputs": {
                    "description": "Initial inputs for the workflow.",
                },
                "output_format": _output_format_schema(),
            },
            "required": ["name"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        name = arguments.get("name")
        if not name:
            return {"success": False, "error": "Missing required parameter: name"}

        engine = WorkflowEngine.from_env()
        result = engine.plan(name, decode_json_argument(arguments.get("inputs")))
        return _format_result(result, arguments.get("output_format", "json"))


@register_tool
class WorkflowRunTool(ToolInterface):
    """Hands out the next step of a workflow run."""

    @property
    def name(self) -> str:
        return "workflow_run"

    @property
    def description(self) -> str:
        return (
            "Run a step in a workflow. Tip: call this tool again with the next step "
            "number and the accumulated data to run all steps in a workflow."
        )

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Name of the workflow.",
                },
                "step": {
                    "type": ["integer", "string"],
                    "description": "Step number to run. Defaults to 1.",
                },
                "inputs": {
                    "description": "Data accumulated so far, passed to the step.",
                },
                "flatten": {
                    "type": "boolean",
                    "description": "Number steps over the flattened workflow, with sub-workflows expanded inline",
                    "default": False,
                },
                "output_format": _output_format_schema(),
            },
            "required": ["name"],
        }

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        name = arguments.get("name")
        if not name:
            return {"success": False, "error": "Missing required parameter: name"}

        engine = WorkflowEngine.from_env()
        result = engine.advance(
            name,
            arguments.get("step"),
            decode_json_argument(arguments.get("inputs")),
            flatten=bool(arguments.get("flatten", False)),
        )
        return _format_result(result, arguments.get("output_format", "json"))
