"""MCP prompts for creating and running workflows.

Prompt arguments always arrive as strings; ``inputs`` is decoded as JSON when
it parses and passed through as text otherwise.
"""

from typing import Any, Dict, List

from workflow_tools.interfaces import PromptInterface
from workflow_tools.plugin import register_prompt
from plugins.workflow_manager.arguments import decode_json_argument
from plugins.workflow_manager.workflows import WorkflowEngine


def _user_message(text: str) -> List[Dict[str, str]]:
    return [{"role": "user", "text": text}]


@register_prompt
class WorkflowCreatePrompt(PromptInterface):
    """Guides the agent through designing and saving a new workflow."""

    @property
    def name(self) -> str:
        return "workflow-create"

    @property
    def description(self) -> str:
        return "Interactive workflow creation assistant."

    @property
    def arguments(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": "name",
                "description": "The name of the workflow to create (kebab-case)",
                "required": True,
            },
            {
                "name": "context",
                "description": "Description of what the workflow should accomplish, or dialogue history for context.",
                "required": True,
            },
        ]

    async def render(self, arguments: Dict[str, str]) -> List[Dict[str, str]]:
        name = arguments.get("name", "")
        context = arguments.get("context", "")
        return _user_message(
            f"""Create a workflow named '{name}' based on the following context:

**Context:**
{context}

**Instructions:**
1. First, use the workflow_define tool to understand the workflow format
2. Analyze the context to identify the sequence of steps needed
3. Design the workflow with appropriate step types:
   - **prompt** steps for AI processing, validation, transformation
   - **mcp** steps for tool calls (database, API, file operations)
   - **workflow** steps for reusable sub-workflows
4. Create a JSON workflow definition
5. Ask for user confirmation before saving
6. Use workflow_save to save the workflow, then workflow_validate to check it

**Design Guidelines:**
- Keep steps focused and single-purpose
- Use descriptive names and clear descriptions
- Include expectedOutputs for prompt steps
- Use template variables like {{{{fieldName}}}} for data flow
- Consider reusability - break complex logic into sub-workflows
- Never let a sub-workflow reference a workflow that includes it

**Context Analysis:**
Based on the provided context, identify:
- What inputs are needed?
- What processing steps are required?
- What outputs should be generated?
- Are there any validation or error handling needs?
- Can any parts be reused as sub-workflows?

Start by using workflow_define to get the format, then create the workflow definition."""
        )


@register_prompt
class WorkflowExecutePrompt(PromptInterface):
    """Renders the full flattened plan of a workflow."""

    @property
    def name(self) -> str:
        return "workflow-execute"

    @property
    def description(self) -> str:
        return "Execute a complete workflow with flattened steps."

    @property
    def arguments(self) -> List[Dict[str, Any]]:
        return [
            {"name": "name", "description": "Name of the workflow to execute.", "required": True},
            {"name": "inputs", "description": "Initial inputs for the workflow.", "required": False},
        ]

    async def render(self, arguments: Dict[str, str]) -> List[Dict[str, str]]:
        engine = WorkflowEngine.from_env()
        result = engine.plan(
            arguments.get("name", ""), decode_json_argument(arguments.get("inputs"))
        )
        return _user_message(result.render())


@register_prompt
class WorkflowRunPrompt(PromptInterface):
    """Renders the instructions for one step of a workflow run."""

    @property
    def name(self) -> str:
        return "workflow-run"

    @property
    def description(self) -> str:
        return "Run a step in a workflow. Tip: Use this prompt recursively to run all steps in a workflow."

    @property
    def arguments(self) -> List[Dict[str, Any]]:
        return [
            {"name": "name", "description": "Name of the workflow.", "required": True},
            {"name": "step", "description": "Step number to run. Default to 1.", "required": False},
            {"name": "inputs", "description": "Inputs of the step.", "required": False},
        ]

    async def render(self, arguments: Dict[str, str]) -> List[Dict[str, str]]:
        engine = WorkflowEngine.from_env()
        result = engine.advance(
            arguments.get("name", ""),
            arguments.get("step"),
            decode_json_argument(arguments.get("inputs")),
        )
        return _user_message(result.render())
