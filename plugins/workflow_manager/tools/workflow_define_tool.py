"""Workflow format reference tool."""

from typing import Any, Dict

from config import env
from workflow_tools.interfaces import ToolInterface
from workflow_tools.plugin import register_tool

WORKFLOW_FORMAT_REFERENCE = """# Workflow System

## Overview
A Workflow is a sequence of steps executed by AI with data flowing between steps.
Workflows are flattened during execution - nested workflows are expanded inline.
Each step is executed by the AI with flexible prompt-based processing.

## Workflow Definition
Workflows are JSON files stored in the `{workflow_dir}/` directory with the `{extension}` extension.

### Required Fields
- **name**: string, kebab-case (e.g., "user-authentication")
- **description**: string, what this workflow accomplishes
- **steps**: array, at least one step

### Optional Fields
- **expectedOutputs**: array of strings, final output field names
- **initialInputs**: object, expected input structure (for documentation)

## Step Types

### Prompt Step (Flexible AI Processing)
```json
{{
  "type": "prompt",
  "description": "What this step accomplishes",
  "template": "Process {{{{input}}}} and generate {{{{expectedOutput}}}}",
  "expectedOutputs": ["field1", "field2"],
  "hints": "Additional guidance for AI"
}}
```

### MCP Step (Tool Call)
```json
{{
  "type": "mcp",
  "tool": "tool-name",
  "description": "What this tool does",
  "inputMapping": {{
    "toolParam": "{{{{dataField}}}}"
  }}
}}
```

### Workflow Step (Sub-workflow - Gets Flattened)
```json
{{
  "type": "workflow",
  "workflow": "sub-workflow-name",
  "description": "What the sub-workflow does"
}}
```

## Example Workflow

```json
{{
  "name": "user-registration",
  "description": "Register a new user with validation",
  "expectedOutputs": ["userId", "success", "message"],
  "steps": [
    {{
      "type": "prompt",
      "description": "Validate and normalize user input",
      "template": "Validate email {{{{email}}}} and name {{{{fullName}}}}. Check format and extract firstName/lastName.",
      "expectedOutputs": ["isValid", "email", "firstName", "lastName", "errors"],
      "hints": "Email must be in valid format, names should be trimmed and capitalized"
    }},
    {{
      "type": "workflow",
      "workflow": "password-security-check",
      "description": "Validate password strength"
    }},
    {{
      "type": "mcp",
      "tool": "database-insert",
      "description": "Save user to database",
      "inputMapping": {{
        "email": "{{{{email}}}}",
        "firstName": "{{{{firstName}}}}",
        "lastName": "{{{{lastName}}}}",
        "passwordHash": "{{{{passwordHash}}}}"
      }}
    }},
    {{
      "type": "prompt",
      "description": "Generate welcome message and final response",
      "template": "Create welcome message for {{{{firstName}}}} and format final response with userId {{{{userId}}}}",
      "expectedOutputs": ["message", "success"]
    }}
  ]
}}
```

## Key Concepts

1. **Flattening**: Sub-workflows are expanded inline during execution
2. **Data Flow**: Each step receives all previous data and adds new fields
3. **Flexible Prompts**: AI interprets templates and generates appropriate outputs
4. **Template Variables**: Use {{{{fieldName}}}} to reference data from previous steps
5. **No Rigid Schemas**: Prompt steps use natural language descriptions instead of strict types
6. **No Cycles**: A workflow may not reference itself, directly or through its sub-workflows
"""


def format_reference(workflow_dir: str = ".workflow", extension: str = ".json") -> str:
    """Workflow format reference with the configured storage location filled in."""
    return WORKFLOW_FORMAT_REFERENCE.format(workflow_dir=workflow_dir, extension=extension)


@register_tool
class WorkflowDefineTool(ToolInterface):
    """Tool describing the workflow definition format."""

    @property
    def name(self) -> str:
        return "workflow_define"

    @property
    def description(self) -> str:
        return "Provides definitions for creating a workflow"

    @property
    def input_schema(self) -> Dict[str, Any]:
        return {"type": "object", "properties": {}, "required": []}

    async def execute_tool(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "success": True,
            "text": format_reference(
                env.get_setting("workflow_dir_name"), env.get_workflow_file_extension()
            ),
        }
