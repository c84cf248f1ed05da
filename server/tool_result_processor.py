"""Tool result processing utilities.

This module converts tool execution results into the MCP content type
returned to clients.
"""

import json
from typing import Any, List

from mcp.types import TextContent


def process_tool_result(result: Any) -> List[TextContent]:
    """Process a tool execution result into MCP content.

    Args:
        result: The result from a tool execution. Can be:
            - List of TextContent objects (returned as-is)
            - List of dicts with type/text keys (converted to TextContent)
            - Single TextContent object (wrapped in list)
            - Dictionary (formatted and wrapped in TextContent)
            - Any other type (converted to string and wrapped in TextContent)

    Returns:
        List of TextContent objects
    """
    if isinstance(result, list):
        if all(isinstance(item, TextContent) for item in result):
            return result
        elif all(isinstance(item, dict) and "text" in item for item in result):
            return [TextContent(type="text", text=str(item["text"])) for item in result]
        else:
            return [TextContent(type="text", text=str(result))]
    elif isinstance(result, TextContent):
        return [result]
    elif isinstance(result, dict):
        return [TextContent(type="text", text=format_result_as_text(result))]
    else:
        return [TextContent(type="text", text=str(result))]


def format_result_as_text(result: dict) -> str:
    """Format a result dictionary as text.

    A ``text`` entry is returned as it is. Failed results become an error line
    followed by any remediation hints. Everything else is dumped as JSON.

    Args:
        result: Dictionary containing tool execution results

    Returns:
        Formatted text representation of the result
    """
    if "text" in result:
        return str(result["text"])

    if not result.get("success", True):
        text = f"Error: {result.get('error', 'Unknown error')}"
        hints = result.get("hints") or []
        if hints:
            text += "\n\n**Troubleshooting:**\n" + "\n".join(
                f"{i}. {hint}" for i, hint in enumerate(hints, 1)
            )
        return text

    return json.dumps(result, indent=2, default=str)
