"""
Step Guidance

Fixed instructions telling the executing agent how to carry out each step
type. The engine never interprets steps itself; it only hands these
instructions out together with the step payload.
"""

import re
from typing import Any, Dict, List

from .definition import StepType

STEP_GUIDANCE: Dict[str, List[str]] = {
    StepType.PROMPT.value: [
        "Use the template with {{variable}} substitution from available data",
        "Follow the description and expectedOutputs guidance",
        "Apply any hints provided",
        "Add new fields to the data object (don't replace existing data)",
    ],
    StepType.MCP.value: [
        "Call the specified MCP tool using inputMapping to map data fields to tool parameters",
        "Add the tool's outputs to the data object",
    ],
    StepType.WORKFLOW.value: [
        "Run the referenced sub-workflow with the current data as its inputs",
        "Merge the sub-workflow's final outputs into the data object",
    ],
}

GENERIC_GUIDANCE = [
    "Execute the step based on its definition",
    "Add any outputs it produces to the data object",
]

DATA_FLOW_RULES = [
    "Start with the initial inputs",
    "Each step adds new fields to the growing data object",
    "Later steps can reference any field from previous steps",
    "Preserve all data throughout execution",
]

TEMPLATE_RULES = [
    "Replace {{fieldName}} with actual values from current data",
    "If a field doesn't exist, note it and continue with available data",
]

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def guidance_for(step_type: str) -> List[str]:
    """Instructions for executing a step of the given type."""
    if not isinstance(step_type, str):
        return list(GENERIC_GUIDANCE)
    return list(STEP_GUIDANCE.get(step_type, GENERIC_GUIDANCE))


def all_guidance() -> Dict[str, List[str]]:
    """Instructions for every step type, plus data-flow and template rules."""
    guidance: Dict[str, List[str]] = {
        step_type: list(lines) for step_type, lines in STEP_GUIDANCE.items()
    }
    guidance["dataFlow"] = list(DATA_FLOW_RULES)
    guidance["templateSubstitution"] = list(TEMPLATE_RULES)
    return guidance


def find_placeholders(value: Any) -> List[str]:
    """
    Collect ``{{field}}`` placeholder names from a template or mapping.

    Strings, lists and dict values are searched recursively; names are
    returned once each, in order of first appearance.
    """
    found: List[str] = []

    def _walk(item: Any):
        if isinstance(item, str):
            for match in PLACEHOLDER_PATTERN.finditer(item):
                if match.group(1) not in found:
                    found.append(match.group(1))
        elif isinstance(item, dict):
            for nested in item.values():
                _walk(nested)
        elif isinstance(item, list):
            for nested in item:
                _walk(nested)

    _walk(value)
    return found


def step_placeholders(step: Dict[str, Any]) -> List[str]:
    """Placeholders a step reads, from its template and input mapping."""
    return find_placeholders(
        [step.get("template"), step.get("inputMapping"), step.get("inputs")]
    )


def format_bullets(lines: List[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)
