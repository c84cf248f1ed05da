"""
Tests for workflow definitions
"""

import pytest

from plugins.workflow_manager.workflows import (
    StepSpec,
    StepType,
    WorkflowDefinition,
    WorkflowParseError,
    is_valid_workflow_name,
)


class TestWorkflowName:
    @pytest.mark.parametrize("name", ["greet", "user-registration", "step-2-check"])
    def test_kebab_case_accepted(self, name):
        assert is_valid_workflow_name(name)

    @pytest.mark.parametrize("name", ["", "Greet", "snake_case", "-lead", "trail-", "a--b", None])
    def test_other_names_rejected(self, name):
        assert not is_valid_workflow_name(name)


class TestStepSpec:
    """Tests for StepSpec."""

    def test_from_dict_accepts_alternate_spellings(self):
        step = StepSpec.from_dict(
            {
                "type": "mcp",
                "tool": "db-insert",
                "inputs": {"email": "{{email}}"},
                "expectedOutputs": ["id"],
            }
        )

        assert step.type == StepType.MCP
        assert step.input_mapping == {"email": "{{email}}"}
        assert step.outputs == ["id"]

    def test_to_dict_preserves_unknown_fields(self):
        data = {"type": "prompt", "template": "Hi", "custom": {"x": 1}}

        assert StepSpec.from_dict(data).to_dict() == data

    def test_valid_steps(self):
        assert StepSpec.from_dict({"type": "prompt", "template": "Hi {{name}}"}).validate() == []
        assert StepSpec.from_dict({"type": "mcp", "tool": "search"}).validate() == []
        assert StepSpec.from_dict({"type": "workflow", "workflow": "sub"}).validate() == []

    def test_invalid_type(self):
        errors = StepSpec.from_dict({"type": "shell"}).validate(3)

        assert len(errors) == 1
        assert "Step 3 has invalid type 'shell'" in errors[0]

    def test_prompt_requires_template(self):
        errors = StepSpec.from_dict({"type": "prompt"}).validate(1)

        assert errors == ["Step 1: prompt step must specify 'template'"]

    def test_mcp_requires_tool_and_no_workflow(self):
        errors = StepSpec.from_dict({"type": "mcp", "workflow": "sub"}).validate(2)

        assert "Step 2: mcp step must specify 'tool'" in errors
        assert "Step 2: mcp step cannot also reference a workflow" in errors

    def test_workflow_requires_name_and_no_tool(self):
        errors = StepSpec.from_dict({"type": "workflow", "tool": "x"}).validate(4)

        assert "Step 4: workflow step must specify 'workflow'" in errors
        assert "Step 4: workflow step cannot also call a tool" in errors


class TestWorkflowDefinition:
    """Tests for WorkflowDefinition."""

    def test_from_json(self):
        definition = WorkflowDefinition.from_json(
            '{"name": "greet", "description": "Say hi", "outputs": ["greeting"],'
            ' "initialInputs": {"name": "string"},'
            ' "steps": [{"type": "prompt", "template": "Hi {{name}}"}]}'
        )

        assert definition.name == "greet"
        assert definition.description == "Say hi"
        assert definition.expected_outputs == ["greeting"]
        assert definition.inputs == {"name": "string"}
        assert len(definition.steps) == 1
        assert definition.validate() == []

    def test_from_json_uses_fallback_name(self):
        definition = WorkflowDefinition.from_json(
            '{"steps": [{"type": "mcp", "tool": "t"}]}', name="stored-name"
        )

        assert definition.name == "stored-name"

    def test_from_json_invalid(self):
        with pytest.raises(WorkflowParseError, match="Invalid JSON"):
            WorkflowDefinition.from_json("{not json", name="broken")

    def test_from_json_not_an_object(self):
        with pytest.raises(WorkflowParseError, match="must be a JSON object"):
            WorkflowDefinition.from_json("[1, 2]")

    def test_validate_missing_name(self):
        definition = WorkflowDefinition.from_dict(
            {"steps": [{"type": "prompt", "template": "x"}]}
        )

        assert "Workflow must have a name" in definition.validate()

    def test_validate_name_case(self):
        definition = WorkflowDefinition.from_dict(
            {"name": "MyFlow", "steps": [{"type": "prompt", "template": "x"}]}
        )

        assert "Workflow name 'MyFlow' must be kebab-case" in definition.validate()

    def test_validate_steps_not_array(self):
        definition = WorkflowDefinition.from_dict({"name": "flow", "steps": "oops"})

        assert definition.validate() == ["Workflow 'steps' must be an array"]

    def test_validate_empty_steps(self):
        definition = WorkflowDefinition.from_dict({"name": "flow", "steps": []})

        assert "Workflow must have at least one step" in definition.validate()

    def test_validate_non_object_step(self):
        definition = WorkflowDefinition.from_dict(
            {"name": "flow", "steps": ["just text"]}
        )

        assert "Step 1 must be an object" in definition.validate()

    def test_validate_keeps_stored_positions(self):
        definition = WorkflowDefinition.from_dict(
            {"name": "flow", "steps": [1, {"type": "mcp"}, {"type": "workflow", "workflow": "flow"}]}
        )

        assert definition.validate() == [
            "Step 1 must be an object",
            "Step 2: mcp step must specify 'tool'",
            "Step 3 references the workflow 'flow' itself",
        ]

    def test_validate_self_reference(self):
        definition = WorkflowDefinition.from_dict(
            {"name": "loop", "steps": [{"type": "workflow", "workflow": "loop"}]}
        )

        assert any("references the workflow 'loop' itself" in e for e in definition.validate())

    def test_sub_workflow_names(self):
        definition = WorkflowDefinition.from_dict(
            {
                "name": "outer",
                "steps": [
                    {"type": "workflow", "workflow": "a"},
                    {"type": "prompt", "template": "x"},
                    {"type": "workflow", "workflow": "b"},
                ],
            }
        )

        assert definition.get_sub_workflow_names() == ["a", "b"]

    def test_to_dict_round_trips_raw(self):
        data = {
            "name": "flow",
            "description": "d",
            "steps": [{"type": "prompt", "template": "x"}],
            "extra": True,
        }

        assert WorkflowDefinition.from_dict(data).to_dict() == data
