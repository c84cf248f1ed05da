"""
Tests for StepwiseAdvancer
"""

from unittest.mock import MagicMock

import pytest

from plugins.workflow_manager.workflows import (
    AdvancerState,
    CompletionNotice,
    FailureResult,
    NextStepInstruction,
    StepwiseAdvancer,
    WorkflowErrorKind,
)
from plugins.workflow_manager.workflows.advancer import parse_step_index
from plugins.workflow_manager.workflows.errors import InvalidStepIndexError

GREET = {
    "name": "greet",
    "steps": [
        {"type": "prompt", "template": "Say hi to {{name}}"},
        {"type": "prompt", "template": "Translate {{greeting}}"},
    ],
}


@pytest.fixture
def advancer(store, write_workflow):
    write_workflow("greet", GREET)
    return StepwiseAdvancer(store)


class TestParseStepIndex:
    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_default_is_first_step(self, value):
        assert parse_step_index(value) == 1

    @pytest.mark.parametrize("value,expected", [(3, 3), ("2", 2), (" 4 ", 4), (2.0, 2)])
    def test_valid(self, value, expected):
        assert parse_step_index(value) == expected

    @pytest.mark.parametrize("value", [0, -1, "0", "-3"])
    def test_below_one(self, value):
        with pytest.raises(InvalidStepIndexError, match="greater than 0"):
            parse_step_index(value)

    @pytest.mark.parametrize("value", ["two", 1.5, True, [1]])
    def test_not_an_integer(self, value):
        with pytest.raises(InvalidStepIndexError):
            parse_step_index(value)


class TestStepwiseAdvancer:
    """Tests for StepwiseAdvancer."""

    def test_first_step(self, advancer):
        result = advancer.advance("greet", 1, {"name": "Ann"})

        assert isinstance(result, NextStepInstruction)
        assert result.step_index == 1
        assert result.total_steps == 2
        assert result.next_index == 2
        assert result.step == GREET["steps"][0]
        assert result.current_data == {"name": "Ann"}
        assert result.placeholders == ["name"]
        assert result.missing_fields == []
        assert result.state == AdvancerState.RUNNING
        assert result.previous_state == AdvancerState.IDLE

    def test_default_index(self, advancer):
        result = advancer.advance("greet")

        assert result.step_index == 1
        assert result.current_data is None
        assert result.missing_fields == ["name"]

    @pytest.mark.parametrize("omitted", [None, ""])
    def test_omitted_index_same_as_first_step(self, advancer, omitted):
        data = {"name": "Ann"}

        assert advancer.advance("greet", omitted, data).to_dict() == (
            advancer.advance("greet", 1, data).to_dict()
        )
        assert advancer.advance("greet", omitted, data).render() == (
            advancer.advance("greet", 1, data).render()
        )

    def test_second_step_notes_missing_fields(self, advancer):
        result = advancer.advance("greet", "2", {"name": "Ann"})

        assert result.step_index == 2
        assert result.next_index == 3
        assert result.previous_state == AdvancerState.RUNNING
        assert result.missing_fields == ["greeting"]
        assert "not in the current data yet: greeting" in result.render()

    def test_completion_echoes_data(self, advancer):
        data = {"name": "Ann", "greeting": "Hi Ann", "translation": "Hola Ann"}

        result = advancer.advance("greet", 3, data)

        assert isinstance(result, CompletionNotice)
        assert result.state == AdvancerState.COMPLETE
        assert result.total_steps == 2
        assert result.final_data is data
        assert result.render() == (
            "Workflow 'greet' run successfully. All 2 steps have been completed. "
            'Final outputs are: {"name": "Ann", "greeting": "Hi Ann", "translation": "Hola Ann"}'
        )

    def test_completion_with_empty_data(self, advancer):
        result = advancer.advance("greet", 3, {})

        assert isinstance(result, CompletionNotice)
        assert result.final_data == {}
        assert result.render().endswith("Final outputs are: {}")

    def test_completion_far_past_the_end(self, advancer):
        assert isinstance(advancer.advance("greet", 99, "plain text"), CompletionNotice)

    @pytest.mark.parametrize("index", [0, -2])
    def test_invalid_index_fails_without_store_read(self, index):
        store = MagicMock()
        store.describe_location.return_value = "/tmp/.workflow/greet.json"

        result = StepwiseAdvancer(store).advance("greet", index, {})

        assert isinstance(result, FailureResult)
        assert result.kind == WorkflowErrorKind.INVALID_STEP_INDEX
        assert result.message == "Step number must be greater than 0."
        store.load.assert_not_called()
        store.read.assert_not_called()

    def test_missing_workflow(self, store):
        result = StepwiseAdvancer(store).advance("missing")

        assert isinstance(result, FailureResult)
        assert result.kind == WorkflowErrorKind.NOT_FOUND
        assert result.state == AdvancerState.FAILED
        assert result.workflow_name == "missing"
        assert result.hints
        assert result.render().startswith("Error running workflow 'missing':")
        assert result.to_dict()["success"] is False

    def test_unusable_name_is_a_failure(self, store):
        result = StepwiseAdvancer(store).advance("a\x00b")

        assert isinstance(result, FailureResult)
        assert result.kind == WorkflowErrorKind.NOT_FOUND

    def test_invalid_definition(self, store, write_workflow):
        write_workflow("empty", {"steps": []})

        result = StepwiseAdvancer(store).advance("empty")

        assert result.kind == WorkflowErrorKind.INVALID_DEFINITION

    def test_top_level_mode_keeps_workflow_steps(self, store, write_workflow):
        write_workflow(
            "outer",
            {"steps": [{"type": "workflow", "workflow": "inner"}, {"type": "mcp", "tool": "t"}]},
        )
        write_workflow("inner", {"steps": [{"type": "prompt", "template": "a"}, {"type": "prompt", "template": "b"}]})

        result = StepwiseAdvancer(store).advance("outer", 1, {})

        assert result.total_steps == 2
        assert result.step["type"] == "workflow"
        assert any("sub-workflow" in line for line in result.guidance)

    def test_flatten_mode_indexes_flattened_steps(self, store, write_workflow):
        write_workflow(
            "outer",
            {"steps": [{"type": "workflow", "workflow": "inner", "description": "Inner"}, {"type": "mcp", "tool": "t"}]},
        )
        write_workflow("inner", {"steps": [{"type": "prompt", "template": "a"}, {"type": "prompt", "template": "b"}]})

        advancer = StepwiseAdvancer(store, flatten=True)
        second = advancer.advance("outer", 2, {})
        last = advancer.advance("outer", 3, {})

        assert second.total_steps == 3
        assert second.step["template"] == "b"
        assert second.step["sourceWorkflow"] == "inner"
        assert second.step["parentDescription"] == "Inner"
        assert last.step["tool"] == "t"
        assert isinstance(advancer.advance("outer", 4, {}), CompletionNotice)

    def test_flatten_mode_reports_cycles(self, store, write_workflow):
        write_workflow("a", {"steps": [{"type": "workflow", "workflow": "b"}]})
        write_workflow("b", {"steps": [{"type": "workflow", "workflow": "a"}]})

        result = StepwiseAdvancer(store, flatten=True).advance("a")

        assert result.kind == WorkflowErrorKind.CIRCULAR_DEPENDENCY

    def test_unknown_step_type_gets_generic_guidance(self, store, write_workflow):
        write_workflow("odd", {"steps": [{"type": "shell", "cmd": "ls"}]})

        result = StepwiseAdvancer(store).advance("odd")

        assert isinstance(result, NextStepInstruction)
        assert result.guidance[0] == "Execute the step based on its definition"

    def test_render_instructions(self, advancer):
        text = advancer.advance("greet", 1, {"name": "Ann"}).render()

        assert text.startswith("You are running step 1 of 2 in workflow 'greet'.")
        assert "run workflow 'greet' again with step=2" in text
        assert '"name": "Ann"' in text

    def test_state_lives_in_arguments(self, advancer):
        first = advancer.advance("greet", 2, {"name": "Ann"})
        second = advancer.advance("greet", 2, {"name": "Ann"})

        assert first.to_dict() == second.to_dict()
