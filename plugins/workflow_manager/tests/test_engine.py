"""
Tests for WorkflowEngine
"""

import pytest

from plugins.workflow_manager.workflows import (
    CompletionNotice,
    FailureResult,
    NextStepInstruction,
    WorkflowEngine,
    WorkflowErrorKind,
)
from plugins.workflow_manager.workflows.resolver import MAX_NESTING_DEPTH


@pytest.fixture
def engine(store):
    return WorkflowEngine(store)


class TestWorkflowEngine:
    """Tests for WorkflowEngine."""

    def test_resolve(self, engine, write_workflow):
        write_workflow("flow", {"name": "flow", "steps": [{"type": "prompt", "template": "x"}]})

        result = engine.resolve("flow")

        assert result.success
        assert len(result.workflow.flattened_steps) == 1
        assert result.to_dict()["success"] is True
        assert result.to_dict()["flattenedSteps"][0]["sourceWorkflow"] == "flow"

    def test_resolve_failure_is_data(self, engine):
        result = engine.resolve("missing")

        assert not result.success
        assert result.failure.kind == WorkflowErrorKind.NOT_FOUND
        assert result.to_dict()["kind"] == "not_found"

    def test_plan(self, engine, write_workflow):
        write_workflow("flow", {"name": "flow", "steps": [{"type": "prompt", "template": "x"}]})

        result = engine.plan("flow", {"a": 1})

        assert result.success
        assert result.plan.total_steps == 1
        assert result.to_dict()["initialData"] == {"a": 1}
        assert "Execute workflow 'flow'" in result.render()

    def test_plan_failure_renders_loading_error(self, engine, write_workflow):
        write_workflow("a", {"steps": [{"type": "workflow", "workflow": "b"}]})
        write_workflow("b", {"steps": [{"type": "workflow", "workflow": "a"}]})

        result = engine.plan("a")

        assert not result.success
        assert result.to_dict()["kind"] == "circular_dependency"
        text = result.render()
        assert text.startswith("Error loading workflow 'a': Circular workflow dependency detected: a")
        assert "**Troubleshooting:**" in text
        assert "circular dependencies" in text

    def test_advance(self, engine, write_workflow):
        write_workflow("flow", {"steps": [{"type": "mcp", "tool": "t"}]})

        assert isinstance(engine.advance("flow"), NextStepInstruction)
        assert isinstance(engine.advance("flow", 2, {"done": True}), CompletionNotice)

    def test_advance_flatten(self, engine, write_workflow):
        write_workflow("outer", {"steps": [{"type": "workflow", "workflow": "inner"}]})
        write_workflow("inner", {"steps": [{"type": "mcp", "tool": "a"}, {"type": "mcp", "tool": "b"}]})

        assert engine.advance("outer").total_steps == 1
        assert engine.advance("outer", flatten=True).total_steps == 2

    def test_validate_valid(self, engine, write_workflow):
        write_workflow(
            "outer",
            {
                "name": "outer",
                "steps": [
                    {"type": "workflow", "workflow": "inner"},
                    {"type": "workflow", "workflow": "inner"},
                ],
            },
        )
        write_workflow("inner", {"name": "inner", "steps": [{"type": "mcp", "tool": "a"}]})

        result = engine.validate("outer")

        assert result.success
        assert result.errors == []
        assert result.step_count == 2
        assert result.flattened_step_count == 2
        assert result.sub_workflows == ["inner"]
        assert result.to_dict()["valid"] is True

    def test_validate_collects_shape_errors_from_sub_workflows(self, engine, write_workflow):
        write_workflow(
            "outer",
            {"name": "outer", "steps": [{"type": "prompt"}, {"type": "workflow", "workflow": "inner"}]},
        )
        write_workflow("inner", {"name": "inner", "steps": [{"type": "mcp"}]})

        result = engine.validate("outer")

        assert not result.success
        assert "Step 1: prompt step must specify 'template'" in result.errors
        assert "inner: Step 1: mcp step must specify 'tool'" in result.errors
        assert result.flattened_step_count == 2

    def test_validate_reports_cycle(self, engine, write_workflow):
        write_workflow("a", {"name": "a", "steps": [{"type": "workflow", "workflow": "b"}]})
        write_workflow("b", {"name": "b", "steps": [{"type": "workflow", "workflow": "a"}]})

        result = engine.validate("a")

        assert not result.success
        assert result.failure.kind == WorkflowErrorKind.CIRCULAR_DEPENDENCY
        assert result.to_dict()["kind"] == "circular_dependency"

    def test_validate_missing_sub_workflow(self, engine, write_workflow):
        write_workflow("outer", {"name": "outer", "steps": [{"type": "workflow", "workflow": "ghost"}]})

        result = engine.validate("outer")

        assert result.failure.kind == WorkflowErrorKind.NOT_FOUND
        assert "ghost" in result.failure.message

    def test_from_env(self, project_env):
        engine = WorkflowEngine.from_env()

        assert engine.store.root == project_env / ".workflow"

    def test_missing_sub_workflow_hints_point_at_it(self, engine, store, write_workflow):
        write_workflow("outer", {"name": "outer", "steps": [{"type": "workflow", "workflow": "ghost"}]})

        for failure in (
            engine.validate("outer").failure,
            engine.resolve("outer").failure,
            engine.advance("outer", flatten=True),
        ):
            assert failure.workflow_name == "outer"
            assert str(store.path_for("ghost")) in failure.hints[0]
            assert str(store.path_for("outer")) not in failure.hints[0]

    def test_unusable_name_is_a_failure(self, engine):
        assert engine.resolve("a\x00b").failure.kind == WorkflowErrorKind.NOT_FOUND
        assert engine.plan("a\x00b").failure.kind == WorkflowErrorKind.NOT_FOUND
        assert engine.validate("a\x00b").failure.kind == WorkflowErrorKind.NOT_FOUND


def write_chain(write_workflow, length):
    """Write w0 -> w1 -> ... -> w<length>, each workflow nesting the next."""
    for i in range(length):
        write_workflow(f"w{i}", {"steps": [{"type": "workflow", "workflow": f"w{i + 1}"}]})
    write_workflow(f"w{length}", {"steps": [{"type": "prompt", "template": "leaf"}]})


class TestNestingDepth:
    def test_deep_chain_within_limit(self, engine, write_workflow):
        write_chain(write_workflow, MAX_NESTING_DEPTH - 1)

        result = engine.resolve("w0")

        assert result.success
        assert len(result.workflow.flattened_steps) == 1
        assert result.workflow.flattened_steps[0].workflow_path[-1] == f"w{MAX_NESTING_DEPTH - 1}"

    @pytest.mark.parametrize("length", [MAX_NESTING_DEPTH, 1200])
    def test_chain_past_limit_is_a_failure(self, engine, write_workflow, length):
        write_chain(write_workflow, length)

        resolution = engine.resolve("w0")
        stepwise = engine.advance("w0", flatten=True)

        assert resolution.failure.kind == WorkflowErrorKind.INVALID_DEFINITION
        assert "nesting exceeds" in resolution.failure.message
        assert isinstance(stepwise, FailureResult)
        assert stepwise.kind == WorkflowErrorKind.INVALID_DEFINITION
        assert engine.validate("w0").failure.kind == WorkflowErrorKind.INVALID_DEFINITION
