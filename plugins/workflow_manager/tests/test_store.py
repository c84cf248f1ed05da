"""
Tests for WorkflowStore
"""

import json

import pytest

from plugins.workflow_manager.workflows import (
    InvalidWorkflowDefinitionError,
    WorkflowNotFoundError,
    WorkflowParseError,
    WorkflowStore,
)


class TestWorkflowStore:
    """Tests for WorkflowStore."""

    def test_path_for(self, store, workflow_dir):
        assert store.path_for("greet") == workflow_dir / "greet.json"

    def test_extension_without_dot(self, workflow_dir):
        assert WorkflowStore(workflow_dir, "md").path_for("greet") == workflow_dir / "greet.md"

    @pytest.mark.parametrize("name", ["", "../secret", "a/b", "a\\b", ".hidden", "a\x00b"])
    def test_path_for_rejects_unsafe_names(self, store, name):
        with pytest.raises(WorkflowNotFoundError):
            store.path_for(name)

    def test_load(self, store, write_workflow):
        write_workflow("greet", {"name": "greet", "steps": []})

        assert store.load("greet") == {"name": "greet", "steps": []}

    def test_load_missing(self, store):
        with pytest.raises(WorkflowNotFoundError) as exc_info:
            store.load("missing")

        assert exc_info.value.workflow_name == "missing"
        assert "Workflow file not found" in exc_info.value.message

    def test_load_invalid_json(self, store, write_workflow):
        write_workflow("broken", "{ not json")

        with pytest.raises(WorkflowParseError, match="Invalid JSON in workflow 'broken'"):
            store.load("broken")

    def test_load_non_object(self, store, write_workflow):
        write_workflow("listy", "[1, 2, 3]")

        with pytest.raises(InvalidWorkflowDefinitionError, match="must be a JSON object"):
            store.load("listy")

    def test_load_reads_fresh_content(self, store, write_workflow):
        write_workflow("greet", {"description": "first"})
        assert store.load("greet")["description"] == "first"

        write_workflow("greet", {"description": "second"})
        assert store.load("greet")["description"] == "second"

    def test_exists(self, store, write_workflow):
        write_workflow("greet", {})

        assert store.exists("greet")
        assert not store.exists("other")
        assert not store.exists("../greet")

    def test_save_creates_directory(self, tmp_path):
        store = WorkflowStore(tmp_path / "new" / ".workflow")
        content = json.dumps({"name": "greet", "steps": []})

        path = store.save("greet", content)

        assert path == tmp_path / "new" / ".workflow" / "greet.json"
        assert path.read_text(encoding="utf-8") == content

    def test_save_rejects_bad_name(self, store):
        with pytest.raises(InvalidWorkflowDefinitionError, match="kebab-case"):
            store.save("Bad_Name", "{}")

    def test_save_rejects_bad_json(self, store):
        with pytest.raises(WorkflowParseError):
            store.save("greet", "{oops")

    def test_list_workflows(self, store, write_workflow):
        write_workflow(
            "b-flow",
            {
                "name": "b-flow",
                "description": "Second",
                "expectedOutputs": ["x"],
                "steps": [{"type": "prompt", "template": "t"}],
            },
        )
        write_workflow("a-flow", {"steps": []})
        write_workflow("broken", "{ nope")

        workflows = store.list_workflows()

        assert [w["name"] for w in workflows] == ["a-flow", "b-flow", "broken"]
        assert workflows[0]["description"] == "No description provided"
        assert workflows[1]["stepCount"] == 1
        assert workflows[1]["expectedOutputs"] == ["x"]
        assert workflows[2]["error"] is True
        assert workflows[2]["description"].startswith("Error parsing workflow")

    def test_list_ignores_other_extensions(self, store, workflow_dir):
        (workflow_dir / "notes.md").write_text("# notes")

        assert store.list_workflows() == []

    def test_list_missing_directory(self, tmp_path):
        assert WorkflowStore(tmp_path / "absent").list_workflows() == []

    def test_from_env(self, project_env):
        store = WorkflowStore.from_env()

        assert store.root == project_env / ".workflow"
        assert store.extension == ".json"
