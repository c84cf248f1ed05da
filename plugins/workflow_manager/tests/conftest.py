"""
Shared fixtures for workflow manager tests.
"""

import json

import pytest

from config import env
from plugins.workflow_manager.workflows import WorkflowStore


@pytest.fixture
def workflow_dir(tmp_path):
    """Workflow directory inside a temporary project."""
    path = tmp_path / ".workflow"
    path.mkdir()
    return path


@pytest.fixture
def store(workflow_dir):
    return WorkflowStore(workflow_dir)


@pytest.fixture
def write_workflow(workflow_dir):
    """Write a workflow definition; dicts are JSON-encoded, strings written raw."""

    def _write(name, definition):
        content = definition if isinstance(definition, str) else json.dumps(definition)
        path = workflow_dir / f"{name}.json"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def project_env(tmp_path, workflow_dir):
    """Point the global configuration at the temporary project."""
    env.set_setting("project_path", str(tmp_path))
    yield tmp_path
    for setting in ("project_path", "workflow_dir_name", "create_example_prompts"):
        env.reset_setting(setting)
