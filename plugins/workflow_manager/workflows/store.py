"""
Workflow Store

File-backed storage of workflow definitions, one JSON document per workflow
under ``<project>/.workflow/<name>.json``. Nothing is cached: every call goes
back to the file system so external edits are picked up immediately.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .definition import is_valid_workflow_name
from .errors import (
    InvalidWorkflowDefinitionError,
    WorkflowNotFoundError,
    WorkflowParseError,
)

logger = logging.getLogger(__name__)


class WorkflowStore:
    """Reads and writes workflow definitions in a directory."""

    def __init__(self, root: Union[str, Path], extension: str = ".json"):
        self.root = Path(root)
        self.extension = extension if extension.startswith(".") else f".{extension}"

    @classmethod
    def from_env(cls) -> "WorkflowStore":
        """Create a store for the configured project."""
        from config import env

        return cls(env.get_workflow_dir(), env.get_workflow_file_extension())

    def path_for(self, name: str) -> Path:
        """
        Get the file path of a workflow.

        Raises:
            WorkflowNotFoundError: If the name cannot address a file in the store
        """
        if (
            not isinstance(name, str)
            or not name
            or "/" in name
            or "\\" in name
            or "\x00" in name
            or ".." in name
            or name.startswith(".")
        ):
            raise WorkflowNotFoundError(f"Invalid workflow name: {name!r}", name)
        return self.root / f"{name}{self.extension}"

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except WorkflowNotFoundError:
            return False

    def read(self, name: str) -> str:
        """
        Read the raw definition of a workflow.

        Raises:
            WorkflowNotFoundError: If the workflow file does not exist
        """
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise WorkflowNotFoundError(f"Workflow file not found: {path}", name)
        except IsADirectoryError:
            raise WorkflowNotFoundError(f"Workflow path is a directory: {path}", name)
        except UnicodeDecodeError as e:
            raise WorkflowParseError(f"Workflow file {path} is not UTF-8 text: {e}", name)
        except OSError as e:
            raise WorkflowNotFoundError(f"Cannot read workflow file {path}: {e}", name)

    def load(self, name: str) -> Dict[str, Any]:
        """
        Read and decode a workflow definition.

        Raises:
            WorkflowNotFoundError: If the workflow file does not exist
            WorkflowParseError: If the file is not valid JSON
            InvalidWorkflowDefinitionError: If the document is not a JSON object
        """
        content = self.read(name)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise WorkflowParseError(
                f"Invalid JSON in workflow '{name}': {e.msg} (line {e.lineno}, column {e.colno})",
                name,
            )

        if not isinstance(data, dict):
            raise InvalidWorkflowDefinitionError(
                f"Invalid workflow '{name}': definition must be a JSON object", name
            )

        logger.debug(f"Loaded workflow '{name}' from {self.path_for(name)}")
        return data

    def save(self, name: str, content: str) -> Path:
        """
        Write a workflow definition.

        Args:
            name: Kebab-case workflow name
            content: JSON document

        Returns:
            Path of the written file

        Raises:
            InvalidWorkflowDefinitionError: If the name is not kebab-case
            WorkflowParseError: If the content is not valid JSON
        """
        if not is_valid_workflow_name(name):
            raise InvalidWorkflowDefinitionError(
                f"Workflow name '{name}' must be kebab-case (e.g. 'user-registration')",
                name,
            )
        try:
            json.loads(content)
        except json.JSONDecodeError as e:
            raise WorkflowParseError(f"Invalid JSON for workflow '{name}': {e}", name)

        path = self.path_for(name)
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Saved workflow '{name}' to {path}")
        return path

    def list_workflows(self) -> List[Dict[str, Any]]:
        """
        Summarize every workflow in the store, sorted by name.

        Files that cannot be parsed are reported with an error description
        instead of aborting the listing.
        """
        if not self.root.is_dir():
            return []

        summaries = []
        for path in sorted(self.root.glob(f"*{self.extension}")):
            if not path.is_file():
                continue
            name = path.name[: -len(self.extension)]
            summary: Dict[str, Any] = {"name": name, "file": path.name}
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                if not isinstance(data, dict):
                    raise ValueError("definition must be a JSON object")
            except (OSError, ValueError) as e:
                summary.update(
                    {
                        "description": f"Error parsing workflow: {e}",
                        "stepCount": 0,
                        "expectedOutputs": [],
                        "error": True,
                    }
                )
            else:
                steps = data.get("steps")
                summary.update(
                    {
                        "displayName": data.get("name") or name,
                        "description": data.get("description") or "No description provided",
                        "stepCount": len(steps) if isinstance(steps, list) else 0,
                        "expectedOutputs": data.get("expectedOutputs") or [],
                    }
                )
            summaries.append(summary)

        return summaries

    def describe_location(self, name: Optional[str] = None) -> str:
        """Human-readable location used in error hints."""
        if name:
            try:
                return str(self.path_for(name))
            except WorkflowNotFoundError:
                pass
        return str(self.root)
