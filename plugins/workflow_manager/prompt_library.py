"""
Prompt Library

Reusable prompt templates stored as YAML or JSON files in the project's
prompts directory. Templates reference their arguments as ``{{name}}``.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

PROMPT_FILE_EXTENSIONS = (".yaml", ".yml", ".json")

ARGUMENT_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")

EXAMPLE_PROMPTS = [
    {
        "name": "code-review",
        "description": "Code review prompt template",
        "content": (
            "Please review the following code:\n\n{{code}}\n\n"
            "Focus on:\n"
            "- Code quality and best practices\n"
            "- Potential bugs or issues\n"
            "- Performance considerations\n"
            "- Maintainability\n\n"
            "Language: {{language}}"
        ),
        "arguments": [
            {"name": "code", "type": "string", "description": "The code to review"},
            {"name": "language", "type": "string", "description": "Programming language"},
        ],
    },
    {
        "name": "explain-concept",
        "description": "Explain a technical concept",
        "content": (
            'Please explain the concept of "{{concept}}" in {{context}}.\n\n'
            "Target audience: {{audience}}\n\n"
            "Please include:\n"
            "- Clear definition\n"
            "- Key characteristics\n"
            "- Practical examples\n"
            "- Common use cases"
        ),
        "arguments": [
            {"name": "concept", "type": "string", "description": "The concept to explain"},
            {"name": "context", "type": "string", "description": "The context or domain"},
            {"name": "audience", "type": "string", "description": "Target audience level"},
        ],
    },
]


@dataclass
class PromptTemplate:
    """A prompt template loaded from the library."""

    name: str
    description: str = ""
    messages: List[Dict[str, str]] = field(default_factory=list)
    arguments: List[Dict[str, Any]] = field(default_factory=list)
    file_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], file_path: Optional[str] = None) -> "PromptTemplate":
        """
        Create from a decoded prompt file.

        A file carries either a single ``content`` text or a list of
        ``messages``; both become the message list.

        Raises:
            ValueError: If the name or the content is missing
        """
        name = data.get("name")
        if not name or not (data.get("content") or data.get("messages")):
            raise ValueError("missing name or content")

        messages = data.get("messages")
        if not isinstance(messages, list):
            messages = [{"role": "user", "text": str(data["content"])}]
        else:
            messages = [_normalize_message(message) for message in messages]

        arguments = data.get("arguments") or []
        if not isinstance(arguments, list):
            raise ValueError("'arguments' must be a list")

        return cls(
            name=str(name),
            description=data.get("description") or "",
            messages=messages,
            arguments=[arg for arg in arguments if isinstance(arg, dict)],
            file_path=file_path,
        )

    @property
    def content(self) -> str:
        return "\n\n".join(message["text"] for message in self.messages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "content": self.content,
            "messages": self.messages,
            "arguments": self.arguments,
            "file": self.file_path,
        }


def _normalize_message(message: Any) -> Dict[str, str]:
    if isinstance(message, str):
        return {"role": "user", "text": message}
    if not isinstance(message, dict):
        raise ValueError("each message must be a string or a mapping")

    content = message.get("content", message.get("text", ""))
    if isinstance(content, dict):
        content = content.get("text", "")
    return {"role": message.get("role", "user"), "text": str(content)}


def substitute_arguments(text: str, arguments: Dict[str, Any]) -> str:
    """Replace ``{{name}}`` placeholders; unknown placeholders are left as they are."""

    def _replace(match):
        name = match.group(1)
        if name in arguments:
            return str(arguments[name])
        return match.group(0)

    return ARGUMENT_PATTERN.sub(_replace, text)


class PromptLibrary:
    """
    Loads and renders prompt templates from a directory.

    Templates are kept in memory after ``load()``; call it again to pick up
    changes on disk.
    """

    def __init__(self, prompts_dir: Union[str, Path]):
        self.prompts_dir = Path(prompts_dir)
        self.prompts: Dict[str, PromptTemplate] = {}
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_env(cls) -> "PromptLibrary":
        """Create a library for the configured project and load it."""
        from config import env

        library = cls(env.get_prompts_dir())
        if env.get_setting("create_example_prompts"):
            library.create_example_prompts()
        library.load()
        return library

    def load(self) -> List[PromptTemplate]:
        """
        Re-read every prompt file in the directory.

        Files that cannot be parsed are logged and skipped.

        Returns:
            The loaded templates, sorted by name
        """
        self.prompts.clear()
        if not self.prompts_dir.is_dir():
            self.logger.debug(f"Prompts directory {self.prompts_dir} does not exist")
            return []

        for path in sorted(self.prompts_dir.iterdir()):
            if not path.is_file() or path.suffix.lower() not in PROMPT_FILE_EXTENSIONS:
                continue
            try:
                prompt = self._load_file(path)
            except (OSError, ValueError, yaml.YAMLError) as e:
                self.logger.warning(f"Skipping prompt file {path}: {e}")
                continue
            self.prompts[prompt.name] = prompt

        self.logger.info(f"Loaded {len(self.prompts)} prompts from {self.prompts_dir}")
        return self.list()

    def _load_file(self, path: Path) -> PromptTemplate:
        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)

        if not isinstance(data, dict):
            raise ValueError("prompt file must contain a mapping")
        return PromptTemplate.from_dict(data, str(path))

    def list(self) -> List[PromptTemplate]:
        return [self.prompts[name] for name in sorted(self.prompts)]

    def get(self, name: str) -> Optional[PromptTemplate]:
        return self.prompts.get(name)

    def execute(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Render a prompt with its arguments substituted.

        Args:
            name: Prompt name
            arguments: Values for the ``{{name}}`` placeholders

        Returns:
            Dictionary with success status and the rendered content
        """
        prompt = self.get(name)
        if prompt is None:
            return {
                "success": False,
                "error": f"Prompt '{name}' not found. Use the list operation to see available prompts.",
            }

        arguments = arguments or {}
        return {
            "success": True,
            "name": name,
            "text": substitute_arguments(prompt.content, arguments),
            "usedArguments": arguments,
        }

    def create_example_prompts(self) -> List[Path]:
        """
        Write the bundled example prompts that do not exist yet.

        Returns:
            Paths of the files that were written
        """
        self.prompts_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for example in EXAMPLE_PROMPTS:
            path = self.prompts_dir / f"{example['name']}.yaml"
            if path.exists():
                continue
            with open(path, "w", encoding="utf-8") as f:
                yaml.safe_dump(example, f, sort_keys=False, allow_unicode=True)
            self.logger.info(f"Created example prompt {path}")
            written.append(path)
        return written
