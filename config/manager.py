from pathlib import Path
from typing import Dict, Any
from config.types import ProjectInfo
import logging
import os


class EnvironmentManager:
    """
    Environment manager holding the settings of the workflow server:
    where the project lives, where workflow definitions and prompt
    templates are stored, and how the server logs and listens.
    """

    _instance = None

    # Default settings with their types
    DEFAULT_SETTINGS = {
        # Project layout
        "project_path": (None, str),
        "workflow_dir_name": (".workflow", str),
        "workflow_file_extension": (".json", str),
        "prompts_dir_name": ("prompts", str),
        "create_example_prompts": (True, bool),
        # Logging
        "log_level": ("INFO", str),
        "log_dir": (".logs", str),
        # SSE transport
        "server_port": (8000, int),
    }

    # Create mapping dynamically - each setting can be set via its uppercase env var
    ENV_MAPPING = {setting.upper(): setting for setting in DEFAULT_SETTINGS.keys()}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize environment with default values"""
        self.project_info = ProjectInfo()
        self.settings: Dict[str, Any] = {}
        self.logger = logging.getLogger(__name__)

        for key, (default_value, _) in self.DEFAULT_SETTINGS.items():
            self.settings[key] = default_value

        self._load_from_env_file()
        self._sync_settings_to_project()

    def _sync_settings_to_project(self):
        """Sync settings to the project info object"""
        project_path = self.get_project_path()
        self.project_info.project_path = str(project_path)
        self.project_info.workflow_dir = str(
            project_path / self.settings["workflow_dir_name"]
        )
        self.project_info.prompts_dir = str(
            project_path / self.settings["prompts_dir_name"]
        )

    def _convert_value(self, value: str, target_type: type) -> Any:
        """Convert string value to target type"""
        if target_type == bool:
            return value.lower() in ("true", "1", "yes")
        return target_type(value)

    def _apply_variable(self, key: str, value: str):
        """Update the setting a variable maps to, if any"""
        if key in self.ENV_MAPPING:
            setting_name = self.ENV_MAPPING[key]
            _, target_type = self.DEFAULT_SETTINGS[setting_name]
            try:
                self.settings[setting_name] = self._convert_value(value, target_type)
            except ValueError:
                self.logger.warning(
                    f"Ignoring invalid value for {key}: {value!r} "
                    f"(expected {target_type.__name__})"
                )

    def _load_from_env_file(self):
        """Find and load variables from a .env file"""
        env_file_paths = []

        if self.settings.get("project_path"):
            env_file_paths.append(Path(self.settings["project_path"]) / ".env")

        env_file_paths.append(Path.cwd() / ".env")

        try:
            env_file_paths.append(Path.home() / ".env")
        except (RuntimeError, OSError):
            # Skip home directory if it can't be determined
            pass

        for env_path in env_file_paths:
            if env_path.exists() and env_path.is_file():
                self.logger.info(f"Loading environment from: {env_path}")
                self._parse_env_file(env_path)
                return

        self.logger.debug(
            "No .env file found. Tried: "
            + ", ".join(str(p) for p in env_file_paths)
        )

    def _parse_env_file(self, env_file_path: Path):
        """Parse a .env file and load variables into environment"""
        try:
            with open(env_file_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line and not line.startswith("#") and "=" in line:
                        key, value = line.split("=", 1)
                        key = key.strip()
                        value = value.strip()

                        # Remove quotes if present
                        if (value.startswith('"') and value.endswith('"')) or (
                            value.startswith("'") and value.endswith("'")
                        ):
                            value = value[1:-1]

                        self._apply_variable(key, value)

            self._sync_settings_to_project()

        except OSError as e:
            self.logger.error(f"Error parsing .env file {env_file_path}: {e}")

    def load(self):
        """Load all environment information"""
        self._load_from_env_file()

        for key, value in os.environ.items():
            self._apply_variable(key, value)

        self._sync_settings_to_project()
        return self

    def get_setting(self, name: str, default: Any = None) -> Any:
        """Get a setting value by name"""
        return self.settings.get(name, default)

    def set_setting(self, name: str, value: Any) -> None:
        """Override a setting at runtime (e.g. from the command line)"""
        if name not in self.DEFAULT_SETTINGS:
            raise KeyError(f"Unknown setting: {name}")
        self.settings[name] = value
        self._sync_settings_to_project()

    def reset_setting(self, name: str) -> None:
        """Restore a setting to its default value"""
        if name not in self.DEFAULT_SETTINGS:
            raise KeyError(f"Unknown setting: {name}")
        self.settings[name] = self.DEFAULT_SETTINGS[name][0]
        self._sync_settings_to_project()

    def get_project_path(self) -> Path:
        """Get the project root, defaulting to the current directory"""
        value = self.settings.get("project_path")
        if not value:
            return Path.cwd()
        return Path(value).expanduser()

    def get_workflow_dir(self) -> Path:
        """Get the directory holding workflow definitions"""
        return self.get_project_path() / self.settings["workflow_dir_name"]

    def get_workflow_file_extension(self) -> str:
        extension = self.settings.get("workflow_file_extension") or ".json"
        return extension if extension.startswith(".") else f".{extension}"

    def get_prompts_dir(self) -> Path:
        """Get the directory holding prompt templates"""
        return self.get_project_path() / self.settings["prompts_dir_name"]

    def get_log_dir(self) -> Path:
        """Get the log directory, relative paths resolve against the project"""
        log_dir = Path(self.settings.get("log_dir") or ".logs").expanduser()
        if not log_dir.is_absolute():
            log_dir = self.get_project_path() / log_dir
        return log_dir


# Create a global instance
env_manager = EnvironmentManager()
