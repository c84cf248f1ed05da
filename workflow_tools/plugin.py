import importlib
import inspect
import logging
import pkgutil
import time
from contextlib import contextmanager
from typing import Dict, List, Type, Set, Optional, Union

from workflow_tools.interfaces import ToolInterface, PromptInterface

logger = logging.getLogger(__name__)

Registrable = Union[Type[ToolInterface], Type[PromptInterface]]


@contextmanager
def time_plugin_operation(name: str):
    start_time = time.time()
    logger.info(f"Starting {name}...")
    try:
        yield
    finally:
        duration = time.time() - start_time
        logger.info(f"{name} completed in {duration:.2f}s")


class PluginRegistry:
    """Registry for workflow MCP tools and prompts.

    This class handles the registration, discovery, and instantiation of classes
    implementing ToolInterface or PromptInterface.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(PluginRegistry, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize the plugin registry"""
        self.tools: Dict[str, Type[ToolInterface]] = {}
        self.instances: Dict[str, ToolInterface] = {}
        self.prompts: Dict[str, Type[PromptInterface]] = {}
        self.prompt_instances: Dict[str, PromptInterface] = {}
        self.discovered_paths: Set[str] = set()

    def _check_class(self, cls: Registrable, interface: type) -> bool:
        if not inspect.isclass(cls):
            raise TypeError(f"Expected a class, got {type(cls)}")

        if not issubclass(cls, interface):
            raise TypeError(
                f"Class {cls.__name__} does not implement {interface.__name__}"
            )

        if inspect.isabstract(cls):
            logger.debug(f"Skipping registration of abstract class {cls.__name__}")
            return False
        return True

    def register_tool(
        self, tool_class: Type[ToolInterface]
    ) -> Optional[Type[ToolInterface]]:
        """Register a tool class.

        Args:
            tool_class: A class that implements ToolInterface

        Returns:
            The registered tool class or None if it wasn't registered

        Raises:
            TypeError: If the provided class doesn't implement ToolInterface
        """
        if not self._check_class(tool_class, ToolInterface):
            return None

        tool_name = tool_class().name
        logger.info(f"Registering tool: {tool_name} ({tool_class.__name__})")
        self.tools[tool_name] = tool_class
        self.instances.pop(tool_name, None)
        return tool_class

    def register_prompt(
        self, prompt_class: Type[PromptInterface]
    ) -> Optional[Type[PromptInterface]]:
        """Register a prompt class.

        Raises:
            TypeError: If the provided class doesn't implement PromptInterface
        """
        if not self._check_class(prompt_class, PromptInterface):
            return None

        prompt_name = prompt_class().name
        logger.info(f"Registering prompt: {prompt_name} ({prompt_class.__name__})")
        self.prompts[prompt_name] = prompt_class
        self.prompt_instances.pop(prompt_name, None)
        return prompt_class

    def get_tool_instance(self, tool_name: str) -> Optional[ToolInterface]:
        """Get or create an instance of a registered tool.

        Args:
            tool_name: Name of the tool to get

        Returns:
            Instance of the tool, or None if not found
        """
        if tool_name in self.instances:
            return self.instances[tool_name]

        if tool_name not in self.tools:
            logger.warning(f"Tool '{tool_name}' not found")
            return None

        logger.debug(f"Creating new instance for tool '{tool_name}'")
        instance = self.tools[tool_name]()
        self.instances[tool_name] = instance
        return instance

    def get_prompt_instance(self, prompt_name: str) -> Optional[PromptInterface]:
        """Get or create an instance of a registered prompt."""
        if prompt_name in self.prompt_instances:
            return self.prompt_instances[prompt_name]

        if prompt_name not in self.prompts:
            logger.warning(f"Prompt '{prompt_name}' not found")
            return None

        instance = self.prompts[prompt_name]()
        self.prompt_instances[prompt_name] = instance
        return instance

    def get_all_instances(self) -> List[ToolInterface]:
        """Get instances of all registered tools, creating them as needed."""
        return [self.get_tool_instance(name) for name in sorted(self.tools)]

    def get_all_prompts(self) -> List[PromptInterface]:
        """Get instances of all registered prompts, creating them as needed."""
        return [self.get_prompt_instance(name) for name in sorted(self.prompts)]

    def discover_tools(self, package_name: str) -> None:
        """Discover tools and prompts by recursively importing a package.

        Registration happens through the decorators as modules are imported.

        Args:
            package_name: Name of the package to scan
        """
        logger.info(f"Discovering tools in package: {package_name}")

        package = importlib.import_module(package_name)
        package_path = getattr(package, "__path__", [])

        for _, module_name, is_pkg in pkgutil.iter_modules(package_path):
            # Test modules are never part of the served surface
            if module_name == "tests" or module_name.startswith("test_"):
                continue

            full_name = f"{package_name}.{module_name}"
            if full_name in self.discovered_paths:
                continue
            self.discovered_paths.add(full_name)

            try:
                if is_pkg:
                    self.discover_tools(full_name)
                else:
                    self._scan_module(importlib.import_module(full_name))
            except ImportError as e:
                logger.warning(f"Error processing module {full_name}: {e}")

    def _scan_module(self, module) -> None:
        """Register tool and prompt classes defined in a module.

        Decorators only run on first import, so already imported modules are
        picked up here after the registry has been cleared.
        """
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__ or inspect.isabstract(obj):
                continue
            if issubclass(obj, ToolInterface) and obj not in self.tools.values():
                self.register_tool(obj)
            elif issubclass(obj, PromptInterface) and obj not in self.prompts.values():
                self.register_prompt(obj)

    def clear(self) -> None:
        """Clear all registered tools, prompts and instances."""
        self.tools.clear()
        self.instances.clear()
        self.prompts.clear()
        self.prompt_instances.clear()
        self.discovered_paths.clear()


# Create singleton instance
registry = PluginRegistry()


def register_tool(cls=None):
    """Decorator to register a tool class with the plugin registry.

    Example:
        @register_tool
        class MyTool(ToolInterface):
            ...
    """

    def _register(cls):
        registry.register_tool(cls)
        return cls

    if cls is None:
        return _register
    return _register(cls)


def register_prompt(cls=None):
    """Decorator to register a prompt class with the plugin registry."""

    def _register(cls):
        registry.register_prompt(cls)
        return cls

    if cls is None:
        return _register
    return _register(cls)


# Packages scanned for tools and prompts when the server starts
DEFAULT_PLUGIN_PACKAGES = ["plugins.workflow_manager"]


def discover_and_register_tools(packages: Optional[List[str]] = None):
    """Discover and register all tools and prompts in the plugin packages."""
    for package_name in packages or DEFAULT_PLUGIN_PACKAGES:
        with time_plugin_operation(f"{package_name} discovery"):
            registry.discover_tools(package_name)

    logger.info(
        f"Registered {len(registry.tools)} tools: {', '.join(sorted(registry.tools)) or 'None'}"
    )
    logger.info(
        f"Registered {len(registry.prompts)} prompts: {', '.join(sorted(registry.prompts)) or 'None'}"
    )
