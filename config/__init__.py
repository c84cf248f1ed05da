"""
Workflow MCP Configuration Package.

This package contains the centralized configuration module for the workflow server.
"""

from config.manager import EnvironmentManager, env_manager
from config.types import ProjectInfo

# Re-export the singleton instance for easy access
env = env_manager

__all__ = [
    "EnvironmentManager",
    "env_manager",
    "env",
    "ProjectInfo",
]
