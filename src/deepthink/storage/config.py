"""Storage configuration for Deep-Think.

This module reads storage settings from the environment and builds the
configured repository.
"""

import os

from .file_repo import FileScenarioRepository
from .repository import ScenarioRepository

# Default configuration (can be overridden via environment variables)
DEFAULT_SCENARIOS_PATH = "scenarios"


def get_scenarios_path() -> str:
    """Get configured scenarios path from environment."""
    return os.environ.get("DEEPTHINK_SCENARIOS_PATH", DEFAULT_SCENARIOS_PATH)


def get_scenario_repository(scenarios_path: str | None = None) -> ScenarioRepository:
    """Factory function to create scenario repository.

    Args:
        scenarios_path: Scenarios directory. If None, uses environment config.

    Returns:
        ScenarioRepository instance
    """
    return FileScenarioRepository(scenarios_path or get_scenarios_path())
