"""Storage module for Deep-Think.

This module provides the scenario repository interface and its JSON file
implementation.

Usage:
    from deepthink.storage import get_scenario_repository

    # Get repository using configured path (from environment)
    scenarios = get_scenario_repository()
    graph = scenarios.get_scenario("hospital-outage")

    # Or load a single file directly
    from deepthink.storage import load_scenario
    graph = load_scenario("scenarios/hospital-outage.json")

Configuration via environment variables:
    DEEPTHINK_SCENARIOS_PATH: Path to scenarios directory (default: "scenarios")
"""

from .config import get_scenario_repository, get_scenarios_path
from .file_repo import FileScenarioRepository, load_scenario, save_scenario, slugify
from .repository import ScenarioRepository

__all__ = [
    # Abstract interface
    "ScenarioRepository",
    # File implementation
    "FileScenarioRepository",
    "load_scenario",
    "save_scenario",
    "slugify",
    # Configuration
    "get_scenarios_path",
    "get_scenario_repository",
]
