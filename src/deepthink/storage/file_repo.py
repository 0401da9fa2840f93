"""File-based scenario repository using JSON files.

Each scenario is one JSON document in the scenarios/ directory, validated
into a ScenarioGraph on load.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from deepthink.models.scenario import ScenarioGraph

from .repository import ScenarioRepository

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    """Convert text to a filename-friendly slug.

    Examples:
        >>> slugify("Hospital Power Outage")
        'hospital-power-outage'
        >>> slugify("Data Breach: Phase 2")
        'data-breach-phase-2'
    """
    text = text.lower()
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def load_scenario(path: str | Path) -> ScenarioGraph:
    """Load and validate a scenario JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        Validated ScenarioGraph

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON or fails schema validation
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    try:
        return ScenarioGraph.from_json(text)
    except ValidationError as e:
        raise ValueError(f"Invalid scenario file {path}: {e}") from e


def save_scenario(graph: ScenarioGraph, path: str | Path) -> None:
    """Write a scenario to a JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(graph.to_json(), encoding="utf-8")


class FileScenarioRepository(ScenarioRepository):
    """JSON file-based scenario repository.

    Stores scenarios as individual JSON files in the scenarios directory,
    named '<scenario id>.json'.
    """

    def __init__(self, scenarios_path: str | Path = "scenarios"):
        """Initialize repository.

        Args:
            scenarios_path: Path to scenarios directory
        """
        self.scenarios_path = Path(scenarios_path)
        self.scenarios_path.mkdir(parents=True, exist_ok=True)

    def _get_scenario_path(self, scenario_id: str) -> Path:
        return self.scenarios_path / f"{scenario_id}.json"

    def list_scenarios(self) -> list[dict]:
        """Return metadata for all readable scenarios.

        Files that fail to load are skipped with a warning.
        """
        scenarios = []
        for path in self.scenarios_path.glob("*.json"):
            try:
                graph = load_scenario(path)
            except ValueError as e:
                logger.warning("Skipping unreadable scenario %s: %s", path.name, e)
                continue
            scenarios.append({
                "id": path.stem,
                "title": graph.title or path.stem,
                "domain": graph.domain,
                "difficulty_level": graph.difficulty_level,
                "version": graph.version,
            })
        return sorted(scenarios, key=lambda x: x["title"])

    def get_scenario(self, scenario_id: str) -> Optional[ScenarioGraph]:
        """Load complete scenario by ID."""
        path = self._get_scenario_path(scenario_id)
        if not path.exists():
            return None
        graph = load_scenario(path)
        logger.info("Loaded scenario %s from %s", scenario_id, path)
        return graph

    def save_scenario(self, graph: ScenarioGraph) -> str:
        """Save scenario, return ID."""
        name = graph.scenario_id or graph.title
        if not name:
            raise ValueError("Scenario must have 'scenario_id' or 'title' field")

        scenario_id = graph.scenario_id or slugify(graph.title)
        if graph.scenario_id is None:
            graph = graph.model_copy(update={"scenario_id": scenario_id})

        path = self._get_scenario_path(scenario_id)
        save_scenario(graph, path)
        logger.info("Saved scenario %s to %s", scenario_id, path)
        return scenario_id

    def delete_scenario(self, scenario_id: str) -> bool:
        """Delete scenario."""
        path = self._get_scenario_path(scenario_id)
        if path.exists():
            path.unlink()
            return True
        return False
