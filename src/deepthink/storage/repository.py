"""Abstract repository interface for Deep-Think scenario storage.

Callers load and save ScenarioGraph objects through this interface without
knowing where scenarios live.
"""

from abc import ABC, abstractmethod
from typing import Optional

from deepthink.models.scenario import ScenarioGraph


class ScenarioRepository(ABC):
    """Abstract base class for scenario storage."""

    @abstractmethod
    def list_scenarios(self) -> list[dict]:
        """Return metadata for all available scenarios.

        Returns:
            List of dicts containing: {id, title, domain, difficulty_level, version}
        """
        pass

    @abstractmethod
    def get_scenario(self, scenario_id: str) -> Optional[ScenarioGraph]:
        """Load complete scenario by ID.

        Args:
            scenario_id: Unique identifier for the scenario

        Returns:
            Validated ScenarioGraph, or None if not found

        Raises:
            ValueError: If the stored scenario is malformed
        """
        pass

    @abstractmethod
    def save_scenario(self, graph: ScenarioGraph) -> str:
        """Save scenario, return ID.

        The ID is the graph's scenario_id when set, otherwise the
        slugified title (e.g., 'Hospital Power Outage' -> 'hospital-power-outage').

        Args:
            graph: Scenario to persist

        Returns:
            ID of saved scenario

        Raises:
            ValueError: If the graph has neither scenario_id nor title
        """
        pass

    @abstractmethod
    def delete_scenario(self, scenario_id: str) -> bool:
        """Delete scenario.

        Args:
            scenario_id: ID of scenario to delete

        Returns:
            True if deleted, False if not found
        """
        pass
