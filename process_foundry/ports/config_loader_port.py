"""
Configuration loader port interface for orchestrator configurations.
"""

from abc import ABC, abstractmethod

from process_foundry.entities.compose_config import ComposeConfig


class ComposeConfigLoaderPort(ABC):
    """Port interface for turning a configuration file into a ComposeConfig."""

    @abstractmethod
    def load(self, path: str) -> ComposeConfig:
        """
        Load the configuration stored at path.

        Raises:
            ConfigurationError: If the file is missing or invalid
        """
        pass
