"""
Application port interface for adapters wrapping an external tool.
"""

import logging
from abc import ABC, abstractmethod

from process_foundry.entities.app_instance import AppInstance


class ApplicationPort(ABC):
    """Port interface for a tool the foundry can drive."""

    @property
    @abstractmethod
    def instance(self) -> AppInstance:
        """The instance this adapter controls."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Standardized "name (version)" for logging purposes."""
        pass

    def set_version(self, instance: AppInstance) -> AppInstance:
        """
        Discover the installed tool's version (not the module version).

        Returns:
            A copy of the instance with the version filled in
        """
        logging.getLogger(__name__).warning(
            f"Set version has not been implemented for {self.get_name()}"
        )
        return instance
