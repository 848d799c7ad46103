"""
Container port interface: the contract every routing node implements.
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.message import Message
from process_foundry.exceptions import MultipleMatchesError, NotFoundError

logger = logging.getLogger(__name__)


class CachePolicy(str, Enum):
    """How a container answers repeated finds for the same name."""

    ALWAYS_PROBE = "always_probe"
    PROBE_ONCE = "probe_once"
    TTL = "ttl"


class ContainerPort(ABC):
    """
    Port interface for containers: nodes that discover and address applications.

    Adapters implement discovery and forwarding; find_one and resolve are
    shared by all of them.
    """

    cache_policy: CachePolicy = CachePolicy.ALWAYS_PROBE
    cache_ttl: float = 0.0

    @abstractmethod
    def find(self, query: AppQuery) -> list[AppInstance]:
        """
        Find every application matching the query.

        Zero matches is a successful, empty result.

        Args:
            query: What to look for

        Returns:
            List of matching AppInstance values
        """
        pass

    @abstractmethod
    def forward(self, target: AppInstance, message: Message) -> str:
        """
        Deliver a message to a child and return its raw output.

        Args:
            target: An instance previously returned by find/find_one
            message: The self-contained message to deliver

        Returns:
            Whatever the execution produced, verbatim

        Raises:
            NotConfiguredError: If the container has no way to reach the target
            NotFoundError: If the target is not a child of this container
        """
        pass

    @abstractmethod
    def cached_apps(self) -> list[AppInstance]:
        """List already-resolved children without probing for new ones."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Stable "name (version)" identity for logs and errors."""
        pass

    def cache_is_fresh(self, cached_at: float) -> bool:
        """Whether an entry cached at cached_at (time.monotonic) may still be used."""
        if self.cache_policy is CachePolicy.ALWAYS_PROBE:
            return False
        if self.cache_policy is CachePolicy.TTL:
            return time.monotonic() - cached_at < self.cache_ttl
        return True

    def find_one(self, query: AppQuery) -> AppInstance:
        """
        Find exactly one application matching the query.

        Raises:
            NotFoundError: If nothing matched
            MultipleMatchesError: If more than one instance matched
        """
        found = self.find(query)
        if not found:
            raise NotFoundError(
                f"No instances matching your query of {query.name} have been "
                f"registered in {self.get_name()}"
            )
        if len(found) > 1:
            raise MultipleMatchesError(
                f"{len(found)} instances matching your definition for {query.name} "
                f"have been registered in {self.get_name()}. "
                "Please narrow your search criteria"
            )
        logger.debug(f"{self.get_name()} resolved {query.name} to {found[0]}")
        return found[0]

    def resolve(self, query: AppQuery) -> list[AppInstance]:
        """Every match when the query asks for all of them, otherwise exactly one."""
        if query.find_all:
            return self.find(query)
        return [self.find_one(query)]
