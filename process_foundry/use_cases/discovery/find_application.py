"""
Use case for locating applications through a container.
"""

import logging
from typing import Optional

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.exceptions import BaseFoundryError, UnhandledError
from process_foundry.ports.container_port import ContainerPort


class FindApplicationUseCase:
    """Use case for resolving a query against a starting container."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the use case.

        Args:
            logger: Logger instance to use for logging
        """
        self._logger = logger or logging.getLogger(__name__)

    def execute(self, container: ContainerPort, query: AppQuery) -> list[AppInstance]:
        """
        Resolve a query.

        Args:
            container: Where the search starts
            query: What to look for

        Returns:
            Every match when query.find_all is set, otherwise exactly one

        Raises:
            NotFoundError: If nothing matched
            MultipleMatchesError: If exactly one was required and several matched
        """
        try:
            self._logger.info(f"Searching {container.get_name()} for {query}")
            found = container.resolve(query)
            self._logger.info(f"Found {len(found)} instances of {query.name}")
            return found
        except BaseFoundryError:
            raise
        except Exception as e:
            self._logger.error(f"Error searching for {query.name}: {e}")
            raise UnhandledError(
                f"Failed to search {container.get_name()} for {query.name}: {str(e)}"
            ) from e
