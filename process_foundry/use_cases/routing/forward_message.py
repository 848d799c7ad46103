import logging
from typing import Iterable, Optional

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.message import Message
from process_foundry.exceptions import BaseFoundryError, NotConfiguredError, UnhandledError
from process_foundry.ports.container_port import ContainerPort
from process_foundry.topology import ContainerTree


class ForwardMessageUseCase:
    """Deliver messages to an instance through the container recorded in its CliAccess."""

    def __init__(
        self,
        fallback: Optional[ContainerPort] = None,
        logger: Optional[logging.Logger] = None,
        tree: Optional[ContainerTree] = None,
    ) -> None:
        self._fallback = fallback
        self._tree = tree
        self._logger = logger or logging.getLogger(__name__)

    def container_for(self, target: AppInstance) -> ContainerPort:
        """
        Raises:
            NotConfiguredError: If the instance has no reachable container
        """
        container = target.cli.container if target.cli else None
        if container is None:
            container = self._fallback
        if container is None:
            raise NotConfiguredError(
                f"No container is known for {target.full_name()}, "
                "so messages to it cannot be forwarded"
            )
        return container

    def route_for(self, target: AppInstance) -> list[str]:
        """Names of the containers a message to target passes, nearest first."""
        container = self.container_for(target)
        if self._tree is None or self._tree.id_of(container) is None:
            return [container.get_name()]
        return [c.get_name() for c in self._tree.route(container)]

    def execute(self, target: AppInstance, messages: Iterable[Message]) -> list[str]:
        container = self.container_for(target)
        route = " -> ".join(self.route_for(target))
        outputs = []
        try:
            for message in messages:
                self._logger.info(
                    f"Forwarding {type(message).__name__} to {target.full_name()} "
                    f"via {route}"
                )
                outputs.append(container.forward(target, message))
            return outputs
        except BaseFoundryError:
            raise
        except Exception as e:
            self._logger.error(f"Error forwarding to {target.full_name()}: {e}")
            raise UnhandledError(
                f"Failed to forward to {target.full_name()}: {str(e)}"
            ) from e
