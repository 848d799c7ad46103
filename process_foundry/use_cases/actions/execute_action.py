import logging
from typing import Any, Optional

from process_foundry.entities.app_instance import AppInstance
from process_foundry.exceptions import BaseFoundryError, UnhandledError
from process_foundry.ports.action_port import ActionPort
from process_foundry.ports.container_port import ContainerPort


class ExecuteActionUseCase:
    """
    Run an action locally or forward it through a container.

    The caller picks the path: passing a container means forwarding.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def execute(
        self,
        action: ActionPort,
        target: AppInstance,
        forward_through: Optional[ContainerPort] = None,
    ) -> Any:
        if forward_through is None:
            return self.run_local(action, target)
        return self.forward(action, target, forward_through)

    def run_local(self, action: ActionPort, target: AppInstance) -> Any:
        name = type(action).__name__
        try:
            self._logger.info(f"Running {name} locally against {target.full_name()}")
            return action.run(target)
        except BaseFoundryError:
            raise
        except Exception as e:
            self._logger.error(f"Error running {name}: {e}")
            raise UnhandledError(
                f"{name} failed against {target.full_name()}: {e}"
            ) from e

    def forward(
        self, action: ActionPort, target: AppInstance, container: ContainerPort
    ) -> list[str]:
        """Forward every rendered message in order and collect the raw outputs."""
        name = type(action).__name__
        try:
            messages = action.to_message(target)
            self._logger.info(
                f"Forwarding {len(messages)} message(s) from {name} "
                f"to {target.full_name()} through {container.get_name()}"
            )
            outputs = []
            for message in messages:
                self._logger.debug(f"msg: {message}")
                outputs.append(container.forward(target, message))
            return outputs
        except BaseFoundryError:
            raise
        except Exception as e:
            self._logger.error(f"Error forwarding {name}: {e}")
            raise UnhandledError(
                f"{name} could not be forwarded to {target.full_name()}: {e}"
            ) from e
