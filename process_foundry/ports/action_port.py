from abc import ABC, abstractmethod
from typing import Any

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.message import Message


class ActionPort(ABC):
    @abstractmethod
    def run(self, target: AppInstance) -> Any:
        """Execute directly against a target sharing this process's execution context."""
        pass

    @abstractmethod
    def to_message(self, target: AppInstance) -> list[Message]:
        """
        Render the same effect as messages for a target reached by forwarding.

        The messages must carry everything a context-free executor needs:
        effective user, literal arguments and the target's command path.
        """
        pass
