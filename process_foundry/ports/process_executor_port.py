"""
Process executor port interface for running commands.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProcessResult:
    stdout: str
    stderr: str = ""
    exit_code: int = 0

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ProcessExecutorPort(ABC):
    """Port interface for running a command and collecting its output."""

    @abstractmethod
    def execute(
        self,
        command: str,
        args: Optional[list[str]] = None,
        run_as: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """
        Run a command to completion.

        Args:
            command: Executable name or path
            args: Ordered argument list
            run_as: Effective user, if different from the current one
            timeout: Seconds before the process is abandoned

        Returns:
            ProcessResult of a successful run

        Raises:
            RemoteError: If the process exited non-zero, timed out or could not start
            ConversionError: If the output is not valid UTF-8
        """
        pass
