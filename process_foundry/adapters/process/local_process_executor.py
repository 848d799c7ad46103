import getpass
import logging
import subprocess
from typing import Optional

from typing_extensions import override

from process_foundry.exceptions import ConversionError, RemoteError
from process_foundry.ports.process_executor_port import (
    ProcessExecutorPort,
    ProcessResult,
)


def _current_user() -> Optional[str]:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None


class LocalProcessExecutor(ProcessExecutorPort):
    """Runs commands on this machine with subprocess."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        default_timeout: Optional[float] = None,
        sudo_command: str = "sudo",
    ) -> None:
        self._logger = logger or logging.getLogger(__name__)
        self._default_timeout = default_timeout
        self._sudo_command = sudo_command

    def build_argv(
        self, command: str, args: Optional[list[str]] = None, run_as: Optional[str] = None
    ) -> list[str]:
        argv = [command, *[str(a) for a in (args or [])]]
        if run_as and run_as != _current_user():
            argv = [self._sudo_command, "-u", run_as, "--", *argv]
        return argv

    def _decode(self, raw: Optional[bytes], command: str) -> str:
        if raw is None:
            return ""
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self._logger.warning(f"Output of '{command}' is not valid UTF-8: {e}")
            raise ConversionError(
                f"Could not decode the output of '{command}' as UTF-8: {e}"
            ) from e

    @override
    def execute(
        self,
        command: str,
        args: Optional[list[str]] = None,
        run_as: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        argv = self.build_argv(command, args, run_as)
        timeout = timeout if timeout is not None else self._default_timeout
        self._logger.debug(f"Executing: {' '.join(argv)}")
        try:
            proc = subprocess.run(argv, capture_output=True, timeout=timeout, check=False)
        except subprocess.TimeoutExpired as e:
            self._logger.error(f"'{command}' timed out after {timeout} seconds")
            raise RemoteError(f"'{command}' timed out after {timeout} seconds") from e
        except OSError as e:
            self._logger.error(f"Failed to start '{command}': {e}")
            raise RemoteError(f"Could not start '{command}': {e}") from e

        stdout = self._decode(proc.stdout, command)
        stderr = self._decode(proc.stderr, command)
        if proc.returncode != 0:
            self._logger.error(
                f"'{command}' exited with status {proc.returncode}: {stderr.strip()}"
            )
            raise RemoteError(
                f"'{command}' exited with status {proc.returncode}: {stderr.strip()}",
                exit_code=proc.returncode,
                stderr=stderr,
            )
        return ProcessResult(stdout=stdout, stderr=stderr, exit_code=proc.returncode)
