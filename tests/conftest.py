"""
Pytest configuration and shared fixtures.
"""

from typing import Optional, Union
from unittest.mock import MagicMock

import pytest

from process_foundry.adapters.compose.docker_compose import DockerCompose
from process_foundry.adapters.shell.bash_shell import BashShell
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.compose_config import ComposeConfig, ComposeService
from process_foundry.exceptions import RemoteError
from process_foundry.ports.process_executor_port import (
    ProcessExecutorPort,
    ProcessResult,
)

Response = Union[str, ProcessResult, Exception]


class FakeExecutor(ProcessExecutorPort):
    """
    Executor returning canned responses keyed by the full argv tuple.

    Unknown commands get the default response.
    """

    def __init__(
        self, responses: Optional[dict[tuple, Response]] = None, default: Response = ""
    ) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[dict] = []

    def execute(self, command, args=None, run_as=None, timeout=None) -> ProcessResult:
        argv = (command, *(args or []))
        self.calls.append({"argv": list(argv), "run_as": run_as, "timeout": timeout})
        response = self.responses.get(argv, self.default)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, ProcessResult):
            return response
        return ProcessResult(stdout=response)


def not_found() -> RemoteError:
    return RemoteError("command -v found nothing", exit_code=1, stderr="")


@pytest.fixture
def mock_logger():
    """
    Create a mock logger for testing.

    Returns:
        Mock logger instance
    """
    return MagicMock()


@pytest.fixture
def executor():
    """A FakeExecutor whose lookups find nothing unless told otherwise."""
    return FakeExecutor(default=not_found())


@pytest.fixture
def shell(executor, mock_logger):
    """A bash shell container backed by the fake executor."""
    return BashShell(AppInstance(name="bash"), executor, logger=mock_logger)


@pytest.fixture
def compose_config():
    """A two-service compose project."""
    return ComposeConfig(
        source="/srv/app/docker-compose.yml",
        services={
            "db": ComposeService(image="postgres:12"),
            "web": ComposeService(image="nginx", depends_on=["db"]),
        },
    )


@pytest.fixture
def compose(shell, compose_config, mock_logger):
    """DockerCompose configured with the project above and the fake shell as parent."""
    instance = AppInstance(name="docker-compose").set_command_path(
        "/usr/bin/docker-compose", shell
    )
    return DockerCompose(instance, parent=shell, logger=mock_logger).with_config(
        compose_config
    )
