"""
Tests for the ForwardMessageUseCase.
"""

from unittest.mock import MagicMock

import pytest

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.message import CommandMessage
from process_foundry.exceptions import NotConfiguredError, UnhandledError
from process_foundry.ports.container_port import ContainerPort
from process_foundry.topology import ContainerTree
from process_foundry.use_cases.routing.forward_message import ForwardMessageUseCase


class TestForwardMessageUseCase:
    """Test cases for the ForwardMessageUseCase."""

    def test_uses_recorded_container(self, shell, executor, mock_logger):
        executor.responses[("/usr/bin/psql", "-l")] = "a\n"
        executor.responses[("/usr/bin/psql", "-c", "select 1")] = "b\n"
        target = AppInstance(name="psql").set_command_path("/usr/bin/psql", shell)

        outputs = ForwardMessageUseCase(logger=mock_logger).execute(
            target,
            [
                CommandMessage.build("/usr/bin/psql", ["-l"]),
                CommandMessage.build("/usr/bin/psql", ["-c", "select 1"]),
            ],
        )

        assert outputs == ["a\n", "b\n"]

    def test_falls_back_when_no_container_is_recorded(self, mock_logger):
        fallback = MagicMock(spec=ContainerPort)
        use_case = ForwardMessageUseCase(fallback=fallback, logger=mock_logger)

        assert use_case.container_for(AppInstance(name="ls")) is fallback

    def test_no_container_at_all(self, mock_logger):
        use_case = ForwardMessageUseCase(logger=mock_logger)

        with pytest.raises(NotConfiguredError, match="No container is known for ls"):
            use_case.execute(AppInstance(name="ls"), [CommandMessage.build("ls")])

    def test_unexpected_errors_are_wrapped(self, mock_logger):
        fallback = MagicMock(spec=ContainerPort)
        fallback.get_name.return_value = "bash (5.1)"
        fallback.forward.side_effect = OSError("broken pipe")
        use_case = ForwardMessageUseCase(fallback=fallback, logger=mock_logger)

        with pytest.raises(UnhandledError, match="broken pipe"):
            use_case.execute(AppInstance(name="ls"), [CommandMessage.build("ls")])

    def test_route_follows_the_container_tree(self, shell, compose, mock_logger):
        tree = ContainerTree(mock_logger)
        tree.ensure(shell)
        tree.ensure(compose, parent=shell)
        db = compose.get_container("db")
        tree.ensure(db, parent=compose)
        target = AppInstance(name="psql").set_command_path("/usr/bin/psql", db)

        route = ForwardMessageUseCase(logger=mock_logger, tree=tree).route_for(target)

        assert route == [db.get_name(), compose.get_name(), "bash (Unknown Version)"]

    def test_route_without_tree(self, shell, mock_logger):
        target = AppInstance(name="ls").set_command_path("/bin/ls", shell)

        assert ForwardMessageUseCase(logger=mock_logger).route_for(target) == [
            "bash (Unknown Version)"
        ]
