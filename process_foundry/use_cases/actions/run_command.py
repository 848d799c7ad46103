"""
The simplest action: run one command with its arguments.
"""

from typing import Iterable, Optional

from typing_extensions import override

from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.message import Cmd, CommandMessage, Message
from process_foundry.exceptions import NotConfiguredError
from process_foundry.ports.action_port import ActionPort
from process_foundry.ports.process_executor_port import ProcessExecutorPort


class RunCommandAction(ActionPort):
    """Run the target's executable with the given arguments."""

    def __init__(
        self,
        args: Iterable[str] = (),
        run_as: Optional[str] = None,
        executor: Optional[ProcessExecutorPort] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.args = tuple(str(a) for a in args)
        self.run_as = run_as
        self._executor = executor
        self._timeout = timeout

    @override
    def to_message(self, target: AppInstance) -> list[Message]:
        cmd = Cmd(command=target.get_command_path(), args=self.args, run_as=self.run_as)
        return [CommandMessage(cmd=cmd)]

    @override
    def run(self, target: AppInstance) -> str:
        if self._executor is None:
            raise NotConfiguredError(
                f"No local executor available to run {target.full_name()}"
            )
        result = self._executor.execute(
            target.get_command_path(),
            list(self.args),
            run_as=self.run_as,
            timeout=self._timeout,
        )
        return result.stdout
