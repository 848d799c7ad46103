"""
Transport-agnostic messages forwarded between containers.

A message is self-contained: the receiver must be able to act on it without
knowing anything about the sender's environment.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass(frozen=True)
class Cmd:
    """Run a command, optionally as another user, with an ordered argument list."""

    command: str
    args: tuple[str, ...] = field(default_factory=tuple)
    run_as: Optional[str] = None

    def __post_init__(self):
        if not self.command:
            raise ValueError("Cmd requires a non-empty 'command'")
        object.__setattr__(self, "args", tuple(str(a) for a in self.args))

    def to_argv(self) -> list[str]:
        return [self.command, *self.args]

    def __str__(self) -> str:
        prefix = f"[{self.run_as}] " if self.run_as else ""
        return prefix + " ".join(self.to_argv())


class Message:
    """Base class for every message variant."""

    kind: str = ""


@dataclass(frozen=True)
class CommandMessage(Message):
    """For a remote shell, such as one inside a managed container."""

    cmd: Cmd
    kind = "command"

    @classmethod
    def build(
        cls, command: str, args: Iterable[str] = (), run_as: Optional[str] = None
    ) -> "CommandMessage":
        return cls(cmd=Cmd(command=command, args=tuple(args), run_as=run_as))


@dataclass(frozen=True)
class RpcMessage(Message):
    """Reserved for RPC calls."""

    kind = "rpc"


@dataclass(frozen=True)
class RestMessage(Message):
    """Reserved for calls to a RESTful API."""

    kind = "rest"
