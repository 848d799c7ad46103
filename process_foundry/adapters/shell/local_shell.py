"""
Bootstrap helper that builds the shell for the machine the foundry runs on.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from process_foundry.adapters.shell.bash_shell import BashShell
from process_foundry.entities.app_instance import AppInstance
from process_foundry.ports.process_executor_port import ProcessExecutorPort

_SHELL_NAME = re.compile(r"/?([\w-]+)$")


class ShellType(str, Enum):
    DASH = "dash"
    BASH = "bash"
    ZSH = "zsh"


@dataclass
class Shell:
    shell_type: ShellType
    instance: AppInstance
    running: BashShell


def preferred_shell_name(shell_env: Optional[str], default: str = "bash") -> str:
    """Name of the user's shell from a $SHELL-style path."""
    if not shell_env:
        return default
    match = _SHELL_NAME.search(shell_env.strip())
    return match.group(1).lower() if match else default


def get_local_shell(
    executor: ProcessExecutorPort,
    shell_env: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
    timeout: Optional[float] = None,
) -> Shell:
    """
    Build the local shell container.

    Bash is on most systems, so it is always used; any other preferred shell
    only produces a warning.
    """
    logger = logger or logging.getLogger(__name__)
    name = preferred_shell_name(shell_env)
    if name != ShellType.BASH.value:
        logger.warning(f"Found preferred shell is '{name}', but using bash anyways")
    shell_type = ShellType.BASH
    running = BashShell(
        AppInstance(name=shell_type.value), executor, logger=logger, timeout=timeout
    )
    logger.info(f"Using local shell {running.get_name()}")
    return Shell(shell_type=shell_type, instance=running.instance, running=running)
