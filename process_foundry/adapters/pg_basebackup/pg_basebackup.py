"""
A wrapper for the CLI tool pg_basebackup.

Generates backup files from a running Postgres database; see
https://www.postgresql.org/docs/12/app-pgbasebackup.html for the flags.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from typing_extensions import override

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.message import Cmd, CommandMessage, Message
from process_foundry.entities.version import extract_version
from process_foundry.exceptions import NotConfiguredError
from process_foundry.ports.action_port import ActionPort
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.container_port import ContainerPort
from process_foundry.ports.process_executor_port import ProcessExecutorPort

APP_NAME = "pg_basebackup"


class CompressionKind(str, Enum):
    NONE = "none"
    TAR = "tar"
    GZIP = "gzip"


@dataclass(frozen=True)
class Compression:
    """Output encoding: plain, tar, or gzipped tar with an optional level (0-9)."""

    kind: CompressionKind = CompressionKind.NONE
    level: Optional[int] = None

    def __post_init__(self):
        if self.level is not None and not 0 <= self.level <= 9:
            raise ValueError(f"Compression level must be between 0 and 9, got {self.level}")

    def to_args(self) -> list[str]:
        if self.kind is CompressionKind.NONE:
            return []
        if self.kind is CompressionKind.TAR:
            return ["-Ft"]
        args = ["-Ft", "-z"]
        if self.level is not None:
            args += ["-Z", str(self.level)]
        return args


class RateUnit(str, Enum):
    KB_S = "k"
    MB_S = "M"


@dataclass(frozen=True)
class Rate:
    amount: int
    unit: RateUnit = RateUnit.KB_S

    def __str__(self) -> str:
        return f"{self.amount}{self.unit.value}"


class WalMethod(str, Enum):
    NONE = "none"
    FETCH = "fetch"
    STREAM = "stream"


class Checkpoint(str, Enum):
    FAST = "fast"
    SPREAD = "spread"


@dataclass(frozen=True)
class BackupOptions:
    """All the command line options that can be passed to pg_basebackup."""

    # Output
    pgdata: Optional[str] = None
    max_rate: Optional[Rate] = None
    write_recovery_conf: bool = False
    tablespace_mapping: Optional[str] = None
    waldir: Optional[str] = None
    wal_method: Optional[WalMethod] = None
    compression: Optional[Compression] = None
    # General
    checkpoint: Optional[Checkpoint] = None
    create_slot: bool = False
    label: Optional[str] = None
    no_clean: bool = False
    no_sync: bool = False
    progress: bool = False
    slot: Optional[str] = None
    verbose: bool = False
    version: bool = False
    no_slot: bool = False
    no_verify_checksums: bool = False
    # Connection
    username: Optional[str] = None
    no_password: bool = False
    password: bool = False

    def to_args(self) -> list[str]:
        args: list[str] = []
        if self.pgdata:
            args += ["-D", self.pgdata]
        if self.max_rate:
            args += ["-r", str(self.max_rate)]
        if self.write_recovery_conf:
            args.append("-R")
        if self.tablespace_mapping:
            args += ["-T", self.tablespace_mapping]
        if self.waldir:
            args.append(f"--waldir={self.waldir}")
        if self.wal_method:
            args += ["-X", self.wal_method.value]
        if self.compression:
            args += self.compression.to_args()
        if self.checkpoint:
            args += ["-c", self.checkpoint.value]
        if self.create_slot:
            args.append("-C")
        if self.label:
            args += ["-l", self.label]
        if self.no_clean:
            args.append("-n")
        if self.no_sync:
            args.append("-N")
        if self.progress:
            args.append("-P")
        if self.slot:
            args += ["-S", self.slot]
        if self.verbose:
            args.append("-v")
        if self.version:
            args.append("-V")
        if self.no_slot:
            args.append("--no-slot")
        if self.no_verify_checksums:
            args.append("--no-verify-checksums")
        if self.username:
            args += ["-U", self.username]
        if self.no_password:
            args.append("-w")
        if self.password:
            args.append("-W")
        return args


class BaseBackupAction(ActionPort):
    """Take a base backup of a Postgres cluster."""

    def __init__(
        self,
        options: BackupOptions,
        run_as: Optional[str] = "postgres",
        executor: Optional[ProcessExecutorPort] = None,
    ) -> None:
        self.options = options
        self.run_as = run_as
        self._executor = executor

    @override
    def to_message(self, target: AppInstance) -> list[Message]:
        cmd = Cmd(
            command=target.get_command_path(),
            args=tuple(self.options.to_args()),
            run_as=self.run_as,
        )
        return [CommandMessage(cmd=cmd)]

    @override
    def run(self, target: AppInstance) -> str:
        if self._executor is None:
            raise NotConfiguredError(
                f"No local executor available to run {APP_NAME} on {target.full_name()}"
            )
        cmd = self.to_message(target)[0].cmd
        return self._executor.execute(
            cmd.command, list(cmd.args), run_as=cmd.run_as
        ).stdout


class PgBaseBackup(ApplicationPort):
    def __init__(
        self,
        instance: AppInstance,
        parent: Optional[ContainerPort] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._instance = instance.with_module_version(MODULE_VERSION)
        self._parent = parent
        self._logger = logger or logging.getLogger(__name__)

    @property
    def instance(self) -> AppInstance:
        return self._instance

    @override
    def get_name(self) -> str:
        return self._instance.full_name()

    def _require_parent(self) -> ContainerPort:
        if self._parent is None:
            raise NotConfiguredError(
                f"{self.get_name()} has no container to forward its commands through"
            )
        return self._parent

    def run(self, options: BackupOptions, run_as: Optional[str] = "postgres") -> str:
        """Take a backup by forwarding the rendered command through the parent container."""
        parent = self._require_parent()
        self._logger.debug(f"Running {self.get_name()} - saving to {options.pgdata}")
        messages = BaseBackupAction(options, run_as=run_as).to_message(self._instance)
        outputs = []
        for message in messages:
            self._logger.debug(f"msg: {message}")
            outputs.append(parent.forward(self._instance, message))
        return "".join(outputs)

    @override
    def set_version(self, instance: AppInstance) -> AppInstance:
        message = CommandMessage.build(instance.get_command_path(), ["--version"])
        output = self._require_parent().forward(instance, message)
        version = extract_version(
            output, instance.name, pattern=r"\(PostgreSQL\)\s+(\d+(?:\.\d+)*)"
        )
        return instance.with_version(version)
