"""
Bash shell adapter.

The shell is the leaf of most routing chains: it probes the local PATH for
executables and runs the commands other containers forward to it.
"""

import logging
import os
import shlex
import time
from typing import Optional

from typing_extensions import override

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.message import CommandMessage, Message
from process_foundry.entities.version import extract_version
from process_foundry.exceptions import NotConfiguredError, NotFoundError, RemoteError
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.container_port import CachePolicy, ContainerPort
from process_foundry.ports.process_executor_port import ProcessExecutorPort

APP_NAME = "bash"


class BashShell(ContainerPort, ApplicationPort):
    """A bash shell able to locate and run executables on its own host."""

    cache_policy = CachePolicy.PROBE_ONCE

    def __init__(
        self,
        instance: AppInstance,
        executor: ProcessExecutorPort,
        parent: Optional[ContainerPort] = None,
        logger: Optional[logging.Logger] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if instance.cli is None:
            instance = instance.set_command_path(APP_NAME)
        self._instance = instance.with_module_version(MODULE_VERSION)
        self._executor = executor
        self._parent = parent
        self._logger = logger or logging.getLogger(__name__)
        self._timeout = timeout
        # Too many executables exist to enumerate them all, so remember each hit by
        # the name or path that was probed
        self._app_cache: dict[str, AppInstance] = {}
        self._cached_at: dict[str, float] = {}

    @property
    def instance(self) -> AppInstance:
        return self._instance

    @property
    def parent(self) -> Optional[ContainerPort]:
        return self._parent

    @override
    def get_name(self) -> str:
        return self._instance.full_name()

    def _shell_path(self) -> str:
        return self._instance.get_command_path()

    def _command_v(self, candidate: str) -> Optional[str]:
        script = f"command -v {shlex.quote(candidate)}"
        try:
            result = self._executor.execute(
                self._shell_path(), ["-c", script], timeout=self._timeout
            )
        except RemoteError as e:
            if e.exit_code is None:
                raise
            self._logger.debug(f"{self.get_name()} found no executable for {candidate}")
            return None
        lines = result.stdout.strip().splitlines()
        return lines[0].strip() if lines else None

    def _candidates(self, query: AppQuery) -> list[str]:
        candidates = list(query.names())
        for directory in query.search_paths:
            candidates.extend(os.path.join(directory, name) for name in query.names())
        return candidates

    def _lookup(self, candidate: str) -> Optional[AppInstance]:
        key = candidate.lower()
        if key in self._app_cache and self.cache_is_fresh(self._cached_at.get(key, 0.0)):
            return self._app_cache[key]
        path = self._command_v(candidate)
        if not path:
            self._app_cache.pop(key, None)
            return None
        name = os.path.basename(candidate)
        app = AppInstance(name=name, instance_id=path).set_command_path(path, self)
        self._logger.info(f"{self.get_name()} found {name} at {path}")
        self._app_cache[key] = app
        self._cached_at[key] = time.monotonic()
        return app

    @override
    def find(self, query: AppQuery) -> list[AppInstance]:
        self._logger.debug(f"{self.get_name()} looking for {query}")
        found: list[AppInstance] = []
        for candidate in self._candidates(query):
            app = self._lookup(candidate)
            if app is None or any(f.instance_id == app.instance_id for f in found):
                continue
            found.append(app)
        return [
            app
            for app in found
            if query.matches_name(app.name) and query.accepts_version(app.version)
        ]

    @override
    def forward(self, target: AppInstance, message: Message) -> str:
        if target.cli is not None:
            owner = target.cli.container
            if owner is not None and owner is not self:
                raise NotFoundError(
                    f"{target.full_name()} belongs to {owner.get_name()} "
                    f"and cannot be reached from {self.get_name()}"
                )
        if not isinstance(message, CommandMessage):
            raise NotConfiguredError(
                f"{self.get_name()} cannot deliver {type(message).__name__} "
                f"messages to {target.full_name()}"
            )
        cmd = message.cmd
        self._logger.info(f"{self.get_name()} running '{cmd}' for {target.full_name()}")
        result = self._executor.execute(
            cmd.command, list(cmd.args), run_as=cmd.run_as, timeout=self._timeout
        )
        return result.stdout

    @override
    def cached_apps(self) -> list[AppInstance]:
        unique = {app.instance_id: app for app in self._app_cache.values()}
        return list(unique.values())

    @override
    def set_version(self, instance: AppInstance) -> AppInstance:
        command = instance.cli.path if instance.cli else APP_NAME
        result = self._executor.execute(command, ["--version"], timeout=self._timeout)
        version = extract_version(
            result.stdout, instance.name, pattern=r"version (\d+(?:\.\d+)*)"
        )
        return instance.with_version(version)

    def refresh_version(self) -> AppInstance:
        """Look up the shell's own version and keep it."""
        self._instance = self.set_version(self._instance)
        return self._instance

    def clear_cache(self) -> None:
        self._app_cache.clear()
        self._cached_at.clear()
