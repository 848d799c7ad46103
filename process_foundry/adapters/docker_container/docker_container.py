"""
A single container managed by an orchestrator.

Commands never reach the container directly; they are relayed to the parent
(usually DockerCompose), which knows how to exec into it.
"""

import logging
import posixpath
import shlex
import time
from enum import Enum
from typing import Optional

from typing_extensions import override

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.message import CommandMessage, Message
from process_foundry.exceptions import NotConfiguredError, NotFoundError, RemoteError
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.container_port import CachePolicy, ContainerPort


class Status(str, Enum):
    DOWN = "down"
    UP = "up"
    EXITED = "exited"


class DockerContainer(ContainerPort, ApplicationPort):
    cache_policy = CachePolicy.PROBE_ONCE

    def __init__(
        self,
        instance: AppInstance,
        parent: Optional[ContainerPort] = None,
        logger: Optional[logging.Logger] = None,
        status: Status = Status.DOWN,
    ) -> None:
        self._instance = instance.with_module_version(MODULE_VERSION)
        self._parent = parent
        self._logger = logger or logging.getLogger(__name__)
        self.status = status
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

    def _require_parent(self) -> ContainerPort:
        if self._parent is None:
            raise NotConfiguredError(
                f"{self.get_name()} has no orchestrator to relay messages through"
            )
        return self._parent

    def _command_v(self, candidate: str) -> Optional[str]:
        message = CommandMessage.build(
            "sh", ["-c", f"command -v {shlex.quote(candidate)}"]
        )
        try:
            output = self._require_parent().forward(self._instance, message)
        except RemoteError as e:
            if e.exit_code is None:
                raise
            return None
        lines = output.strip().splitlines()
        return lines[0].strip() if lines else None

    def _lookup(self, candidate: str) -> Optional[AppInstance]:
        key = candidate.lower()
        if key in self._app_cache and self.cache_is_fresh(self._cached_at.get(key, 0.0)):
            return self._app_cache[key]
        path = self._command_v(candidate)
        if not path:
            self._app_cache.pop(key, None)
            return None
        app = AppInstance(
            name=posixpath.basename(candidate), instance_id=path
        ).set_command_path(path, self)
        self._app_cache[key] = app
        self._cached_at[key] = time.monotonic()
        self.status = Status.UP
        return app

    @override
    def find(self, query: AppQuery) -> list[AppInstance]:
        self._logger.info(f"{self.get_name()} looking for {query}")
        candidates = list(query.names())
        for directory in query.search_paths:
            candidates.extend(posixpath.join(directory, name) for name in query.names())
        found: list[AppInstance] = []
        for candidate in candidates:
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
        parent = self._require_parent()
        if target.cli is not None:
            owner = target.cli.container
            if owner is not None and owner is not self:
                raise NotFoundError(
                    f"{target.full_name()} is not inside {self.get_name()}"
                )
        self._logger.debug(f"{self.get_name()} relaying message for {target.full_name()}")
        return parent.forward(self._instance, message)

    @override
    def cached_apps(self) -> list[AppInstance]:
        unique = {app.instance_id: app for app in self._app_cache.values()}
        return list(unique.values())
