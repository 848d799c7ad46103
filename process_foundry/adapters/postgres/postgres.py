"""
Module for a Postgres server reached through its container.
"""

import logging
from typing import Optional

from typing_extensions import override

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.adapters.pg_basebackup.pg_basebackup import PgBaseBackup
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppDescription
from process_foundry.entities.message import CommandMessage
from process_foundry.entities.version import extract_version
from process_foundry.exceptions import NotConfiguredError
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.container_port import ContainerPort

DESCRIPTION = AppDescription(name="postgres", aliases=("postgresql", "pg"))
BACKUP_TOOL = AppDescription(name="pg_basebackup")


class Postgres(ApplicationPort):
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
            raise NotConfiguredError(f"{self.get_name()} has no container set")
        return self._parent

    @override
    def set_version(self, instance: AppInstance) -> AppInstance:
        message = CommandMessage.build(instance.get_command_path(), ["--version"])
        output = self._require_parent().forward(instance, message)
        version = extract_version(
            output, instance.name, pattern=r"\(PostgreSQL\)\s+(\d+(?:\.\d+)*)"
        )
        return instance.with_version(version)

    def get_backup_tool(self) -> PgBaseBackup:
        """Find pg_basebackup next to this server."""
        parent = self._require_parent()
        found = parent.find_one(BACKUP_TOOL.to_app_query())
        self._logger.info(f"{self.get_name()} will back up with {found.full_name()}")
        return PgBaseBackup(found, parent=parent, logger=self._logger)
