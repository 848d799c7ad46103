"""
Docker Compose adapter.

Compose is both an application (the docker-compose CLI on some host) and a
container: its services are the children it can find and forward to.
"""

import logging
from typing import Optional

from typing_extensions import override

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.adapters.docker_container.docker_container import (
    DockerContainer,
)
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.compose_config import ComposeConfig
from process_foundry.entities.message import Cmd, CommandMessage, Message
from process_foundry.entities.version import extract_version
from process_foundry.exceptions import (
    BaseFoundryError,
    ConfigurationError,
    NotConfiguredError,
    NotFoundError,
)
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.config_loader_port import ComposeConfigLoaderPort
from process_foundry.ports.container_port import CachePolicy, ContainerPort
from process_foundry.topology import ContainerTree

APP_NAME = "docker-compose"


class DockerCompose(ContainerPort, ApplicationPort):
    """A docker-compose project whose services can be found and addressed."""

    cache_policy = CachePolicy.ALWAYS_PROBE

    def __init__(
        self,
        instance: AppInstance,
        parent: Optional[ContainerPort] = None,
        loader: Optional[ComposeConfigLoaderPort] = None,
        config: Optional[ComposeConfig] = None,
        logger: Optional[logging.Logger] = None,
        tree: Optional[ContainerTree] = None,
    ) -> None:
        if instance.cli is None:
            instance = instance.set_command_path(APP_NAME)
        self._instance = instance.with_module_version(MODULE_VERSION)
        self._parent = parent
        self._loader = loader
        self._config = config
        self._logger = logger or logging.getLogger(__name__)
        self._tree = tree
        self._app_cache: dict[str, AppInstance] = {}
        self._containers: dict[str, DockerContainer] = {}

    @property
    def instance(self) -> AppInstance:
        return self._instance

    @property
    def config(self) -> Optional[ComposeConfig]:
        return self._config

    @property
    def parent(self) -> Optional[ContainerPort]:
        return self._parent

    @override
    def get_name(self) -> str:
        return self._instance.full_name()

    def load(self, config_file: str) -> "DockerCompose":
        """
        Read a compose file through the configured loader.

        Returns:
            A new DockerCompose holding the configuration

        Raises:
            NotConfiguredError: If no loader was given
            ConfigurationError: If the file cannot be read or parsed
        """
        if self._loader is None:
            raise NotConfiguredError(
                f"{self.get_name()} has no configuration loader to read {config_file}"
            )
        self._logger.info(f"Parsing the docker compose file at {config_file}")
        try:
            config = self._loader.load(config_file)
        except BaseFoundryError:
            raise
        except Exception as e:
            self._logger.error(f"Error loading {config_file}: {e}")
            raise ConfigurationError(
                f"Failed to parse the docker-compose file at {config_file}: {e}"
            ) from e
        if config.source is None:
            config = config.model_copy(update={"source": config_file})
        self._logger.debug(f"Successfully parsed the schema at {config_file}")
        return self.with_config(config)

    def with_config(self, config: ComposeConfig) -> "DockerCompose":
        """
        A copy of this adapter using the given configuration.

        The copy takes this adapter's place in the container tree.
        """
        configured = DockerCompose(
            self._instance.with_config_file(config.source),
            parent=self._parent,
            loader=self._loader,
            config=config,
            logger=self._logger,
            tree=self._tree,
        )
        if self._tree is not None and self._tree.id_of(self) is not None:
            self._tree.replace(self, configured)
        return configured

    def _require_config(self, action: str) -> ComposeConfig:
        if self._config is None:
            raise ConfigurationError(
                f"{self.get_name()} tried to {action} without a valid config"
            )
        return self._config

    def _service_instance(self, service: str) -> AppInstance:
        return AppInstance(name=service, instance_id=service).set_command_path(
            service, self
        )

    def list_services(self) -> list[str]:
        return self._require_config("list services").list_service_names()

    @override
    def find(self, query: AppQuery) -> list[AppInstance]:
        config = self._require_config(f"find {query.name}")
        found = []
        for service in config.list_service_names():
            if not query.matches_name(service):
                continue
            app = self._service_instance(service)
            self._app_cache[service] = app
            found.append(app)
        self._logger.debug(f"{self.get_name()} matched {len(found)} services for {query}")
        return found

    def exec_args(self, service: str, cmd: Cmd) -> list[str]:
        """Arguments for running cmd inside a service with `exec`."""
        args: list[str] = []
        if self._instance.config_file:
            args += ["-f", self._instance.config_file]
        args += ["exec", "-T"]
        if cmd.run_as:
            args += ["--user", cmd.run_as]
        args += [service, cmd.command, *cmd.args]
        return args

    @override
    def forward(self, target: AppInstance, message: Message) -> str:
        if self._parent is None:
            raise NotConfiguredError(
                f"{self.get_name()} has no parent shell to forward messages "
                f"for {target.full_name()} through"
            )
        if target.cli is not None:
            owner = target.cli.container
            if owner is not None and owner is not self:
                raise NotFoundError(
                    f"{target.full_name()} belongs to {owner.get_name()}, "
                    f"not to {self.get_name()}"
                )
        config = self._require_config(f"forward a message to {target.full_name()}")
        service = target.instance_id or target.name
        if service not in config.services:
            raise NotFoundError(
                f"{target.full_name()} is not a service of {self.get_name()}"
            )
        if not isinstance(message, CommandMessage):
            raise NotConfiguredError(
                f"{self.get_name()} cannot deliver {type(message).__name__} "
                f"messages to {target.full_name()}"
            )
        wrapped = CommandMessage.build(
            self._instance.get_command_path(), self.exec_args(service, message.cmd)
        )
        self._logger.debug(f"{self.get_name()} forwarding '{wrapped.cmd}'")
        return self._parent.forward(self._instance, wrapped)

    @override
    def cached_apps(self) -> list[AppInstance]:
        return list(self._app_cache.values())

    def get_container(self, name: str) -> DockerContainer:
        """The container adapter for one service, reused across lookups."""
        service = self.find_one(AppQuery(name=name))
        key = service.instance_id or service.name
        if key not in self._containers:
            container = DockerContainer(service, parent=self, logger=self._logger)
            if self._tree is not None and self._tree.id_of(self) is not None:
                self._tree.ensure(container, parent=self)
            self._containers[key] = container
        return self._containers[key]

    @override
    def set_version(self, instance: AppInstance) -> AppInstance:
        if self._parent is None:
            raise NotConfiguredError(
                f"{self.get_name()} needs a parent shell to look up its version"
            )
        message = CommandMessage.build(
            instance.get_command_path(), ["version", "--short"]
        )
        output = self._parent.forward(instance, message)
        return instance.with_version(extract_version(output, instance.name))

    def refresh_version(self) -> AppInstance:
        self._instance = self.set_version(self._instance)
        return self._instance
