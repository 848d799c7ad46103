"""
The lookup registry for the adapters doing the work.

A registry is created once while bootstrapping and passed to whatever builds
the container tree; no module-level instance exists.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from process_foundry import __version__ as MODULE_VERSION
from process_foundry.adapters.compose.docker_compose import DockerCompose
from process_foundry.adapters.docker_container.docker_container import DockerContainer
from process_foundry.adapters.pg_basebackup.pg_basebackup import PgBaseBackup
from process_foundry.adapters.postgres.postgres import Postgres
from process_foundry.adapters.shell.bash_shell import BashShell
from process_foundry.entities.app_instance import AppInstance
from process_foundry.entities.version import parse_requirement, parse_version
from process_foundry.exceptions import ConfigurationError, DuplicateKeyError, NotFoundError
from process_foundry.ports.application_port import ApplicationPort
from process_foundry.ports.config_loader_port import ComposeConfigLoaderPort
from process_foundry.ports.container_port import ContainerPort
from process_foundry.ports.process_executor_port import ProcessExecutorPort
from process_foundry.topology import ContainerTree

AdapterFactory = Callable[[AppInstance, Optional[ContainerPort]], ApplicationPort]


class ActsAs(str, Enum):
    """Whether an adapter is used as a container, an application, or both."""

    CONTAINER = "container"
    APP = "app"
    EITHER = "either"


@dataclass(frozen=True)
class AppDefinition:
    """Describes the adapter code registered for a tool."""

    name: str
    acts_as: ActsAs = ActsAs.EITHER
    app_version: Optional[Union[Version, str]] = None
    works_with: Optional[Union[SpecifierSet, str]] = None
    aliases: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.app_version, str):
            object.__setattr__(
                self, "app_version", parse_version(self.app_version, self.name)
            )
        if isinstance(self.works_with, str):
            object.__setattr__(
                self, "works_with", parse_requirement(self.works_with, self.name)
            )
        object.__setattr__(self, "aliases", tuple(self.aliases))

    def keys(self) -> list[str]:
        return [k.lower() for k in (self.name, *self.aliases)]


class AdapterRegistry:
    """Name-keyed constructors for adapters."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        tree: Optional[ContainerTree] = None,
    ) -> None:
        self._factories: dict[str, tuple[AppDefinition, AdapterFactory]] = {}
        self._keys: dict[str, str] = {}
        self._logger = logger or logging.getLogger(__name__)
        self._tree = tree

    def __len__(self) -> int:
        return len(self._factories)

    def __str__(self) -> str:
        definitions = self.definitions()
        containers = sum(1 for d in definitions if d.acts_as is not ActsAs.APP)
        apps = sum(1 for d in definitions if d.acts_as is not ActsAs.CONTAINER)
        return (
            f"Registry has {len(definitions)} factories loaded, "
            f"{containers} usable as containers and {apps} as applications"
        )

    def register_factory(
        self, definition: AppDefinition, factory: AdapterFactory
    ) -> None:
        """
        Raises:
            DuplicateKeyError: If the name or an alias is already registered
        """
        for key in definition.keys():
            if key in self._keys:
                raise DuplicateKeyError(
                    f"Cannot register {definition.name}: '{key}' is already used "
                    f"by {self._keys[key]}"
                )
        canonical = definition.name.lower()
        self._factories[canonical] = (definition, factory)
        for key in definition.keys():
            self._keys[key] = canonical
        self._logger.debug(f"Registered {definition.name}: {self}")

    def get_definition(self, name: str) -> AppDefinition:
        return self._lookup(name)[0]

    def definitions(self) -> list[AppDefinition]:
        return [definition for definition, _ in self._factories.values()]

    def _lookup(self, name: str) -> tuple[AppDefinition, AdapterFactory]:
        key = (name or "").strip().lower()
        if key not in self._keys:
            raise NotFoundError(f"No adapter has been registered for {name}")
        return self._factories[self._keys[key]]

    def build(
        self,
        instance: AppInstance,
        parent: Optional[ContainerPort] = None,
        adapter: Optional[str] = None,
    ) -> ApplicationPort:
        """
        Construct the adapter for an instance.

        Args:
            instance: The discovered instance to control
            parent: Container the adapter forwards through
            adapter: Registered name to use instead of the instance name

        Raises:
            NotFoundError: If no adapter is registered under that name, or a
                container is built below a parent outside the tree
            ConfigurationError: If the instance version is not handled
        """
        definition, factory = self._lookup(adapter or instance.name)
        if (
            definition.works_with is not None
            and instance.version is not None
            and not definition.works_with.contains(instance.version, prereleases=True)
        ):
            raise ConfigurationError(
                f"{definition.name} adapter handles versions '{definition.works_with}', "
                f"which does not include {instance.full_name()}"
            )
        self._logger.info(f"Building {definition.name} adapter for {instance.full_name()}")
        built = factory(instance, parent)
        if self._tree is not None and isinstance(built, ContainerPort):
            self._tree.ensure(built, parent)
        return built


def default_registry(
    executor: ProcessExecutorPort,
    loader: Optional[ComposeConfigLoaderPort] = None,
    logger: Optional[logging.Logger] = None,
    timeout: Optional[float] = None,
    tree: Optional[ContainerTree] = None,
) -> AdapterRegistry:
    """A registry holding every built-in adapter."""
    registry = AdapterRegistry(logger, tree)
    registry.register_factory(
        AppDefinition("bash", ActsAs.EITHER, MODULE_VERSION, aliases=("sh",)),
        lambda instance, parent: BashShell(
            instance, executor, parent=parent, logger=logger, timeout=timeout
        ),
    )
    registry.register_factory(
        AppDefinition(
            "docker-compose", ActsAs.EITHER, MODULE_VERSION, aliases=("compose",)
        ),
        lambda instance, parent: DockerCompose(
            instance, parent=parent, loader=loader, logger=logger, tree=tree
        ),
    )
    registry.register_factory(
        AppDefinition("docker-container", ActsAs.CONTAINER, MODULE_VERSION),
        lambda instance, parent: DockerContainer(instance, parent=parent, logger=logger),
    )
    registry.register_factory(
        AppDefinition(
            "postgres", ActsAs.APP, MODULE_VERSION, aliases=("postgresql", "pg")
        ),
        lambda instance, parent: Postgres(instance, parent=parent, logger=logger),
    )
    registry.register_factory(
        AppDefinition("pg_basebackup", ActsAs.APP, MODULE_VERSION),
        lambda instance, parent: PgBaseBackup(instance, parent=parent, logger=logger),
    )
    return registry
