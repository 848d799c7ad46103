"""
AppInstance domain entity and its access descriptors.

Instances are immutable snapshots. Every update returns a new instance so that
anyone still holding the previous value keeps a valid copy.
"""

import weakref
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Optional, Union

from packaging.version import Version

from process_foundry.entities.version import parse_version
from process_foundry.exceptions import NotConfiguredError

if TYPE_CHECKING:
    from process_foundry.ports.container_port import ContainerPort


@dataclass(frozen=True)
class CliAccess:
    """
    Where an executable lives, as seen from the container that can run it.

    The container is held through a weak reference: it only answers "where do
    I run this" and never keeps the container alive.
    """

    path: str
    container_ref: Optional[weakref.ReferenceType] = field(
        default=None, compare=False, repr=False
    )

    @classmethod
    def create(
        cls, path: str, container: Optional["ContainerPort"] = None
    ) -> "CliAccess":
        ref = weakref.ref(container) if container is not None else None
        return cls(path=path, container_ref=ref)

    @property
    def container(self) -> Optional["ContainerPort"]:
        """The container this path is valid in, if it is still alive."""
        if self.container_ref is None:
            return None
        return self.container_ref()


@dataclass(frozen=True)
class ApiAccess:
    uri: str


VersionLike = Union[Version, str, None]


@dataclass(frozen=True)
class AppInstance:
    """
    A specific, discovered copy of an external application.

    Attributes:
        name: The standard name for this app (e.g. bash, docker-compose)
        instance_id: Opaque identifier assigned by the container that found it
        version: Version of the installed tool, when it can be discovered
        module_version: Version of the adapter code handling this instance
        config_file: Path to a loaded configuration
        cli: How to invoke the tool's command line
        api: How to reach the tool over an API
    """

    name: str
    instance_id: Optional[str] = None
    version: Optional[Version] = None
    module_version: Optional[Version] = None
    config_file: Optional[str] = None
    cli: Optional[CliAccess] = None
    api: Optional[ApiAccess] = None

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ValueError("AppInstance requires a non-empty 'name'")
        if isinstance(self.version, str):
            object.__setattr__(self, "version", parse_version(self.version, self.name))
        if isinstance(self.module_version, str):
            object.__setattr__(
                self,
                "module_version",
                parse_version(self.module_version, f"Module for {self.name}"),
            )

    def full_name(self) -> str:
        """Standardized "name (version)" used in logs and errors."""
        if self.version is None:
            return f"{self.name} (Unknown Version)"
        return f"{self.name} ({self.version})"

    def with_version(self, version: VersionLike) -> "AppInstance":
        if isinstance(version, str):
            version = parse_version(version, self.name)
        return replace(self, version=version)

    def with_module_version(self, version: VersionLike) -> "AppInstance":
        if isinstance(version, str):
            version = parse_version(version, f"Module for {self.name}")
        return replace(self, module_version=version)

    def with_instance_id(self, instance_id: Optional[str]) -> "AppInstance":
        return replace(self, instance_id=instance_id)

    def with_config_file(self, config_file: Optional[str]) -> "AppInstance":
        return replace(self, config_file=config_file)

    def with_api(self, uri: str) -> "AppInstance":
        return replace(self, api=ApiAccess(uri=uri))

    def set_command_path(
        self, path: str, container: Optional["ContainerPort"] = None
    ) -> "AppInstance":
        """
        Record where the executable lives.

        An existing container reference is kept unless a new one is given.
        """
        if container is None and self.cli is not None:
            cli = replace(self.cli, path=path)
        else:
            cli = CliAccess.create(path, container)
        return replace(self, cli=cli)

    def get_command_path(self) -> str:
        """
        Raises:
            NotConfiguredError: If no command line access has been set
        """
        if self.cli is None:
            raise NotConfiguredError(f"Cli is not set for {self.full_name()}")
        return self.cli.path

    def get_details(self) -> dict[str, Any]:
        container = self.cli.container if self.cli else None
        return {
            "instance_id": self.instance_id,
            "name": self.name,
            "version": str(self.version) if self.version else None,
            "module_version": (
                str(self.module_version) if self.module_version else None
            ),
            "config_file": self.config_file,
            "cli_path": self.cli.path if self.cli else None,
            "container": container.get_name() if container is not None else None,
            "api_uri": self.api.uri if self.api else None,
        }

    def __str__(self) -> str:
        return f"AppInstance {self.full_name()}"
