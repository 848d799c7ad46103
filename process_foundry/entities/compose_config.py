"""
Pydantic models for a docker-compose configuration.

Only the fields the foundry uses are modelled; unknown keys are kept so a
configuration can be exported again without loss.
"""

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Restart(str, Enum):
    NO = "no"
    ALWAYS = "always"
    ON_FAILURE = "on-failure"
    UNLESS_STOPPED = "unless-stopped"


class ServiceVolumeType(str, Enum):
    VOLUME = "volume"
    BIND = "bind"
    TMPFS = "tmpfs"
    NPIPE = "npipe"


class ServiceVolume(BaseModel):
    """Long-form service volume. Short strings are read as the source."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    volume_type: ServiceVolumeType = Field(ServiceVolumeType.BIND, alias="type")
    source: Optional[str] = None
    target: Optional[str] = None
    read_only: Optional[bool] = None


class PortMapping(BaseModel):
    model_config = ConfigDict(extra="allow")

    target: Optional[int] = None
    published: Optional[int] = None
    protocol: Optional[str] = None
    mode: Optional[str] = None


class ComposeService(BaseModel):
    """One service entry under 'services'."""

    model_config = ConfigDict(extra="allow")

    image: Optional[str] = None
    command: Optional[Union[str, list[str]]] = None
    depends_on: Optional[list[str]] = None
    ports: Optional[list[Union[str, int, PortMapping]]] = None
    restart: Optional[Restart] = None
    volumes: Optional[list[ServiceVolume]] = None

    @field_validator("volumes", mode="before")
    @classmethod
    def _short_volumes(cls, value):
        if value is None:
            return value
        return [{"source": v} if isinstance(v, str) else v for v in value]


class ComposeConfig(BaseModel):
    """Structured docker-compose configuration."""

    model_config = ConfigDict(extra="allow")

    source: Optional[str] = Field(None, exclude=True)
    version: str = "3.8"
    services: dict[str, ComposeService] = Field(default_factory=dict)

    def get_source(self) -> str:
        return self.source or "No source set"

    def list_service_names(self) -> list[str]:
        return list(self.services.keys())
