"""
Pydantic models for the wire form of messages, queries and instances.

Every field is a plain string, optional string, boolean or list of strings,
so the JSON produced here round-trips unchanged.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from process_foundry.entities.app_instance import ApiAccess, AppInstance, CliAccess
from process_foundry.entities.app_query import AppQuery
from process_foundry.entities.message import (
    Cmd,
    CommandMessage,
    Message,
    RestMessage,
    RpcMessage,
)
from process_foundry.exceptions import ConversionError, UnreachableError


class CmdSchema(BaseModel):
    """Schema for a command to run."""

    run_as: Optional[str] = Field(None, description="Effective user, if any")
    command: str = Field(..., min_length=1, description="Command path or name")
    args: list[str] = Field(default_factory=list, description="Ordered arguments")

    @classmethod
    def from_entity(cls, cmd: Cmd) -> "CmdSchema":
        return cls(run_as=cmd.run_as, command=cmd.command, args=list(cmd.args))

    def to_entity(self) -> Cmd:
        return Cmd(command=self.command, args=tuple(self.args), run_as=self.run_as)


class CommandMessageSchema(BaseModel):
    kind: Literal["command"] = "command"
    cmd: CmdSchema


class RpcMessageSchema(BaseModel):
    kind: Literal["rpc"] = "rpc"


class RestMessageSchema(BaseModel):
    kind: Literal["rest"] = "rest"


MessageSchema = Annotated[
    Union[CommandMessageSchema, RpcMessageSchema, RestMessageSchema],
    Field(discriminator="kind"),
]

_message_adapter: TypeAdapter = TypeAdapter(MessageSchema)


class AppQuerySchema(BaseModel):
    """Schema for application search criteria."""

    name: str = Field(..., min_length=1, description="Name to match")
    works_with: Optional[str] = Field(None, description="Version requirement")
    aliases: list[str] = Field(default_factory=list, description="Alternate names")
    search_paths: list[str] = Field(
        default_factory=list, description="Where to look"
    )
    find_all: bool = Field(False, description="Return every match")

    @classmethod
    def from_entity(cls, query: AppQuery) -> "AppQuerySchema":
        return cls(
            name=query.name,
            works_with=str(query.works_with) if query.works_with is not None else None,
            aliases=list(query.aliases),
            search_paths=list(query.search_paths),
            find_all=query.find_all,
        )

    def to_entity(self) -> AppQuery:
        return AppQuery(
            name=self.name,
            works_with=self.works_with,
            aliases=tuple(self.aliases),
            search_paths=tuple(self.search_paths),
            find_all=self.find_all,
        )


class CliAccessSchema(BaseModel):
    path: str = Field(..., description="Location of the executable")


class ApiAccessSchema(BaseModel):
    uri: str = Field(..., description="Where the API is served")


class AppInstanceSchema(BaseModel):
    """Schema for a discovered application. The container reference is not sent."""

    instance_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    version: Optional[str] = None
    module_version: Optional[str] = None
    config_file: Optional[str] = None
    cli: Optional[CliAccessSchema] = None
    api: Optional[ApiAccessSchema] = None

    @classmethod
    def from_entity(cls, instance: AppInstance) -> "AppInstanceSchema":
        return cls(
            instance_id=instance.instance_id,
            name=instance.name,
            version=str(instance.version) if instance.version else None,
            module_version=(
                str(instance.module_version) if instance.module_version else None
            ),
            config_file=instance.config_file,
            cli=CliAccessSchema(path=instance.cli.path) if instance.cli else None,
            api=ApiAccessSchema(uri=instance.api.uri) if instance.api else None,
        )

    def to_entity(self) -> AppInstance:
        return AppInstance(
            name=self.name,
            instance_id=self.instance_id,
            version=self.version,
            module_version=self.module_version,
            config_file=self.config_file,
            cli=CliAccess(path=self.cli.path) if self.cli else None,
            api=ApiAccess(uri=self.api.uri) if self.api else None,
        )


def message_to_schema(
    message: Message,
) -> Union[CommandMessageSchema, RpcMessageSchema, RestMessageSchema]:
    if isinstance(message, CommandMessage):
        return CommandMessageSchema(cmd=CmdSchema.from_entity(message.cmd))
    if isinstance(message, RpcMessage):
        return RpcMessageSchema()
    if isinstance(message, RestMessage):
        return RestMessageSchema()
    raise UnreachableError(f"Unknown message type {type(message).__name__}")


def encode_message(message: Message) -> str:
    return message_to_schema(message).model_dump_json()


def decode_message(text: str) -> Message:
    """
    Raises:
        ConversionError: If the text is not a valid message
    """
    try:
        schema = _message_adapter.validate_json(text)
    except ValidationError as e:
        raise ConversionError(f"Could not decode message: {e}") from e
    if isinstance(schema, CommandMessageSchema):
        return CommandMessage(cmd=schema.cmd.to_entity())
    if isinstance(schema, RpcMessageSchema):
        return RpcMessage()
    return RestMessage()


def encode_instance(instance: AppInstance) -> str:
    return AppInstanceSchema.from_entity(instance).model_dump_json()


def decode_instance(text: str) -> AppInstance:
    try:
        schema = AppInstanceSchema.model_validate_json(text)
    except ValidationError as e:
        raise ConversionError(f"Could not decode app instance: {e}") from e
    return schema.to_entity()
