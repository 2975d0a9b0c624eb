"""
Wire events exchanged over the events WebSocket.

Every frame is a JSON object tagged by its ``type`` key. Inbound frames are
turned into one of the ``*Event`` models below by :func:`decode_event`;
outbound frames are built from the client event models and serialized with
:func:`encode_event`.
"""

import json
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from Robespierre.core.models.channel import Channel, ChannelField, Message
from Robespierre.core.models.id import ChannelId, MemberId, MessageId, RoleId, ServerId, UserId
from Robespierre.core.models.server import Member, MemberField, RoleField, Server, ServerField
from Robespierre.core.models.user import RelationshipStatus, User, UserField


class EventDecodeError(ValueError):
    """Raised when an inbound frame is not a known, well-formed event."""

    def __init__(self, message: str, payload: Any = None):
        self.payload = payload
        super().__init__(message)


class ServerToClientEvent(BaseModel):
    """Base class of every inbound event."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    TYPE: ClassVar[str] = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ServerToClientEvent":
        return cls.model_validate(payload)


class ErrorEvent(ServerToClientEvent):
    TYPE = "Error"
    error: str


class AuthenticatedEvent(ServerToClientEvent):
    TYPE = "Authenticated"


class PongEvent(ServerToClientEvent):
    TYPE = "Pong"
    data: int = 0


class ReadyEvent(ServerToClientEvent):
    """Initial snapshot of everything visible to the session."""

    TYPE = "Ready"
    users: List[User] = Field(default_factory=list)
    servers: List[Server] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=list)
    members: List[Member] = Field(default_factory=list)


class MessageEvent(ServerToClientEvent):
    """A new message; the message fields sit next to ``type`` on the wire."""

    TYPE = "Message"
    message: Message

    @classmethod
    def from_payload(cls, payload):
        return cls(message=Message.model_validate(payload))


class MessageUpdateEvent(ServerToClientEvent):
    TYPE = "MessageUpdate"
    id: MessageId
    channel: ChannelId
    data: Dict[str, Any]


class MessageDeleteEvent(ServerToClientEvent):
    TYPE = "MessageDelete"
    id: MessageId
    channel: ChannelId


class ChannelCreateEvent(ServerToClientEvent):
    TYPE = "ChannelCreate"
    channel: Channel

    @classmethod
    def from_payload(cls, payload):
        return cls(channel=Channel.model_validate(payload))


class ChannelUpdateEvent(ServerToClientEvent):
    TYPE = "ChannelUpdate"
    id: ChannelId
    data: Dict[str, Any]
    clear: Optional[ChannelField] = None


class ChannelDeleteEvent(ServerToClientEvent):
    TYPE = "ChannelDelete"
    id: ChannelId


class ChannelGroupJoinEvent(ServerToClientEvent):
    TYPE = "ChannelGroupJoin"
    id: ChannelId
    user: UserId


class ChannelGroupLeaveEvent(ServerToClientEvent):
    TYPE = "ChannelGroupLeave"
    id: ChannelId
    user: UserId


class ChannelStartTypingEvent(ServerToClientEvent):
    TYPE = "ChannelStartTyping"
    id: ChannelId
    user: UserId


class ChannelStopTypingEvent(ServerToClientEvent):
    TYPE = "ChannelStopTyping"
    id: ChannelId
    user: UserId


class ChannelAckEvent(ServerToClientEvent):
    TYPE = "ChannelAck"
    id: ChannelId
    user: UserId
    message_id: MessageId


class ServerUpdateEvent(ServerToClientEvent):
    TYPE = "ServerUpdate"
    id: ServerId
    data: Dict[str, Any]
    clear: Optional[ServerField] = None


class ServerDeleteEvent(ServerToClientEvent):
    TYPE = "ServerDelete"
    id: ServerId


class ServerMemberUpdateEvent(ServerToClientEvent):
    TYPE = "ServerMemberUpdate"
    id: MemberId
    data: Dict[str, Any]
    clear: Optional[MemberField] = None


class ServerMemberJoinEvent(ServerToClientEvent):
    TYPE = "ServerMemberJoin"
    id: ServerId
    user: UserId


class ServerMemberLeaveEvent(ServerToClientEvent):
    TYPE = "ServerMemberLeave"
    id: ServerId
    user: UserId


class ServerRoleUpdateEvent(ServerToClientEvent):
    TYPE = "ServerRoleUpdate"
    id: ServerId
    role_id: RoleId
    data: Dict[str, Any]
    clear: Optional[RoleField] = None


class ServerRoleDeleteEvent(ServerToClientEvent):
    TYPE = "ServerRoleDelete"
    id: ServerId
    role_id: RoleId


class UserUpdateEvent(ServerToClientEvent):
    TYPE = "UserUpdate"
    id: UserId
    data: Dict[str, Any]
    clear: Optional[UserField] = None


class UserRelationshipEvent(ServerToClientEvent):
    TYPE = "UserRelationship"
    id: UserId
    user: UserId
    status: RelationshipStatus


EVENT_TYPES: Dict[str, Type[ServerToClientEvent]] = {
    cls.TYPE: cls
    for cls in (
        ErrorEvent, AuthenticatedEvent, PongEvent, ReadyEvent,
        MessageEvent, MessageUpdateEvent, MessageDeleteEvent,
        ChannelCreateEvent, ChannelUpdateEvent, ChannelDeleteEvent,
        ChannelGroupJoinEvent, ChannelGroupLeaveEvent,
        ChannelStartTypingEvent, ChannelStopTypingEvent, ChannelAckEvent,
        ServerUpdateEvent, ServerDeleteEvent,
        ServerMemberUpdateEvent, ServerMemberJoinEvent, ServerMemberLeaveEvent,
        ServerRoleUpdateEvent, ServerRoleDeleteEvent,
        UserUpdateEvent, UserRelationshipEvent,
    )
}


def decode_event(raw: Union[str, bytes, Mapping[str, Any]]) -> ServerToClientEvent:
    """
    Decode one inbound frame.

    Args:
        raw: JSON text or an already parsed object

    Returns:
        The typed event

    Raises:
        EventDecodeError: If the frame is not JSON, has an unknown ``type``
            or does not match the event's schema
    """
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise EventDecodeError(f"invalid JSON: {e}", raw) from e
    else:
        payload = raw

    if not isinstance(payload, Mapping):
        raise EventDecodeError("event is not an object", payload)

    event_type = payload.get("type")
    cls = EVENT_TYPES.get(event_type)
    if cls is None:
        raise EventDecodeError(f"unknown event type: {event_type!r}", payload)

    body = {k: v for k, v in payload.items() if k != "type"}
    try:
        return cls.from_payload(body)
    except ValidationError as e:
        raise EventDecodeError(f"malformed {event_type} event: {e}", payload) from e


class ClientToServerEvent(BaseModel):
    """Base class of outbound events."""

    TYPE: ClassVar[str] = ""


class AuthenticateEvent(ClientToServerEvent):
    TYPE = "Authenticate"
    token: str


class BeginTypingEvent(ClientToServerEvent):
    TYPE = "BeginTyping"
    channel: ChannelId


class EndTypingEvent(ClientToServerEvent):
    TYPE = "EndTyping"
    channel: ChannelId


class PingEvent(ClientToServerEvent):
    TYPE = "Ping"
    data: int = 0


def encode_event(event: ClientToServerEvent) -> str:
    return json.dumps({"type": event.TYPE, **event.model_dump(mode="json")})


__all__ = [
    'EventDecodeError',
    'ServerToClientEvent',
    'ErrorEvent',
    'AuthenticatedEvent',
    'PongEvent',
    'ReadyEvent',
    'MessageEvent',
    'MessageUpdateEvent',
    'MessageDeleteEvent',
    'ChannelCreateEvent',
    'ChannelUpdateEvent',
    'ChannelDeleteEvent',
    'ChannelGroupJoinEvent',
    'ChannelGroupLeaveEvent',
    'ChannelStartTypingEvent',
    'ChannelStopTypingEvent',
    'ChannelAckEvent',
    'ServerUpdateEvent',
    'ServerDeleteEvent',
    'ServerMemberUpdateEvent',
    'ServerMemberJoinEvent',
    'ServerMemberLeaveEvent',
    'ServerRoleUpdateEvent',
    'ServerRoleDeleteEvent',
    'UserUpdateEvent',
    'UserRelationshipEvent',
    'EVENT_TYPES',
    'decode_event',
    'ClientToServerEvent',
    'AuthenticateEvent',
    'BeginTypingEvent',
    'EndTypingEvent',
    'PingEvent',
    'encode_event',
]
