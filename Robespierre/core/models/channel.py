"""Channel and message entities."""

from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Union

from pydantic import Field

from Robespierre.core.models.base import Entity
from Robespierre.core.models.id import ChannelId, MessageId, ServerId, UserId


class ChannelType(str, Enum):
    SAVED_MESSAGES = "SavedMessages"
    DIRECT_MESSAGE = "DirectMessage"
    GROUP = "Group"
    TEXT_CHANNEL = "TextChannel"
    VOICE_CHANNEL = "VoiceChannel"


class ChannelField(str, Enum):
    DESCRIPTION = "Description"
    ICON = "Icon"


_COMMON_FIELDS = frozenset({"channel_type", "nonce"})

# attributes each channel kind carries on the wire
VARIANT_FIELDS: Dict[ChannelType, FrozenSet[str]] = {
    ChannelType.SAVED_MESSAGES: frozenset({"user"}),
    ChannelType.DIRECT_MESSAGE: frozenset({"active", "recipients", "last_message"}),
    ChannelType.GROUP: frozenset({
        "recipients", "name", "owner", "description", "last_message",
        "icon", "permissions", "nsfw",
    }),
    ChannelType.TEXT_CHANNEL: frozenset({
        "server", "name", "description", "icon", "default_permissions",
        "role_permissions", "last_message", "nsfw",
    }),
    ChannelType.VOICE_CHANNEL: frozenset({
        "server", "name", "description", "icon", "default_permissions",
        "role_permissions", "nsfw",
    }),
}


class Channel(Entity):
    """
    Any kind of channel, discriminated by ``channel_type``.

    Only the attributes listed for the channel's kind in ``VARIANT_FIELDS``
    are meaningful; the others stay ``None`` and patches never set them.
    """

    CLEAR_PATHS = {
        ChannelField.DESCRIPTION.value: ("description",),
        ChannelField.ICON.value: ("icon",),
    }

    id: ChannelId = Field(alias="_id")
    channel_type: ChannelType
    nonce: Optional[str] = None

    user: Optional[UserId] = None
    active: Optional[bool] = None
    recipients: Optional[List[UserId]] = None
    last_message: Optional[Any] = None
    name: Optional[str] = None
    owner: Optional[UserId] = None
    description: Optional[str] = None
    icon: Optional[Dict[str, Any]] = None
    permissions: Optional[int] = None
    server: Optional[ServerId] = None
    default_permissions: Optional[int] = None
    role_permissions: Optional[Dict[str, int]] = None
    nsfw: Optional[bool] = None

    def _patchable(self, name: str) -> bool:
        return name in _COMMON_FIELDS or name in VARIANT_FIELDS[self.channel_type]

    @property
    def server_id(self) -> Optional[ServerId]:
        """Owning server of a text or voice channel, else ``None``."""
        if self.channel_type in (ChannelType.TEXT_CHANNEL, ChannelType.VOICE_CHANNEL):
            return self.server
        return None


class Message(Entity):
    """
    A chat message.

    ``content`` is the text for user messages, or a dict with a ``type`` key
    for system messages (user joined, channel renamed, ...).
    """

    id: MessageId = Field(alias="_id")
    nonce: Optional[str] = None
    channel: ChannelId
    author: UserId
    content: Union[str, Dict[str, Any]]
    attachments: List[Dict[str, Any]] = Field(default_factory=list)
    edited: Optional[Any] = None
    embeds: List[Dict[str, Any]] = Field(default_factory=list)
    mentions: List[UserId] = Field(default_factory=list)
    replies: List[MessageId] = Field(default_factory=list)

    @property
    def is_system(self) -> bool:
        return not isinstance(self.content, str)

    @property
    def text(self) -> Optional[str]:
        if isinstance(self.content, str):
            return self.content
        return None


__all__ = ['ChannelType', 'ChannelField', 'VARIANT_FIELDS', 'Channel', 'Message']
