"""
Data model for Revolt entities and wire events.
"""

from Robespierre.core.models.id import (
    IdError,
    IncorrectLength,
    InvalidCharacter,
    IdString,
    UserId,
    ChannelId,
    ServerId,
    RoleId,
    MessageId,
    AttachmentId,
    MemberId,
)
from Robespierre.core.models.mention import Mention
from Robespierre.core.models.user import RelationshipStatus, User, UserField
from Robespierre.core.models.server import (
    Member,
    MemberField,
    Role,
    RoleField,
    Server,
    ServerField,
)
from Robespierre.core.models.channel import Channel, ChannelField, ChannelType, Message

__all__ = [
    'IdError',
    'IncorrectLength',
    'InvalidCharacter',
    'IdString',
    'UserId',
    'ChannelId',
    'ServerId',
    'RoleId',
    'MessageId',
    'AttachmentId',
    'MemberId',
    'Mention',
    'RelationshipStatus',
    'User',
    'UserField',
    'Member',
    'MemberField',
    'Role',
    'RoleField',
    'Server',
    'ServerField',
    'Channel',
    'ChannelField',
    'ChannelType',
    'Message',
]
