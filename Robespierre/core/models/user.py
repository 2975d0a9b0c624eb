"""User entity."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from Robespierre.core.models.base import Entity
from Robespierre.core.models.id import UserId


class RelationshipStatus(str, Enum):
    """How the current user relates to another user."""
    NONE = "None"
    USER = "User"
    FRIEND = "Friend"
    OUTGOING = "Outgoing"
    INCOMING = "Incoming"
    BLOCKED = "Blocked"
    BLOCKED_OTHER = "BlockedOther"


class UserField(str, Enum):
    """User fields the server may clear."""
    AVATAR = "Avatar"
    PROFILE_BACKGROUND = "ProfileBackground"
    PROFILE_CONTENT = "ProfileContent"
    STATUS_TEXT = "StatusText"


class User(Entity):
    """
    A user account (human or bot).

    Attributes:
        id: User id
        username: Unique username
        avatar: Avatar attachment object, if set
        relations: Relationships visible to the current user
        badges: Badge bitfield
        status: Presence object (``text``, ``presence``)
        relationship: Relationship with the current user
        online: Whether the user is online
        flags: Account flags bitfield
        bot: Bot information (``owner``) when the account is a bot
        profile: Profile object (``content``, ``background``)
    """

    CLEAR_PATHS = {
        UserField.AVATAR.value: ("avatar",),
        UserField.PROFILE_BACKGROUND.value: ("profile", "background"),
        UserField.PROFILE_CONTENT.value: ("profile", "content"),
        UserField.STATUS_TEXT.value: ("status", "text"),
    }

    id: UserId = Field(alias="_id")
    username: str
    avatar: Optional[Dict[str, Any]] = None
    relations: Optional[List[Dict[str, Any]]] = None
    badges: Optional[int] = None
    status: Optional[Dict[str, Any]] = None
    relationship: Optional[RelationshipStatus] = None
    online: Optional[bool] = None
    flags: Optional[int] = None
    bot: Optional[Dict[str, Any]] = None
    profile: Optional[Dict[str, Any]] = None

    @property
    def is_bot(self) -> bool:
        return self.bot is not None


__all__ = ['RelationshipStatus', 'UserField', 'User']
