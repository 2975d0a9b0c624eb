"""Server, role and member entities."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from Robespierre.core.models.base import Entity
from Robespierre.core.models.id import ChannelId, MemberId, RoleId, UserId, ServerId


class ServerField(str, Enum):
    ICON = "Icon"
    BANNER = "Banner"
    DESCRIPTION = "Description"


class RoleField(str, Enum):
    COLOUR = "Colour"


class MemberField(str, Enum):
    NICKNAME = "Nickname"
    AVATAR = "Avatar"


class Role(Entity):
    """
    A server role.

    Roles have no id of their own on the wire; they are keyed by the
    ``RoleId`` under which the server lists them.
    """

    CLEAR_PATHS = {RoleField.COLOUR.value: ("colour",)}

    name: str
    permissions: Any = None
    colour: Optional[str] = None
    hoist: bool = False
    rank: int = 0


class Server(Entity):
    """
    A server (guild).

    Attributes:
        id: Server id
        owner: Id of the owning user
        name: Display name
        description: Optional description
        channels: Ids of the channels in this server
        categories: Channel categories
        system_messages: Channels that receive system messages
        roles: Role id -> role
        default_permissions: Default server and channel permissions
        icon: Icon attachment
        banner: Banner attachment
        nsfw: Whether the server is flagged NSFW
    """

    CLEAR_PATHS = {
        ServerField.ICON.value: ("icon",),
        ServerField.BANNER.value: ("banner",),
        ServerField.DESCRIPTION.value: ("description",),
    }

    id: ServerId = Field(alias="_id")
    nonce: Optional[str] = None
    owner: UserId
    name: str
    description: Optional[str] = None
    channels: List[ChannelId] = Field(default_factory=list)
    categories: List[Dict[str, Any]] = Field(default_factory=list)
    system_messages: Optional[Dict[str, Any]] = None
    roles: Dict[RoleId, Role] = Field(default_factory=dict)
    default_permissions: Any = None
    icon: Optional[Dict[str, Any]] = None
    banner: Optional[Dict[str, Any]] = None
    nsfw: bool = False


class Member(Entity):
    """A user's membership record in one server."""

    CLEAR_PATHS = {
        MemberField.NICKNAME.value: ("nickname",),
        MemberField.AVATAR.value: ("avatar",),
    }

    id: MemberId = Field(alias="_id")
    nickname: Optional[str] = None
    avatar: Optional[Dict[str, Any]] = None
    roles: List[RoleId] = Field(default_factory=list)


__all__ = ['ServerField', 'RoleField', 'MemberField', 'Role', 'Server', 'Member']
