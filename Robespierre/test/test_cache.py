"""
Unit tests for the entity cache, its locks and event synchronisation.
"""

import asyncio

import pytest

from Robespierre.core.cache import Cache, CacheConfig, RwLock, commit_to_cache
from Robespierre.core.models import (
    ChannelField,
    MemberId,
    MemberField,
    RoleField,
    UserField,
)
from Robespierre.core.models.events import decode_event
from Robespierre.test.factories import (
    CHANNEL_ID,
    DM_CHANNEL_ID,
    ROLE_ID,
    SERVER_ID,
    USER_ID,
    make_dm_channel,
    make_id,
    make_member,
    make_message,
    make_server,
    make_text_channel,
    make_user,
)


class TestUsersAndServers:
    """Tests for the simple entity tables."""

    @pytest.mark.asyncio
    async def test_commit_and_get(self, cache):
        await cache.commit_user(make_user())
        user = await cache.get_user(USER_ID)
        assert user.username == "alice"

    @pytest.mark.asyncio
    async def test_get_returns_copy(self, cache):
        await cache.commit_user(make_user(status={"text": "hi"}))
        user = await cache.get_user(USER_ID)
        user.status["text"] = "changed"

        assert (await cache.get_user(USER_ID)).status == {"text": "hi"}

    @pytest.mark.asyncio
    async def test_get_data_projects(self, cache):
        await cache.commit_user(make_user())
        assert await cache.get_user_data(USER_ID, lambda u: u.username) == "alice"
        assert await cache.get_user_data(make_id(99), lambda u: u.username) is None

    @pytest.mark.asyncio
    async def test_patch_is_idempotent(self, cache):
        await cache.commit_user(make_user())
        await cache.patch_user(USER_ID, {"username": "bob", "online": True})
        once = await cache.get_user(USER_ID)
        await cache.patch_user(USER_ID, {"username": "bob", "online": True})
        twice = await cache.get_user(USER_ID)

        assert once == twice
        assert twice.username == "bob"

    @pytest.mark.asyncio
    async def test_patch_missing_entity_is_noop(self, cache):
        await cache.patch_user(USER_ID, {"username": "bob"})
        assert await cache.get_user(USER_ID) is None

    @pytest.mark.asyncio
    async def test_patch_with_clear(self, cache):
        await cache.commit_user(make_user(avatar={"_id": "a"}, profile={"content": "bio", "background": {}}))
        await cache.patch_user(USER_ID, {}, UserField.AVATAR)
        await cache.patch_user(USER_ID, {}, UserField.PROFILE_CONTENT)

        user = await cache.get_user(USER_ID)
        assert user.avatar is None
        assert user.profile == {"background": {}}

    @pytest.mark.asyncio
    async def test_delete_server(self, cache):
        await cache.commit_server(make_server())
        await cache.delete_server(SERVER_ID)
        assert await cache.get_server(SERVER_ID) is None

    @pytest.mark.asyncio
    async def test_member_keyed_by_composite_id(self, cache):
        await cache.commit_member(make_member(nickname="Al"))
        await cache.patch_member(MemberId(server=SERVER_ID, user=USER_ID), {}, MemberField.NICKNAME)

        member = await cache.get_member(MemberId(server=SERVER_ID, user=USER_ID))
        assert member.nickname is None


class TestChannels:
    """Tests for the channel table."""

    @pytest.mark.asyncio
    async def test_patch_ignores_fields_of_other_kinds(self, cache):
        await cache.commit_channel(make_dm_channel())
        await cache.patch_channel(DM_CHANNEL_ID, {"name": "renamed", "active": False})

        channel = await cache.get_channel(DM_CHANNEL_ID)
        assert channel.name is None
        assert channel.active is False

    @pytest.mark.asyncio
    async def test_clear_description(self, cache):
        await cache.commit_channel(make_text_channel(description="topic"))
        await cache.patch_channel(CHANNEL_ID, {"name": "lobby"}, ChannelField.DESCRIPTION)

        channel = await cache.get_channel(CHANNEL_ID)
        assert channel.name == "lobby"
        assert channel.description is None

    @pytest.mark.asyncio
    async def test_delete_channel_drops_messages(self, cache):
        await cache.commit_channel(make_text_channel())
        await cache.commit_message(make_message(1))
        await cache.delete_channel(CHANNEL_ID)

        assert await cache.get_channel(CHANNEL_ID) is None
        assert await cache.get_message(CHANNEL_ID, make_id(1)) is None


class TestMessages:
    """Tests for the bounded message table."""

    @pytest.mark.asyncio
    async def test_capacity_bound_evicts_oldest(self, cache):
        for n in range(8):
            await cache.commit_message(make_message(n))

        async with cache.messages.read() as messages:
            assert len(messages[CHANNEL_ID]) == 5
        assert await cache.get_message(CHANNEL_ID, make_id(2)) is None
        assert await cache.get_message(CHANNEL_ID, make_id(3)) is not None
        assert await cache.get_message(CHANNEL_ID, make_id(7)) is not None

    @pytest.mark.asyncio
    async def test_capacity_is_per_channel(self, cache):
        for n in range(5):
            await cache.commit_message(make_message(n))
        await cache.commit_message(make_message(50, channel=DM_CHANNEL_ID))

        assert await cache.get_message(CHANNEL_ID, make_id(0)) is not None
        assert await cache.get_message(DM_CHANNEL_ID, make_id(50)) is not None

    @pytest.mark.asyncio
    async def test_recommit_does_not_take_extra_slot(self, cache):
        for _ in range(10):
            await cache.commit_message(make_message(1))
        for n in range(2, 6):
            await cache.commit_message(make_message(n))

        assert await cache.get_message(CHANNEL_ID, make_id(1)) is not None

    @pytest.mark.asyncio
    async def test_zero_capacity_disables(self):
        cache = Cache(CacheConfig(messages=0))
        await cache.commit_message(make_message(1))
        assert await cache.get_message(CHANNEL_ID, make_id(1)) is None

    @pytest.mark.asyncio
    async def test_patch_and_delete(self, cache):
        await cache.commit_message(make_message(1))
        await cache.patch_message(CHANNEL_ID, make_id(1), {"content": "edited"})
        assert (await cache.get_message(CHANNEL_ID, make_id(1))).content == "edited"

        await cache.delete_message(CHANNEL_ID, make_id(1))
        assert await cache.get_message(CHANNEL_ID, make_id(1)) is None
        async with cache.message_queue.read() as queues:
            assert list(queues[CHANNEL_ID]) == []


class TestCommitToCache:
    """Tests for applying decoded events to the cache."""

    @pytest.mark.asyncio
    async def test_ready_snapshot(self, cache):
        event = decode_event({
            "type": "Ready",
            "users": [make_user().to_dict()],
            "servers": [make_server(roles={ROLE_ID: {"name": "mod"}}).to_dict()],
            "channels": [make_text_channel().to_dict()],
            "members": [make_member().to_dict()],
        })
        await commit_to_cache(cache, event)

        assert await cache.get_user(USER_ID) is not None
        assert await cache.get_server(SERVER_ID) is not None
        assert (await cache.get_role(ROLE_ID)).name == "mod"
        assert await cache.get_channel(CHANNEL_ID) is not None
        assert await cache.get_member(MemberId(server=SERVER_ID, user=USER_ID)) is not None

    @pytest.mark.asyncio
    async def test_message_lifecycle(self, cache):
        message_id = make_id(1)
        await commit_to_cache(cache, decode_event({
            "type": "Message", "_id": message_id, "channel": CHANNEL_ID,
            "author": USER_ID, "content": "hi",
        }))
        await commit_to_cache(cache, decode_event({
            "type": "MessageUpdate", "id": message_id, "channel": CHANNEL_ID,
            "data": {"content": "edited"},
        }))
        assert (await cache.get_message(CHANNEL_ID, message_id)).content == "edited"

        await commit_to_cache(cache, decode_event({
            "type": "MessageDelete", "id": message_id, "channel": CHANNEL_ID,
        }))
        assert await cache.get_message(CHANNEL_ID, message_id) is None

    @pytest.mark.asyncio
    async def test_channel_lifecycle(self, cache):
        await commit_to_cache(cache, decode_event({"type": "ChannelCreate", **make_text_channel().to_dict()}))
        await commit_to_cache(cache, decode_event({
            "type": "ChannelUpdate", "id": CHANNEL_ID, "data": {"name": "lobby"},
        }))
        assert (await cache.get_channel(CHANNEL_ID)).name == "lobby"

        await commit_to_cache(cache, decode_event({"type": "ChannelDelete", "id": CHANNEL_ID}))
        assert await cache.get_channel(CHANNEL_ID) is None

    @pytest.mark.asyncio
    async def test_server_updates(self, cache):
        await cache.commit_server(make_server(description="desc"))
        await cache.commit_role(ROLE_ID, make_server(roles={ROLE_ID: {"name": "mod", "colour": "red"}}).roles[ROLE_ID])

        await commit_to_cache(cache, decode_event({
            "type": "ServerUpdate", "id": SERVER_ID, "data": {"name": "Renamed"}, "clear": "Description",
        }))
        await commit_to_cache(cache, decode_event({
            "type": "ServerRoleUpdate", "id": SERVER_ID, "role_id": ROLE_ID,
            "data": {"name": "admin"}, "clear": RoleField.COLOUR.value,
        }))

        server = await cache.get_server(SERVER_ID)
        assert server.name == "Renamed"
        assert server.description is None
        role = await cache.get_role(ROLE_ID)
        assert role.name == "admin"
        assert role.colour is None

        await commit_to_cache(cache, decode_event({"type": "ServerDelete", "id": SERVER_ID}))
        assert await cache.get_server(SERVER_ID) is None

    @pytest.mark.asyncio
    async def test_member_and_user_updates(self, cache):
        await cache.commit_member(make_member())
        await cache.commit_user(make_user())

        await commit_to_cache(cache, decode_event({
            "type": "ServerMemberUpdate", "id": {"server": SERVER_ID, "user": USER_ID},
            "data": {"nickname": "Ally"},
        }))
        await commit_to_cache(cache, decode_event({
            "type": "UserUpdate", "id": USER_ID, "data": {"online": True},
        }))

        member = await cache.get_member(MemberId(server=SERVER_ID, user=USER_ID))
        assert member.nickname == "Ally"
        assert (await cache.get_user(USER_ID)).online is True

    @pytest.mark.asyncio
    async def test_events_without_cache_effect(self, cache):
        await commit_to_cache(cache, decode_event({
            "type": "ChannelStartTyping", "id": CHANNEL_ID, "user": USER_ID,
        }))
        async with cache.channels.read() as channels:
            assert channels == {}

    @pytest.mark.asyncio
    async def test_no_cache(self):
        await commit_to_cache(None, decode_event({"type": "ServerDelete", "id": SERVER_ID}))


class TestRwLock:
    """Tests for the reader/writer lock."""

    @pytest.mark.asyncio
    async def test_readers_share(self):
        lock = RwLock({"a": 1})
        async with lock.read() as first:
            async with lock.read() as second:
                assert first is second
                assert lock.locked

        assert not lock.locked

    @pytest.mark.asyncio
    async def test_writer_waits_for_readers(self):
        lock = RwLock([])

        async def writer():
            async with lock.write() as value:
                value.append("w")

        async with lock.read() as value:
            task = asyncio.create_task(writer())
            await asyncio.sleep(0)
            assert value == []

        await task
        async with lock.read() as value:
            assert value == ["w"]

    @pytest.mark.asyncio
    async def test_waiting_writer_blocks_new_readers(self):
        lock = RwLock(None)
        events = []

        async def writer():
            async with lock.write():
                events.append("w")

        async def reader():
            async with lock.read():
                events.append("r")

        async with lock.read():
            w = asyncio.create_task(writer())
            await asyncio.sleep(0)
            r = asyncio.create_task(reader())
            await asyncio.sleep(0)
            assert events == []

        await asyncio.gather(w, r)
        assert events == ["w", "r"]

    @pytest.mark.asyncio
    async def test_cancelled_writer_releases_readers(self):
        lock = RwLock(None)

        async def writer():
            async with lock.write():
                pass

        async def reader():
            async with lock.read():
                return "read"

        async with lock.read():
            w = asyncio.create_task(writer())
            await asyncio.sleep(0)
            r = asyncio.create_task(reader())
            await asyncio.sleep(0)

            w.cancel()
            assert await asyncio.wait_for(r, 1) == "read"

        with pytest.raises(asyncio.CancelledError):
            await w
