"""
Test configuration and fixtures for Robespierre tests.

Provides:
- A mocked HTTP client that serves entities from an in-memory registry
- A fresh cache and context per test
- Custom markers
"""

from typing import Any, Dict
from unittest.mock import AsyncMock

import pytest

from Robespierre.core.cache import Cache, CacheConfig
from Robespierre.core.context import Context
from Robespierre.core.http import NotFound
from Robespierre.core.models import MemberId
from Robespierre.test.factories import (
    make_dm_channel,
    make_member,
    make_message,
    make_server,
    make_text_channel,
    make_user,
)


class FakeHttp:
    """
    Stand-in for :class:`~Robespierre.core.http.HttpClient`.

    Entities registered in ``users``/``channels``/``servers``/``members`` are
    served by the ``fetch_*`` mocks; anything else raises ``NotFound``.
    ``send_message`` records its calls and echoes a message back.
    """

    def __init__(self):
        self.users: Dict[str, Any] = {}
        self.channels: Dict[str, Any] = {}
        self.servers: Dict[str, Any] = {}
        self.members: Dict[MemberId, Any] = {}

        self.fetch_user = AsyncMock(side_effect=self._lookup(self.users))
        self.fetch_channel = AsyncMock(side_effect=self._lookup(self.channels))
        self.fetch_server = AsyncMock(side_effect=self._lookup(self.servers))
        self.fetch_member = AsyncMock(side_effect=self._fetch_member)
        self.send_message = AsyncMock(side_effect=self._send_message)
        self.close = AsyncMock()

    @staticmethod
    def _lookup(table):
        async def lookup(entity_id):
            try:
                return table[entity_id].model_copy(deep=True)
            except KeyError:
                raise NotFound(f"{entity_id} not found", 404) from None
        return lookup

    async def _fetch_member(self, server_id, user_id):
        member_id = MemberId(server=server_id, user=user_id)
        try:
            return self.members[member_id].model_copy(deep=True)
        except KeyError:
            raise NotFound(f"{member_id} not found", 404) from None

    async def _send_message(self, channel_id, content, nonce, attachments=None, replies=None):
        return make_message(999, content=content, channel=channel_id, nonce=nonce)

    @property
    def sent(self):
        """Texts passed to ``send_message`` so far."""
        return [call.args[1] for call in self.send_message.call_args_list]


@pytest.fixture
def http() -> FakeHttp:
    """HTTP client serving a default user, text channel, DM, server and member."""
    fake = FakeHttp()
    user = make_user()
    fake.users[user.id] = user
    channel = make_text_channel()
    fake.channels[channel.id] = channel
    dm = make_dm_channel()
    fake.channels[dm.id] = dm
    server = make_server()
    fake.servers[server.id] = server
    member = make_member(nickname="Al")
    fake.members[member.id] = member
    return fake


@pytest.fixture
def cache() -> Cache:
    return Cache(CacheConfig(messages=5))


@pytest.fixture
def ctx(http, cache) -> Context:
    return Context(http=http, cache=cache)


@pytest.fixture
def uncached_ctx(http) -> Context:
    return Context(http=http)


@pytest.fixture
def messenger_ctx(ctx) -> Context:
    """A context attached to a messenger, as inside ``Connection.run``."""
    from Robespierre.core.events import ConnectionMessenger
    return ctx.with_messenger(ConnectionMessenger())


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
