"""
Tests for the events websocket connection, using an in-memory socket.

Tests cover:
- Authentication handshake
- The run loop: prepare/handle ordering, handler failures, shutdown
- Typing sessions and heartbeats
- Isolation of failing and slow events from the rest of the stream
"""

import asyncio
import json
from typing import Any, List
from unittest.mock import AsyncMock

import pytest
from websockets.exceptions import ConnectionClosedOK

from Robespierre.core.events import (
    AuthError,
    Connection,
    ConnectionClosedError,
    RawEventHandler,
    TypingSessionManager,
)
from Robespierre.core.http import Authentication
from Robespierre.framework import Command, command
from Robespierre.handlers import CacheWrap, EventHandler, EventHandlerWrap, FrameworkWrap
from Robespierre.start import build_framework
from Robespierre.test.factories import CHANNEL_ID, make_text_channel, message_payload


class FakeWebSocket:
    """Websocket double fed from a queue; exceptions in the queue are raised by recv()."""

    def __init__(self, *frames: Any):
        self.incoming: asyncio.Queue = asyncio.Queue()
        for frame in frames:
            self.feed(frame)
        self.sent: List[dict] = []
        self.closed = False

    def feed(self, frame: Any) -> None:
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self.incoming.put_nowait(frame)

    async def send(self, frame: str) -> None:
        self.sent.append(json.loads(frame))

    async def recv(self) -> str:
        frame = await self.incoming.get()
        if isinstance(frame, Exception):
            raise frame
        return frame

    async def close(self) -> None:
        self.closed = True

    def sent_types(self) -> List[str]:
        return [frame["type"] for frame in self.sent]


def closed() -> ConnectionClosedOK:
    return ConnectionClosedOK(None, None)


class RecordingHandler(RawEventHandler):
    def __init__(self):
        self.log = []

    async def prepare(self, ctx, event):
        self.log.append(("prepare", getattr(event, "message", None) and event.message.id))

    async def handle(self, ctx, event):
        self.log.append(("handle", getattr(event, "message", None) and event.message.id))


class TestAuthentication:
    """Tests for Connection.connect()."""

    @pytest.mark.asyncio
    async def test_authenticated(self, monkeypatch):
        ws = FakeWebSocket({"type": "Authenticated"})
        monkeypatch.setattr("websockets.connect", AsyncMock(return_value=ws))

        connection = await Connection.connect(Authentication.bot("secret"), "wss://example.invalid")

        assert ws.sent == [{"type": "Authenticate", "token": "secret"}]
        assert not connection.closed

    @pytest.mark.asyncio
    async def test_error_closes_socket(self, monkeypatch):
        ws = FakeWebSocket({"type": "Error", "error": "InvalidSession"})
        monkeypatch.setattr("websockets.connect", AsyncMock(return_value=ws))

        with pytest.raises(AuthError) as info:
            await Connection.connect(Authentication.bot("bad"), "wss://example.invalid")

        assert info.value.reason == "InvalidSession"
        assert str(info.value) == "error while authenticating: InvalidSession"
        assert ws.closed

    @pytest.mark.asyncio
    async def test_undecodable_frames_skipped(self, monkeypatch):
        ws = FakeWebSocket("not json", {"type": "Brand new"}, {"type": "Authenticated"})
        monkeypatch.setattr("websockets.connect", AsyncMock(return_value=ws))

        await Connection.connect(Authentication.bot("secret"), "wss://example.invalid")

    @pytest.mark.asyncio
    async def test_closed_during_handshake(self, monkeypatch):
        ws = FakeWebSocket(closed())
        monkeypatch.setattr("websockets.connect", AsyncMock(return_value=ws))

        with pytest.raises(ConnectionClosedError):
            await Connection.connect(Authentication.bot("secret"), "wss://example.invalid")
        assert ws.closed


class TestRun:
    """Tests for Connection.run()."""

    @pytest.mark.asyncio
    async def test_prepare_then_handle(self, ctx):
        ws = FakeWebSocket(message_payload(1), message_payload(2), closed())
        handler = RecordingHandler()
        connection = Connection(ws, ping_interval=60)

        with pytest.raises(ConnectionClosedError):
            await connection.run(ctx, handler)
        await asyncio.sleep(0.01)

        log = handler.log
        assert [entry for entry in log if entry[0] == "prepare"] == [
            ("prepare", message_payload(1)["_id"]),
            ("prepare", message_payload(2)["_id"]),
        ]
        for n in (1, 2):
            message_id = message_payload(n)["_id"]
            assert log.index(("prepare", message_id)) < log.index(("handle", message_id))

    @pytest.mark.asyncio
    async def test_handler_error_does_not_stop_loop(self, ctx):
        handled = []

        class Failing(RawEventHandler):
            async def handle(self, ctx, event):
                handled.append(event.message.id)
                raise RuntimeError("boom")

        ws = FakeWebSocket(message_payload(1), message_payload(2), closed())
        with pytest.raises(ConnectionClosedError):
            await Connection(ws, ping_interval=60).run(ctx, Failing())
        await asyncio.sleep(0.01)

        assert len(handled) == 2

    @pytest.mark.asyncio
    async def test_close_request_stops_loop(self, ctx):
        class Closer(RawEventHandler):
            async def handle(self, ctx, event):
                ctx.messenger.close()

        ws = FakeWebSocket(message_payload(1))
        connection = Connection(ws, ping_interval=60)
        await asyncio.wait_for(connection.run(ctx, Closer()), 1)

        assert ws.closed
        assert connection.closed

    @pytest.mark.asyncio
    async def test_typing_session(self, ctx):
        class Typer(RawEventHandler):
            async def handle(self, ctx, event):
                async with ctx.typing(event.message.channel):
                    pass
                ctx.messenger.close()

        ws = FakeWebSocket(message_payload(1))
        await asyncio.wait_for(Connection(ws, ping_interval=60).run(ctx, Typer()), 1)

        assert ws.sent == [
            {"type": "BeginTyping", "channel": CHANNEL_ID},
            {"type": "EndTyping", "channel": CHANNEL_ID},
        ]

    @pytest.mark.asyncio
    async def test_heartbeat(self, ctx):
        ws = FakeWebSocket()
        connection = Connection(ws, ping_interval=0.01)
        task = asyncio.create_task(connection.run(ctx, RecordingHandler()))

        await asyncio.sleep(0.05)
        ws.feed(closed())
        with pytest.raises(ConnectionClosedError):
            await asyncio.wait_for(task, 1)

        assert "Ping" in ws.sent_types()

    @pytest.mark.asyncio
    async def test_typing_requires_connection(self, ctx):
        with pytest.raises(RuntimeError):
            ctx.typing(CHANNEL_ID)


class TestNext:
    """Tests for Connection.next()."""

    @pytest.mark.asyncio
    async def test_skips_pong(self):
        ws = FakeWebSocket({"type": "Pong", "data": 0}, message_payload(1))
        event = await Connection(ws, ping_interval=60).next()
        assert event.message.id == message_payload(1)["_id"]

    @pytest.mark.asyncio
    async def test_pings_while_idle(self):
        ws = FakeWebSocket()
        connection = Connection(ws, ping_interval=0.01)
        task = asyncio.create_task(connection.next())

        await asyncio.sleep(0.05)
        ws.feed(message_payload(1))
        await asyncio.wait_for(task, 1)

        assert {"type": "Ping", "data": 0} in ws.sent


class TestTypingSessionManager:
    """Tests for typing session reference counting."""

    def test_nested_sessions(self):
        sessions = TypingSessionManager()
        sessions.start_typing(CHANNEL_ID)
        sessions.start_typing(CHANNEL_ID)

        assert sessions.stop_typing(CHANNEL_ID) is False
        assert list(sessions.current_sessions()) == [CHANNEL_ID]
        assert sessions.stop_typing(CHANNEL_ID) is True
        assert list(sessions.current_sessions()) == []

    def test_stop_without_session(self):
        assert TypingSessionManager().stop_typing(CHANNEL_ID) is False


class TestDispatchIsolation:
    """Tests that one event's failure or slowness does not affect the next."""

    @pytest.mark.asyncio
    async def test_bad_cache_patch_does_not_stop_loop(self, ctx, cache):
        await cache.commit_channel(make_text_channel())
        handled = []

        class Inner(RawEventHandler):
            async def handle(self, ctx, event):
                handled.append(type(event).__name__)

        ws = FakeWebSocket(
            {"type": "ChannelUpdate", "id": CHANNEL_ID, "data": {"name": "renamed", "nsfw": "maybe"}},
            message_payload(1),
            closed(),
        )
        with pytest.raises(ConnectionClosedError):
            await Connection(ws, ping_interval=60).run(ctx, CacheWrap(Inner()))
        await asyncio.sleep(0.01)

        assert sorted(handled) == ["ChannelUpdateEvent", "MessageEvent"]
        assert (await cache.get_channel(CHANNEL_ID)).name == "general"
        assert (await cache.get_message(CHANNEL_ID, message_payload(1)["_id"])) is not None

    @pytest.mark.asyncio
    async def test_slow_command_does_not_hold_up_next_event(self, ctx, http):
        gate = asyncio.Event()
        finished = []

        @command
        async def slow(ctx, message):
            await gate.wait()
            finished.append(message.id)

        framework = build_framework(prefix="!").group(
            lambda g: g.with_name("Slow").command(lambda: Command.new("slow", slow))
        )
        handler = CacheWrap(EventHandlerWrap(FrameworkWrap(framework, EventHandler())))
        ws = FakeWebSocket(
            message_payload(1, content="!slow"),
            message_payload(2, content="!ping"),
            closed(),
        )

        with pytest.raises(ConnectionClosedError):
            await Connection(ws, ping_interval=60).run(ctx, handler)

        async def replied():
            while not http.sent:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(replied(), 1)
        await asyncio.sleep(0.02)
        assert http.sent == ["pong"]
        assert finished == []

        gate.set()
        await asyncio.sleep(0.01)
        assert finished == [message_payload(1)["_id"]]
        assert http.sent == ["pong"]
