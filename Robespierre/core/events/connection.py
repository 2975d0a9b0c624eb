"""
Events WebSocket connection.

One :class:`Connection` owns one authenticated socket. :meth:`Connection.run`
reads frames strictly one at a time, lets the handler apply the event to
shared state inline (``prepare``), then hands the event to the handler in a
task of its own so slow handlers never hold up decoding of the next frame.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Set

import websockets
from websockets.exceptions import ConnectionClosed

from Robespierre.config import config
from Robespierre.core.events.exceptions import AuthError, ConnectionClosedError
from Robespierre.core.events.typing_sessions import (
    ConnectionMessage,
    ConnectionMessageKind,
    ConnectionMessenger,
    TypingSessionManager,
)
from Robespierre.core.http import Authentication
from Robespierre.core.models import ChannelId
from Robespierre.core.models.events import (
    AuthenticateEvent,
    AuthenticatedEvent,
    BeginTypingEvent,
    ClientToServerEvent,
    EndTypingEvent,
    ErrorEvent,
    EventDecodeError,
    PingEvent,
    PongEvent,
    ServerToClientEvent,
    decode_event,
    encode_event,
)

logger = logging.getLogger(__name__)


class RawEventHandler(ABC):
    """
    Receives every decoded event from :meth:`Connection.run`.

    ``prepare`` is awaited in the read loop before the next frame is read;
    ``handle`` runs in its own task.
    """

    async def prepare(self, ctx: Any, event: ServerToClientEvent) -> None:
        """Apply ``event`` to shared state before it is dispatched."""
        return None

    @abstractmethod
    async def handle(self, ctx: Any, event: ServerToClientEvent) -> None:
        pass


class Connection:
    """
    An authenticated events socket.

    Example:
        connection = await Connection.connect(Authentication.bot(token))
        await connection.run(ctx, CacheWrap(EventHandlerWrap(MyHandler())))
    """

    def __init__(self, websocket, ping_interval: float = config.PING_INTERVAL):
        self._websocket = websocket
        self.ping_interval = ping_interval
        self.typing_interval = config.TYPING_INTERVAL
        self._next_ping = asyncio.get_running_loop().time() + ping_interval
        self._tasks: Set[asyncio.Task] = set()
        self.closed = False

    @classmethod
    async def connect(cls, auth: Authentication, url: str = config.WS_URL) -> 'Connection':
        """
        Open and authenticate a connection.

        Raises:
            AuthError: If the server answers the authentication with an error
            ConnectionClosedError: If the socket closes during the handshake
        """
        logger.debug("Connecting to websocket on %s", url)
        websocket = await websockets.connect(url)
        connection = cls(websocket)
        try:
            await connection._authenticate(auth)
        except BaseException:
            await websocket.close()
            raise
        return connection

    async def _authenticate(self, auth: Authentication) -> None:
        logger.debug("Authenticating")
        await self.send_event(AuthenticateEvent(token=auth.token))

        event = None
        while event is None:
            event = await self.get_event()

        match event:
            case AuthenticatedEvent():
                logger.info("Authenticated")
            case ErrorEvent():
                logger.error("Error while authenticating: %s", event.error)
                raise AuthError(event.error)
            case _:
                logger.info("Unexpected message after auth: %r", event)

    async def send_event(self, event: ClientToServerEvent) -> None:
        frame = encode_event(event)
        logger.debug("[>] %s", frame)
        try:
            await self._websocket.send(frame)
        except ConnectionClosed as e:
            self.closed = True
            raise ConnectionClosedError() from e

    async def get_event(self) -> Optional[ServerToClientEvent]:
        """
        Read and decode one frame.

        Returns:
            The event, or None if the frame could not be decoded (the
            failure is logged and the connection stays usable)
        """
        try:
            frame = await self._websocket.recv()
        except ConnectionClosed as e:
            self.closed = True
            raise ConnectionClosedError() from e

        logger.debug("[<] %s", frame)
        try:
            return decode_event(frame)
        except EventDecodeError as e:
            logger.warning("Failed to decode event: %s", e)
            return None

    async def heartbeat(self) -> None:
        await self.send_event(PingEvent(data=0))
        self._next_ping = asyncio.get_running_loop().time() + self.ping_interval

    async def start_typing(self, channel_id: ChannelId) -> None:
        await self.send_event(BeginTypingEvent(channel=channel_id))

    async def stop_typing(self, channel_id: ChannelId) -> None:
        await self.send_event(EndTypingEvent(channel=channel_id))

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            await self._websocket.close()

    async def next(self) -> ServerToClientEvent:
        """
        Wait for the next event other than a pong, sending heartbeats while
        waiting. For bots that run their own loop instead of :meth:`run`.
        """
        loop = asyncio.get_running_loop()
        while True:
            timeout = max(0.0, self._next_ping - loop.time())
            try:
                event = await asyncio.wait_for(self.get_event(), timeout)
            except asyncio.TimeoutError:
                await self.heartbeat()
                continue

            if event is None or isinstance(event, PongEvent):
                continue
            return event

    async def _run_handler(self, handler: RawEventHandler, ctx: Any, event: ServerToClientEvent) -> None:
        try:
            await handler.handle(ctx, event)
        except Exception:
            logger.exception("Unhandled error while handling %s", type(event).__name__)

    async def _dispatch(self, handler: RawEventHandler, ctx: Any, event: ServerToClientEvent) -> None:
        try:
            await handler.prepare(ctx, event)
        except Exception:
            logger.exception("Unhandled error while preparing %s", type(event).__name__)

        task = asyncio.create_task(self._run_handler(handler, ctx, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle_message(self, message: ConnectionMessage, typing: TypingSessionManager) -> bool:
        """Act on a messenger request; returns True when the loop should stop."""
        match message.kind:
            case ConnectionMessageKind.START_TYPING:
                typing.start_typing(message.channel)
                await self.start_typing(message.channel)
            case ConnectionMessageKind.STOP_TYPING:
                if typing.stop_typing(message.channel):
                    await self.stop_typing(message.channel)
            case ConnectionMessageKind.CLOSE:
                await self.close()
                return True
        return False

    async def run(self, ctx: Any, handler: RawEventHandler) -> None:
        """
        Read events until the socket closes or a close is requested.

        ``ctx`` is given a fresh :class:`ConnectionMessenger` (through its
        ``with_messenger`` method) so handlers can request typing indicators
        or a shutdown. Handler tasks already started keep running after
        this returns.

        Raises:
            ConnectionClosedError: If the server closes the socket
        """
        messenger = ConnectionMessenger()
        ctx = ctx.with_messenger(messenger)
        typing = TypingSessionManager()

        loop = asyncio.get_running_loop()
        next_typing = loop.time() + self.typing_interval

        recv_task: Optional[asyncio.Task] = None
        message_task: Optional[asyncio.Task] = None
        try:
            while True:
                if recv_task is None:
                    recv_task = asyncio.ensure_future(self.get_event())
                if message_task is None:
                    message_task = asyncio.ensure_future(messenger.queue.get())

                timeout = max(0.0, min(self._next_ping, next_typing) - loop.time())
                done, _ = await asyncio.wait(
                    {recv_task, message_task},
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED
                )

                if recv_task in done:
                    finished, recv_task = recv_task, None
                    event = finished.result()
                    if event is not None:
                        await self._dispatch(handler, ctx, event)

                if message_task in done:
                    finished, message_task = message_task, None
                    if await self._handle_message(finished.result(), typing):
                        return

                now = loop.time()
                if now >= self._next_ping:
                    await self.heartbeat()
                if now >= next_typing:
                    for channel_id in typing.current_sessions():
                        await self.start_typing(channel_id)
                    next_typing = now + self.typing_interval
        finally:
            for task in (recv_task, message_task):
                if task is not None:
                    task.cancel()


__all__ = ['RawEventHandler', 'Connection']
