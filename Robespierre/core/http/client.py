"""
REST client for the Revolt API.

Only the endpoints the library itself needs are wrapped: fetching the
entities the cache mirrors and sending messages. All requests share one
``aiohttp.ClientSession`` so connections are pooled across clients.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from Robespierre.config import config
from Robespierre.core.http.exceptions import DecodeError, HttpError, NotFound, RequestError
from Robespierre.core.models import (
    Channel,
    ChannelId,
    Member,
    Message,
    Server,
    ServerId,
    User,
    UserId,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Authentication:
    """
    Credentials attached to every request and used to open the event socket.

    Use :meth:`bot` for bot tokens and :meth:`user` for a user session.
    """
    token: str
    user_id: Optional[str] = None
    is_bot: bool = True

    @classmethod
    def bot(cls, token: str) -> 'Authentication':
        return cls(token=token)

    @classmethod
    def user(cls, session_token: str, user_id: str) -> 'Authentication':
        return cls(token=session_token, user_id=user_id, is_bot=False)

    def headers(self) -> Dict[str, str]:
        if self.is_bot:
            return {"x-bot-token": self.token}
        return {"x-session-token": self.token, "x-user-id": self.user_id or ""}


class SessionManager:
    """
    Singleton manager for aiohttp.ClientSession.

    Provides a shared session across all HttpClient instances.
    """

    _instance: Optional['SessionManager'] = None
    _session: Optional[aiohttp.ClientSession] = None
    _lock = asyncio.Lock()

    def __new__(cls) -> 'SessionManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def get_session(self) -> aiohttp.ClientSession:
        """Get or create the shared aiohttp session."""
        if self._session is None or self._session.closed:
            async with self._lock:
                if self._session is None or self._session.closed:
                    connector = aiohttp.TCPConnector(
                        limit=0,
                        ttl_dns_cache=300,
                        enable_cleanup_closed=True
                    )
                    timeout = aiohttp.ClientTimeout(
                        total=config.HTTP_TIMEOUT,
                        connect=config.HTTP_CONNECT_TIMEOUT
                    )
                    self._session = aiohttp.ClientSession(
                        connector=connector,
                        timeout=timeout
                    )
        return self._session

    async def close(self) -> None:
        """Close the shared session."""
        async with self._lock:
            if self._session and not self._session.closed:
                await self._session.close()
                self._session = None

    @property
    def is_closed(self) -> bool:
        return self._session is None or self._session.closed


_session_manager = SessionManager()


class HttpClient:
    """
    Thin async wrapper over the REST endpoints used by the cache and the
    command framework.
    """

    def __init__(self, auth: Authentication, api_root: str = config.API_ROOT):
        """
        Args:
            auth: Credentials sent with every request
            api_root: Base URL of the API, without trailing slash
        """
        self.auth = auth
        self.api_root = api_root.rstrip("/")

    async def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an HTTP request to the API and return the decoded JSON body.

        Args:
            endpoint: Path below the API root, starting with ``/``
            method: HTTP method
            data: JSON body

        Returns:
            Decoded response body

        Raises:
            NotFound: On 404
            HttpError: On any other non-2xx status
            RequestError: If no response was received in time
            DecodeError: If the body is not JSON
        """
        url = f"{self.api_root}{endpoint}"
        logger.debug("%s %s", method, url)

        session = await _session_manager.get_session()
        try:
            async with session.request(
                method=method,
                url=url,
                json=data,
                headers=self.auth.headers()
            ) as response:
                if response.status == 404:
                    raise NotFound(f"{method} {endpoint} not found", response.status, url)
                if response.status >= 400:
                    body = await response.text()
                    raise HttpError(f"{method} {endpoint} failed: {body}", response.status, url)

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise DecodeError(f"invalid JSON from {endpoint}: {e}", response.status, url) from e
        except aiohttp.ClientError as e:
            raise RequestError(f"{method} {endpoint} failed: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise RequestError(f"{method} {endpoint} timed out", url=url) from e

    @staticmethod
    def _decode(model, payload: Any, endpoint: str):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"unexpected {model.__name__} payload from {endpoint}: {e}") from e

    async def fetch_user(self, user_id: UserId) -> User:
        endpoint = f"/users/{user_id}"
        return self._decode(User, await self._make_request(endpoint), endpoint)

    async def fetch_self(self) -> User:
        """The account the credentials belong to."""
        endpoint = "/users/@me"
        return self._decode(User, await self._make_request(endpoint), endpoint)

    async def fetch_channel(self, channel_id: ChannelId) -> Channel:
        endpoint = f"/channels/{channel_id}"
        return self._decode(Channel, await self._make_request(endpoint), endpoint)

    async def fetch_server(self, server_id: ServerId) -> Server:
        endpoint = f"/servers/{server_id}"
        return self._decode(Server, await self._make_request(endpoint), endpoint)

    async def fetch_member(self, server_id: ServerId, user_id: UserId) -> Member:
        endpoint = f"/servers/{server_id}/members/{user_id}"
        return self._decode(Member, await self._make_request(endpoint), endpoint)

    async def send_message(
        self,
        channel_id: ChannelId,
        content: str,
        nonce: str,
        attachments: Optional[List[str]] = None,
        replies: Optional[List[Dict[str, Any]]] = None,
    ) -> Message:
        """
        Send a message to a channel.

        Args:
            channel_id: Target channel
            content: Message text
            nonce: Client-chosen unique value used to deduplicate sends
            attachments: Ids of already uploaded attachments
            replies: ``{"id": message_id, "mention": bool}`` entries

        Returns:
            The created message
        """
        endpoint = f"/channels/{channel_id}/messages"
        body: Dict[str, Any] = {"content": content, "nonce": nonce}
        if attachments:
            body["attachments"] = list(attachments)
        if replies:
            body["replies"] = list(replies)

        return self._decode(Message, await self._make_request(endpoint, "POST", body), endpoint)

    async def close(self) -> None:
        await _session_manager.close()


__all__ = ['Authentication', 'SessionManager', 'HttpClient']
