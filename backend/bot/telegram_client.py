# backend/bot/telegram_client.py
import logging
from typing import Any, Dict, List, Optional

import aiohttp
import requests

logger = logging.getLogger("calcbot.telegram")

DEFAULT_API_URL = "https://api.telegram.org"


class TelegramAPIError(Exception):
    """The Bot API answered with ok=false or an unreadable payload."""

    def __init__(self, method: str, description: str, error_code: Optional[int] = None):
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.error_code = error_code


def _unwrap(method: str, data: Any) -> Any:
    if not isinstance(data, dict):
        raise TelegramAPIError(method, "unexpected response payload")
    if not data.get("ok"):
        raise TelegramAPIError(
            method,
            data.get("description", "unknown error"),
            data.get("error_code"),
        )
    return data.get("result")


def redact(message: str, token: str) -> str:
    # Request URLs embed the token; keep it out of error messages and logs.
    return message.replace(token, "<token>") if token else message


def get_me(token: str, base_url: str = DEFAULT_API_URL, timeout: float = 30) -> Dict[str, Any]:
    """
    Synchronous startup check: resolves the bot account behind a token.
    Raises TelegramAPIError when the token is rejected or the API is unreachable.
    """
    url = f"{base_url}/bot{token}/getMe"
    try:
        response = requests.get(url, timeout=timeout)
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise TelegramAPIError("getMe", redact(str(e), token)) from None
    return _unwrap("getMe", data)


class TelegramClient:
    """Minimal async Bot API client: long-poll updates and send replies."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        request_timeout: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout
        self._token = token
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "TelegramClient":
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def _call(self, method: str, payload: Dict[str, Any], timeout: float) -> Any:
        if self._session is None:
            raise RuntimeError("TelegramClient session is not open")

        url = f"{self.base_url}/bot{self._token}/{method}"
        logger.debug(f"-> {method} {payload}")

        try:
            async with self._session.post(
                url, json=payload, timeout=aiohttp.ClientTimeout(total=timeout)
            ) as resp:
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise TelegramAPIError(method, f"HTTP {resp.status}: invalid JSON") from e
        except aiohttp.ClientError as e:
            raise TelegramAPIError(method, redact(str(e), self._token)) from None

        return _unwrap(method, data)

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 60) -> List[Dict[str, Any]]:
        payload: Dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        return await self._call("getUpdates", payload, timeout + self.request_timeout) or []

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_to_message_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id
        return await self._call("sendMessage", payload, self.request_timeout)
