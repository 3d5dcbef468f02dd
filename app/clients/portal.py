# app/clients/portal.py

import logging
import re
from typing import Any, Literal, Optional, Sequence

import httpx

logger = logging.getLogger(__name__)

_RETRY_AFTER_RE = re.compile(r"retry[- _]?after[\"']?\s*[:=]?\s*[\"']?(\d+(?:\.\d+)?)", re.IGNORECASE)


class ApiError(Exception):
    """Non-2xx response. The message is "<status>: <body text>"."""

    def __init__(self, status_code: int, body: str, headers: Optional[httpx.Headers] = None):
        self.status_code = status_code
        self.body = body
        self.headers = headers or httpx.Headers()
        super().__init__(f"{status_code}: {body}")

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    @property
    def retry_after(self) -> float | None:
        """Seconds to wait, from the Retry-After header or a hint in the body."""
        header = self.headers.get("retry-after")
        if header:
            try:
                return float(header)
            except ValueError:
                pass
        match = _RETRY_AFTER_RE.search(self.body or "")
        return float(match.group(1)) if match else None


class NetworkError(Exception):
    """The request never got a response (DNS, refused connection, timeout)."""


def key_to_url(key: Sequence[Any]) -> str:
    return "/".join(str(part) for part in key)


class PortalClient:
    """
    Async HTTP client for the portal API.
    Keeps a cookie jar between calls and sends the bearer token when one is set.
    """
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: httpx.Timeout | None = None,
    ):
        self.async_client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout or httpx.Timeout(20.0, read=60.0),
            transport=transport,
            cookies=httpx.Cookies(),
        )
        if token:
            self.set_token(token)

    def set_token(self, token: str | None):
        if token:
            self.async_client.headers["Authorization"] = f"Bearer {token}"
        else:
            self.async_client.headers.pop("Authorization", None)

    async def api_request(self, method: str, url: str, json: Any = None) -> httpx.Response:
        """
        Sends one request. Returns the Response on 2xx,
        raises ApiError on any other status and NetworkError when no response arrived.
        """
        try:
            response = await self.async_client.request(method, url, json=json)
        except httpx.RequestError as e:
            logger.error(f"Network error during {method} request to {url!r}: {e}")
            raise NetworkError(str(e) or e.__class__.__name__) from e

        if response.is_error:
            body = response.text or response.reason_phrase
            logger.warning(f"HTTP error during {method} request to {url!r}: {response.status_code} {body}")
            raise ApiError(response.status_code, body, response.headers)
        return response

    async def get_json(self, key: Sequence[Any], on_401: Literal["throw", "return_none"] = "throw") -> Any:
        """Default query function: GETs the URL made of the key segments."""
        try:
            response = await self.api_request("GET", key_to_url(key))
        except ApiError as e:
            if e.is_unauthorized and on_401 == "return_none":
                return None
            raise
        return response.json()

    async def aclose(self):
        await self.async_client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()
