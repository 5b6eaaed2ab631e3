"""Raw HTTP transport: one request in, raw header and body bytes out."""

from __future__ import annotations

import atexit
import http.cookiejar
import logging
import threading
import urllib.parse
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Protocol

import httpx

from .errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.3; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/42.0.2311.90 Safari/537.36"
)

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

logger = logging.getLogger(__name__)

_client: httpx.Client | None = None
_client_lock = threading.Lock()


@dataclass(frozen=True)
class RawTransferResult:
    """Accumulated header block and body of one transfer."""

    header_bytes: bytes
    body_bytes: bytes


class RawTransport(Protocol):
    """
    Protocol for the single-transfer primitive used by TransferEngine.

    Implementations must not follow redirects or persist cookies; both are
    handled by the engine.
    """

    def perform(
        self,
        url: str,
        method: str,
        user_agent: str,
        cookies: str | None = None,
        referer: str | None = None,
        form: str | None = None,
    ) -> RawTransferResult:
        """
        Perform one HTTP transfer.

        Args:
            url: The URL to request
            method: "GET" or "POST"
            user_agent: User-Agent header value
            cookies: Optional ``Cookie:`` header value
            referer: Optional ``Referer:`` header value
            form: Optional URL-encoded POST body

        Returns:
            RawTransferResult with header and body bytes

        Raises:
            TransportError: On any network or protocol failure
        """
        ...


class AsyncRawTransport(Protocol):
    """Awaitable counterpart of RawTransport."""

    async def perform(
        self,
        url: str,
        method: str,
        user_agent: str,
        cookies: str | None = None,
        referer: str | None = None,
        form: str | None = None,
    ) -> RawTransferResult: ...


def _refusing_cookie_jar() -> http.cookiejar.CookieJar:
    # An empty allow-list blocks every domain, so the client never stores
    # or replays cookies on its own.
    policy = http.cookiejar.DefaultCookiePolicy(allowed_domains=[])
    return http.cookiejar.CookieJar(policy=policy)


def _client_options(timeout: httpx.Timeout) -> dict:
    return {
        "timeout": timeout,
        "follow_redirects": False,
        "cookies": _refusing_cookie_jar(),
    }


def get_client() -> httpx.Client:
    """Get or create the shared HTTP client (thread-safe, created once)."""
    global _client
    if _client is None:
        with _client_lock:
            # Double-check after acquiring lock
            if _client is None:
                logger.debug("Creating shared HTTP client")
                _client = httpx.Client(**_client_options(DEFAULT_TIMEOUT))
    return _client


def close() -> None:
    """Close the shared HTTP client."""
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None


def encode_form(form: Mapping[str, str]) -> str:
    """URL-encode form fields, spaces as ``+``."""
    return urllib.parse.urlencode(list(form.items()))


def _build_headers(
    user_agent: str,
    cookies: str | None,
    referer: str | None,
    form: str | None,
) -> dict[str, str]:
    headers = {"User-Agent": user_agent, "Accept-Encoding": "identity"}
    if cookies:
        headers["Cookie"] = cookies
    if referer:
        headers["Referer"] = referer
    if form is not None:
        headers["Content-Type"] = FORM_CONTENT_TYPE
    return headers


def _build_request(
    client: httpx.Client | httpx.AsyncClient,
    method: str,
    url: str,
    user_agent: str,
    cookies: str | None,
    referer: str | None,
    form: str | None,
    timeout: httpx.Timeout | None = None,
) -> httpx.Request:
    request = client.build_request(
        method,
        url,
        headers=_build_headers(user_agent, cookies, referer, form),
        content=form.encode("utf-8") if form is not None else None,
        timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
    )
    # Only the cookies passed in may go out, never ones stored by the client.
    if not cookies and "Cookie" in request.headers:
        del request.headers["Cookie"]
    return request


def _header_block(response: httpx.Response) -> bytes:
    """Rebuild the raw header block: status line, header lines, blank line.

    The body handed back is already content-decoded, so ``Content-Encoding``
    is left out to keep the block consistent with it.
    """
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}"
    lines = [status_line.encode("ascii", errors="replace")]
    for name, value in response.headers.raw:
        if name.lower() == b"content-encoding":
            continue
        lines.append(name + b": " + value)
    return b"\r\n".join(lines) + b"\r\n\r\n"


class HttpxTransport:
    """RawTransport backed by a blocking httpx client."""

    def __init__(
        self,
        client: httpx.Client | None = None,
        timeout: httpx.Timeout | None = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            client: Client to use; the shared client when omitted. It must not
                follow redirects. Cookies it stores are never sent.
            timeout: Per-request timeout overriding the client's
        """
        self._client = client
        self._timeout = timeout

    @property
    def client(self) -> httpx.Client:
        return self._client if self._client is not None else get_client()

    def perform(
        self,
        url: str,
        method: str,
        user_agent: str,
        cookies: str | None = None,
        referer: str | None = None,
        form: str | None = None,
    ) -> RawTransferResult:
        client = self.client
        request = _build_request(
            client, method, url, user_agent, cookies, referer, form, timeout=self._timeout
        )
        try:
            response = client.send(request, stream=True)
            try:
                body = b"".join(response.iter_bytes())
            finally:
                response.close()
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(url, str(e)) from e

        return RawTransferResult(header_bytes=_header_block(response), body_bytes=body)


class AsyncHttpxTransport:
    """AsyncRawTransport backed by an httpx.AsyncClient it owns."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client or httpx.AsyncClient(**_client_options(timeout))

    async def __aenter__(self) -> AsyncHttpxTransport:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def perform(
        self,
        url: str,
        method: str,
        user_agent: str,
        cookies: str | None = None,
        referer: str | None = None,
        form: str | None = None,
    ) -> RawTransferResult:
        request = _build_request(self._client, method, url, user_agent, cookies, referer, form)
        try:
            response = await self._client.send(request, stream=True)
            try:
                body = b"".join([chunk async for chunk in response.aiter_bytes()])
            finally:
                await response.aclose()
        except httpx.HTTPError as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise TransportError(url, str(e)) from e

        return RawTransferResult(header_bytes=_header_block(response), body_bytes=body)


# Register cleanup handler for automatic cleanup on exit
atexit.register(close)
