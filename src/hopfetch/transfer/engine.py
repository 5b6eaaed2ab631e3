"""Public entry points: GET/POST with manual cookie and redirect handling."""

from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import TYPE_CHECKING

from .errors import RedirectLoopError
from .http import (
    DEFAULT_USER_AGENT,
    AsyncHttpxTransport,
    HttpxTransport,
    encode_form,
)
from .redirect import follow_redirect, follow_redirect_async
from .response import Request, Response, parse_response

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .http import AsyncRawTransport, RawTransport

DEFAULT_MAX_REDIRECTS = 20

logger = logging.getLogger(__name__)


def _check_hops(url: str, hops: int, max_redirects: int | None) -> None:
    if max_redirects is not None and hops > max_redirects:
        raise RedirectLoopError(url, max_redirects)


class TransferEngine:
    """
    Blocking transfer engine.

    Every call performs one transfer, parses it, and follows any redirect
    as a GET carrying the cookies gathered so far. Nothing is kept between
    calls.

    Example:
        engine = TransferEngine()
        response = engine.post("https://example.com/login", {"user": "me"})
        print(response.cookie_header)
    """

    def __init__(
        self,
        transport: RawTransport | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int | None = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        """
        Initialize the engine.

        Args:
            transport: Single-transfer primitive (shared httpx client if None)
            user_agent: User-Agent sent with every request
            max_redirects: Redirects allowed per call, None for no limit
        """
        self._transport = transport if transport is not None else HttpxTransport()
        self._user_agent = user_agent
        self._max_redirects = max_redirects

    def get(self, url: str, cookies: str | None = None, referer: str | None = None) -> Response:
        """Issue a GET and follow redirects."""
        return self._get(url, cookies, referer, hops=0)

    def post(
        self,
        url: str,
        form: Mapping[str, str],
        cookies: str | None = None,
        referer: str | None = None,
    ) -> Response:
        """Issue a form POST and follow redirects (as GET)."""
        request = Request("POST", url, cookies=cookies, referer=referer, form=form)
        return self._send(request, hops=0)

    def _get(self, url: str, cookies: str | None, referer: str | None, hops: int) -> Response:
        _check_hops(url, hops, self._max_redirects)
        return self._send(Request("GET", url, cookies=cookies, referer=referer), hops)

    def _send(self, request: Request, hops: int) -> Response:
        logger.debug(f"{request.method} {request.url}")
        result = self._transport.perform(
            request.url,
            request.method,
            self._user_agent,
            cookies=request.cookies,
            referer=request.referer,
            form=encode_form(request.form) if request.form is not None else None,
        )
        response = parse_response(
            result.header_bytes,
            result.body_bytes,
            request_cookies=request.cookies,
            url=request.url,
        )

        def fetch(next_url: str, cookie_header: str) -> Response:
            return self._get(next_url, cookie_header, None, hops + 1)

        return follow_redirect(request.url, response, fetch)


class AsyncTransferEngine:
    """
    Non-blocking transfer engine.

    Redirect hops are awaited one after another, so a call never has more
    than one transfer in flight.

    Example:
        async with AsyncTransferEngine() as engine:
            response = await engine.get("https://example.com")
    """

    def __init__(
        self,
        transport: AsyncRawTransport | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        max_redirects: int | None = DEFAULT_MAX_REDIRECTS,
    ) -> None:
        self._owns_transport = transport is None
        self._transport = transport if transport is not None else AsyncHttpxTransport()
        self._user_agent = user_agent
        self._max_redirects = max_redirects

    async def __aenter__(self) -> AsyncTransferEngine:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if the engine created it."""
        if self._owns_transport and isinstance(self._transport, AsyncHttpxTransport):
            await self._transport.aclose()

    async def get(self, url: str, cookies: str | None = None, referer: str | None = None) -> Response:
        return await self._get(url, cookies, referer, hops=0)

    async def post(
        self,
        url: str,
        form: Mapping[str, str],
        cookies: str | None = None,
        referer: str | None = None,
    ) -> Response:
        request = Request("POST", url, cookies=cookies, referer=referer, form=form)
        return await self._send(request, hops=0)

    async def _get(self, url: str, cookies: str | None, referer: str | None, hops: int) -> Response:
        _check_hops(url, hops, self._max_redirects)
        return await self._send(Request("GET", url, cookies=cookies, referer=referer), hops)

    async def _send(self, request: Request, hops: int) -> Response:
        logger.debug(f"{request.method} {request.url}")
        result = await self._transport.perform(
            request.url,
            request.method,
            self._user_agent,
            cookies=request.cookies,
            referer=request.referer,
            form=encode_form(request.form) if request.form is not None else None,
        )
        response = parse_response(
            result.header_bytes,
            result.body_bytes,
            request_cookies=request.cookies,
            url=request.url,
        )

        async def fetch(next_url: str, cookie_header: str) -> Response:
            return await self._get(next_url, cookie_header, None, hops + 1)

        return await follow_redirect_async(request.url, response, fetch)


_default_engine: TransferEngine | None = None
_default_engine_lock = threading.Lock()


def _engine() -> TransferEngine:
    """Get or create the default engine (thread-safe, created once)."""
    global _default_engine
    if _default_engine is None:
        with _default_engine_lock:
            # Double-check after acquiring lock
            if _default_engine is None:
                _default_engine = TransferEngine()
    return _default_engine


def get(url: str, cookies: str | None = None, referer: str | None = None) -> Response:
    """GET through the default engine over the shared client."""
    return _engine().get(url, cookies=cookies, referer=referer)


def post(
    url: str,
    form: Mapping[str, str],
    cookies: str | None = None,
    referer: str | None = None,
) -> Response:
    """POST through the default engine over the shared client."""
    return _engine().post(url, form, cookies=cookies, referer=referer)
