"""Hopfetch transfer engine."""

from .cookies import CookieJar, parse_cookie_header, parse_fragment
from .engine import (
    DEFAULT_MAX_REDIRECTS,
    AsyncTransferEngine,
    TransferEngine,
    get,
    post,
)
from .errors import RedirectLoopError, TransferError, TransportError
from .http import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    AsyncHttpxTransport,
    AsyncRawTransport,
    HttpxTransport,
    RawTransferResult,
    RawTransport,
    close,
    encode_form,
    get_client,
)
from .redirect import follow_redirect, follow_redirect_async, merge_cookies, resolve_location
from .response import HeaderEntry, Request, Response, parse_headers, parse_response

__all__ = [
    # Engine
    "TransferEngine",
    "AsyncTransferEngine",
    "get",
    "post",
    "DEFAULT_MAX_REDIRECTS",
    # Transport
    "RawTransport",
    "AsyncRawTransport",
    "RawTransferResult",
    "HttpxTransport",
    "AsyncHttpxTransport",
    "get_client",
    "close",
    "encode_form",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    # Parsing
    "Request",
    "Response",
    "HeaderEntry",
    "parse_headers",
    "parse_response",
    # Cookies
    "CookieJar",
    "parse_fragment",
    "parse_cookie_header",
    # Redirects
    "resolve_location",
    "merge_cookies",
    "follow_redirect",
    "follow_redirect_async",
    # Errors
    "TransferError",
    "TransportError",
    "RedirectLoopError",
]
