"""Redirect following with cookie accumulation across hops."""

from __future__ import annotations

import logging
import urllib.parse
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .response import Response

    Fetch = Callable[[str, str], Response]
    AsyncFetch = Callable[[str, str], Awaitable[Response]]

logger = logging.getLogger(__name__)


def resolve_location(original_url: str, location: str) -> str:
    """
    Resolve a ``location`` header value against the URL that produced it.

    Absolute locations are returned verbatim. Anything else is attached to
    the scheme and host of the original URL only: the original path and
    port are not taken into account.

    Args:
        original_url: URL the redirecting response was fetched from
        location: Raw ``location`` header value

    Returns:
        Absolute URL for the next hop
    """
    if location.startswith("http://") or location.startswith("https://"):
        return location

    parsed = urllib.parse.urlparse(original_url)
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"

    if location.startswith("/"):
        return f"{parsed.scheme}://{host}{location}"
    return f"{parsed.scheme}://{host}/{location}"


def merge_cookies(origin: Response, target: Response) -> None:
    """Fold the cookies of a redirecting response into the next one.

    Values from ``origin`` overwrite those already in ``target``.
    """
    for name, value in origin.cookies.items():
        target.cookies[name] = value
    target.cookies.add_from_headers(origin.header_list)


def _redirect_target(url: str, response: Response) -> str | None:
    location = response.headers.get("location")
    if location is None:
        return None
    target = resolve_location(url, location)
    logger.debug(f"Following redirect from {url} to {target}")
    return target


def follow_redirect(url: str, response: Response, fetch: Fetch) -> Response:
    """
    Chase the redirect in ``response``, if any.

    ``fetch`` is the engine's full GET path, so redirects returned by the
    next hop are followed as well.

    Args:
        url: URL ``response`` was fetched from
        response: Parsed response of that URL
        fetch: Callable taking (url, cookie header) and returning a Response

    Returns:
        ``response`` itself when it has no ``location`` header, otherwise the
        final response of the chain carrying the merged cookies
    """
    target = _redirect_target(url, response)
    if target is None:
        return response

    redirected = fetch(target, response.cookie_header)
    merge_cookies(response, redirected)
    return redirected


async def follow_redirect_async(url: str, response: Response, fetch: AsyncFetch) -> Response:
    """Awaitable variant of follow_redirect."""
    target = _redirect_target(url, response)
    if target is None:
        return response

    redirected = await fetch(target, response.cookie_header)
    merge_cookies(response, redirected)
    return redirected
