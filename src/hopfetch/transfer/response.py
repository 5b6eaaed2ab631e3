"""Request and response models, and parsing of raw transfer output."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .cookies import CookieJar

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

HeaderEntry = tuple[str, str]

_LINE_BREAKS = re.compile(r"[\r\n]+")


@dataclass(frozen=True)
class Request:
    """A single GET or POST issued by the engine."""

    method: str
    url: str
    cookies: str | None = None
    referer: str | None = None
    form: Mapping[str, str] | None = None


@dataclass
class Response:
    """
    Parsed result of a transfer, possibly spanning a redirect chain.

    Attributes:
        header_list: Every received header in order, names lower-cased
        headers: Name to value lookup, last occurrence wins
        content: Raw body bytes
        cookies: Cookies accumulated across the chain
        url: URL the final hop was fetched from
    """

    header_list: list[HeaderEntry]
    headers: dict[str, str]
    content: bytes
    cookies: CookieJar = field(default_factory=CookieJar)
    url: str | None = None

    @property
    def cookies_flat(self) -> list[str]:
        return self.cookies.flat

    @property
    def cookie_header(self) -> str:
        """Serialized ``Cookie:`` header value built from the jar."""
        return self.cookies.header


def parse_headers(header_bytes: bytes) -> list[HeaderEntry]:
    """
    Turn an accumulated raw header block into ordered (name, value) pairs.

    The first line is the status line and is dropped. Lines without a colon
    are skipped.

    Args:
        header_bytes: Status line plus header lines as received

    Returns:
        List of (lower-cased name, value) tuples in received order
    """
    text = header_bytes.decode("utf-8", errors="replace")
    lines = [line for line in _LINE_BREAKS.split(text) if line]

    entries: list[HeaderEntry] = []
    for line in lines[1:]:
        name, sep, value = line.partition(":")
        if not sep:
            logger.debug(f"Skipping malformed header line: {line!r}")
            continue
        entries.append((name.lower().strip(), value.strip()))
    return entries


def parse_response(
    header_bytes: bytes,
    body_bytes: bytes,
    request_cookies: str | None = None,
    url: str | None = None,
) -> Response:
    """
    Build a Response from the raw output of one transfer.

    Args:
        header_bytes: Raw header block, status line first
        body_bytes: Raw body, kept verbatim
        request_cookies: ``Cookie:`` header sent with the request, seeded
            into the jar before any ``set-cookie`` entries
        url: URL the transfer was made to

    Returns:
        Parsed Response
    """
    header_list = parse_headers(header_bytes)
    headers = {name: value for name, value in header_list}

    cookies = CookieJar()
    if request_cookies:
        cookies.add_from_header_value(request_cookies)
    cookies.add_from_headers(header_list)

    return Response(
        header_list=header_list,
        headers=headers,
        content=body_bytes,
        cookies=cookies,
        url=url,
    )
