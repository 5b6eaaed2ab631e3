"""Cookie jar built from Cookie and Set-Cookie header values."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


def parse_fragment(fragment: str) -> tuple[str, str]:
    """
    Split one ``name=value`` fragment of a cookie header.

    Only the first ``=`` separates name from value, so ``"a="`` is ``a`` with
    an empty value. A fragment with no ``=`` (``"flag"``) or nothing before
    it (``"=x"``) becomes a name, taken whole, with an empty value.

    Args:
        fragment: A single ``;``-separated piece of a cookie header

    Returns:
        Tuple of (name, value), both trimmed
    """
    name, sep, value = fragment.partition("=")
    if sep and name.strip():
        return name.strip(), value.strip()
    return fragment.strip(), ""


class CookieJar(dict[str, str]):
    """Mapping of cookie name to value.

    Setting an existing name keeps its original position, so serialization
    order is the order in which names were first seen.
    """

    def add_from_header_value(self, header_value: str) -> None:
        """Apply a ``Cookie:`` or ``Set-Cookie:`` header value to the jar."""
        for fragment in header_value.split(";"):
            name, value = parse_fragment(fragment)
            if not name:
                continue
            self[name] = value

    def add_from_headers(self, header_list: Iterable[tuple[str, str]]) -> None:
        """Apply every ``set-cookie`` entry of an ordered header list."""
        for name, value in header_list:
            if name == "set-cookie":
                self.add_from_header_value(value)

    @property
    def flat(self) -> list[str]:
        """Cookies as ``name=value`` strings, in jar order."""
        return [f"{name}={value}" for name, value in self.items()]

    @property
    def header(self) -> str:
        """Serialized ``Cookie:`` header value for the next request."""
        return "; ".join(self.flat)

    def serialize(self) -> str:
        """Return the jar as a ``Cookie:`` header value (same as ``header``)."""
        return self.header


def parse_cookie_header(header_value: str | None) -> CookieJar:
    """Build a jar from a ``Cookie:`` header value (``None`` gives an empty jar)."""
    jar = CookieJar()
    if header_value:
        jar.add_from_header_value(header_value)
    return jar
