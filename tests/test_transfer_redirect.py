"""Tests for transfer.redirect module."""

from unittest import mock

import pytest

from hopfetch.transfer import redirect as redirect_module
from hopfetch.transfer.response import parse_response


def make_response(header_block: bytes, body: bytes = b"", request_cookies=None):
    return parse_response(header_block, body, request_cookies=request_cookies)


class TestResolveLocation:
    """Tests for resolve_location function."""

    def test_root_relative(self):
        """A leading slash should resolve against scheme and host."""
        result = redirect_module.resolve_location("http://x.test/start", "/next")

        assert result == "http://x.test/next"

    def test_absolute_http(self):
        """Absolute locations should be used verbatim."""
        result = redirect_module.resolve_location("http://x.test/start", "http://y.test/z")

        assert result == "http://y.test/z"

    def test_absolute_https(self):
        """Absolute https locations should be used verbatim."""
        result = redirect_module.resolve_location("http://x.test/", "https://y.test/z?q=1")

        assert result == "https://y.test/z?q=1"

    def test_path_relative_ignores_original_path(self):
        """Relative locations attach to the host root, not the original path."""
        result = redirect_module.resolve_location("https://x.test/a/b/page", "other")

        assert result == "https://x.test/other"

    def test_port_not_carried_over(self):
        """Only the host of the original URL is used."""
        result = redirect_module.resolve_location("http://x.test:8080/a", "/b")

        assert result == "http://x.test/b"

    def test_ipv6_host_bracketed(self):
        """IPv6 hosts should stay bracketed."""
        result = redirect_module.resolve_location("http://[2001:db8::1]/a", "/b")

        assert result == "http://[2001:db8::1]/b"


class TestFollowRedirect:
    """Tests for follow_redirect function."""

    def test_no_location_returns_same_response(self):
        """Responses without a location header are returned unchanged."""
        response = make_response(b"HTTP/1.1 200 OK\r\nSet-Cookie: a=1\r\n")
        fetch = mock.MagicMock()

        result = redirect_module.follow_redirect("http://x.test/", response, fetch)

        assert result is response
        fetch.assert_not_called()

    def test_fetches_resolved_url_with_cookies(self):
        """The next hop gets the resolved URL and the serialized jar."""
        response = make_response(
            b"HTTP/1.1 302 Found\r\nLocation: /next\r\nSet-Cookie: a=1\r\n",
        )
        final = make_response(b"HTTP/1.1 200 OK\r\n", b"done")
        fetch = mock.MagicMock(return_value=final)

        result = redirect_module.follow_redirect("http://x.test/start", response, fetch)

        fetch.assert_called_once_with("http://x.test/next", "a=1")
        assert result is final
        assert result.content == b"done"

    def test_origin_cookies_take_precedence(self):
        """Origin hop values overwrite values already in the next response."""
        response = make_response(
            b"HTTP/1.1 302 Found\r\nLocation: /next\r\nSet-Cookie: a=origin\r\n",
        )
        final = make_response(b"HTTP/1.1 200 OK\r\nSet-Cookie: a=later\r\nSet-Cookie: b=2\r\n")
        fetch = mock.MagicMock(return_value=final)

        result = redirect_module.follow_redirect("http://x.test/", response, fetch)

        assert result.cookies == {"a": "origin", "b": "2"}

    @pytest.mark.asyncio
    async def test_async_variant(self):
        """The async variant should await fetch and merge cookies."""
        response = make_response(
            b"HTTP/1.1 301 Moved\r\nLocation: http://y.test/z\r\nSet-Cookie: a=1\r\n",
        )
        final = make_response(b"HTTP/1.1 200 OK\r\nSet-Cookie: b=2\r\n")
        fetch = mock.AsyncMock(return_value=final)

        result = await redirect_module.follow_redirect_async("http://x.test/", response, fetch)

        fetch.assert_awaited_once_with("http://y.test/z", "a=1")
        assert result.cookies == {"b": "2", "a": "1"}


class TestMergeCookies:
    """Tests for merge_cookies function."""

    def test_reapplies_set_cookie_headers(self):
        """Origin set-cookie entries are applied after the jar copy."""
        origin = make_response(
            b"HTTP/1.1 302 Found\r\nSet-Cookie: a=1\r\n",
            request_cookies="a=sent; c=3",
        )
        target = make_response(b"HTTP/1.1 200 OK\r\n")

        redirect_module.merge_cookies(origin, target)

        assert target.cookies == {"a": "1", "c": "3"}
