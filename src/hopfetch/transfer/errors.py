"""Exceptions raised by the transfer engine."""

from __future__ import annotations


class TransferError(Exception):
    """Base class for transfer failures."""


class TransportError(TransferError):
    """A single transfer failed at the network or protocol level."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"Transfer to {url} failed: {message}")
        self.url = url


class RedirectLoopError(TransferError):
    """More redirects were followed than the engine allows."""

    def __init__(self, url: str, max_redirects: int) -> None:
        super().__init__(f"Exceeded {max_redirects} redirects at {url}")
        self.url = url
        self.max_redirects = max_redirects
