"""Transport interface.

This is the (small) contract a transport implementation follows, and the
exceptions it raises. It lives outside :mod:`wmipc.protocol` so the protocol
layer stays free of any socket handling.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..protocol.errors import IPCError


class TransportError(IPCError):
    """Base class for all transport-layer errors."""


class Timeout(TransportError, TimeoutError):
    """A request did not receive its reply before the caller's deadline."""


class TransportConnectionError(TransportError):
    """The transport could not establish or maintain a connection."""


class ConnectionClosed(TransportConnectionError):
    """ The connection has ended, either because the peer closed or reset
        it, because a fatal protocol error forced it closed, or because it
        was closed locally. The connection cannot be used again.
    """


class Transport(ABC):
    """Minimal contract for a byte-stream transport carrying frames."""

    @abstractmethod
    def open(self) -> None:
        """Establish the connection and start receiving frames."""

    @abstractmethod
    def close(self) -> None:
        """Tear down the connection."""

    @abstractmethod
    def send(self, type: int, payload: bytes) -> None:
        """Write one frame; frames from concurrent callers never interleave."""

    @property
    def is_open(self) -> bool:
        """Whether the transport is currently connected."""
        return False


class RequestCancelled(TransportError):
    """The request was cancelled locally before its reply arrived."""
