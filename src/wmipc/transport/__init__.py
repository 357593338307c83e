"""Transport layer: the local stream socket and per-connection dispatch."""

from .base import (
    TransportError,
    Timeout,
    TransportConnectionError,
    ConnectionClosed,
    RequestCancelled,
)

from . import session
from . import stream
