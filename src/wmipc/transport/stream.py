"""Local stream socket transport.

One :class:`StreamTransport` owns one connected Unix-domain stream socket.
Writes are serialized through a single lock so that concurrent callers
never interleave their frames. A background thread reads the socket,
reassembles frames, and hands each one, in receipt order, to the
*on_frame* callback.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Optional

import zmq

from .. import config
from ..protocol import wire
from ..protocol.errors import ProtocolError, TruncatedMessage
from .base import ConnectionClosed, Transport, TransportConnectionError


logger = logging.getLogger(__name__)


class StreamTransport(Transport):
    """Frame transport over a local stream socket.

    Either *path* (the filesystem path of the server's socket, resolved by
    the caller) or an already connected *sock* must be provided. The socket
    is closed when the transport closes, on every exit path.

    *on_frame* is invoked on the read thread for every complete frame.
    *on_close* is invoked exactly once with the exception describing why the
    connection ended: :class:`ConnectionClosed` for a local close or the peer
    going away, :class:`ProtocolError` or :class:`TruncatedMessage` for a
    corrupt stream.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        sock: Optional[socket.socket] = None,
        on_frame: Optional[Callable[[wire.Frame], None]] = None,
        on_close: Optional[Callable[[BaseException], None]] = None,
        read_size: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ):

        if path is None and sock is None:
            raise ValueError("either a socket path or a connected socket is required")

        self.path = path
        self.socket = sock
        self.on_frame = on_frame
        self.on_close = on_close
        self.read_size = read_size or config.read_size
        self.poll_interval = poll_interval or config.poll_interval

        # Reentrant, so that a caller can hold it across queueing a pending
        # request and calling send().

        self.lock = threading.RLock()
        self.closed: Optional[BaseException] = None
        self.finished = threading.Event()
        self.shutdown = False
        self.thread: Optional[threading.Thread] = None

    @property
    def is_open(self) -> bool:
        return self.thread is not None and self.closed is None

    def open(self) -> None:

        if self.socket is None:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.connect(self.path)
            except OSError as e:
                sock.close()
                raise TransportConnectionError("cannot connect to %s: %s" % (self.path, e)) from e
            self.socket = sock

        self.socket.setblocking(True)

        self.thread = threading.Thread(target=self.run, name="wmipc-reader")
        self.thread.daemon = True
        self.thread.start()

    def send(self, type: int, payload: bytes = b"") -> None:
        """Write one frame of *type* carrying *payload*.

        Raises :class:`ConnectionClosed` immediately if the connection has
        already ended, or if the write fails.
        """

        frame = wire.pack_frame(type, payload)

        with self.lock:
            if self.closed is not None:
                raise ConnectionClosed("connection is closed: %s" % (self.closed,))

            try:
                self.socket.sendall(frame)
            except OSError as e:
                error = ConnectionClosed("write failed: %s" % (e,))
                self._teardown(error)
                self._shutdown_socket()
                raise error from e

        logger.debug("sent frame type %d, %d bytes", type, len(payload))

    def run(self) -> None:
        """Main loop of the read thread."""

        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        buffer = bytearray()
        reason: Optional[BaseException] = None

        try:
            while self.shutdown == False:
                ready = poller.poll(int(self.poll_interval * 1000))
                if not ready:
                    continue

                try:
                    chunk = self.socket.recv(self.read_size)
                except (BlockingIOError, InterruptedError):
                    continue
                except OSError as e:
                    reason = ConnectionClosed("connection reset: %s" % (e,))
                    break

                if not chunk:
                    if buffer:
                        reason = TruncatedMessage("connection ended %d bytes into a frame" % (len(buffer)))
                    break

                buffer += chunk
                self._frames_incoming(buffer)

        except ProtocolError as e:
            logger.error("fatal protocol error, closing connection: %s", e)
            reason = e
        except Exception as e:
            logger.exception("unexpected error on the read thread, closing connection")
            reason = e

        finally:
            if reason is None:
                if self.shutdown:
                    reason = ConnectionClosed("connection closed locally")
                else:
                    reason = ConnectionClosed("connection closed by peer")

            poller.unregister(self.socket)
            self._teardown(reason)

            with self.lock:
                self.socket.close()

            self.finished.set()

    def _frames_incoming(self, buffer: bytearray) -> None:
        """Dispatch every complete frame at the front of *buffer*."""

        while True:
            unpacked = wire.unpack_frame(buffer)
            if unpacked is None:
                return

            frame, consumed = unpacked
            del buffer[:consumed]

            logger.debug("received %r", frame)

            if self.on_frame is not None:
                self.on_frame(frame)

    def _teardown(self, reason: BaseException) -> bool:
        """Record *reason* as the terminal state, once; notify on_close."""

        with self.lock:
            if self.closed is not None:
                return False
            self.closed = reason

        if self.on_close is not None:
            self.on_close(reason)

        return True

    def _shutdown_socket(self) -> None:
        """Wake the read thread by shutting the socket down in both directions."""

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Already disconnected.
            pass

    def close(self, timeout: Optional[float] = None) -> None:
        """Close the connection and wait for the read thread to finish.

        Safe to call more than once, and from any thread, including the
        read thread itself.
        """

        self.shutdown = True

        if self.thread is None:
            if self.socket is not None:
                self.socket.close()
            self._teardown(ConnectionClosed("connection closed locally"))
            self.finished.set()
            return

        self._shutdown_socket()

        if threading.current_thread() is not self.thread:
            self.thread.join(timeout)

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        """Block until the read thread has finished; False on timeout."""

        return self.finished.wait(timeout)
