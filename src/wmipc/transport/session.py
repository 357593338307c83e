"""Per-connection dispatch: reply correlation and event fan-out.

The protocol carries no request identifier. The server answers the requests
of any one type code in the order they were issued, so pending requests are
kept in one FIFO queue per type code and each reply is matched to the oldest
entry queued under its code. Two requests of the same type issued
concurrently from different threads are only matched correctly if they are
also written in the order they were queued; :class:`wmipc.Connection` holds
the transport's write lock across both steps for that reason.
"""

from __future__ import annotations

import collections
import logging
import queue
import threading
from typing import Any, Callable, Deque, Dict, List, Optional

from .. import config
from ..protocol import codec
from ..protocol.errors import MalformedPayload, SpuriousReply
from ..protocol.wire import Frame
from .base import ConnectionClosed, RequestCancelled, Timeout


logger = logging.getLogger(__name__)


PENDING = "PENDING"
COMPLETE = "COMPLETE"
FAILED = "FAILED"
ABANDONED = "ABANDONED"


class PendingRequest:
    """One outstanding request awaiting the reply of type *code*.

    The reply payload is decoded in the caller's thread when :func:`wait`
    returns, using *decoder* if one was provided; a payload that does not
    decode raises :class:`wmipc.MalformedPayload` there, and only there.

    A request that times out or is cancelled is *abandoned*: it keeps its
    place in the dispatcher's queue so that its reply, if it ever arrives, is
    consumed and discarded instead of being handed to a later request.
    """

    def __init__(self, code: int, decoder: Optional[Callable[[int, bytes], Any]] = None):
        self.code = code
        self.decoder = decoder
        self.state = PENDING
        self.payload: Optional[bytes] = None
        self.error: Optional[BaseException] = None

        self._lock = threading.Lock()
        self._event = threading.Event()
        self._decoded = False
        self._response: Any = None

    def __repr__(self):
        return "PendingRequest(%d, %s)" % (self.code, self.state)

    @property
    def abandoned(self) -> bool:
        return self.state == ABANDONED

    def poll(self) -> bool:
        """Return True if the request is no longer waiting on anything."""
        return self._event.is_set()

    def cancel(self) -> bool:
        """Stop waiting for the reply. Returns False if it was too late.

        The request bytes have already been written and cannot be recalled;
        any thread blocked in :func:`wait` raises :class:`RequestCancelled`.
        """

        with self._lock:
            if self.state != PENDING:
                return False
            self.state = ABANDONED

        self._event.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> Any:
        """Block until the reply arrives and return it, decoded.

        Raises :class:`wmipc.Timeout` after *timeout* seconds, abandoning the
        request; None waits until the reply arrives or the connection ends.
        """

        if not self._event.wait(timeout):
            with self._lock:
                if self.state == PENDING:
                    self.state = ABANDONED
                    self.error = Timeout("no reply to request type %d in %.2f sec" % (self.code, timeout))

            self._event.set()

        if self.state == COMPLETE:
            return self._decode()

        if self.error is not None:
            raise self.error

        raise RequestCancelled("request type %d was cancelled" % (self.code))

    def _decode(self) -> Any:

        with self._lock:
            if self._decoded:
                return self._response

            if self.decoder is None:
                response = self.payload
            else:
                response = self.decoder(self.code, self.payload)

            self._response = response
            self._decoded = True

        return response

    def _complete(self, payload: bytes) -> bool:
        with self._lock:
            if self.state != PENDING:
                return False
            self.payload = payload
            self.state = COMPLETE

        self._event.set()
        return True

    def _fail(self, error: BaseException) -> bool:
        with self._lock:
            if self.state != PENDING:
                return False
            self.error = error
            self.state = FAILED

        self._event.set()
        return True


# end of class PendingRequest


class Dispatcher:
    """Route incoming frames for one connection.

    Replies are matched to :class:`PendingRequest` instances on the calling
    (read) thread. Events are handed to a dedicated listener thread through a
    bounded queue, so that a slow listener can only ever delay other
    listeners, never the read thread; when the queue is full, new events are
    dropped with a warning.
    """

    def __init__(self, event_queue_size: Optional[int] = None):

        if event_queue_size is None:
            event_queue_size = config.event_queue_size

        self.lock = threading.Lock()
        self.pending: Dict[int, Deque[PendingRequest]] = dict()
        self.listeners: Dict[int, List[Callable[[Any], Any]]] = dict()
        self.closed: Optional[BaseException] = None
        self.shutdown = False

        self.events: queue.Queue = queue.Queue(event_queue_size)
        self.thread = threading.Thread(target=self.run, name="wmipc-listeners")
        self.thread.daemon = True
        self.thread.start()

    # --- requests ---

    def expect(self, code: int, decoder: Optional[Callable[[int, bytes], Any]] = None) -> PendingRequest:
        """Queue and return a :class:`PendingRequest` for a reply of *code*.

        The caller must write the request to the wire after queueing it, and
        must do both while holding the transport's write lock.
        """

        pending = PendingRequest(code, decoder)

        with self.lock:
            if self.closed is not None:
                raise self._closed_error()

            try:
                waiting = self.pending[code]
            except KeyError:
                waiting = collections.deque()
                self.pending[code] = waiting

            waiting.append(pending)

        return pending

    def withdraw(self, pending: PendingRequest) -> None:
        """Remove a request that was queued but never written.

        Unlike :func:`PendingRequest.cancel`, this gives up the request's
        place in the queue; it must only be used when no reply can arrive.
        """

        pending.cancel()

        with self.lock:
            waiting = self.pending.get(pending.code)
            if waiting is None:
                return

            try:
                waiting.remove(pending)
            except ValueError:
                return

            if len(waiting) == 0:
                del self.pending[pending.code]

    def outstanding(self, code: Optional[int] = None) -> int:
        """Return the number of queued requests, abandoned ones included."""

        with self.lock:
            if code is not None:
                return len(self.pending.get(code, ()))
            return sum(len(waiting) for waiting in self.pending.values())

    # --- listeners ---

    def register(self, code: int, callback: Callable[[Any], Any]) -> None:
        """Invoke *callback* with the decoded payload of every event *code*.

        Callbacks for the same code run in registration order, on the
        listener thread; registering the same callback twice calls it twice.
        """

        if callable(callback):
            pass
        else:
            raise TypeError("callback must be callable")

        with self.lock:
            try:
                callbacks = self.listeners[code]
            except KeyError:
                callbacks = list()
                self.listeners[code] = callbacks

            callbacks.append(callback)

    def unregister(self, code: int, callback: Callable[[Any], Any]) -> bool:
        """Remove the first registration of *callback* for *code*.

        This is local bookkeeping only; the protocol has no way to
        unsubscribe, so the server keeps sending the event.
        """

        with self.lock:
            try:
                callbacks = self.listeners[code]
                callbacks.remove(callback)
            except (KeyError, ValueError):
                return False

            if len(callbacks) == 0:
                del self.listeners[code]

        return True

    def listening(self, code: int) -> bool:
        with self.lock:
            return code in self.listeners

    # --- incoming ---

    def route(self, frame: Frame) -> None:
        """Deliver one frame; called by the transport in receipt order."""

        if frame.is_event:
            self._event_incoming(frame)
        else:
            self._reply_incoming(frame)

    def _reply_incoming(self, frame: Frame) -> None:

        code = frame.code

        with self.lock:
            try:
                waiting = self.pending[code]
            except KeyError:
                pending = None
            else:
                pending = waiting.popleft()
                if len(waiting) == 0:
                    del self.pending[code]

        if pending is None:
            logger.warning("%s", SpuriousReply(code, frame.payload))
            return

        if pending._complete(frame.payload):
            return

        logger.debug("discarding late reply of type %d for an abandoned request", code)

    def _event_incoming(self, frame: Frame) -> None:

        # Do nothing if nobody is listening.

        if self.listening(frame.code):
            pass
        else:
            logger.debug("no listener for event %d, dropped", frame.code)
            return

        try:
            self.events.put_nowait(frame)
        except queue.Full:
            logger.warning("listener queue full (%d events), dropping event %d",
                           self.events.maxsize, frame.code)

    def run(self) -> None:
        """Main loop of the listener thread.

        Runs until :func:`close` has been called and the queue has drained.
        """

        while True:
            try:
                frame = self.events.get(timeout=config.poll_interval)
            except queue.Empty:
                if self.shutdown:
                    break
                continue

            if frame is None:
                break

            self.propagate(frame)

    def propagate(self, frame: Frame) -> None:
        """Decode an event frame and invoke its listeners in order."""

        try:
            message = codec.decode_frame(frame)
        except MalformedPayload as e:
            logger.warning("dropping event %d: %s", frame.code, e)
            return
        except Exception:
            logger.exception("dropping event %d, decoding failed", frame.code)
            return

        with self.lock:
            callbacks = list(self.listeners.get(message.code, ()))

        for callback in callbacks:
            try:
                callback(message.payload)
            except Exception:
                logger.exception("listener %r failed for event %s", callback, message.name)
                continue

    # --- teardown ---

    def _closed_error(self) -> ConnectionClosed:
        reason = self.closed

        if isinstance(reason, ConnectionClosed):
            return ConnectionClosed(str(reason))

        error = ConnectionClosed("connection closed after %s: %s" % (type(reason).__name__, reason))
        error.__cause__ = reason
        return error

    def close(self, reason: Optional[BaseException] = None) -> None:
        """Move to the terminal state and fail every pending request.

        *reason* is the error that ended the connection; each pending request
        raises a :class:`ConnectionClosed` chained to it.
        """

        if reason is None:
            reason = ConnectionClosed("connection closed")

        with self.lock:
            if self.closed is not None:
                return

            self.closed = reason
            waiting = list()
            for entries in self.pending.values():
                waiting.extend(entries)
            self.pending.clear()

        for pending in waiting:
            pending._fail(self._closed_error())

        # Let the listener thread drain what it already has, then exit.

        self.shutdown = True

        try:
            self.events.put_nowait(None)
        except queue.Full:
            pass

    def join(self, timeout: Optional[float] = None) -> None:
        if threading.current_thread() is not self.thread:
            self.thread.join(timeout)


# end of class Dispatcher
