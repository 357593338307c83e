""" Implementation of :class:`Connection`, the primary entry point for
    talking to a running window manager over its IPC socket, and of the
    :func:`connect` shorthand.
"""

import logging

from . import config
from .protocol import codec
from .protocol import fields
from .transport.base import ConnectionClosed
from .transport.session import Dispatcher
from .transport.stream import StreamTransport


logger = logging.getLogger(__name__)

_default = object()


class Connection:
    """ One connection to the window manager. The *path* is the location of
        the server's socket; discovering it (from an environment variable or
        a window property) is left to the caller. Alternatively an already
        connected stream socket can be supplied as *sock*.

        Every connection has its own reader and listener threads and its own
        queue of pending requests; nothing is shared between connections.
        Requests of different types can be issued from any number of
        threads at once. Requests of the same type issued concurrently are
        matched to replies in the order they were written, since the
        protocol has no request identifier; use separate connections when
        that matters.

        The *timeout* is the default number of seconds a request waits for
        its reply; None waits indefinitely. It defaults to
        :data:`wmipc.config.timeout`.

        A :class:`Connection` is a context manager; leaving the block closes
        the connection.
    """

    def __init__(self, path=None, sock=None, timeout=_default, event_queue_size=None):

        if timeout is _default:
            timeout = config.timeout

        self.timeout = timeout
        self.subscriptions = set()

        self.dispatcher = Dispatcher(event_queue_size)
        self.transport = StreamTransport(path, sock, on_frame=self.dispatcher.route, on_close=self._closed)

        try:
            self.transport.open()
        except Exception:
            self.dispatcher.close()
            raise


    def __enter__(self):
        return self


    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


    def __repr__(self):
        state = 'closed' if self.closed else 'open'

        if self.transport.path is None:
            return '<Connection %s>' % (state)

        return '<Connection %s %s>' % (self.transport.path, state)


    def _closed(self, reason):
        """ Invoked exactly once by the transport when the connection ends.
        """

        logger.debug('connection ended: %s', reason)

        self.dispatcher.close(reason)


    @property
    def closed(self):
        return self.transport.closed is not None


    def close(self):
        """ Close the connection. Any requests still waiting for a reply
            raise :class:`wmipc.ConnectionClosed`.
        """

        self.transport.close()
        self.dispatcher.join(config.poll_interval * 2)


    def wait_closed(self, timeout=None):
        """ Block until the connection ends, whether closed locally or by
            the server; returns False if *timeout* seconds pass first. This
            is the natural way for an event-driven client to idle while its
            listeners do the work.
        """

        return self.transport.wait_closed(timeout)


    # Generic request machinery.

    def send(self, code, payload=b'', decoder=codec.decode_reply):
        """ Write a request of type *code* and return the
            :class:`wmipc.transport.session.PendingRequest` that will receive
            the reply, without waiting for it. The reply is decoded with
            *decoder* when the caller invokes its wait() method.
        """

        # Queueing the request and writing it must happen as one step under
        # the write lock; otherwise two same-type requests from different
        # threads could be queued in one order and written in the other.

        with self.transport.lock:
            pending = self.dispatcher.expect(code, decoder)
            try:
                self.transport.send(code, payload)
            except ConnectionClosed:
                # The transport's close handler has already failed every
                # pending request, including this one.
                raise
            except Exception:
                # Nothing reached the wire; no reply will come for it.
                self.dispatcher.withdraw(pending)
                raise

        return pending


    def request(self, code, payload=b'', timeout=_default, decoder=codec.decode_reply):
        """ Issue a request of type *code* and block until its decoded reply
            arrives. Raises :class:`wmipc.Timeout` if no reply arrives within
            *timeout* seconds, :class:`wmipc.ConnectionClosed` if the
            connection ends first, and :class:`wmipc.MalformedPayload` if
            the reply cannot be decoded.
        """

        if timeout is _default:
            timeout = self.timeout

        pending = self.send(code, payload, decoder)
        return pending.wait(timeout)


    # Typed requests.

    def command(self, text, timeout=_default):
        """ Run one or more commands, returning one
            :class:`wmipc.CommandResult` per command.
        """

        payload = codec.encode_command(text)
        return self.request(fields.COMMAND, payload, timeout)


    def get_workspaces(self, timeout=_default):
        return self.request(fields.GET_WORKSPACES, timeout=timeout)


    def subscribe(self, events, timeout=_default):
        """ Subscribe to the named *events* ('window', 'workspace', ...).
            There is no way to unsubscribe short of closing the connection.
        """

        events = list(events)
        payload = codec.encode_subscribe(events)
        reply = self.request(fields.SUBSCRIBE, payload, timeout)

        if reply.success:
            for event in events:
                try:
                    self.subscriptions.add(fields.event_code(event))
                except ValueError:
                    # Subscribed by a name this library does not know.
                    pass

        return reply


    def get_outputs(self, timeout=_default):
        return self.request(fields.GET_OUTPUTS, timeout=timeout)


    def get_tree(self, timeout=_default):
        """ Return the root :class:`wmipc.TreeNode` of the layout tree.
        """

        return self.request(fields.GET_TREE, timeout=timeout)


    def get_marks(self, timeout=_default):
        return self.request(fields.GET_MARKS, timeout=timeout)


    def get_bar_config(self, bar_id=None, timeout=_default):
        """ With no *bar_id*, return the list of configured bar ids;
            otherwise return the :class:`wmipc.BarConfig` for that bar.
        """

        if bar_id is None:
            payload = b''
            variant = codec.BAR_IDS
        else:
            payload = codec.encode_command(bar_id)
            variant = codec.BAR_CONFIG

        def decoder(code, data):
            return codec.decode_reply(code, data, variant)

        return self.request(fields.GET_BAR_CONFIG, payload, timeout, decoder)


    def get_version(self, timeout=_default):
        return self.request(fields.GET_VERSION, timeout=timeout)


    def get_binding_modes(self, timeout=_default):
        return self.request(fields.GET_BINDING_MODES, timeout=timeout)


    def get_config(self, timeout=_default):
        return self.request(fields.GET_CONFIG, timeout=timeout)


    def send_tick(self, payload='', timeout=_default):
        """ Ask the server to broadcast a tick event carrying *payload* to
            every client subscribed to 'tick'.
        """

        return self.request(fields.SEND_TICK, codec.encode_tick(payload), timeout)


    def sync(self, window, rnd, timeout=_default):
        return self.request(fields.SYNC, codec.encode_sync(window, rnd), timeout)


    # Event listeners.

    def on(self, event, callback, timeout=_default):
        """ Register a *callback* to be invoked with the decoded payload of
            every *event* (a name such as 'window', or an event code). The
            connection is subscribed to the event if it was not already.

            Callbacks run on the connection's listener thread, one at a time
            and in registration order; they should be as lightweight as
            possible. A callback may issue requests on the same connection.
        """

        code = fields.event_code(event)
        self.dispatcher.register(code, callback)

        if code in self.subscriptions:
            return

        name = fields.event_name(code)
        if name is None:
            # Nothing to subscribe to by name; the listener will only fire
            # if the server sends this event anyway.
            return

        try:
            self.subscribe([name], timeout)
        except Exception:
            self.dispatcher.unregister(code, callback)
            raise


    def off(self, event, callback):
        """ Remove a *callback* registered with :func:`on`. The server keeps
            sending the event; it is simply no longer delivered to that
            callback. Returns False if the callback was not registered.
        """

        code = fields.event_code(event)
        return self.dispatcher.unregister(code, callback)


# end of class Connection



def connect(path=None, **kwargs):
    """ Return a new :class:`Connection` to the socket at *path*. Keyword
        arguments are passed through to :class:`Connection`.
    """

    return Connection(path, **kwargs)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
