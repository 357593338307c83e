import json
import os
import queue
import socket
import threading

import pytest

import wmipc
from wmipc.protocol import wire


here = os.path.dirname(os.path.abspath(__file__))


class FakeServer:
    """ The server end of a connected socket pair, speaking just enough of
        the protocol to exercise a client. Every frame received is recorded
        in :attr:`received`; if a reply is registered for the frame's type
        via :func:`answer` it is sent back immediately.
    """

    def __init__(self, sock=None):

        if sock is None:
            sock, client = socket.socketpair()
            self.client_sock = client
        else:
            self.client_sock = None

        self.socket = sock
        self.received = queue.Queue()
        self.answers = dict()
        self.lock = threading.Lock()

        self.thread = threading.Thread(target=self.run)
        self.thread.daemon = True
        self.thread.start()


    def answer(self, code, reply):
        """ Reply to every request of type *code* with *reply*: bytes, a
            JSON-serializable value, or a callable accepting the request
            payload and returning either of those.
        """

        self.answers[code] = reply


    def run(self):

        buffer = bytearray()

        while True:
            try:
                chunk = self.socket.recv(65536)
            except OSError:
                break

            if not chunk:
                break

            buffer += chunk

            while True:
                unpacked = wire.unpack_frame(buffer)
                if unpacked is None:
                    break

                frame, consumed = unpacked
                del buffer[:consumed]
                self.received.put(frame)

                try:
                    reply = self.answers[frame.type]
                except KeyError:
                    continue

                if callable(reply):
                    reply = reply(frame.payload)

                self.reply(frame.type, reply)


    def next_request(self, timeout=2):
        return self.received.get(timeout=timeout)


    def reply(self, code, payload):
        self.send_raw(wire.pack_frame(code, encode(payload)))


    def event(self, code, payload):
        self.send_raw(wire.pack_event(code, encode(payload)))


    def send_raw(self, data):
        with self.lock:
            self.socket.sendall(data)


    def close(self):
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        self.socket.close()


def encode(payload):

    if isinstance(payload, bytes):
        return payload

    return json.dumps(payload).encode('utf-8')


def load(name):
    """ Return the decoded contents of the JSON file *name* in tests/data.
    """

    with open(os.path.join(here, 'data', name), 'rb') as data:
        return json.load(data)


@pytest.fixture
def tree_json():
    return load('tree.json')


@pytest.fixture
def server():

    server = FakeServer()
    yield server
    server.close()


@pytest.fixture
def connection(server):

    connection = wmipc.Connection(sock=server.client_sock, timeout=2)
    yield connection
    connection.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
