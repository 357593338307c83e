from . import errors
from . import fields
from . import message
from . import wire


"""
wmipc Protocol Layer
====================

This package defines the message format spoken over the window manager's
IPC socket: how frames are laid out, what the type codes mean, and how
payloads are decoded. It MUST NOT depend on any transport implementation.

The codec (:mod:`wmipc.protocol.codec`) and record classes
(:mod:`wmipc.protocol.replies`) are imported explicitly by their users; they
depend on :mod:`wmipc.tree`, which in turn depends on this package.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Connection (wmipc.connection)
    High-level API
    - command(), get_tree(), ...
    - on() / off()

    │
    ▼
Dispatcher (wmipc.transport.session)
    Correlates replies with pending requests (FIFO per type code)
    Fans events out to listeners

    │
    ▼
Transport (wmipc.transport.stream)
    Owns the socket, serializes writes, reassembles frames

---------------------------------------------------------------------

Within this package
-------------------

Codec (codec.py)
    Request payload encoding, reply/event payload decoding
    Unknown codes decode to an Unrecognized record

    │
    ▼
Records (replies.py)
    Workspace, Output, BarConfig, VersionInfo, event records

    │
    ▼
Framer (wire.py)
    magic + length + type + payload

    │
    ▼
Field Vocabulary (fields.py)
    Canonical request, reply and event codes

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
