""" Python client for the i3-compatible window manager IPC protocol. This
    includes the wire framing, request/reply correlation, event delivery to
    listeners, and decoding of the layout tree and other reply payloads.
"""

# Utility components.

from . import json
from . import config

# Submodules used by multiple other components.

from . import protocol
from . import tree
from .protocol import codec
from .protocol import replies
from . import transport

# Primary public-facing interfaces.

from . import connection
connect = connection.connect

from .connection import Connection
from .tree import NodeId, Rect, TreeNode, build_tree

from .protocol.errors import (
    IPCError,
    ProtocolError,
    TruncatedMessage,
    MalformedPayload,
    SpuriousReply,
)

from .transport.base import (
    TransportError,
    TransportConnectionError,
    ConnectionClosed,
    RequestCancelled,
    Timeout,
)

from .protocol.replies import (
    CommandResult,
    Success,
    Workspace,
    Output,
    BarConfig,
    VersionInfo,
    ConfigReply,
    WorkspaceEvent,
    OutputEvent,
    ModeEvent,
    WindowEvent,
    BarconfigUpdateEvent,
    BindingEvent,
    ShutdownEvent,
    TickEvent,
    Unrecognized,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
