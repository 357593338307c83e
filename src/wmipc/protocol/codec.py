"""Payload codec: request payload encoding and reply/event decoding.

Reply and event payloads are selected strictly by their code through the
tables below. Codes that are not in a table decode to
:class:`~wmipc.protocol.replies.Unrecognized`, carrying the raw JSON, so that
a newer server never breaks an older client.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional

from .. import json
from ..tree import build_tree
from . import fields
from . import replies
from .errors import MalformedPayload
from .message import EVENT, REPLY, Message
from .wire import Frame


# Explicit variants for the GET_BAR_CONFIG reply.

BAR_IDS = "bar_ids"
BAR_CONFIG = "bar_config"


# Request encoding.

def encode_command(text: str) -> bytes:
    """Return the UTF-8 bytes for one or more commands."""

    if not isinstance(text, str):
        raise TypeError("command must be str, not " + type(text).__name__)

    return text.encode("utf-8")


def encode_subscribe(events: Iterable) -> bytes:
    """Return the JSON array of event names for a SUBSCRIBE request.

    Each entry may be an event name or a known event code.
    """

    names = list()
    for event in events:
        if isinstance(event, str):
            names.append(event)
            continue

        name = fields.event_name(fields.event_code(event))
        if name is None:
            raise ValueError("no subscription name for event code %r" % (event,))
        names.append(name)

    return json.dumps(names)


def encode_tick(payload: str = "") -> bytes:
    return encode_command(payload)


def encode_sync(window: int, rnd: int) -> bytes:
    return json.dumps({"window": int(window), "rnd": int(rnd)})


# Decoding helpers.

def _loads(code: int, payload: bytes) -> Any:
    try:
        return json.loads(payload)
    except json.DecodeError as e:
        raise MalformedPayload("invalid JSON for code %d: %s" % (code, e), code, payload) from e


def _expect(kind, value, code):
    if not isinstance(value, kind):
        raise MalformedPayload("code %d expects a JSON %s, not %s" % (
            code, "array" if kind is list else "object", type(value).__name__), code)
    return value


def _records(cls) -> Callable[[Any, int], list]:

    def decode(value, code):
        _expect(list, value, code)
        return [cls(entry) for entry in value]

    return decode


def _record(cls) -> Callable[[Any, int], Any]:

    def decode(value, code):
        return cls(_expect(dict, value, code))

    return decode


def _strings(value, code):
    _expect(list, value, code)
    for entry in value:
        if not isinstance(entry, str):
            raise MalformedPayload("code %d expects a list of strings" % (code), code)
    return list(value)


def _tree(value, code):
    return build_tree(_expect(dict, value, code))


def _bar_config(value, code, variant=None):

    if variant is None:
        variant = BAR_IDS if isinstance(value, list) else BAR_CONFIG

    if variant == BAR_IDS:
        return _strings(value, code)
    if variant == BAR_CONFIG:
        return replies.BarConfig(_expect(dict, value, code))

    raise ValueError("unknown bar config variant: %r" % (variant,))


_reply_decoders: Dict[int, Callable[[Any, int], Any]] = {
    fields.COMMAND: _records(replies.CommandResult),
    fields.GET_WORKSPACES: _records(replies.Workspace),
    fields.SUBSCRIBE: _record(replies.Success),
    fields.GET_OUTPUTS: _records(replies.Output),
    fields.GET_TREE: _tree,
    fields.GET_MARKS: _strings,
    fields.GET_VERSION: _record(replies.VersionInfo),
    fields.GET_BINDING_MODES: _strings,
    fields.GET_CONFIG: _record(replies.ConfigReply),
    fields.SEND_TICK: _record(replies.Success),
    fields.SYNC: _record(replies.Success),
}

_event_decoders: Dict[int, Callable[[Any, int], Any]] = {
    fields.WORKSPACE: _record(replies.WorkspaceEvent),
    fields.OUTPUT: _record(replies.OutputEvent),
    fields.MODE: _record(replies.ModeEvent),
    fields.WINDOW: _record(replies.WindowEvent),
    fields.BARCONFIG_UPDATE: _record(replies.BarconfigUpdateEvent),
    fields.BINDING: _record(replies.BindingEvent),
    fields.SHUTDOWN: _record(replies.ShutdownEvent),
    fields.TICK: _record(replies.TickEvent),
}


def _decode(decoder, code, value, payload):
    try:
        return decoder(value, code)
    except MalformedPayload as e:
        if e.payload is None:
            e.payload = payload
        if e.code is None:
            e.code = code
        raise
    except (TypeError, KeyError, AttributeError) as e:
        # Valid JSON whose nesting does not match what the records expect.
        raise MalformedPayload("unexpected structure for code %d: %s" % (code, e), code, payload) from e


def decode_reply(code: int, payload: bytes, variant: Optional[str] = None) -> Any:
    """Decode a reply payload for the request type *code*.

    *variant* only matters for GET_BAR_CONFIG: :data:`BAR_IDS` or
    :data:`BAR_CONFIG`, according to whether the request named a bar. Without
    it the array/object shape of the payload decides.
    """

    value = _loads(code, payload)

    if code == fields.GET_BAR_CONFIG:
        return _decode(lambda v, c: _bar_config(v, c, variant), code, value, payload)

    try:
        decoder = _reply_decoders[code]
    except KeyError:
        return replies.Unrecognized("reply", code, value)

    return _decode(decoder, code, value, payload)


def decode_event(code: int, payload: bytes) -> Any:
    """Decode an event payload; *code* has the event bit already cleared."""

    value = _loads(code, payload)

    try:
        decoder = _event_decoders[code]
    except KeyError:
        return replies.Unrecognized("event", code, value)

    return _decode(decoder, code, value, payload)


def decode_frame(frame: Frame) -> Message:
    """Decode a whole frame into a :class:`~wmipc.protocol.message.Message`.

    The listener thread uses this for every event it delivers.
    """

    if frame.is_event:
        return Message(EVENT, frame.code, decode_event(frame.code, frame.payload))

    return Message(REPLY, frame.code, decode_reply(frame.code, frame.payload))
