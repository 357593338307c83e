""" Protocol constants: the request type codes, the event codes, and the
    names used to subscribe to each event. Keep these in one place to avoid
    bare integers scattered across the message handling.
"""

# Request (and matching reply) type codes.

COMMAND = 0
GET_WORKSPACES = 1
SUBSCRIBE = 2
GET_OUTPUTS = 3
GET_TREE = 4
GET_MARKS = 5
GET_BAR_CONFIG = 6
GET_VERSION = 7
GET_BINDING_MODES = 8
GET_CONFIG = 9
SEND_TICK = 10
SYNC = 11

request_names = {
    COMMAND: 'COMMAND',
    GET_WORKSPACES: 'GET_WORKSPACES',
    SUBSCRIBE: 'SUBSCRIBE',
    GET_OUTPUTS: 'GET_OUTPUTS',
    GET_TREE: 'GET_TREE',
    GET_MARKS: 'GET_MARKS',
    GET_BAR_CONFIG: 'GET_BAR_CONFIG',
    GET_VERSION: 'GET_VERSION',
    GET_BINDING_MODES: 'GET_BINDING_MODES',
    GET_CONFIG: 'GET_CONFIG',
    SEND_TICK: 'SEND_TICK',
    SYNC: 'SYNC',
}


# Event codes, before the event bit is applied.

EVENT_BIT = 1 << 31

WORKSPACE = 0
OUTPUT = 1
MODE = 2
WINDOW = 3
BARCONFIG_UPDATE = 4
BINDING = 5
SHUTDOWN = 6
TICK = 7

event_names = {
    WORKSPACE: 'workspace',
    OUTPUT: 'output',
    MODE: 'mode',
    WINDOW: 'window',
    BARCONFIG_UPDATE: 'barconfig_update',
    BINDING: 'binding',
    SHUTDOWN: 'shutdown',
    TICK: 'tick',
}

event_codes = dict((name, code) for code, name in event_names.items())


def event_code(event):
    """ Return the numeric event code for *event*, which can be either the
        subscription name ('window', 'workspace', ...) or the code itself.
    """

    if isinstance(event, int):
        if event < 0 or event >= EVENT_BIT:
            raise ValueError('event code out of range: ' + repr(event))
        return event

    try:
        return event_codes[event]
    except KeyError:
        raise ValueError('unknown event: ' + repr(event))


def event_name(code):
    """ Return the subscription name for *code*, or None if the code is not
        one this library knows about.
    """

    return event_names.get(code)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
