""" Record classes for decoded reply and event payloads. Each record is
    built from one decoded JSON object; known keys become attributes (None
    when the server did not send them) and the whole mapping is kept as
    :attr:`Record.raw`, so that keys added by newer servers remain
    reachable.
"""

from ..tree import Rect, TreeNode
from .errors import MalformedPayload


class Record:
    """ Base class for the flat reply records. Subclasses list their keys in
        :attr:`fields`; keys listed in :attr:`rects` are converted into
        :class:`wmipc.tree.Rect` instances.
    """

    fields = ()
    rects = ()

    def __init__(self, data):

        if not isinstance(data, dict):
            raise MalformedPayload("%s expects a JSON object, not %s" % (type(self).__name__, type(data).__name__))

        self.raw = data

        for field in self.fields:
            value = data.get(field)
            if field in self.rects:
                value = Rect.from_json(value)
            setattr(self, field, value)


    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.raw == other.raw


    def __repr__(self):
        values = list()
        for field in self.fields:
            values.append('%s=%s' % (field, repr(getattr(self, field))))

        return '%s(%s)' % (type(self).__name__, ', '.join(values))


# end of class Record



class CommandResult(Record):
    """ The outcome of one command in a COMMAND request. A request that
        chains several commands (separated by ',' or ';') yields one
        :class:`CommandResult` per command.
    """

    fields = ('success', 'error', 'parse_error')

    def __init__(self, data):
        Record.__init__(self, data)
        self.success = bool(self.success)
        self.parse_error = bool(self.parse_error)


class Success(Record):
    """Reply to SUBSCRIBE, SEND_TICK and SYNC."""

    fields = ('success',)

    def __init__(self, data):
        Record.__init__(self, data)
        self.success = bool(self.success)


class Workspace(Record):
    fields = ('num', 'name', 'visible', 'focused', 'urgent', 'rect', 'output')
    rects = ('rect',)


class Output(Record):
    fields = ('name', 'active', 'primary', 'current_workspace', 'rect')
    rects = ('rect',)


class BarConfig(Record):
    fields = ('id', 'mode', 'position', 'status_command', 'font',
              'workspace_buttons', 'binding_mode_indicator', 'verbose',
              'colors', 'tray_output')


class VersionInfo(Record):
    fields = ('major', 'minor', 'patch', 'human_readable',
              'loaded_config_file_name')


class ConfigReply(Record):
    """The contents of the configuration file the server last loaded."""

    fields = ('config',)


# Event records.


class WorkspaceEvent(Record):
    """ The *current* and *old* workspaces are :class:`wmipc.tree.TreeNode`
        instances, or None when the server sends null or omits them.
    """

    fields = ('change', 'current', 'old')

    def __init__(self, data):
        Record.__init__(self, data)
        self.current = _node(self.current)
        self.old = _node(self.old)


class OutputEvent(Record):
    fields = ('change',)


class ModeEvent(Record):
    fields = ('change', 'pango_markup')


class WindowEvent(Record):
    fields = ('change', 'container')

    def __init__(self, data):
        Record.__init__(self, data)
        self.container = _node(self.container)


class BarconfigUpdateEvent(BarConfig):
    pass


class Binding(Record):
    fields = ('command', 'event_state_mask', 'input_code', 'symbol',
              'input_type', 'mods')


class BindingEvent(Record):
    fields = ('change', 'binding')

    def __init__(self, data):
        Record.__init__(self, data)
        if self.binding is not None:
            self.binding = Binding(self.binding)


class ShutdownEvent(Record):
    fields = ('change',)


class TickEvent(Record):
    fields = ('first', 'payload')


class Unrecognized:
    """ The payload of a reply or event this library does not know how to
        interpret. The decoded JSON is kept as-is in :attr:`data`.

        :ivar kind: 'reply' or 'event'.
        :ivar code: The reply type code or event code.
    """

    def __init__(self, kind, code, data):
        self.kind = kind
        self.code = code
        self.data = data


    def __eq__(self, other):
        if not isinstance(other, Unrecognized):
            return NotImplemented
        return (self.kind, self.code, self.data) == (other.kind, other.code, other.data)


    def __repr__(self):
        return 'Unrecognized(%s %d, %s)' % (self.kind, self.code, repr(self.data))


# end of class Unrecognized



def _node(value):

    if value is None:
        return None

    return TreeNode(value)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
