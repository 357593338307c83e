""" A class representation of a decoded message: a reply to a request, or
    an asynchronous event, along with its decoded payload.
"""

from . import fields


REPLY = 'REPLY'
EVENT = 'EVENT'


class Message:
    """ The :class:`Message` is a very thin encapsulation of what arrived on
        the wire once its payload has been decoded. The *kind* is either
        :data:`REPLY` or :data:`EVENT`; the *code* is the reply type code or
        the event code (with the event bit already cleared); the *payload*
        is the decoded value, typically one of the record classes in
        :mod:`wmipc.protocol.replies` or a :class:`wmipc.tree.TreeNode`.

        :ivar valid_kinds: A set of valid strings for the message kind.
    """

    valid_kinds = set((REPLY, EVENT))

    def __init__(self, kind, code, payload=None):

        if kind in self.valid_kinds:
            pass
        else:
            raise ValueError('invalid message kind: ' + repr(kind))

        self.kind = kind
        self.code = code
        self.payload = payload


    def __repr__(self):
        return 'Message(%s, %s, %s)' % (self.kind, self.name, repr(self.payload))


    @property
    def name(self):
        """ The protocol name for this message's code, or the bare number
            if the code is not one this library knows about.
        """

        if self.kind == EVENT:
            name = fields.event_name(self.code)
        else:
            name = fields.request_names.get(self.code)

        if name is None:
            name = str(self.code)

        return name


    @property
    def is_event(self):
        return self.kind == EVENT


# end of class Message


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
