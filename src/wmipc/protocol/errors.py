""" Protocol-level exceptions. Transport-level exceptions, which derive from
    the same :class:`IPCError` base, live in :mod:`wmipc.transport.base`.
"""


class IPCError(Exception):
    """Base class for every error raised by this library."""


class ProtocolError(IPCError):
    """ The byte stream is desynchronized: a frame did not begin with the
        expected magic string. There is no way to recover; the connection
        is torn down.
    """


class TruncatedMessage(ProtocolError):
    """The stream ended partway through a frame."""


class MalformedPayload(IPCError, ValueError):
    """ A well-formed frame carried a payload that is not valid JSON, or is
        JSON of the wrong shape for its type code.

        :ivar code: The reply or event code of the offending frame.
        :ivar payload: The raw payload bytes.
    """

    def __init__(self, message, code=None, payload=None):
        IPCError.__init__(self, message)
        self.code = code
        self.payload = payload


class SpuriousReply(IPCError):
    """ A reply arrived with no outstanding request of its type code. This
        is reported via the log, never raised into a caller.
    """

    def __init__(self, code, payload=None):
        message = "reply of type %d with no pending request" % (code)
        IPCError.__init__(self, message)
        self.code = code
        self.payload = payload


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
