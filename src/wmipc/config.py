""" Process-wide defaults for new connections. Each value can be overridden
    from the environment when this module is first imported, and again for
    an individual :class:`wmipc.Connection` via its keyword arguments.

    :ivar timeout: Seconds a request waits for its reply; None waits until
        the reply arrives or the connection closes.
    :ivar event_queue_size: Maximum number of undelivered events held for
        the listener thread before new arrivals are dropped.
    :ivar read_size: Maximum number of bytes requested from the socket in
        a single read.
    :ivar poll_interval: Seconds the read thread waits for socket activity
        before checking whether it has been asked to shut down.
"""

import os


def _environment(name, default, cast):
    """ Return the environment variable *name* converted via *cast*, or the
        *default* if it is not set. The strings 'none' and '' map to None.
    """

    try:
        value = os.environ[name]
    except KeyError:
        return default

    value = value.strip()

    if value == '' or value.lower() == 'none':
        return None

    try:
        return cast(value)
    except ValueError:
        raise ValueError("invalid value for %s: %s" % (name, repr(value)))


def _positive(cast):

    def converter(value):
        value = cast(value)
        if value <= 0:
            raise ValueError('must be positive')
        return value

    return converter


timeout = _environment('WMIPC_TIMEOUT', 30.0, _positive(float))
event_queue_size = _environment('WMIPC_EVENT_QUEUE', 1024, _positive(int))
read_size = _environment('WMIPC_READ_SIZE', 65536, _positive(int))
poll_interval = 1.0

# A None read size or queue size makes no sense; restore the defaults.

if event_queue_size is None:
    event_queue_size = 1024

if read_size is None:
    read_size = 65536


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
