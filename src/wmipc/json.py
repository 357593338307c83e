''' JSON handling for reply and event payloads, and for the few request
    payloads that are JSON (SUBSCRIBE, SYNC).

    :func:`dumps` returns the bytes that go on the wire and :func:`loads`
    accepts the bytes that came off it. :data:`DecodeError` is the tuple of
    exceptions :func:`loads` raises for input that is not valid JSON, and
    :data:`backend` names the library doing the work.
'''

# A GET_TREE reply covers every container the window manager knows about,
# and clients that watch 'window' events decode a container per event; both
# are hot paths for a status bar or layout daemon. msgspec is used when it
# is installed, orjson otherwise (it is a declared dependency); the standard
# library is the last resort for environments where neither is available.

msgspec = None
orjson = None
json = None

try:
    import msgspec
except ImportError:
    pass

if msgspec is None:
    try:
        import orjson
    except ImportError:
        pass

if msgspec is None and orjson is None:
    import json


def _encode_stdlib(value):
    return json.dumps(value, separators=(',', ':')).encode('utf-8')


if msgspec is not None:
    _encoder = msgspec.json.Encoder()
    _decoder = msgspec.json.Decoder()
    dumps = _encoder.encode
    loads = _decoder.decode
    DecodeError = (msgspec.DecodeError, UnicodeDecodeError)
    backend = 'msgspec'

elif orjson is not None:
    dumps = orjson.dumps
    loads = orjson.loads
    DecodeError = (orjson.JSONDecodeError, UnicodeDecodeError)
    backend = 'orjson'

else:
    dumps = _encode_stdlib
    loads = json.loads
    DecodeError = (ValueError, UnicodeDecodeError)
    backend = 'json'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
