import cbor2
from cbor2 import CBORTag

from .exceptions import InvalidDatumError

# Plutus limits a single bytestring chunk to 64 bytes.
CHUNK_SIZE = 64

_SMALL_CONSTR_TAG = 121
_LARGE_CONSTR_TAG = 1280
_GENERAL_CONSTR_TAG = 102


class Constr:
    """ Plutus constructor application: alternative index plus a list of fields. """

    def __init__(self, index, fields=None):
        self.index = index
        self.fields = list(fields) if fields is not None else []

    def __eq__(self, other):
        if not isinstance(other, Constr):
            return NotImplemented
        return self.index == other.index and self.fields == other.fields

    def __repr__(self):
        return "Constr({}, {!r})".format(self.index, self.fields)


VOID = Constr(0, [])


class _IndefiniteList:
    def __init__(self, items):
        self.items = items


class _ChunkedBytes:
    def __init__(self, data):
        self.data = data


def _encoder_default(encoder, value):
    """ Writes the two CBOR forms cbor2 doesn't produce on its own. """
    if isinstance(value, _IndefiniteList):
        encoder.write(b'\x9f')
        for item in value.items:
            encoder.encode(item)
        encoder.write(b'\xff')
    elif isinstance(value, _ChunkedBytes):
        encoder.write(b'\x5f')
        for pos in range(0, len(value.data), CHUNK_SIZE):
            encoder.encode(value.data[pos:pos + CHUNK_SIZE])
        encoder.write(b'\xff')
    else:
        raise InvalidDatumError("Can't encode {!r} as Plutus data".format(value))


def _prepare_list(items):
    prepared = [_prepare(item) for item in items]
    if not prepared:
        return []
    return _IndefiniteList(prepared)


def _prepare(data):
    """ Converts Plutus data into objects cbor2 (with `_encoder_default`) encodes exactly like the ledger does. """
    if isinstance(data, Constr):
        fields = _prepare_list(data.fields)
        if 0 <= data.index < 7:
            return CBORTag(_SMALL_CONSTR_TAG + data.index, fields)
        elif 7 <= data.index < 128:
            return CBORTag(_LARGE_CONSTR_TAG + data.index - 7, fields)
        elif data.index >= 0:
            return CBORTag(_GENERAL_CONSTR_TAG, [data.index, fields])
        raise InvalidDatumError("Constructor index must be non-negative, got {}".format(data.index))

    if isinstance(data, bool):
        raise InvalidDatumError("Booleans aren't Plutus data, use Constr instead")

    if isinstance(data, int):
        return data

    if isinstance(data, (bytes, bytearray)):
        data = bytes(data)
        if len(data) > CHUNK_SIZE:
            return _ChunkedBytes(data)
        return data

    if isinstance(data, (list, tuple)):
        return _prepare_list(data)

    raise InvalidDatumError("Can't encode {!r} as Plutus data".format(data))


def to_cbor(data):
    """
    Encodes Plutus data into CBOR.

    Non-empty lists are written as indefinite-length arrays, empty ones as definite `0x80`,
    and bytestrings longer than 64 bytes are split into 64-byte chunks.
    """
    return cbor2.dumps(_prepare(data), default=_encoder_default)


def _restore(item):
    if isinstance(item, CBORTag):
        tag = item.tag
        if _SMALL_CONSTR_TAG <= tag < _SMALL_CONSTR_TAG + 7:
            return Constr(tag - _SMALL_CONSTR_TAG, _restore_fields(item.value))
        elif _LARGE_CONSTR_TAG <= tag < _LARGE_CONSTR_TAG + 121:
            return Constr(tag - _LARGE_CONSTR_TAG + 7, _restore_fields(item.value))
        elif tag == _GENERAL_CONSTR_TAG:
            if not isinstance(item.value, (list, tuple)) or len(item.value) != 2 or type(item.value[0]) is not int:
                raise InvalidDatumError("Malformed general constructor: {!r}".format(item.value))
            return Constr(item.value[0], _restore_fields(item.value[1]))
        raise InvalidDatumError("Unexpected CBOR tag {}".format(tag))

    if isinstance(item, bool):
        raise InvalidDatumError("Booleans aren't Plutus data")

    if isinstance(item, (int, bytes)):
        return item

    # cbor2 6 returns arrays nested in tags as tuples.
    if isinstance(item, (list, tuple)):
        return [_restore(x) for x in item]

    raise InvalidDatumError("Unsupported Plutus data item: {!r}".format(item))


def _restore_fields(value):
    if not isinstance(value, (list, tuple)):
        raise InvalidDatumError("Constructor fields must be a list, got {!r}".format(value))
    return [_restore(x) for x in value]


_DECODE_ERRORS = (cbor2.CBORDecodeError, EOFError, ValueError, TypeError)


def _loads(encoded):
    try:
        return cbor2.loads(encoded)
    except _DECODE_ERRORS as e:
        raise InvalidDatumError("Invalid CBOR: {}".format(e)) from e


def _holds_complete_item(encoded):
    try:
        cbor2.loads(encoded)
    except _DECODE_ERRORS:
        return False
    return True


def from_cbor(encoded):
    """ Decodes CBOR into Plutus data. Raises `InvalidDatumError` for anything that isn't valid Plutus data. """
    item = _loads(encoded)

    # A CBOR item is self-delimiting: no proper prefix of it decodes, so if the input
    # without its last byte still does, the input carries trailing bytes.
    if len(encoded) > 1 and _holds_complete_item(encoded[:-1]):
        raise InvalidDatumError("Trailing bytes after Plutus data")

    return _restore(item)
