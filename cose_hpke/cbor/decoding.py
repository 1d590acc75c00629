from collections.abc import Mapping, Sequence
from io import BytesIO

from cbor2 import CBORDecoder, CBORDecodeError


def loads_exact(encoded: bytes):
    """
    Decode exactly one CBOR data item; trailing bytes raise CBORDecodeError.
    """

    with BytesIO(encoded) as fp:
        value = CBORDecoder(fp).decode()

        if fp.read(1):
            raise CBORDecodeError('Trailing data after CBOR item')

    return value


# Decoded maps and arrays may be immutable (frozendict, tuple) depending on
# the cbor2 version and on whether they sit inside a tag

def is_map(value) -> bool:
    return isinstance(value, Mapping)


def is_array(value) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))
