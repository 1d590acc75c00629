"""
Versioned URL fragment payload:

    base64url( version || payload )

version 0x00 carries the payload as is, 0x01 a raw deflate stream. Fragments
produced before versioning have no version byte; any other leading byte is
read as such a legacy payload.
"""

import logging
import re

from jwcrypto.common import base64url_encode, base64url_decode

from cose_hpke.errors import CorruptFragmentError, EmptyFragmentError
from cose_hpke.url.compress import compress, decompress, is_compression_available

logger = logging.getLogger(__name__)

VERSION_UNCOMPRESSED = 0x00
VERSION_COMPRESSED = 0x01

_BASE64URL = re.compile(r'^[A-Za-z0-9_-]*$')


def to_base64url(data: bytes) -> str:
    return base64url_encode(data)


def from_base64url(text: str) -> bytes:
    if not _BASE64URL.match(text):
        raise CorruptFragmentError('Fragment is not base64url')

    try:
        return base64url_decode(text)
    except ValueError as err:
        raise CorruptFragmentError('Fragment is not base64url') from err


def encode_fragment(data: bytes) -> str:
    payload = bytes([VERSION_UNCOMPRESSED]) + data

    if is_compression_available():
        compressed = compress(data)
        if len(compressed) < len(data):
            logger.debug("Compressed fragment payload from %d to %d bytes", len(data), len(compressed))
            payload = bytes([VERSION_COMPRESSED]) + compressed

    return to_base64url(payload)


def decode_fragment(text: str) -> bytes:
    decoded = from_base64url(text)

    if len(decoded) == 0:
        raise EmptyFragmentError()

    version = decoded[0]

    if version == VERSION_UNCOMPRESSED:
        return decoded[1:]

    if version == VERSION_COMPRESSED:
        if not is_compression_available():
            raise CorruptFragmentError('Compressed fragment but zlib is not available')
        return decompress(decoded[1:])

    # Unversioned payload from an older encoder, e.g. a bare COSE message starting with 0xd0
    logger.debug("No version byte (0x%02x), reading legacy fragment", version)
    return decoded
