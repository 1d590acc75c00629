try:
    import zlib
except ImportError:
    # zlib is an optional CPython module
    zlib = None

from cose_hpke.errors import CorruptFragmentError

# Raw deflate stream, no zlib header or checksum
WBITS = -15


def is_compression_available() -> bool:
    return zlib is not None


def compress(data: bytes) -> bytes:
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, WBITS)

    return compressor.compress(data) + compressor.flush()


def decompress(data: bytes) -> bytes:
    decompressor = zlib.decompressobj(WBITS)

    try:
        result = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as err:
        raise CorruptFragmentError('Invalid compressed payload') from err

    if not decompressor.eof:
        raise CorruptFragmentError('Truncated compressed payload')

    return result
