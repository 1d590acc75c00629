from urllib.parse import urlsplit

from cose_hpke import config
from cose_hpke.config import MAX_URL_LENGTH
from cose_hpke.errors import NoFragmentError, UrlTooLargeError
from .compress import compress, decompress, is_compression_available
from .fragment import to_base64url, from_base64url, encode_fragment, decode_fragment


def create_shareable_url(data: bytes, base_url: str = None) -> str:
    """
    Embed data in the fragment of base_url, which is never sent to the server.
    """

    if base_url is None:
        base_url = config.base_url()

    url = f'{base_url}#{encode_fragment(data)}'

    if len(url) > MAX_URL_LENGTH:
        raise UrlTooLargeError(len(url), MAX_URL_LENGTH)

    return url


def parse_shareable_url(url: str) -> bytes:
    fragment = urlsplit(url).fragment

    # A bare trailing "#" carries no fragment either
    if not fragment:
        raise NoFragmentError()

    return decode_fragment(fragment)


def is_url(text: str) -> bool:
    return text.startswith('http://') or text.startswith('https://')
