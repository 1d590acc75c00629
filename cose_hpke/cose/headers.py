from cbor2 import dumps, CBORDecodeError

from cose_hpke.cbor import loads_exact, is_map
from cose_hpke.cose.constants import Header
from cose_hpke.errors import MalformedMessageError


def build_protected_header(alg: int) -> bytes:
    """
    Serialized once; the resulting bytes are what Enc_structure and
    Recipient_structure authenticate, so they are never re-encoded.
    """

    return dumps({Header.ALG: alg})


def parse_protected_header(encoded: bytes) -> dict:
    if len(encoded) == 0:
        return {}

    try:
        header = loads_exact(encoded)
    except CBORDecodeError as err:
        raise MalformedMessageError('Protected header is not valid CBOR') from err

    if not is_map(header):
        raise MalformedMessageError('Protected header must be a CBOR map')

    return dict(header)


def build_unprotected_header(ek: bytes, kid: bytes = None) -> dict:
    header = {Header.EK: ek}

    if kid is not None:
        header[Header.KID] = kid

    return header
