import logging

from cose_hpke.cose.constants import Context, Header
from cose_hpke.cose.headers import build_protected_header, parse_protected_header, build_unprotected_header
from cose_hpke.cose.key import CoseKey
from cose_hpke.cose.messages import Encrypt0Message
from cose_hpke.cose.structures import build_enc_structure
from cose_hpke.errors import DecryptionFailed, InvalidKeyError, MalformedMessageError
from cose_hpke.hpke.suite import resolve, suite_from_algorithm

logger = logging.getLogger(__name__)


def encrypt_integrated(plaintext: bytes,
                       recipient_public_key: bytes,
                       suite_id: str = None,
                       external_aad: bytes = b'',
                       external_info: bytes = b'') -> bytes:
    """
    Encrypt plaintext to a single recipient as a COSE_Encrypt0 message.
    The HPKE ciphertext is the message ciphertext, the encapsulated key
    travels in the unprotected header.
    """

    suite = resolve(suite_id)

    key = CoseKey.decode(recipient_public_key)
    if not suite.accepts(key):
        raise InvalidKeyError(f'{key.type_name} key cannot be used with {suite.suite_id}', key.type_name)

    protected_header = build_protected_header(suite.integrated_alg)
    aad = build_enc_structure(Context.ENCRYPT0, protected_header, external_aad)

    ek, ciphertext = suite.seal(key, plaintext, aad=aad, info=external_info)

    logger.debug("Sealed %d bytes to one recipient with %s", len(plaintext), suite.suite_id)

    return Encrypt0Message(protected_header=protected_header,
                           unprotected_header=build_unprotected_header(ek, kid=key.kid),
                           ciphertext=ciphertext).serialize()


def decrypt_integrated(message,
                       recipient_private_key: bytes,
                       suite_id: str = None,
                       external_aad: bytes = b'',
                       external_info: bytes = b'') -> bytes:
    """
    Decrypt a COSE_Encrypt0 message, given as bytes or as a parsed Encrypt0Message.

    The suite comes from suite_id when given, otherwise from the protected
    header. Every cryptographic failure is reported as DecryptionFailed.
    """

    key = CoseKey.decode(recipient_private_key)
    if not key.is_private:
        raise InvalidKeyError('Private key requires d parameter', key.type_name)

    if not isinstance(message, Encrypt0Message):
        message = Encrypt0Message.deserialize(message)

    ek = message.unprotected_header.get(Header.EK)
    if not isinstance(ek, bytes) or len(ek) == 0:
        raise DecryptionFailed()

    try:
        alg = parse_protected_header(message.protected_header).get(Header.ALG)
    except MalformedMessageError as err:
        raise DecryptionFailed() from err

    suite = resolve(suite_id) if suite_id is not None else suite_from_algorithm(alg)

    # The alg must name this suite's integrated mode
    if suite is None or (alg is not None and alg != suite.integrated_alg):
        logger.debug("Algorithm %s does not select integrated encryption", alg)
        raise DecryptionFailed()

    aad = build_enc_structure(Context.ENCRYPT0, message.protected_header, external_aad)

    return suite.open(key, ek, message.ciphertext, aad=aad, info=external_info)
