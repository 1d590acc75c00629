import logging
import os
from typing import List

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from cose_hpke.cose.constants import Algorithm, Context, Header
from cose_hpke.cose.headers import build_protected_header, parse_protected_header, build_unprotected_header
from cose_hpke.cose.key import CoseKey
from cose_hpke.cose.messages import EncryptMessage, Recipient
from cose_hpke.cose.structures import build_enc_structure, build_recipient_structure
from cose_hpke.errors import (DecryptionFailed, InvalidKeyError, MalformedMessageError, NoMatchingRecipientError,
                              NoRecipientsError)
from cose_hpke.hpke.suite import SuiteConfig, resolve, suite_from_algorithm

logger = logging.getLogger(__name__)

# AES-256-GCM
CEK_LENGTH = 32
IV_LENGTH = 12


def encrypt_key_encryption(plaintext: bytes,
                           recipient_public_keys: List[bytes],
                           suite_id: str = None,
                           external_aad: bytes = b'',
                           recipient_extra_info: bytes = b'') -> bytes:
    """
    Encrypt plaintext to one or more recipients as a COSE_Encrypt message.

    The content is encrypted once under a random CEK; the CEK is HPKE-sealed
    to every recipient with the Recipient_structure as HPKE info.
    """

    if len(recipient_public_keys) == 0:
        raise NoRecipientsError()

    suite = resolve(suite_id)

    # All keys are validated before the content is encrypted
    keys = [CoseKey.decode(encoded) for encoded in recipient_public_keys]
    for key in keys:
        if not suite.accepts(key):
            raise InvalidKeyError(f'{key.type_name} key cannot be used with {suite.suite_id}', key.type_name)

    cek = os.urandom(CEK_LENGTH)
    iv = os.urandom(IV_LENGTH)

    content_protected_header = build_protected_header(suite.content_alg)
    content_aad = build_enc_structure(Context.ENCRYPT, content_protected_header, external_aad)

    ciphertext = AESGCM(cek).encrypt(iv, plaintext, content_aad)

    recipients = [_wrap_cek(suite, key, cek, recipient_extra_info) for key in keys]

    logger.debug("Sealed %d bytes to %d recipients with %s", len(plaintext), len(recipients), suite.suite_id)

    return EncryptMessage(protected_header=content_protected_header,
                          unprotected_header={Header.IV: iv},
                          ciphertext=ciphertext,
                          recipients=recipients).serialize()


def _wrap_cek(suite: SuiteConfig, key: CoseKey, cek: bytes, extra_info: bytes) -> Recipient:
    protected_header = build_protected_header(suite.key_encryption_alg)
    info = build_recipient_structure(suite.content_alg, protected_header, extra_info)

    ek, encrypted_cek = suite.seal(key, cek, info=info)

    return Recipient(protected_header=protected_header,
                     unprotected_header=build_unprotected_header(ek, kid=key.kid),
                     ciphertext=encrypted_cek)


def decrypt_key_encryption(message,
                           recipient_private_key: bytes,
                           suite_id: str = None,
                           external_aad: bytes = b'',
                           recipient_extra_info: bytes = b'') -> bytes:
    """
    Decrypt a COSE_Encrypt message, given as bytes or as a parsed EncryptMessage.

    Recipients are tried in message order until one of them yields the CEK.
    Raises NoMatchingRecipientError if none does, DecryptionFailed if the
    content layer does not authenticate.
    """

    key = CoseKey.decode(recipient_private_key)
    if not key.is_private:
        raise InvalidKeyError('Private key requires d parameter', key.type_name)

    override = resolve(suite_id) if suite_id is not None else None

    if not isinstance(message, EncryptMessage):
        message = EncryptMessage.deserialize(message)

    try:
        content_header = parse_protected_header(message.protected_header)
    except MalformedMessageError as err:
        raise DecryptionFailed() from err

    content_alg = content_header.get(Header.ALG, (override or resolve()).content_alg)

    cek = None
    for index, recipient in enumerate(message.recipients):
        cek = _unwrap_cek(recipient, key, content_alg, override, recipient_extra_info)
        if cek is not None:
            logger.debug("Recipient %d of %d matched", index + 1, len(message.recipients))
            break

    if cek is None:
        raise NoMatchingRecipientError()

    iv = message.unprotected_header.get(Header.IV)
    if not isinstance(iv, bytes):
        raise MalformedMessageError('Missing IV in content unprotected header')

    if content_alg != Algorithm.A256GCM:
        logger.debug("Unsupported content algorithm %s", content_alg)
        raise DecryptionFailed()

    content_aad = build_enc_structure(Context.ENCRYPT, message.protected_header, external_aad)

    try:
        return AESGCM(cek).decrypt(iv, message.ciphertext, content_aad)
    except (InvalidTag, ValueError) as err:
        raise DecryptionFailed() from err


def _unwrap_cek(recipient: Recipient, key: CoseKey, content_alg, override: SuiteConfig, extra_info: bytes):
    """
    One trial decryption attempt. Returns the CEK, or None when this
    recipient entry is not for the given key.
    """

    ek = recipient.unprotected_header.get(Header.EK)
    if not isinstance(ek, bytes):
        return None

    try:
        alg = parse_protected_header(recipient.protected_header).get(Header.ALG)
    except MalformedMessageError:
        return None

    suite = override or suite_from_algorithm(alg)
    if suite is None or not suite.accepts(key):
        return None

    if alg is not None and alg != suite.key_encryption_alg:
        return None

    info = build_recipient_structure(content_alg, recipient.protected_header, extra_info)

    try:
        cek = suite.open(key, ek, recipient.ciphertext, info=info)
    except DecryptionFailed:
        logger.debug("Recipient entry did not open with %s", suite.suite_id)
        return None

    if len(cek) != CEK_LENGTH:
        return None

    return cek
