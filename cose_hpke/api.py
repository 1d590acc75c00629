import logging
from typing import List

from cose_hpke.cose.messages import Encrypt0Message, EncryptMessage, parse_message
from cose_hpke.errors import NoRecipientsError, UnrecognizedMessageTypeError
from cose_hpke.hpke.integrated import encrypt_integrated, decrypt_integrated
from cose_hpke.hpke.key_encryption import encrypt_key_encryption, decrypt_key_encryption

logger = logging.getLogger(__name__)


def encrypt(plaintext: bytes,
            recipients: List[bytes],
            suite_id: str = None,
            external_aad: bytes = b'',
            external_info: bytes = b'',
            recipient_extra_info: bytes = b'') -> bytes:
    """
    Encrypt plaintext to the given COSE_Key encoded public keys.

    One recipient produces a COSE_Encrypt0 message (integrated encryption),
    two or more a COSE_Encrypt message (key encryption). external_info only
    applies to the former, recipient_extra_info only to the latter.
    """

    if len(recipients) == 0:
        raise NoRecipientsError()

    if len(recipients) == 1:
        logger.debug("Single recipient, using integrated encryption")
        return encrypt_integrated(plaintext, recipients[0],
                                  suite_id=suite_id,
                                  external_aad=external_aad,
                                  external_info=external_info)

    logger.debug("%d recipients, using key encryption", len(recipients))
    return encrypt_key_encryption(plaintext, recipients,
                                  suite_id=suite_id,
                                  external_aad=external_aad,
                                  recipient_extra_info=recipient_extra_info)


def decrypt(message: bytes,
            private_key: bytes,
            suite_id: str = None,
            external_aad: bytes = b'',
            external_info: bytes = b'',
            recipient_extra_info: bytes = b'') -> bytes:
    """
    Decrypt either message type; the type is taken from the CBOR tag, or
    from the array length for untagged messages.
    """

    parsed = parse_message(message)

    if isinstance(parsed, Encrypt0Message):
        logger.debug("Decrypting COSE_Encrypt0 message")
        return decrypt_integrated(parsed, private_key,
                                  suite_id=suite_id,
                                  external_aad=external_aad,
                                  external_info=external_info)

    if isinstance(parsed, EncryptMessage):
        logger.debug("Decrypting COSE_Encrypt message with %d recipients", len(parsed.recipients))
        return decrypt_key_encryption(parsed, private_key,
                                      suite_id=suite_id,
                                      external_aad=external_aad,
                                      recipient_extra_info=recipient_extra_info)

    raise UnrecognizedMessageTypeError('Unable to determine COSE message type')
