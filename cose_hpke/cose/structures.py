from cbor2 import dumps

from cose_hpke.cose.constants import Context


def build_enc_structure(context: str, protected: bytes, external_aad: bytes = b'') -> bytes:
    """
    Enc_structure = [context, protected, external_aad] (RFC 9052 section 5.3)

    context is "Encrypt0" for COSE_Encrypt0, "Encrypt" for the COSE_Encrypt
    content layer and "Enc_Recipient" for a recipient layer.
    """

    return dumps([context, protected, external_aad])


def build_recipient_structure(next_layer_alg: int, recipient_protected: bytes, extra_info: bytes = b'') -> bytes:
    """
    Recipient_structure used as HPKE info in key encryption mode:

        [ "HPKE Recipient", next_layer_alg, recipient_protected_header, recipient_extra_info ]
    """

    return dumps([Context.HPKE_RECIPIENT, next_layer_alg, recipient_protected, extra_info])
