from .key import CoseKey, generate_key_pair, encode_key, decode_key, to_diagnostic, to_jwk, from_jwk
from .headers import build_protected_header, parse_protected_header, build_unprotected_header
from .structures import build_enc_structure, build_recipient_structure
from .messages import CoseMessage, Encrypt0Message, EncryptMessage, Recipient, parse_message
