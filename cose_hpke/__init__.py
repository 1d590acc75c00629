from .api import encrypt, decrypt
from .cose.key import CoseKey, generate_key_pair, encode_key, decode_key, to_diagnostic, to_jwk, from_jwk
from .cose.messages import Encrypt0Message, EncryptMessage, Recipient, parse_message
from .hpke.suite import SuiteConfig, SUITES, resolve, suite_from_algorithm
from .url import (create_shareable_url, parse_shareable_url, encode_fragment, decode_fragment,
                  is_compression_available, MAX_URL_LENGTH)
from .errors import (CoseError, InvalidKeyError, UnsupportedSuiteError, NoRecipientsError, MalformedMessageError,
                     UnrecognizedMessageTypeError, DecryptionFailed, NoMatchingRecipientError, UrlTooLargeError,
                     NoFragmentError, EmptyFragmentError, CorruptFragmentError)
