from abc import ABCMeta, abstractmethod
from typing import List

from cbor2 import dumps, CBORTag, CBORDecodeError

from cose_hpke.cbor import loads_exact, is_map, is_array

from cose_hpke.cose.constants import Tag
from cose_hpke.errors import MalformedMessageError, UnrecognizedMessageTypeError


def _loads(encoded: bytes):
    try:
        return loads_exact(encoded)
    except CBORDecodeError as err:
        raise MalformedMessageError('Message is not valid CBOR') from err


def _check_layer(name: str, elements) -> None:
    protected, unprotected, ciphertext = elements[:3]

    if not isinstance(protected, bytes):
        raise MalformedMessageError(f'{name} protected header must be a byte string')
    if not is_map(unprotected):
        raise MalformedMessageError(f'{name} unprotected header must be a map')
    if not isinstance(ciphertext, bytes):
        raise MalformedMessageError(f'{name} ciphertext must be a byte string')


class Recipient:
    """
    COSE_recipient = [protected, unprotected, encrypted CEK]
    """

    def __init__(self, protected_header: bytes, unprotected_header: dict, ciphertext: bytes):
        self.protected_header = protected_header
        self.unprotected_header = unprotected_header
        self.ciphertext = ciphertext

    @property
    def content(self):
        return [self.protected_header, self.unprotected_header, self.ciphertext]

    @classmethod
    def from_cbor(cls, decoded) -> 'Recipient':
        if not is_array(decoded) or len(decoded) != 3:
            raise MalformedMessageError('COSE_recipient must have 3 elements')

        _check_layer('COSE_recipient', decoded)

        (protected, unprotected, ciphertext) = decoded

        return Recipient(protected, dict(unprotected), ciphertext)


class CoseMessage(metaclass=ABCMeta):

    _tag = None
    _arity = None

    @property
    def tag(self):
        return self._tag

    @property
    @abstractmethod
    def content(self):
        pass

    def serialize(self) -> bytes:
        return dumps(CBORTag(self.tag, self.content))

    @classmethod
    def deserialize(cls, encoded: bytes):
        """
        Accepts both the tagged and the untagged form.
        """

        return cls.from_cbor(_loads(encoded))

    @classmethod
    def from_cbor(cls, decoded):
        name = cls.__name__

        if isinstance(decoded, CBORTag):
            if decoded.tag != cls._tag:
                raise MalformedMessageError(f'Expected {name} tag ({cls._tag}), got {decoded.tag}')
            decoded = decoded.value

        if not is_array(decoded):
            raise MalformedMessageError(f'Invalid {name} structure')

        if len(decoded) != cls._arity:
            raise MalformedMessageError(f'{name} must have {cls._arity} elements')

        _check_layer(name, decoded)

        return cls._from_elements(decoded)

    @classmethod
    @abstractmethod
    def _from_elements(cls, elements):
        pass


class Encrypt0Message(CoseMessage):
    """
    COSE_Encrypt0 (tag 16), used for integrated encryption to one recipient.
    """

    _tag = Tag.COSE_ENCRYPT0
    _arity = 3

    def __init__(self, protected_header: bytes, unprotected_header: dict, ciphertext: bytes):
        self.protected_header = protected_header
        self.unprotected_header = unprotected_header
        self.ciphertext = ciphertext

    @property
    def content(self):
        return [self.protected_header, self.unprotected_header, self.ciphertext]

    @classmethod
    def _from_elements(cls, elements):
        (protected, unprotected, ciphertext) = elements

        return Encrypt0Message(protected, dict(unprotected), ciphertext)


class EncryptMessage(CoseMessage):
    """
    COSE_Encrypt (tag 96): content encrypted under a CEK, which is wrapped
    once per recipient.
    """

    _tag = Tag.COSE_ENCRYPT
    _arity = 4

    def __init__(self,
                 protected_header: bytes,
                 unprotected_header: dict,
                 ciphertext: bytes,
                 recipients: List[Recipient]):
        self.protected_header = protected_header
        self.unprotected_header = unprotected_header
        self.ciphertext = ciphertext
        self.recipients = recipients

    @property
    def content(self):
        return [self.protected_header,
                self.unprotected_header,
                self.ciphertext,
                [recipient.content for recipient in self.recipients]]

    @classmethod
    def _from_elements(cls, elements):
        (protected, unprotected, ciphertext, recipients) = elements

        if not is_array(recipients):
            raise MalformedMessageError('COSE_Encrypt recipients must be an array')

        return EncryptMessage(protected, dict(unprotected), ciphertext,
                              [Recipient.from_cbor(recipient) for recipient in recipients])


_by_tag = {cls._tag: cls for cls in (Encrypt0Message, EncryptMessage)}
_by_arity = {cls._arity: cls for cls in (Encrypt0Message, EncryptMessage)}


def parse_message(encoded: bytes) -> CoseMessage:
    """
    Decode a COSE message and classify it by tag or, when untagged, by array length.
    """

    decoded = _loads(encoded)

    if isinstance(decoded, CBORTag):
        cls = _by_tag.get(decoded.tag)
        if cls is None:
            raise UnrecognizedMessageTypeError(f'Unknown COSE tag: {decoded.tag}')
        return cls.from_cbor(decoded)

    if is_array(decoded) and len(decoded) in _by_arity:
        return _by_arity[len(decoded)].from_cbor(decoded)

    raise UnrecognizedMessageTypeError('Unable to determine COSE message type')
