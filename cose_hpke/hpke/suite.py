import logging
from collections import namedtuple

from cryptography.hazmat.primitives.asymmetric import ec, x25519
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from pyhpke import AEADId, CipherSuite, KDFId, KEMId, KEMKey
from pyhpke.exceptions import OpenError

from cose_hpke.config import DEFAULT_SUITE_ID
from cose_hpke.cose.constants import Algorithm, Key
from cose_hpke.errors import DecryptionFailed, UnsupportedSuiteError

logger = logging.getLogger(__name__)

_SuiteConfig = namedtuple('_SuiteConfig', 'suite_id integrated_alg key_encryption_alg content_alg '
                                          'key_type curve kem kdf aead')


class SuiteConfig(_SuiteConfig):
    """
    A COSE-HPKE cipher suite: the COSE algorithm ids it is registered under,
    the key type it accepts and the RFC 9180 KEM/KDF/AEAD triple behind it.
    """

    __slots__ = ()

    @property
    def cipher_suite(self) -> CipherSuite:
        return CipherSuite.new(self.kem, self.kdf, self.aead)

    def accepts(self, key) -> bool:
        return key.kty == self.key_type and key.crv == self.curve

    def generate_key_pair(self):
        """
        Returns (public, private) raw key bytes. P-256 public keys are
        uncompressed points (0x04 || x || y), everything else is 32 bytes.
        """

        if self.key_type == Key.Type.EC2:
            private_key = ec.generate_private_key(ec.SECP256R1())
            public_bytes = private_key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
            private_bytes = private_key.private_numbers().private_value.to_bytes(32, 'big')
        else:
            private_key = x25519.X25519PrivateKey.generate()
            public_bytes = private_key.public_key().public_bytes_raw()
            private_bytes = private_key.private_bytes_raw()

        return public_bytes, private_bytes

    def seal(self, public_key, plaintext: bytes, aad: bytes = b'', info: bytes = b''):
        pkr = KEMKey.from_pyca_cryptography_key(public_key.public_key())

        enc, context = self.cipher_suite.create_sender_context(pkr, info=info)
        ciphertext = context.seal(plaintext, aad=aad)

        return enc, ciphertext

    def open(self, private_key, enc: bytes, ciphertext: bytes, aad: bytes = b'', info: bytes = b'') -> bytes:
        if not self.accepts(private_key):
            raise DecryptionFailed()

        skr = KEMKey.from_pyca_cryptography_key(private_key.private_key())

        # Bad encapsulated keys, wrong keys and authentication failures all look the same
        try:
            context = self.cipher_suite.create_recipient_context(enc, skr, info=info)
            return context.open(ciphertext, aad=aad)
        except (OpenError, ValueError) as err:
            raise DecryptionFailed() from err


HPKE_4 = SuiteConfig(suite_id='HPKE-4',
                     integrated_alg=Algorithm.HPKE_4_INTEGRATED,
                     key_encryption_alg=Algorithm.HPKE_4_KEY_ENCRYPTION,
                     content_alg=Algorithm.A256GCM,
                     key_type=Key.Type.OKP,
                     curve=Key.Curve.X25519,
                     kem=KEMId.DHKEM_X25519_HKDF_SHA256,
                     kdf=KDFId.HKDF_SHA256,
                     aead=AEADId.CHACHA20_POLY1305)

HPKE_7 = SuiteConfig(suite_id='HPKE-7',
                     integrated_alg=Algorithm.HPKE_7_INTEGRATED,
                     key_encryption_alg=Algorithm.HPKE_7_KEY_ENCRYPTION,
                     content_alg=Algorithm.A256GCM,
                     key_type=Key.Type.EC2,
                     curve=Key.Curve.P_256,
                     kem=KEMId.DHKEM_P256_HKDF_SHA256,
                     kdf=KDFId.HKDF_SHA256,
                     aead=AEADId.AES256_GCM)

SUITES = {suite.suite_id: suite for suite in (HPKE_4, HPKE_7)}


def resolve(suite_id: str = None) -> SuiteConfig:
    if suite_id is None:
        suite_id = DEFAULT_SUITE_ID

    try:
        return SUITES[suite_id]
    except KeyError:
        raise UnsupportedSuiteError(suite_id) from None


def suite_from_algorithm(alg) -> SuiteConfig:
    """
    Reverse lookup of a header algorithm id. Returns None if no suite uses it.
    """

    for suite in SUITES.values():
        if alg in (suite.integrated_alg, suite.key_encryption_alg):
            logger.debug("Algorithm %s belongs to suite %s", alg, suite.suite_id)
            return suite

    return None


def suite_for_key(key) -> SuiteConfig:
    for suite in SUITES.values():
        if suite.accepts(key):
            return suite

    return None
