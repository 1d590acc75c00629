from collections import namedtuple

from cbor2 import dumps, CBORDecodeError
from cryptography.hazmat.primitives.asymmetric import ec, x25519
from jwcrypto import jwk
from jwcrypto.common import base64url_encode, base64url_decode

from cose_hpke.cbor import diagnose, loads_exact, is_map
from cose_hpke.cose.constants import Key
from cose_hpke.errors import InvalidKeyError
from cose_hpke.hpke.suite import resolve, suite_for_key

COORDINATE_SIZE = 32

_curves = {
    Key.Type.EC2: Key.Curve.P_256,
    Key.Type.OKP: Key.Curve.X25519
}

_type_names = {
    Key.Type.EC2: 'EC2',
    Key.Type.OKP: 'OKP'
}

_CoseKey = namedtuple('_CoseKey', 'kty crv x y d alg kid')


class CoseKey(_CoseKey):
    """
    An EC2/P-256 or OKP/X25519 COSE_Key. Holds a private key iff d is set.
    """

    __slots__ = ()

    def __new__(cls, kty: int, crv: int, x: bytes, y: bytes = None, d: bytes = None, alg: int = None,
                kid: bytes = None):
        return super().__new__(cls, kty, crv, x, y, d, alg, kid)

    @property
    def is_private(self) -> bool:
        return self.d is not None

    @property
    def type_name(self) -> str:
        return _type_names[self.kty]

    def public(self) -> 'CoseKey':
        return self._replace(d=None)

    def encode(self) -> bytes:
        # Field order is fixed so that re-encoding a decoded key is byte-identical
        cbor = {Key.KTY: self.kty}

        if self.kid is not None:
            cbor[Key.KID] = self.kid
        if self.alg is not None:
            cbor[Key.ALG] = self.alg

        cbor[Key.CRV] = self.crv
        cbor[Key.X] = self.x

        if self.y is not None:
            cbor[Key.Y] = self.y
        if self.d is not None:
            cbor[Key.D] = self.d

        return dumps(cbor)

    def public_key(self):
        if self.kty == Key.Type.EC2:
            numbers = ec.EllipticCurvePublicNumbers(int.from_bytes(self.x, 'big'),
                                                    int.from_bytes(self.y, 'big'),
                                                    ec.SECP256R1())
            try:
                return numbers.public_key()
            except ValueError as err:
                raise InvalidKeyError('Invalid P-256 public key', 'EC2') from err

        return x25519.X25519PublicKey.from_public_bytes(self.x)

    def private_key(self):
        if self.d is None:
            raise InvalidKeyError('Private key requires d parameter', self.type_name)

        if self.kty == Key.Type.EC2:
            try:
                return ec.derive_private_key(int.from_bytes(self.d, 'big'), ec.SECP256R1())
            except ValueError as err:
                raise InvalidKeyError('Invalid P-256 private key', 'EC2') from err

        return x25519.X25519PrivateKey.from_private_bytes(self.d)

    @classmethod
    def decode(cls, encoded: bytes) -> 'CoseKey':
        try:
            decoded = loads_exact(encoded)
        except CBORDecodeError as err:
            raise InvalidKeyError('COSE_Key is not valid CBOR') from err

        return cls.from_map(decoded)

    @classmethod
    def from_map(cls, decoded) -> 'CoseKey':
        if not is_map(decoded):
            raise InvalidKeyError('COSE_Key must be a CBOR map')

        kty = decoded.get(Key.KTY)
        if not isinstance(kty, int) or kty not in _curves:
            raise InvalidKeyError(f'Unsupported key type: {kty}', 'EC2 or OKP')

        name = _type_names[kty]

        crv = decoded.get(Key.CRV)
        if crv != _curves[kty]:
            raise InvalidKeyError(f'Unsupported curve for {name} key: {crv}', name)

        x = _coordinate(decoded, Key.X, 'x', name)
        y = _coordinate(decoded, Key.Y, 'y', name)
        d = _coordinate(decoded, Key.D, 'd', name)

        if x is None:
            raise InvalidKeyError(f'{name} key requires x coordinate', name)
        if kty == Key.Type.EC2 and y is None:
            raise InvalidKeyError('EC2 key requires y coordinate', name)
        if kty == Key.Type.OKP and y is not None:
            raise InvalidKeyError('OKP key must not carry a y coordinate', name)

        alg = decoded.get(Key.ALG)
        if alg is not None and not isinstance(alg, int):
            raise InvalidKeyError(f'Unsupported key algorithm: {alg!r}', name)

        kid = decoded.get(Key.KID)
        if kid is not None and not isinstance(kid, bytes):
            raise InvalidKeyError('Key id must be a byte string', name)

        return cls(kty, crv, x, y=y, d=d, alg=alg, kid=kid)

    @classmethod
    def from_raw(cls, suite, public_bytes: bytes, private_bytes: bytes = None) -> 'CoseKey':
        """
        Package raw HPKE key bytes of the given suite as a COSE_Key.
        """

        if suite.key_type == Key.Type.EC2:
            if len(public_bytes) != 2 * COORDINATE_SIZE + 1 or public_bytes[0] != 0x04:
                raise InvalidKeyError('Invalid P-256 public key format', 'EC2')
            x = public_bytes[1:1 + COORDINATE_SIZE]
            y = public_bytes[1 + COORDINATE_SIZE:]
        else:
            if len(public_bytes) != COORDINATE_SIZE:
                raise InvalidKeyError('Invalid X25519 public key format', 'OKP')
            x = public_bytes
            y = None

        if private_bytes is not None and len(private_bytes) != COORDINATE_SIZE:
            raise InvalidKeyError(f'Invalid {_type_names[suite.key_type]} private key format',
                                  _type_names[suite.key_type])

        return cls(suite.key_type, suite.curve, x, y=y, d=private_bytes, alg=suite.integrated_alg)


def _coordinate(decoded: dict, label: int, name: str, key_type: str):
    value = decoded.get(label)

    if value is None:
        return None

    if not isinstance(value, bytes) or len(value) != COORDINATE_SIZE:
        raise InvalidKeyError(f'{key_type} key {name} must be {COORDINATE_SIZE} bytes', key_type)

    return value


def generate_key_pair(suite_id: str = None):
    """
    Generate a key pair for the given suite (default HPKE-7 / P-256).
    Returns CBOR-encoded (public, private) COSE_Keys.
    """

    suite = resolve(suite_id)

    public_bytes, private_bytes = suite.generate_key_pair()
    private = CoseKey.from_raw(suite, public_bytes, private_bytes)

    return private.public().encode(), private.encode()


def encode_key(key: CoseKey) -> bytes:
    return key.encode()


def decode_key(encoded: bytes) -> CoseKey:
    return CoseKey.decode(encoded)


def to_diagnostic(encoded: bytes) -> str:
    return diagnose(encoded)


def to_jwk(encoded: bytes) -> dict:
    key = CoseKey.decode(encoded)

    if key.kty == Key.Type.OKP:
        params = {'kty': 'OKP', 'crv': 'X25519', 'x': base64url_encode(key.x)}
    else:
        params = {'kty': 'EC', 'crv': 'P-256', 'x': base64url_encode(key.x), 'y': base64url_encode(key.y)}

    if key.d is not None:
        params['d'] = base64url_encode(key.d)

    return params


def from_jwk(params: dict) -> bytes:
    try:
        exported = jwk.JWK(**params).export(private_key='d' in params, as_dict=True)
    except (jwk.InvalidJWKType, jwk.InvalidJWKValue, ValueError) as err:
        raise InvalidKeyError(f'Invalid JWK: {err}', params.get('kty', 'unknown')) from err

    kty = exported.get('kty')
    crv = exported.get('crv')

    if (kty, crv) == ('OKP', 'X25519'):
        decoded = {Key.KTY: Key.Type.OKP, Key.CRV: Key.Curve.X25519}
    elif (kty, crv) == ('EC', 'P-256'):
        decoded = {Key.KTY: Key.Type.EC2, Key.CRV: Key.Curve.P_256, Key.Y: base64url_decode(exported['y'])}
    else:
        raise InvalidKeyError(f'Unsupported JWK type: {kty}/{crv}', kty or 'unknown')

    decoded[Key.X] = base64url_decode(exported['x'])
    if 'd' in exported:
        decoded[Key.D] = base64url_decode(exported['d'])

    key = CoseKey.from_map(decoded)
    key = key._replace(alg=suite_for_key(key).integrated_alg)

    return key.encode()
