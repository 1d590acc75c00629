class Tag:
    COSE_ENCRYPT  = 96
    COSE_ENCRYPT0 = 16


class Header:
    ALG = 1  # int / tstr
    KID = 4  # bstr
    IV = 5  # bstr
    EK = -4  # bstr, HPKE encapsulated key


class Context:
    ENCRYPT0 = "Encrypt0"
    ENCRYPT = "Encrypt"
    ENC_RECIPIENT = "Enc_Recipient"
    HPKE_RECIPIENT = "HPKE Recipient"


class Algorithm:
    A256GCM = 3

    # draft-ietf-cose-hpke
    HPKE_4_INTEGRATED = 42
    HPKE_4_KEY_ENCRYPTION = 50
    HPKE_7_INTEGRATED = 45
    HPKE_7_KEY_ENCRYPTION = 53


class Key:
    KTY = 1  # int
    KID = 2  # bstr
    ALG = 3  # int

    CRV = -1
    X = -2
    Y = -3
    D = -4

    class Type:
        OKP = 1
        EC2 = 2

    class Curve:
        P_256 = 1
        X25519 = 4
