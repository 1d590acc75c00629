class CoseError(Exception):
    pass


class InvalidKeyError(CoseError):

    def __init__(self, message: str, key_type: str = None):
        super().__init__(message)
        self.key_type = key_type


class UnsupportedSuiteError(CoseError):

    def __init__(self, suite_id):
        super().__init__(f"Unsupported HPKE suite: {suite_id}")
        self.suite_id = suite_id


class NoRecipientsError(CoseError):

    def __init__(self):
        super().__init__("At least one recipient required")


class MalformedMessageError(CoseError):
    pass


class UnrecognizedMessageTypeError(CoseError):
    pass


class DecryptionFailed(CoseError):
    """
    Raised for any cryptographic failure while opening a message. The message
    never says why; the underlying exception, if any, is only kept as __cause__.
    """

    def __init__(self):
        super().__init__("Decryption failed")


class NoMatchingRecipientError(CoseError):

    def __init__(self):
        super().__init__("No matching recipient found for the provided key")


class UrlTooLargeError(CoseError):

    def __init__(self, actual_size: int, max_size: int):
        actual_mb = actual_size / (1024 * 1024)
        max_mb = max_size / (1024 * 1024)
        super().__init__(f"URL exceeds maximum length: {actual_mb:.2f}MB > {max_mb:.2f}MB limit")
        self.actual_size = actual_size
        self.max_size = max_size


class NoFragmentError(CoseError):

    def __init__(self):
        super().__init__("URL has no fragment")


class EmptyFragmentError(CoseError):

    def __init__(self):
        super().__init__("Empty fragment")


class CorruptFragmentError(CoseError):
    pass
