import os

DEFAULT_SUITE_ID = 'HPKE-7'

# Chrome's URL length limit
MAX_URL_LENGTH = 2 * 1024 * 1024

BASE_URL = 'https://cose-hpke.github.io/decrypt'


def base_url() -> str:
    """
    Base URL for shareable links. COSE_HPKE_BASE_URL overrides the default.
    """

    return os.getenv('COSE_HPKE_BASE_URL') or BASE_URL
