import pytest

from src.server.ssl_utils import generate_certificate_and_key
from tests.ssl_constants import CERTS_DIR, SERVER_CRT, SERVER_KEY


@pytest.fixture(scope="session", autouse=True)
def generate_test_certs() -> None:
    """Provide the self-signed pair the TLS client tests trust.

    The pair is created once and reused by later sessions.
    """
    CERTS_DIR.mkdir(parents=True, exist_ok=True)
    if generate_certificate_and_key(CERTS_DIR) is None:
        print(f"\nCould not create test certificates in {CERTS_DIR}.")
    else:
        print(f"\nTest certificates ready: {SERVER_CRT}, {SERVER_KEY}")
