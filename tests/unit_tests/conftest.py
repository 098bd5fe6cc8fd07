import pytest
from urllib.parse import parse_qs, urlsplit

from app.utils.s3_signer import S3UrlSigner


@pytest.fixture
def signer(credentials) -> S3UrlSigner:
    """Signer for account "1" (acct1 / bkt)."""
    return S3UrlSigner(credentials)


@pytest.fixture
def query_of():
    """Returns a helper flattening a URL's query string into a dict."""
    def _query_of(url: str):
        return {k: v[0] for k, v in parse_qs(urlsplit(url).query, keep_blank_values=True).items()}
    return _query_of
