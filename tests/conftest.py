import json
import pytest
import httpx
from typing import Dict, List, Tuple
from unittest.mock import patch

from app.config import settings
from app.models.schemas import TenantCredentials

def pytest_collection_modifyitems(config, items):
    for item in items:
        if "integration_tests" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in item.nodeid:
            item.add_marker(pytest.mark.unit)


ACCOUNTS = {
    "1": {
        "accessKeyId": "A",
        "secretAccessKey": "B",
        "accountId": "acct1",
        "bucketName": "bkt",
    },
    "2": {
        "accessKeyId": "AKIDSECOND",
        "secretAccessKey": "second-secret",
        "accountId": "acct2",
        "bucketName": "media",
    },
}


class FakeObjectStore:
    """In-memory stand-in for the S3-compatible store, served over httpx.MockTransport"""

    def __init__(self):
        self.objects: Dict[str, Tuple[bytes, Dict[str, str]]] = {}
        self.requests: List[httpx.Request] = []
        self.fail_with = None

    def put(self, path: str, body=b"", headers=None):
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.objects[path] = (body, headers or {})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        stored = self.objects.get(request.url.path)
        if stored is None:
            return httpx.Response(404, text="NoSuchKey")
        body, headers = stored
        if request.method == "HEAD":
            return httpx.Response(200, headers=headers)
        return httpx.Response(200, content=body, headers=headers)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def accounts_json() -> str:
    return json.dumps(ACCOUNTS)


@pytest.fixture
def credentials() -> TenantCredentials:
    return TenantCredentials.model_validate(ACCOUNTS["1"])


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def gateway_client(accounts_json, object_store):
    """TestClient over the full app with the object store mocked out"""
    from fastapi.testclient import TestClient
    from app.main import app

    with patch.object(settings, "accounts_json", accounts_json), \
         patch("app.main.create_http_client", return_value=object_store.client()):
        with TestClient(app, follow_redirects=False) as client:
            yield client
