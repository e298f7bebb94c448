import io
import os
import sys
import pytest
import requests
from requests.structures import CaseInsensitiveDict
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../backend')))

from fastapi.testclient import TestClient
from config import ProxyConfig
from main import create_app

SECRET = "MY_SECRET_ACCESS_TOKEN"


class LazyBody:
    """Flux brut qui produit ses octets à la demande et compte les lectures."""
    def __init__(self, total_size: int, fill: bytes = b"x"):
        self.remaining = total_size
        self.fill = fill
        self.reads = []
        self.closed = False

    def read(self, size=-1):
        if self.closed:
            raise ValueError("read on closed body")
        if size is None or size < 0:
            size = self.remaining
        size = min(size, self.remaining)
        self.remaining -= size
        self.reads.append(size)
        return self.fill * size

    def close(self):
        self.closed = True


def make_response(status=200, reason="OK", content_type="image/png", body=b"", url="https://img.example/a.png"):
    """Construit une vraie requests.Response dont le corps n'est pas encore lu."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.url = url
    headers = CaseInsensitiveDict()
    if content_type is not None:
        headers["Content-Type"] = content_type
    response.headers = headers
    response.raw = body if hasattr(body, "read") else io.BytesIO(body)
    return response


class FakeSession:
    """Remplace requests.Session : enregistre les appels et renvoie une réponse prévue."""
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


@pytest.fixture
def config():
    return ProxyConfig(port=4001, access_token=SECRET)


@pytest.fixture
def session():
    return FakeSession(make_response(body=b"\x89PNG\r\n\x1a\nfake-png-bytes"))


@pytest.fixture
def client(config, session):
    return TestClient(create_app(config, session=session))
