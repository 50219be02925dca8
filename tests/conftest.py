import threading

import pytest
import requests
from fastapi.testclient import TestClient

from api import netguard
from api.ai import chat as chat_function
from api.index import app


@pytest.fixture(autouse=True)
def public_dns(monkeypatch):
    """Every host resolves to a public address unless a test says otherwise."""
    monkeypatch.setattr(netguard, "_resolve_addresses", lambda host: ["93.184.216.34"])
    monkeypatch.setattr(netguard.config, "ALLOWED_HOSTS", [])
    monkeypatch.setattr(netguard.config, "ALLOW_PRIVATE_NETWORKS", False)


class FakeResponse:
    def __init__(self, status_code=200, content_type="", text="", location=None):
        self.status_code = status_code
        self.headers = {"content-type": content_type} if content_type else {}
        if location is not None:
            self.headers["location"] = location
        self.text = text
        self.closed = False

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def is_redirect(self):
        return "location" in self.headers and self.status_code in (301, 302, 303, 307, 308)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeHttp:
    """
    Stands in for requests.Session. `routes` maps (method, url) to a
    FakeResponse or an exception instance; anything else is a 404.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self._lock = threading.Lock()

    def session(self):
        return self

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def request(self, method, url, **kwargs):
        with self._lock:
            self.calls.append((method, url))
        result = self.routes.get((method, url), FakeResponse(404, "text/html"))
        if isinstance(result, Exception):
            raise result
        return result

    def methods_for(self, url):
        return [m for m, u in self.calls if u == url]


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def response():
    return FakeResponse


@pytest.fixture
def connection_error():
    return requests.ConnectionError("connection refused")


class FakeChat:
    def __init__(self, reply="Here are some ideas", error=None):
        self._reply = reply
        self._error = error
        self.messages = []

    def reply(self, message):
        self.messages.append(message)
        if self._error:
            raise self._error
        return self._reply


@pytest.fixture
def fake_chat():
    return FakeChat()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def chat_api(fake_chat):
    chat_function.app.dependency_overrides[chat_function.get_chat_client] = lambda: fake_chat
    yield TestClient(chat_function.app)
    chat_function.app.dependency_overrides.clear()
