# tests/conftest.py
import threading

import pytest
from fastapi.testclient import TestClient

from playstore_api.catalog.provider import get_provider
from playstore_api.main import create_app


class FakeProvider:
    """Records every call and answers from canned responses.

    ``responses`` maps an operation to a value or to a callable taking
    the options. ``errors`` maps an operation to the exception it raises.
    ``app`` additionally fails for every id listed in ``failing_apps``.
    """

    def __init__(self):
        self.calls = []
        self.responses = {}
        self.errors = {}
        self.failing_apps = set()
        self._lock = threading.Lock()

    def _handle(self, operation, opts):
        with self._lock:
            self.calls.append((operation, dict(opts)))
        if operation in self.errors:
            raise self.errors[operation]
        value = self.responses.get(operation, [])
        return value(opts) if callable(value) else value

    def calls_to(self, operation):
        return [opts for op, opts in self.calls if op == operation]

    def search(self, opts):
        return self._handle("search", opts)

    def suggest(self, opts):
        return self._handle("suggest", opts)

    def list(self, opts):
        return self._handle("list", opts)

    def app(self, opts):
        if opts.get("appId") in self.failing_apps:
            with self._lock:
                self.calls.append(("app", dict(opts)))
            raise RuntimeError(f"App not found (404): {opts['appId']}")
        return self._handle("app", opts)

    def similar(self, opts):
        return self._handle("similar", opts)

    def datasafety(self, opts):
        return self._handle("datasafety", opts)

    def permissions(self, opts):
        return self._handle("permissions", opts)

    def reviews(self, opts):
        return self._handle("reviews", opts)

    def developer(self, opts):
        return self._handle("developer", opts)

    def categories(self, opts):
        return self._handle("categories", opts)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(provider):
    app = create_app()
    app.dependency_overrides[get_provider] = lambda: provider
    with TestClient(app) as test_client:
        yield test_client
