import json

import pytest
import requests

from fundfolio.ingest.models import PortfolioHolding
from fundfolio.results import Success


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.text = text
        self.reason = "OK" if status_code < 400 else "Error"

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Maps URL -> FakeResponse; unknown URLs behave like an unreachable host."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.puts = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append(url)
        resp = self.responses.get(url)
        if resp is None:
            raise requests.ConnectionError(f"cannot reach {url}")
        return resp

    def put(self, url, headers=None, json=None, timeout=None):
        self.puts.append((url, headers, json))
        return self.responses.get(("PUT", url), FakeResponse(200, "{}"))


class MemoryStore:
    def __init__(self, data=None, get_result=None):
        self.data = data
        self.get_result = get_result
        self.writes = []

    def get(self):
        if self.get_result is not None:
            return self.get_result
        return Success(self.data)

    def put(self, items):
        self.writes.append(items)
        self.data = items
        return Success(None)


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def memory_store():
    return MemoryStore()


def make_holding(fund_id, weekly, **fields):
    return PortfolioHolding(id=fund_id, name=fields.pop("name", fund_id.title()),
                            weekly_investment=weekly, **fields)


@pytest.fixture
def holding():
    return make_holding


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def store_cls():
    return MemoryStore
