"""Gemensamma pytest-fixturer.

Lägger projektroten på sys.path och stänger av riktiga nätverksanrop.
"""
from __future__ import annotations

import json
import os
import random
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import requests  # noqa: E402


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None):
        self.status_code = status_code
        self._data = data if data is not None else {}

    def json(self):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    @property
    def text(self):
        return json.dumps(self._data)


@pytest.fixture
def fake_resp():
    return FakeResp


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    """Any un-mocked HTTP call fails like an unreachable host."""

    def refuse(*args, **kwargs):
        raise requests.exceptions.ConnectionError("network disabled in tests")

    monkeypatch.setattr(requests, "get", refuse)
    monkeypatch.setattr(requests, "post", refuse)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def square_route():
    return [
        (37.7694, -122.4862),
        (37.7694, -122.4762),
        (37.7594, -122.4762),
        (37.7594, -122.4862),
    ]


@pytest.fixture
def long_route():
    """A 25-point diagonal line."""
    return [(59.30 + i * 0.001, 18.00 + i * 0.002) for i in range(25)]
