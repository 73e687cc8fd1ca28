"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest

from core.dispatcher import dispatch
from tests.fakes import FakeLinearClient


@pytest.fixture
def client() -> FakeLinearClient:
    return FakeLinearClient()


@pytest.fixture
def call(client):
    """Dispatch a tool against the fake backend and return the ToolResponse."""

    async def _call(tool: str, /, **arguments):
        return await dispatch(tool, arguments, client=client)

    return _call


@pytest.fixture
def call_json(call):
    """Dispatch a tool that must succeed with a JSON payload and return the decoded payload."""

    async def _call_json(tool: str, /, **arguments):
        response = await call(tool, **arguments)
        assert not response.is_error, response.text
        return json.loads(response.text)

    return _call_json
