"""Tests for the GraphQL client against a mocked HTTP transport."""

from __future__ import annotations

import json

import httpx
import pytest

from core.linear_client import LinearAPIError, LinearClient

URL = "https://linear.test/graphql"


def make_client(handler, api_key: str | None = "lin_api_test") -> LinearClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LinearClient(api_key, url=URL, timeout=5.0, page_size=50, http_client=http)


class Recorder:
    def __init__(self, *responses: httpx.Response) -> None:
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


@pytest.mark.asyncio
async def test_teams_sends_auth_and_page_size():
    recorder = Recorder(httpx.Response(200, json={"data": {"teams": {"nodes": [{"id": "t1", "key": "ENG"}]}}}))
    async with make_client(recorder) as client:
        teams = await client.teams()
    assert teams == [{"id": "t1", "key": "ENG"}]
    request = recorder.requests[0]
    assert str(request.url) == URL
    assert request.headers["Authorization"] == "lin_api_test"
    assert recorder.body()["variables"] == {"first": 50}
    assert "teams(first: $first)" in recorder.body()["query"]


@pytest.mark.asyncio
async def test_missing_api_key_raises_before_request():
    recorder = Recorder()
    async with make_client(recorder, api_key=None) as client:
        with pytest.raises(LinearAPIError, match="LINEAR_API_KEY is not set"):
            await client.teams()
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_issue_not_found_returns_none():
    recorder = Recorder(
        httpx.Response(
            200,
            json={"data": None, "errors": [{"message": "Entity not found: Issue", "extensions": {"code": "INVALID_INPUT"}}]},
        )
    )
    async with make_client(recorder) as client:
        assert await client.issue("ENG-404") is None
    assert recorder.body()["variables"] == {"id": "ENG-404"}


@pytest.mark.asyncio
async def test_graphql_errors_raise_with_message():
    recorder = Recorder(
        httpx.Response(
            400,
            json={"errors": [{"message": "Argument Validation Error",
                              "extensions": {"userPresentableMessage": "Title is too long"}}]},
        )
    )
    async with make_client(recorder) as client:
        with pytest.raises(LinearAPIError, match="Title is too long"):
            await client.create_issue({"teamId": "t1", "title": "x" * 1000})


@pytest.mark.asyncio
async def test_http_error_with_text_body():
    recorder = Recorder(httpx.Response(429, text="Too many requests\nretry later"))
    async with make_client(recorder) as client:
        with pytest.raises(LinearAPIError, match="HTTP 429: Too many requests"):
            await client.users()


@pytest.mark.asyncio
async def test_transport_failure_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(LinearAPIError, match="connection refused"):
            await client.viewer()


@pytest.mark.asyncio
async def test_unsuccessful_mutation_raises():
    recorder = Recorder(httpx.Response(200, json={"data": {"issueDelete": {"success": False}}}))
    async with make_client(recorder) as client:
        with pytest.raises(LinearAPIError, match="issueDelete did not succeed"):
            await client.delete_issue("uuid-1")


@pytest.mark.asyncio
async def test_create_issue_returns_issue_node():
    node = {"id": "uuid-1", "identifier": "ENG-1", "title": "Fix bug", "url": "https://linear.app/x/issue/ENG-1"}
    recorder = Recorder(httpx.Response(200, json={"data": {"issueCreate": {"success": True, "issue": node}}}))
    async with make_client(recorder) as client:
        assert await client.create_issue({"teamId": "t1", "title": "Fix bug"}) == node
    assert recorder.body()["variables"] == {"input": {"teamId": "t1", "title": "Fix bug"}}


@pytest.mark.asyncio
async def test_nested_collection_of_missing_parent_is_empty():
    recorder = Recorder(httpx.Response(200, json={"data": None, "errors": [{"message": "Entity not found"}]}))
    async with make_client(recorder) as client:
        assert await client.issue_comments("nope") == []


@pytest.mark.asyncio
async def test_issues_passes_filter_and_first():
    recorder = Recorder(httpx.Response(200, json={"data": {"issues": {"nodes": []}}}))
    filter_ = {"team": {"id": {"eq": "t1"}}}
    async with make_client(recorder) as client:
        assert await client.issues(filter=filter_, first=5) == []
    assert recorder.body()["variables"] == {"filter": filter_, "first": 5}


@pytest.mark.asyncio
async def test_active_cycle_absent():
    recorder = Recorder(httpx.Response(200, json={"data": {"team": {"activeCycle": None}}}))
    async with make_client(recorder) as client:
        assert await client.active_cycle("t1") is None


@pytest.mark.asyncio
async def test_owned_http_client_is_closed():
    client = LinearClient("key", url=URL)
    async with client:
        http = client._http
        assert isinstance(http, httpx.AsyncClient)
    assert http.is_closed
