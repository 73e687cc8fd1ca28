"""Tests for tool discovery, dispatch and the error envelope."""

from __future__ import annotations

import pytest

from core.dispatcher import ToolResponse, dispatch, get_registry, load_tools
from core.linear_client import LinearAPIError

EXPECTED_TOOLS = {
    "linear_list_issues", "linear_get_issue", "linear_create_issue", "linear_update_issue",
    "linear_delete_issue", "linear_add_comment", "linear_search_issues", "linear_get_my_issues",
    "linear_list_projects", "linear_get_project", "linear_create_project", "linear_update_project",
    "linear_delete_project",
    "linear_list_cycles", "linear_get_active_cycle", "linear_create_cycle", "linear_add_issue_to_cycle",
    "linear_list_labels", "linear_create_label", "linear_add_label_to_issue", "linear_remove_label_from_issue",
    "linear_list_teams", "linear_list_users", "linear_get_user",
    "linear_list_workflow_states", "linear_create_issue_relation", "linear_list_roadmaps", "linear_add_attachment",
}


class TestRegistry:
    def test_full_catalogue(self):
        assert set(load_tools()) == EXPECTED_TOOLS

    def test_descriptors_are_complete(self):
        for name, meta in get_registry().items():
            assert callable(meta["func"]), name
            assert meta["title"] and meta["description"], name
            schema = meta["input_schema"]
            assert schema["type"] == "object", name
            for required in schema.get("required", []):
                assert required in schema["properties"], f"{name}.{required}"


class TestToolResponse:
    def test_success_has_no_error_flag(self):
        response = ToolResponse.from_text("ok")
        assert response.to_dict() == {"content": [{"type": "text", "text": "ok"}]}

    def test_error_flag(self):
        response = ToolResponse.from_text("Error: boom", is_error=True)
        assert response.to_dict() == {"content": [{"type": "text", "text": "Error: boom"}], "isError": True}
        assert response.text == "Error: boom"


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_tool_is_not_an_error(self, call):
        response = await call("linear_do_magic")
        assert not response.is_error
        assert response.text == "Unknown tool: linear_do_magic"

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_single_error_response(self, client, call):
        client.fail_with = LinearAPIError("Authentication required, not authenticated")
        response = await call("linear_list_teams")
        assert response.is_error
        assert len(response.content) == 1
        assert response.text == "Error: Authentication required, not authenticated"

    @pytest.mark.asyncio
    async def test_failure_mid_call_is_caught(self, client, call):
        client.add_issue()

        async def broken(*args, **kwargs):
            raise RuntimeError("validation rejected")

        client.update_issue = broken
        response = await call("linear_update_issue", issueId="ENG-1", title="x")
        assert response.is_error
        assert response.text == "Error: validation rejected"

    @pytest.mark.asyncio
    async def test_missing_api_key_reported_on_call(self, monkeypatch):
        monkeypatch.delenv("LINEAR_API_KEY", raising=False)
        response = await dispatch("linear_list_teams", {})
        assert response.is_error
        assert response.text == "Error: LINEAR_API_KEY is not set"

    @pytest.mark.asyncio
    async def test_not_found_is_success(self, call):
        response = await call("linear_get_issue", issueId="ENG-999")
        assert not response.is_error
        assert response.text == "Issue ENG-999 not found"

    @pytest.mark.asyncio
    async def test_arguments_default_to_empty(self, client):
        response = await dispatch("linear_list_teams", None, client=client)
        assert not response.is_error

    @pytest.mark.asyncio
    async def test_tool_argument_called_name(self, client, call):
        response = await call("linear_create_label", name="Perf", teamKey="eng")
        assert not response.is_error
        assert client.called("create_label")[0]["name"] == "Perf"
