"""Tests for the issue tools."""

from __future__ import annotations

import pytest


class TestListIssues:
    @pytest.mark.asyncio
    async def test_empty_result_is_empty_list(self, call_json):
        assert await call_json("linear_list_issues", teamKey="ENG") == []

    @pytest.mark.asyncio
    async def test_default_limit(self, client, call_json):
        await call_json("linear_list_issues")
        assert client.called("issues")[-1] == {"filter": {}, "first": 20}

    @pytest.mark.asyncio
    async def test_filters_applied(self, client, call_json):
        client.add_issue(title="mine", assignee_id="user-bob")
        client.add_issue(title="other")
        client.add_issue(team_key="PROD", title="prod", assignee_id="user-bob")
        issues = await call_json("linear_list_issues", teamKey="eng", assigneeEmail="bob@example.com", limit=5)
        assert [i["title"] for i in issues] == ["mine"]
        assert issues[0]["assignee"] == "Bob Builder"
        assert client.called("issues")[-1]["first"] == 5

    @pytest.mark.asyncio
    async def test_unknown_team_widens_filter(self, client, call_json):
        client.add_issue(title="a")
        client.add_issue(team_key="PROD", title="b")
        issues = await call_json("linear_list_issues", teamKey="NOPE")
        assert len(issues) == 2

    @pytest.mark.asyncio
    async def test_label_and_cycle_filters(self, client, call_json):
        client.add_issue(title="labelled", label_ids=["label-eng-infra"], cycle_id="cycle-eng-2")
        client.add_issue(title="old cycle", label_ids=["label-eng-infra"], cycle_id="cycle-eng-1")
        client.add_issue(title="plain")
        issues = await call_json("linear_list_issues", teamKey="ENG", labelName="INFRA", inActiveCycle=True)
        assert [i["title"] for i in issues] == ["labelled"]


class TestGetIssue:
    @pytest.mark.asyncio
    async def test_detail(self, client, call_json):
        issue = client.add_issue(title="Crash", label_ids=["label-bug"], priority=1, assignee_id="user-ada")
        client.comments[issue["id"]] = [{"body": "seen it", "createdAt": "2026-10-02T00:00:00.000Z"}]
        detail = await call_json("linear_get_issue", issueId="ENG-1")
        assert detail["id"] == "ENG-1"
        assert detail["priority"] == "Urgent"
        assert detail["assignee"] == "Ada Lovelace"
        assert detail["labels"] == ["Bug"]
        assert detail["project"] is None
        assert detail["comments"] == [{"body": "seen it", "createdAt": "2026-10-02T00:00:00.000Z"}]

    @pytest.mark.asyncio
    async def test_not_found(self, call):
        response = await call("linear_get_issue", issueId="ENG-404")
        assert not response.is_error
        assert response.text == "Issue ENG-404 not found"


class TestCreateIssue:
    @pytest.mark.asyncio
    async def test_create_then_get(self, call, call_json):
        response = await call("linear_create_issue", title="Fix bug", teamKey="ENG")
        assert not response.is_error
        assert response.text == "Created issue ENG-1: Fix bug\nURL: https://linear.app/test/issue/ENG-1"

        detail = await call_json("linear_get_issue", issueId="ENG-1")
        assert detail["title"] == "Fix bug"
        assert detail["status"] == "Backlog"
        assert detail["assignee"] == "Unassigned"

    @pytest.mark.asyncio
    async def test_team_not_found_does_not_write(self, client, call):
        response = await call("linear_create_issue", title="x", teamKey="NOPE")
        assert response.text == "Team NOPE not found"
        assert not response.is_error
        assert client.called("create_issue") == []

    @pytest.mark.asyncio
    async def test_optional_references(self, client, call):
        await call(
            "linear_create_issue",
            title="Full",
            teamKey="eng",
            description="desc",
            priority=2,
            assigneeEmail="BOB@example.com",
            status="todo",
            projectName="APOLLO",
            labelNames=["bug", "infra", "Bug", "missing"],
            estimate=5,
        )
        (issue_input,) = client.called("create_issue")
        assert issue_input == {
            "teamId": "team-eng",
            "title": "Full",
            "description": "desc",
            "priority": 2,
            "estimate": 5,
            "assigneeId": "user-bob",
            "stateId": "state-team-eng-unstarted",
            "projectId": "proj-apollo",
            "labelIds": ["label-bug", "label-eng-infra"],
        }
        assert len(client.called("labels")) == 1

    @pytest.mark.asyncio
    async def test_unknown_assignee_is_omitted(self, client, call):
        await call("linear_create_issue", title="x", teamKey="ENG", assigneeEmail="ghost@example.com")
        assert "assigneeId" not in client.called("create_issue")[0]


class TestUpdateIssue:
    @pytest.mark.asyncio
    async def test_status_resolved_in_issue_team(self, client, call):
        client.add_issue(team_key="PROD")
        response = await call("linear_update_issue", issueId="PROD-1", status="done", priority=0)
        assert response.text == "Updated issue PROD-1"
        update = client.called("update_issue")[0]["input"]
        assert update == {"priority": 0, "stateId": "state-team-prod-completed"}

    @pytest.mark.asyncio
    async def test_unknown_status_ignored(self, client, call):
        client.add_issue()
        await call("linear_update_issue", issueId="ENG-1", status="Limbo", title="New")
        assert client.called("update_issue")[0]["input"] == {"title": "New"}

    @pytest.mark.asyncio
    async def test_not_found(self, client, call):
        response = await call("linear_update_issue", issueId="ENG-9", title="x")
        assert response.text == "Issue ENG-9 not found"
        assert client.called("update_issue") == []


class TestOtherIssueTools:
    @pytest.mark.asyncio
    async def test_delete(self, client, call):
        issue = client.add_issue()
        response = await call("linear_delete_issue", issueId="ENG-1")
        assert response.text == "Deleted issue ENG-1"
        assert client.called("delete_issue") == [issue["id"]]

    @pytest.mark.asyncio
    async def test_comment(self, client, call):
        issue = client.add_issue()
        response = await call("linear_add_comment", issueId="ENG-1", body="hello")
        assert response.text == "Added comment to ENG-1"
        assert client.called("create_comment") == [{"issueId": issue["id"], "body": "hello"}]

    @pytest.mark.asyncio
    async def test_comment_on_missing_issue(self, client, call):
        response = await call("linear_add_comment", issueId="ENG-2", body="hello")
        assert response.text == "Issue ENG-2 not found"
        assert client.called("create_comment") == []

    @pytest.mark.asyncio
    async def test_search(self, client, call_json):
        client.add_issue(title="Login crash")
        client.add_issue(team_key="PROD", title="Crash report")
        client.add_issue(title="Unrelated")
        results = await call_json("linear_search_issues", query="crash", teamKey="prod")
        assert [r["id"] for r in results] == ["PROD-1"]
        assert client.called("search_issues")[0] == {"term": "crash", "first": 20, "teamId": "team-prod"}

    @pytest.mark.asyncio
    async def test_my_issues(self, client, call_json):
        client.add_issue(title="mine", assignee_id="user-ada", state="In Progress")
        client.add_issue(title="mine too", assignee_id="user-ada")
        client.add_issue(title="bob's", assignee_id="user-bob", state="In Progress")
        issues = await call_json("linear_get_my_issues", status="in progress")
        assert [i["title"] for i in issues] == ["mine"]
