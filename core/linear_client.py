"""Async client for the Linear GraphQL API.

One `LinearClient` lives for the duration of a single tool call and wraps one
`httpx.AsyncClient`. Every method returns plain dicts shaped like the GraphQL
nodes (camelCase keys). Issue nodes only carry `{"id": ...}` references for
their state, assignee, team and project; callers fetch those separately so
they can be requested concurrently.
"""
from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from core.config import get_config  # type: ignore
from utils import extract_error_message, get_endpoint, graphql_error_messages, robust_parse_text  # type: ignore

logger = logging.getLogger(__name__)

API_KEY_ENV = "LINEAR_API_KEY"

TEAM_FIELDS = "id key name description"
USER_FIELDS = "id name email displayName active admin"
STATE_FIELDS = "id name type color position team { id }"
LABEL_FIELDS = "id name color description team { id }"
COMMENT_FIELDS = "id body createdAt"
PROJECT_FIELDS = "id name description state progress startDate targetDate url lead { id }"
CYCLE_FIELDS = "id number name startsAt endsAt progress isActive team { id }"
ISSUE_FIELDS = """
    id identifier title description priority estimate url createdAt updatedAt
    labelIds
    state { id }
    assignee { id }
    team { id }
    project { id }
"""


class LinearAPIError(Exception):
    """Raised for any failed call against the Linear API."""


def _is_not_found(error: Any) -> bool:
    if not isinstance(error, dict):
        return False
    return "entity not found" in str(error.get("message", "")).lower()


def _nodes(connection: dict | None) -> list[dict]:
    if not connection:
        return []
    return list(connection.get("nodes") or [])


class LinearClient:
    def __init__(
        self,
        api_key: str | None,
        url: str | None = None,
        timeout: float | None = None,
        page_size: int | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        cfg = get_config() or {}
        self._api_key = api_key
        self._url = url or get_endpoint("graphql")
        self._timeout = float(timeout if timeout is not None else cfg.get("request_timeout", 30.0))
        self.page_size = int(page_size if page_size is not None else cfg.get("collection_page_size", 250))
        self._http = http_client
        self._owns_http = http_client is None

    @classmethod
    def from_env(cls, **kwargs: Any) -> "LinearClient":
        """Build a client authenticated with the LINEAR_API_KEY environment variable."""
        return cls(os.environ.get(API_KEY_ENV), **kwargs)

    async def __aenter__(self) -> "LinearClient":
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    # ------------------------------------------------------------------ transport

    async def execute(self, query: str, variables: dict[str, Any] | None = None, nullable: bool = False) -> dict | None:
        """POST one GraphQL document and return its `data` object.

        With `nullable=True` an "Entity not found" answer returns None instead of raising.
        """
        if not self._api_key:
            raise LinearAPIError(f"{API_KEY_ENV} is not set")
        if self._http is None:
            raise LinearAPIError("LinearClient used outside of its async context")

        headers = {"Authorization": self._api_key, "Content-Type": "application/json"}
        try:
            response = await self._http.post(
                self._url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning(f"Request to {self._url} failed: {e}")
            raise LinearAPIError(f"Request to Linear failed: {e}") from e

        payload = robust_parse_text(response.text)
        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            if nullable and all(_is_not_found(err) for err in errors):
                return None
            message = "; ".join(graphql_error_messages(payload)) or "Unknown GraphQL error"
            logger.warning(f"Linear API returned errors (HTTP {response.status_code}): {message}")
            raise LinearAPIError(message)

        if response.is_error:
            message = extract_error_message(response.text, response.reason_phrase or "request failed")
            logger.warning(f"Linear API HTTP {response.status_code}: {message}")
            raise LinearAPIError(f"HTTP {response.status_code}: {message}")

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
            raise LinearAPIError("Unexpected response from Linear API")
        return payload["data"]

    async def _mutate(self, query: str, variables: dict[str, Any], field: str, key: str | None = None) -> Any:
        data = await self.execute(query, variables)
        result = (data or {}).get(field) or {}
        if not result.get("success"):
            raise LinearAPIError(f"{field} did not succeed")
        return result.get(key) if key else True

    # ------------------------------------------------------------------ teams & users

    async def teams(self) -> list[dict]:
        data = await self.execute(
            f"query Teams($first: Int) {{ teams(first: $first) {{ nodes {{ {TEAM_FIELDS} }} }} }}",
            {"first": self.page_size},
        )
        return _nodes(data["teams"])

    async def team(self, team_id: str) -> dict | None:
        data = await self.execute(
            f"query Team($id: String!) {{ team(id: $id) {{ {TEAM_FIELDS} }} }}", {"id": team_id}, nullable=True
        )
        return data["team"] if data else None

    async def users(self, include_disabled: bool = False) -> list[dict]:
        data = await self.execute(
            f"query Users($first: Int, $includeDisabled: Boolean) "
            f"{{ users(first: $first, includeDisabled: $includeDisabled) {{ nodes {{ {USER_FIELDS} }} }} }}",
            {"first": self.page_size, "includeDisabled": include_disabled},
        )
        return _nodes(data["users"])

    async def user(self, user_id: str) -> dict | None:
        data = await self.execute(
            f"query User($id: String!) {{ user(id: $id) {{ {USER_FIELDS} }} }}", {"id": user_id}, nullable=True
        )
        return data["user"] if data else None

    async def viewer(self) -> dict:
        data = await self.execute(f"query Viewer {{ viewer {{ {USER_FIELDS} }} }}")
        return data["viewer"]

    async def user_teams(self, user_id: str) -> list[dict]:
        data = await self.execute(
            f"query UserTeams($id: String!, $first: Int) "
            f"{{ user(id: $id) {{ teams(first: $first) {{ nodes {{ {TEAM_FIELDS} }} }} }} }}",
            {"id": user_id, "first": self.page_size},
            nullable=True,
        )
        return _nodes(data["user"]["teams"]) if data and data.get("user") else []

    # ------------------------------------------------------------------ workflow states & labels

    async def workflow_states(self, team_id: str | None = None) -> list[dict]:
        filter_ = {"team": {"id": {"eq": team_id}}} if team_id else None
        data = await self.execute(
            f"query States($first: Int, $filter: WorkflowStateFilter) "
            f"{{ workflowStates(first: $first, filter: $filter) {{ nodes {{ {STATE_FIELDS} }} }} }}",
            {"first": self.page_size, "filter": filter_},
        )
        return _nodes(data["workflowStates"])

    async def workflow_state(self, state_id: str) -> dict | None:
        data = await self.execute(
            f"query State($id: String!) {{ workflowState(id: $id) {{ {STATE_FIELDS} }} }}",
            {"id": state_id},
            nullable=True,
        )
        return data["workflowState"] if data else None

    async def labels(self, filter: dict | None = None) -> list[dict]:
        data = await self.execute(
            f"query Labels($first: Int, $filter: IssueLabelFilter) "
            f"{{ issueLabels(first: $first, filter: $filter) {{ nodes {{ {LABEL_FIELDS} }} }} }}",
            {"first": self.page_size, "filter": filter},
        )
        return _nodes(data["issueLabels"])

    async def create_label(self, input: dict) -> dict:
        return await self._mutate(
            f"mutation CreateLabel($input: IssueLabelCreateInput!) "
            f"{{ issueLabelCreate(input: $input) {{ success issueLabel {{ {LABEL_FIELDS} }} }} }}",
            {"input": input},
            "issueLabelCreate",
            "issueLabel",
        )

    # ------------------------------------------------------------------ issues

    async def issue(self, issue_id: str) -> dict | None:
        """Look up an issue by UUID or human identifier ("ENG-123"); None when it does not exist."""
        data = await self.execute(
            f"query Issue($id: String!) {{ issue(id: $id) {{ {ISSUE_FIELDS} }} }}", {"id": issue_id}, nullable=True
        )
        return data["issue"] if data else None

    async def issues(self, filter: dict | None = None, first: int = 20) -> list[dict]:
        data = await self.execute(
            f"query Issues($filter: IssueFilter, $first: Int) "
            f"{{ issues(filter: $filter, first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }}",
            {"filter": filter or None, "first": first},
        )
        return _nodes(data["issues"])

    async def search_issues(self, term: str, first: int = 20, team_id: str | None = None) -> list[dict]:
        data = await self.execute(
            f"query Search($term: String!, $first: Int, $teamId: String) "
            f"{{ searchIssues(term: $term, first: $first, teamId: $teamId) {{ nodes {{ {ISSUE_FIELDS} }} }} }}",
            {"term": term, "first": first, "teamId": team_id},
        )
        return _nodes(data["searchIssues"])

    async def issue_comments(self, issue_id: str) -> list[dict]:
        data = await self.execute(
            f"query IssueComments($id: String!, $first: Int) "
            f"{{ issue(id: $id) {{ comments(first: $first) {{ nodes {{ {COMMENT_FIELDS} }} }} }} }}",
            {"id": issue_id, "first": self.page_size},
            nullable=True,
        )
        return _nodes(data["issue"]["comments"]) if data and data.get("issue") else []

    async def issue_labels(self, issue_id: str) -> list[dict]:
        data = await self.execute(
            f"query IssueLabels($id: String!) {{ issue(id: $id) {{ labels {{ nodes {{ {LABEL_FIELDS} }} }} }} }}",
            {"id": issue_id},
            nullable=True,
        )
        return _nodes(data["issue"]["labels"]) if data and data.get("issue") else []

    async def create_issue(self, input: dict) -> dict:
        return await self._mutate(
            f"mutation CreateIssue($input: IssueCreateInput!) "
            f"{{ issueCreate(input: $input) {{ success issue {{ {ISSUE_FIELDS} }} }} }}",
            {"input": input},
            "issueCreate",
            "issue",
        )

    async def update_issue(self, issue_id: str, input: dict) -> dict:
        return await self._mutate(
            f"mutation UpdateIssue($id: String!, $input: IssueUpdateInput!) "
            f"{{ issueUpdate(id: $id, input: $input) {{ success issue {{ {ISSUE_FIELDS} }} }} }}",
            {"id": issue_id, "input": input},
            "issueUpdate",
            "issue",
        )

    async def delete_issue(self, issue_id: str) -> bool:
        return await self._mutate(
            "mutation DeleteIssue($id: String!) { issueDelete(id: $id) { success } }",
            {"id": issue_id},
            "issueDelete",
        )

    async def create_comment(self, input: dict) -> dict:
        return await self._mutate(
            f"mutation CreateComment($input: CommentCreateInput!) "
            f"{{ commentCreate(input: $input) {{ success comment {{ {COMMENT_FIELDS} }} }} }}",
            {"input": input},
            "commentCreate",
            "comment",
        )

    async def create_issue_relation(self, input: dict) -> dict:
        return await self._mutate(
            "mutation CreateRelation($input: IssueRelationCreateInput!) "
            "{ issueRelationCreate(input: $input) { success issueRelation { id type } } }",
            {"input": input},
            "issueRelationCreate",
            "issueRelation",
        )

    async def create_attachment(self, issue_id: str, url: str, title: str | None = None) -> dict:
        return await self._mutate(
            "mutation LinkURL($issueId: String!, $url: String!, $title: String) "
            "{ attachmentLinkURL(issueId: $issueId, url: $url, title: $title) "
            "{ success attachment { id title url } } }",
            {"issueId": issue_id, "url": url, "title": title},
            "attachmentLinkURL",
            "attachment",
        )

    # ------------------------------------------------------------------ projects

    async def projects(self, filter: dict | None = None, first: int | None = None) -> list[dict]:
        data = await self.execute(
            f"query Projects($filter: ProjectFilter, $first: Int) "
            f"{{ projects(filter: $filter, first: $first) {{ nodes {{ {PROJECT_FIELDS} }} }} }}",
            {"filter": filter or None, "first": first or self.page_size},
        )
        return _nodes(data["projects"])

    async def project(self, project_id: str) -> dict | None:
        data = await self.execute(
            f"query Project($id: String!) {{ project(id: $id) {{ {PROJECT_FIELDS} }} }}",
            {"id": project_id},
            nullable=True,
        )
        return data["project"] if data else None

    async def project_teams(self, project_id: str) -> list[dict]:
        data = await self.execute(
            f"query ProjectTeams($id: String!) {{ project(id: $id) {{ teams {{ nodes {{ {TEAM_FIELDS} }} }} }} }}",
            {"id": project_id},
            nullable=True,
        )
        return _nodes(data["project"]["teams"]) if data and data.get("project") else []

    async def project_issues(self, project_id: str, first: int = 50) -> list[dict]:
        data = await self.execute(
            f"query ProjectIssues($id: String!, $first: Int) "
            f"{{ project(id: $id) {{ issues(first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }} }}",
            {"id": project_id, "first": first},
            nullable=True,
        )
        return _nodes(data["project"]["issues"]) if data and data.get("project") else []

    async def create_project(self, input: dict) -> dict:
        return await self._mutate(
            f"mutation CreateProject($input: ProjectCreateInput!) "
            f"{{ projectCreate(input: $input) {{ success project {{ {PROJECT_FIELDS} }} }} }}",
            {"input": input},
            "projectCreate",
            "project",
        )

    async def update_project(self, project_id: str, input: dict) -> dict:
        return await self._mutate(
            f"mutation UpdateProject($id: String!, $input: ProjectUpdateInput!) "
            f"{{ projectUpdate(id: $id, input: $input) {{ success project {{ {PROJECT_FIELDS} }} }} }}",
            {"id": project_id, "input": input},
            "projectUpdate",
            "project",
        )

    async def delete_project(self, project_id: str) -> bool:
        return await self._mutate(
            "mutation DeleteProject($id: String!) { projectDelete(id: $id) { success } }",
            {"id": project_id},
            "projectDelete",
        )

    # ------------------------------------------------------------------ cycles & roadmaps

    async def cycles(self, filter: dict | None = None, first: int = 10) -> list[dict]:
        data = await self.execute(
            f"query Cycles($filter: CycleFilter, $first: Int) "
            f"{{ cycles(filter: $filter, first: $first) {{ nodes {{ {CYCLE_FIELDS} }} }} }}",
            {"filter": filter or None, "first": first},
        )
        return _nodes(data["cycles"])

    async def active_cycle(self, team_id: str) -> dict | None:
        data = await self.execute(
            f"query ActiveCycle($id: String!) {{ team(id: $id) {{ activeCycle {{ {CYCLE_FIELDS} }} }} }}",
            {"id": team_id},
            nullable=True,
        )
        return data["team"].get("activeCycle") if data and data.get("team") else None

    async def cycle_issues(self, cycle_id: str, first: int = 50) -> list[dict]:
        data = await self.execute(
            f"query CycleIssues($id: String!, $first: Int) "
            f"{{ cycle(id: $id) {{ issues(first: $first) {{ nodes {{ {ISSUE_FIELDS} }} }} }} }}",
            {"id": cycle_id, "first": first},
            nullable=True,
        )
        return _nodes(data["cycle"]["issues"]) if data and data.get("cycle") else []

    async def create_cycle(self, input: dict) -> dict:
        return await self._mutate(
            f"mutation CreateCycle($input: CycleCreateInput!) "
            f"{{ cycleCreate(input: $input) {{ success cycle {{ {CYCLE_FIELDS} }} }} }}",
            {"input": input},
            "cycleCreate",
            "cycle",
        )

    async def roadmaps(self, first: int = 20) -> list[dict]:
        data = await self.execute(
            "query Roadmaps($first: Int) "
            "{ roadmaps(first: $first) { nodes { id name description url projects { nodes { name } } } } }",
            {"first": first},
        )
        return _nodes(data["roadmaps"])
