from typing import Any
import logging

from core.config import get_default_limit  # type: ignore
from core.filters import build_issue_filter, id_eq  # type: ignore
from core.formatters import describe_issue, format_issues, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore

logger = logging.getLogger(__name__)


def issue_limit(args: dict[str, Any]) -> int:
    return int(args.get("limit") or get_default_limit("issues", 20))


def issue_not_found(issue_id: str) -> str:
    logger.info(f"Issue {issue_id} not found")
    return f"Issue {issue_id} not found"


async def list_issues(client, args: dict[str, Any]) -> str:
    """List issues narrowed by whichever optional filters resolve."""
    resolver = EntityResolver(client)
    filter_ = await build_issue_filter(resolver, args)
    issues = await client.issues(filter=filter_, first=issue_limit(args))
    return to_json(await format_issues(client, issues))


async def get_issue(client, args: dict[str, Any]) -> str:
    """Detailed view of one issue, including labels, project and comments."""
    issue = await client.issue(args["issueId"])
    if not issue:
        return issue_not_found(args["issueId"])
    return to_json(await describe_issue(client, issue))


async def create_issue(client, args: dict[str, Any]) -> str:
    """Create an issue in the team given by teamKey.

    The team is mandatory. Assignee, status, project and labels are applied
    only when they resolve; unknown ones are left out of the create call.
    """
    resolver = EntityResolver(client)
    team = await resolver.team_by_key(args["teamKey"])
    if not team:
        return f"Team {args['teamKey']} not found"

    issue_input: dict[str, Any] = {"teamId": team["id"], "title": args["title"]}
    if args.get("description") is not None:
        issue_input["description"] = args["description"]
    if args.get("priority") is not None:
        issue_input["priority"] = args["priority"]
    if args.get("estimate") is not None:
        issue_input["estimate"] = args["estimate"]

    if args.get("assigneeEmail"):
        user = await resolver.user_by_email(args["assigneeEmail"])
        if user:
            issue_input["assigneeId"] = user["id"]
    if args.get("status"):
        state = await resolver.state_by_name(team["id"], args["status"])
        if state:
            issue_input["stateId"] = state["id"]
    if args.get("projectName"):
        project = await resolver.project_by_name(args["projectName"])
        if project:
            issue_input["projectId"] = project["id"]

    if args.get("labelNames"):
        labels, _missing = await resolver.labels_by_names(args["labelNames"], team["id"])
        if labels:
            issue_input["labelIds"] = [label["id"] for label in labels]

    issue = await client.create_issue(issue_input)
    logger.info(f"Created issue {issue['identifier']} in team {team['key']}")
    return f"Created issue {issue['identifier']}: {issue['title']}\nURL: {issue['url']}"


async def update_issue(client, args: dict[str, Any]) -> str:
    """Update fields of an existing issue; status is resolved within the issue's own team."""
    issue = await client.issue(args["issueId"])
    if not issue:
        return issue_not_found(args["issueId"])

    resolver = EntityResolver(client)
    update_input: dict[str, Any] = {}
    if args.get("title"):
        update_input["title"] = args["title"]
    if args.get("description"):
        update_input["description"] = args["description"]
    if args.get("priority") is not None:
        update_input["priority"] = args["priority"]
    if args.get("estimate") is not None:
        update_input["estimate"] = args["estimate"]

    if args.get("status") and issue.get("team"):
        state = await resolver.state_by_name(issue["team"]["id"], args["status"])
        if state:
            update_input["stateId"] = state["id"]
    if args.get("assigneeEmail"):
        user = await resolver.user_by_email(args["assigneeEmail"])
        if user:
            update_input["assigneeId"] = user["id"]
    if args.get("projectName"):
        project = await resolver.project_by_name(args["projectName"])
        if project:
            update_input["projectId"] = project["id"]

    await client.update_issue(issue["id"], update_input)
    return f"Updated issue {args['issueId']}"


async def delete_issue(client, args: dict[str, Any]) -> str:
    issue = await client.issue(args["issueId"])
    if not issue:
        return issue_not_found(args["issueId"])
    await client.delete_issue(issue["id"])
    return f"Deleted issue {args['issueId']}"


async def add_comment(client, args: dict[str, Any]) -> str:
    issue = await client.issue(args["issueId"])
    if not issue:
        return issue_not_found(args["issueId"])
    await client.create_comment({"issueId": issue["id"], "body": args["body"]})
    return f"Added comment to {args['issueId']}"


async def search_issues(client, args: dict[str, Any]) -> str:
    """Full-text search; teamKey narrows the search only when it resolves."""
    team_id = None
    if args.get("teamKey"):
        team = await EntityResolver(client).team_by_key(args["teamKey"])
        team_id = team["id"] if team else None
    issues = await client.search_issues(args["query"], first=issue_limit(args), team_id=team_id)
    return to_json(await format_issues(client, issues))


async def get_my_issues(client, args: dict[str, Any]) -> str:
    """Issues assigned to the user owning the API key."""
    me = await client.viewer()
    resolver = EntityResolver(client)
    filter_ = await build_issue_filter(
        resolver,
        {k: args.get(k) for k in ("status", "teamKey")},
        base={"assignee": id_eq(me["id"])},
    )
    issues = await client.issues(filter=filter_, first=issue_limit(args))
    return to_json(await format_issues(client, issues))


ISSUE_ID = {"type": "string", "description": "The issue identifier (e.g., 'ENG-123')"}
LIMIT = {"type": "number", "description": "Maximum number of issues to return (default: 20)"}
PRIORITY = {"type": "number", "description": "Priority: 0=No priority, 1=Urgent, 2=High, 3=Normal, 4=Low"}


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_issues": {
            "func": list_issues,
            "title": "List issues",
            "description": "List issues from Linear with optional filters. Returns issue ID, title, status, assignee, and priority.",
            "input_schema": {
                "type": "object",
                "properties": {
                    "teamKey": {"type": "string", "description": "Filter by team key (e.g., 'ENG', 'PROD')"},
                    "status": {"type": "string", "description": "Filter by status name (e.g., 'In Progress', 'Done', 'Backlog')"},
                    "assigneeEmail": {"type": "string", "description": "Filter by assignee email"},
                    "projectName": {"type": "string", "description": "Filter by project name"},
                    "labelName": {"type": "string", "description": "Filter by label name"},
                    "inActiveCycle": {"type": "boolean", "description": "Only issues in their team's active cycle"},
                    "limit": LIMIT,
                },
            },
        },
        "linear_get_issue": {
            "func": get_issue,
            "title": "Get issue",
            "description": "Get detailed information about a specific Linear issue by its identifier (e.g., 'ENG-123')",
            "input_schema": {"type": "object", "properties": {"issueId": ISSUE_ID}, "required": ["issueId"]},
        },
        "linear_create_issue": {
            "func": create_issue,
            "title": "Create issue",
            "description": "Create a new issue in Linear",
            "input_schema": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "description": "Issue title"},
                    "description": {"type": "string", "description": "Issue description (supports markdown)"},
                    "teamKey": {"type": "string", "description": "Team key to create the issue in (e.g., 'ENG')"},
                    "priority": PRIORITY,
                    "assigneeEmail": {"type": "string", "description": "Email of the user to assign the issue to"},
                    "status": {"type": "string", "description": "Initial status name (defaults to the team's default state)"},
                    "projectName": {"type": "string", "description": "Project to add the issue to"},
                    "labelNames": {"type": "array", "items": {"type": "string"}, "description": "Label names to attach"},
                    "estimate": {"type": "number", "description": "Estimate in points"},
                },
                "required": ["title", "teamKey"],
            },
        },
        "linear_update_issue": {
            "func": update_issue,
            "title": "Update issue",
            "description": "Update an existing Linear issue",
            "input_schema": {
                "type": "object",
                "properties": {
                    "issueId": ISSUE_ID,
                    "title": {"type": "string", "description": "New title"},
                    "description": {"type": "string", "description": "New description"},
                    "status": {"type": "string", "description": "New status name (e.g., 'In Progress', 'Done')"},
                    "priority": PRIORITY,
                    "assigneeEmail": {"type": "string", "description": "Email of user to assign to"},
                    "projectName": {"type": "string", "description": "Move the issue to this project"},
                    "estimate": {"type": "number", "description": "New estimate in points"},
                },
                "required": ["issueId"],
            },
        },
        "linear_delete_issue": {
            "func": delete_issue,
            "title": "Delete issue",
            "description": "Delete (move to trash) a Linear issue",
            "input_schema": {"type": "object", "properties": {"issueId": ISSUE_ID}, "required": ["issueId"]},
        },
        "linear_add_comment": {
            "func": add_comment,
            "title": "Add comment",
            "description": "Add a comment to a Linear issue",
            "input_schema": {
                "type": "object",
                "properties": {
                    "issueId": ISSUE_ID,
                    "body": {"type": "string", "description": "Comment body (supports markdown)"},
                },
                "required": ["issueId", "body"],
            },
        },
        "linear_search_issues": {
            "func": search_issues,
            "title": "Search issues",
            "description": "Search for issues using a text query",
            "input_schema": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query text"},
                    "teamKey": {"type": "string", "description": "Restrict the search to one team"},
                    "limit": {"type": "number", "description": "Maximum number of results (default: 20)"},
                },
                "required": ["query"],
            },
        },
        "linear_get_my_issues": {
            "func": get_my_issues,
            "title": "My issues",
            "description": "Get issues assigned to the authenticated user",
            "input_schema": {
                "type": "object",
                "properties": {
                    "status": {"type": "string", "description": "Filter by status (e.g., 'In Progress')"},
                    "teamKey": {"type": "string", "description": "Filter by team key"},
                    "limit": LIMIT,
                },
            },
        },
    }
