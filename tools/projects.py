from typing import Any
import asyncio
import logging

from core.config import get_default_limit  # type: ignore
from core.filters import build_project_filter  # type: ignore
from core.formatters import format_issues, format_project, format_team, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore

logger = logging.getLogger(__name__)

PROJECT_STATES = ("planned", "started", "paused", "completed", "canceled", "backlog")
OPTIONAL_FIELDS = ("description", "startDate", "targetDate")


def project_not_found(name: str) -> str:
    logger.info(f"Project {name} not found")
    return f"Project {name} not found"


def invalid_state(state: str) -> str:
    return f"Invalid project state '{state}'. Valid states: {', '.join(PROJECT_STATES)}"


async def list_projects(client, args: dict[str, Any]) -> str:
    """List projects, optionally limited to those accessible by a team or in one state."""
    filter_ = await build_project_filter(EntityResolver(client), args)
    limit = int(args.get("limit") or get_default_limit("projects", 20))
    projects = await client.projects(filter=filter_, first=limit)
    return to_json([format_project(p) for p in projects])


async def get_project(client, args: dict[str, Any]) -> str:
    """Project detail with its teams, lead and issues."""
    project = await EntityResolver(client).project_by_name(args["projectName"])
    if not project:
        return project_not_found(args["projectName"])

    lead_ref = project.get("lead") or {}

    async def _lead():
        return await client.user(lead_ref["id"]) if lead_ref.get("id") else None

    teams, lead, issues = await asyncio.gather(
        client.project_teams(project["id"]),
        _lead(),
        client.project_issues(project["id"]),
    )
    formatted = format_project(project)
    formatted["lead"] = lead.get("name") if lead else None
    formatted["teams"] = [format_team(t) for t in teams]
    formatted["issues"] = await format_issues(client, issues)
    return to_json(formatted)


async def create_project(client, args: dict[str, Any]) -> str:
    """Create a project for the teams that resolve; nothing is written when none do."""
    resolver = EntityResolver(client)
    teams, missing = await resolver.teams_by_keys(args.get("teamKeys") or [])
    if not teams:
        return "No valid teams found"
    if missing:
        logger.info(f"Skipping unknown team keys for project {args['name']!r}: {missing}")

    state = args.get("state")
    if state and state.lower() not in PROJECT_STATES:
        return invalid_state(state)

    project_input: dict[str, Any] = {"name": args["name"], "teamIds": [t["id"] for t in teams]}
    for key in OPTIONAL_FIELDS:
        if args.get(key):
            project_input[key] = args[key]
    if state:
        project_input["state"] = state.lower()
    if args.get("leadEmail"):
        lead = await resolver.user_by_email(args["leadEmail"])
        if lead:
            project_input["leadId"] = lead["id"]

    project = await client.create_project(project_input)
    message = f"Created project {project['name']}\nURL: {project.get('url')}"
    if missing:
        message += f"\nSkipped unknown teams: {', '.join(missing)}"
    return message


async def update_project(client, args: dict[str, Any]) -> str:
    resolver = EntityResolver(client)
    project = await resolver.project_by_name(args["projectName"])
    if not project:
        return project_not_found(args["projectName"])

    state = args.get("state")
    if state and state.lower() not in PROJECT_STATES:
        return invalid_state(state)

    update_input: dict[str, Any] = {}
    for key in ("name",) + OPTIONAL_FIELDS:
        if args.get(key):
            update_input[key] = args[key]
    if state:
        update_input["state"] = state.lower()
    if args.get("leadEmail"):
        lead = await resolver.user_by_email(args["leadEmail"])
        if lead:
            update_input["leadId"] = lead["id"]

    await client.update_project(project["id"], update_input)
    return f"Updated project {args['projectName']}"


async def delete_project(client, args: dict[str, Any]) -> str:
    project = await EntityResolver(client).project_by_name(args["projectName"])
    if not project:
        return project_not_found(args["projectName"])
    await client.delete_project(project["id"])
    return f"Deleted project {project['name']}"


PROJECT_NAME = {"type": "string", "description": "Project name (case-insensitive)"}
STATE = {"type": "string", "description": "Project state: " + ", ".join(PROJECT_STATES)}


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_projects": {
            "func": list_projects,
            "title": "List projects",
            "description": "List projects in Linear",
            "input_schema": {
                "type": "object",
                "properties": {
                    "teamKey": {"type": "string", "description": "Filter by team key"},
                    "state": {"type": "string", "description": "Filter by project state"},
                    "limit": {"type": "number", "description": "Maximum number of projects to return (default: 20)"},
                },
            },
        },
        "linear_get_project": {
            "func": get_project,
            "title": "Get project",
            "description": "Get a project by name, with its teams, lead, progress and issues",
            "input_schema": {"type": "object", "properties": {"projectName": PROJECT_NAME}, "required": ["projectName"]},
        },
        "linear_create_project": {
            "func": create_project,
            "title": "Create project",
            "description": "Create a new project associated with one or more teams",
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Project name"},
                    "teamKeys": {"type": "array", "items": {"type": "string"}, "description": "Keys of the teams owning the project"},
                    "description": {"type": "string", "description": "Project description"},
                    "state": STATE,
                    "leadEmail": {"type": "string", "description": "Email of the project lead"},
                    "startDate": {"type": "string", "description": "Start date (YYYY-MM-DD)"},
                    "targetDate": {"type": "string", "description": "Target date (YYYY-MM-DD)"},
                },
                "required": ["name", "teamKeys"],
            },
        },
        "linear_update_project": {
            "func": update_project,
            "title": "Update project",
            "description": "Update an existing project found by name",
            "input_schema": {
                "type": "object",
                "properties": {
                    "projectName": PROJECT_NAME,
                    "name": {"type": "string", "description": "New project name"},
                    "description": {"type": "string", "description": "New description"},
                    "state": STATE,
                    "leadEmail": {"type": "string", "description": "Email of the new project lead"},
                    "startDate": {"type": "string", "description": "Start date (YYYY-MM-DD)"},
                    "targetDate": {"type": "string", "description": "Target date (YYYY-MM-DD)"},
                },
                "required": ["projectName"],
            },
        },
        "linear_delete_project": {
            "func": delete_project,
            "title": "Delete project",
            "description": "Delete a project found by name",
            "input_schema": {"type": "object", "properties": {"projectName": PROJECT_NAME}, "required": ["projectName"]},
        },
    }
