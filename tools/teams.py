from typing import Any

from core.formatters import format_team, format_user, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore


async def list_teams(client, args: dict[str, Any]) -> str:
    """List all teams in the workspace."""
    teams = await client.teams()
    return to_json([format_team(t) for t in teams])


async def list_users(client, args: dict[str, Any]) -> str:
    """List workspace users; deactivated users only when includeInactive is set."""
    include_inactive = bool(args.get("includeInactive"))
    users = await client.users(include_disabled=include_inactive)
    if not include_inactive:
        users = [u for u in users if u.get("active", True)]
    return to_json([format_user(u) for u in users])


async def get_user(client, args: dict[str, Any]) -> str:
    user = await EntityResolver(client).user_by_email(args["email"])
    if not user:
        return f"User {args['email']} not found"
    formatted = format_user(user)
    formatted["teams"] = [t.get("key") for t in await client.user_teams(user["id"])]
    return to_json(formatted)


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_teams": {
            "func": list_teams,
            "title": "List teams",
            "description": "List all teams in the Linear workspace",
            "input_schema": {"type": "object", "properties": {}},
        },
        "linear_list_users": {
            "func": list_users,
            "title": "List users",
            "description": "List users in the Linear workspace",
            "input_schema": {
                "type": "object",
                "properties": {
                    "includeInactive": {"type": "boolean", "description": "Include deactivated users (default: false)"},
                },
            },
        },
        "linear_get_user": {
            "func": get_user,
            "title": "Get user",
            "description": "Get a user by email, including the teams they belong to",
            "input_schema": {
                "type": "object",
                "properties": {"email": {"type": "string", "description": "User email (case-insensitive)"}},
                "required": ["email"],
            },
        },
    }
