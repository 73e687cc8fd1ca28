from typing import Any
import logging

from core.config import get_default_limit  # type: ignore
from core.filters import id_eq  # type: ignore
from core.formatters import format_cycle, format_issues, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore

logger = logging.getLogger(__name__)


def team_not_found(key: str) -> str:
    logger.info(f"Team {key} not found")
    return f"Team {key} not found"


async def list_cycles(client, args: dict[str, Any]) -> str:
    """Cycles of one team, most recent page only."""
    team = await EntityResolver(client).team_by_key(args["teamKey"])
    if not team:
        return team_not_found(args["teamKey"])
    limit = int(args.get("limit") or get_default_limit("cycles", 10))
    cycles = await client.cycles(filter={"team": id_eq(team["id"])}, first=limit)
    return to_json([format_cycle(c) for c in cycles])


async def get_active_cycle(client, args: dict[str, Any]) -> str:
    """The team's current cycle together with its issues."""
    team = await EntityResolver(client).team_by_key(args["teamKey"])
    if not team:
        return team_not_found(args["teamKey"])
    cycle = await client.active_cycle(team["id"])
    if not cycle:
        return f"No active cycle for team {args['teamKey']}"
    formatted = format_cycle(cycle)
    formatted["issues"] = await format_issues(client, await client.cycle_issues(cycle["id"]))
    return to_json(formatted)


async def create_cycle(client, args: dict[str, Any]) -> str:
    team = await EntityResolver(client).team_by_key(args["teamKey"])
    if not team:
        return team_not_found(args["teamKey"])
    cycle_input = {"teamId": team["id"], "startsAt": args["startsAt"], "endsAt": args["endsAt"]}
    if args.get("name"):
        cycle_input["name"] = args["name"]
    cycle = await client.create_cycle(cycle_input)
    return f"Created cycle {cycle['number']} for team {team['key']} ({cycle['startsAt']} - {cycle['endsAt']})"


async def add_issue_to_cycle(client, args: dict[str, Any]) -> str:
    """Move an issue into the cycle with the given number in the issue's own team."""
    issue = await client.issue(args["issueId"])
    if not issue:
        return f"Issue {args['issueId']} not found"
    team_id = (issue.get("team") or {}).get("id")
    number = int(args["cycleNumber"])
    cycles = await client.cycles(filter={"team": id_eq(team_id), "number": {"eq": number}}, first=1)
    cycle = next((c for c in cycles if c.get("number") == number), None)
    if not cycle:
        return f"Cycle {number} not found for issue {args['issueId']}'s team"
    await client.update_issue(issue["id"], {"cycleId": cycle["id"]})
    return f"Added issue {args['issueId']} to cycle {number}"


TEAM_KEY = {"type": "string", "description": "Team key (e.g., 'ENG')"}


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_cycles": {
            "func": list_cycles,
            "title": "List cycles",
            "description": "List cycles of a team with their dates and progress",
            "input_schema": {
                "type": "object",
                "properties": {
                    "teamKey": TEAM_KEY,
                    "limit": {"type": "number", "description": "Maximum number of cycles to return (default: 10)"},
                },
                "required": ["teamKey"],
            },
        },
        "linear_get_active_cycle": {
            "func": get_active_cycle,
            "title": "Get active cycle",
            "description": "Get the active cycle of a team, including its issues",
            "input_schema": {"type": "object", "properties": {"teamKey": TEAM_KEY}, "required": ["teamKey"]},
        },
        "linear_create_cycle": {
            "func": create_cycle,
            "title": "Create cycle",
            "description": "Create a new cycle for a team",
            "input_schema": {
                "type": "object",
                "properties": {
                    "teamKey": TEAM_KEY,
                    "startsAt": {"type": "string", "description": "Start date (ISO 8601)"},
                    "endsAt": {"type": "string", "description": "End date (ISO 8601)"},
                    "name": {"type": "string", "description": "Optional cycle name"},
                },
                "required": ["teamKey", "startsAt", "endsAt"],
            },
        },
        "linear_add_issue_to_cycle": {
            "func": add_issue_to_cycle,
            "title": "Add issue to cycle",
            "description": "Add an issue to a cycle of its team, identified by cycle number",
            "input_schema": {
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "The issue identifier (e.g., 'ENG-123')"},
                    "cycleNumber": {"type": "number", "description": "Cycle number within the issue's team"},
                },
                "required": ["issueId", "cycleNumber"],
            },
        },
    }
