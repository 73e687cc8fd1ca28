from typing import Any

from core.formatters import format_workflow_state, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore


async def list_workflow_states(client, args: dict[str, Any]) -> str:
    """Workflow states of a team, in board order."""
    team = await EntityResolver(client).team_by_key(args["teamKey"])
    if not team:
        return f"Team {args['teamKey']} not found"
    states = sorted(await client.workflow_states(team["id"]), key=lambda s: s.get("position") or 0)
    return to_json([format_workflow_state(s) for s in states])


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_workflow_states": {
            "func": list_workflow_states,
            "title": "List workflow states",
            "description": "List the workflow states (statuses) of a team",
            "input_schema": {
                "type": "object",
                "properties": {"teamKey": {"type": "string", "description": "Team key (e.g., 'ENG')"}},
                "required": ["teamKey"],
            },
        },
    }
