from typing import Any
import logging

from core.filters import id_eq  # type: ignore
from core.formatters import format_label, to_json  # type: ignore
from core.resolver import EntityResolver  # type: ignore

logger = logging.getLogger(__name__)


def team_scope(team_id: str) -> dict:
    """A team's own labels plus workspace-wide labels."""
    return {"or": [{"team": id_eq(team_id)}, {"team": {"null": True}}]}


async def list_labels(client, args: dict[str, Any]) -> str:
    filter_ = None
    if args.get("teamKey"):
        team = await EntityResolver(client).team_by_key(args["teamKey"])
        if team:
            filter_ = team_scope(team["id"])
    labels = await client.labels(filter_)
    return to_json([format_label(label) for label in labels])


async def create_label(client, args: dict[str, Any]) -> str:
    label_input: dict[str, Any] = {"name": args["name"]}
    for key in ("color", "description"):
        if args.get(key):
            label_input[key] = args[key]
    if args.get("teamKey"):
        team = await EntityResolver(client).team_by_key(args["teamKey"])
        if not team:
            return f"Team {args['teamKey']} not found"
        label_input["teamId"] = team["id"]
    label = await client.create_label(label_input)
    return f"Created label {label['name']}"


async def _issue_and_label(client, args: dict[str, Any]):
    issue = await client.issue(args["issueId"])
    if not issue:
        return None, None, f"Issue {args['issueId']} not found"
    team_id = (issue.get("team") or {}).get("id")
    label = await EntityResolver(client).label_by_name(args["labelName"], team_id)
    if not label:
        return issue, None, f"Label {args['labelName']} not found"
    return issue, label, None


async def add_label_to_issue(client, args: dict[str, Any]) -> str:
    """Attach a label, keeping the issue's existing labels (set union)."""
    issue, label, missing = await _issue_and_label(client, args)
    if missing:
        return missing
    label_ids = list(dict.fromkeys(issue.get("labelIds") or []))
    if label["id"] in label_ids:
        return f"Issue {args['issueId']} already has label {label['name']}"
    await client.update_issue(issue["id"], {"labelIds": label_ids + [label["id"]]})
    return f"Added label {label['name']} to {args['issueId']}"


async def remove_label_from_issue(client, args: dict[str, Any]) -> str:
    issue, label, missing = await _issue_and_label(client, args)
    if missing:
        return missing
    label_ids = list(dict.fromkeys(issue.get("labelIds") or []))
    if label["id"] not in label_ids:
        return f"Issue {args['issueId']} does not have label {label['name']}"
    await client.update_issue(issue["id"], {"labelIds": [i for i in label_ids if i != label["id"]]})
    return f"Removed label {label['name']} from {args['issueId']}"


ISSUE_LABEL_SCHEMA = {
    "type": "object",
    "properties": {
        "issueId": {"type": "string", "description": "The issue identifier (e.g., 'ENG-123')"},
        "labelName": {"type": "string", "description": "Label name (case-insensitive)"},
    },
    "required": ["issueId", "labelName"],
}


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_labels": {
            "func": list_labels,
            "title": "List labels",
            "description": "List issue labels, optionally those available to one team",
            "input_schema": {
                "type": "object",
                "properties": {"teamKey": {"type": "string", "description": "Team key; includes workspace labels"}},
            },
        },
        "linear_create_label": {
            "func": create_label,
            "title": "Create label",
            "description": "Create an issue label, workspace-wide or for one team",
            "input_schema": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Label name"},
                    "color": {"type": "string", "description": "Hex color (e.g., '#ff0000')"},
                    "description": {"type": "string", "description": "Label description"},
                    "teamKey": {"type": "string", "description": "Team key; omit for a workspace label"},
                },
                "required": ["name"],
            },
        },
        "linear_add_label_to_issue": {
            "func": add_label_to_issue,
            "title": "Add label to issue",
            "description": "Add a label to an issue, keeping its existing labels",
            "input_schema": ISSUE_LABEL_SCHEMA,
        },
        "linear_remove_label_from_issue": {
            "func": remove_label_from_issue,
            "title": "Remove label from issue",
            "description": "Remove a label from an issue",
            "input_schema": ISSUE_LABEL_SCHEMA,
        },
    }
