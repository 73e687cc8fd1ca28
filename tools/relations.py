from typing import Any
import asyncio

RELATION_TYPES = ("blocks", "duplicate", "related")


async def create_issue_relation(client, args: dict[str, Any]) -> str:
    """Link two issues: issueId blocks / duplicates / relates to relatedIssueId."""
    relation_type = str(args.get("type", "")).lower()
    if relation_type not in RELATION_TYPES:
        return f"Invalid relation type '{args.get('type')}'. Valid types: {', '.join(RELATION_TYPES)}"

    issue, related = await asyncio.gather(client.issue(args["issueId"]), client.issue(args["relatedIssueId"]))
    if not issue:
        return f"Issue {args['issueId']} not found"
    if not related:
        return f"Issue {args['relatedIssueId']} not found"

    await client.create_issue_relation(
        {"issueId": issue["id"], "relatedIssueId": related["id"], "type": relation_type}
    )
    return f"Created {relation_type} relation: {args['issueId']} -> {args['relatedIssueId']}"


def get_tools() -> dict[str, Any]:
    return {
        "linear_create_issue_relation": {
            "func": create_issue_relation,
            "title": "Create issue relation",
            "description": "Create a relation between two issues (blocks, duplicate, related)",
            "input_schema": {
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "Source issue identifier (e.g., 'ENG-123')"},
                    "relatedIssueId": {"type": "string", "description": "Target issue identifier (e.g., 'ENG-456')"},
                    "type": {"type": "string", "enum": list(RELATION_TYPES), "description": "Relation type"},
                },
                "required": ["issueId", "relatedIssueId", "type"],
            },
        },
    }
