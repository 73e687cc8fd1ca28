from typing import Any


async def add_attachment(client, args: dict[str, Any]) -> str:
    """Attach a URL (PR, doc, design...) to an issue."""
    issue = await client.issue(args["issueId"])
    if not issue:
        return f"Issue {args['issueId']} not found"
    attachment = await client.create_attachment(issue["id"], args["url"], args.get("title"))
    title = (attachment or {}).get("title") or args["url"]
    return f"Added attachment {title} to {args['issueId']}"


def get_tools() -> dict[str, Any]:
    return {
        "linear_add_attachment": {
            "func": add_attachment,
            "title": "Add attachment",
            "description": "Attach a URL to a Linear issue",
            "input_schema": {
                "type": "object",
                "properties": {
                    "issueId": {"type": "string", "description": "The issue identifier (e.g., 'ENG-123')"},
                    "url": {"type": "string", "description": "URL to attach"},
                    "title": {"type": "string", "description": "Attachment title (defaults to the URL)"},
                },
                "required": ["issueId", "url"],
            },
        },
    }
