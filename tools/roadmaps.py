from typing import Any

from core.config import get_default_limit  # type: ignore
from core.formatters import format_roadmap, to_json  # type: ignore


async def list_roadmaps(client, args: dict[str, Any]) -> str:
    roadmaps = await client.roadmaps(first=int(args.get("limit") or get_default_limit("roadmaps", 20)))
    return to_json([format_roadmap(r) for r in roadmaps])


def get_tools() -> dict[str, Any]:
    return {
        "linear_list_roadmaps": {
            "func": list_roadmaps,
            "title": "List roadmaps",
            "description": "List roadmaps and the projects they contain",
            "input_schema": {
                "type": "object",
                "properties": {"limit": {"type": "number", "description": "Maximum number of roadmaps (default: 20)"}},
            },
        },
    }
