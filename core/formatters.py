"""Flatten Linear entities into the JSON shapes returned by the tools."""
from __future__ import annotations

import asyncio
import json
import math
from typing import Any

PRIORITY_LABELS = ["No priority", "Urgent", "High", "Normal", "Low"]


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def priority_label(priority: Any) -> str:
    """Map Linear's 0-4 priority to its label; anything else is "Unknown"."""
    if isinstance(priority, bool) or not isinstance(priority, (int, float)):
        return "Unknown"
    if not math.isfinite(priority) or priority != int(priority) or not 0 <= priority < len(PRIORITY_LABELS):
        return "Unknown"
    return PRIORITY_LABELS[int(priority)]


def format_progress(progress: Any) -> str | None:
    """0.667 -> "67%" (half rounds up)."""
    if progress is None:
        return None
    return f"{math.floor(float(progress) * 100 + 0.5)}%"


def _name(entity: dict | None, default: str) -> str:
    if entity and entity.get("name"):
        return entity["name"]
    return default


def format_issue(issue: dict, state: dict | None, assignee: dict | None, team: dict | None) -> dict:
    return {
        "id": issue.get("identifier"),
        "title": issue.get("title"),
        "description": issue.get("description"),
        "status": _name(state, "Unknown"),
        "priority": priority_label(issue.get("priority")),
        "assignee": _name(assignee, "Unassigned"),
        "team": _name(team, "Unknown"),
        "url": issue.get("url"),
        "createdAt": issue.get("createdAt"),
        "updatedAt": issue.get("updatedAt"),
    }


def format_issue_detail(
    issue: dict,
    state: dict | None,
    assignee: dict | None,
    team: dict | None,
    comments: list[dict],
    labels: list[dict],
    project: dict | None,
) -> dict:
    formatted = format_issue(issue, state, assignee, team)
    formatted["labels"] = [label.get("name") for label in labels]
    formatted["project"] = project.get("name") if project else None
    formatted["estimate"] = issue.get("estimate")
    ordered = sorted(comments, key=lambda c: c.get("createdAt") or "")
    formatted["comments"] = [{"body": c.get("body"), "createdAt": c.get("createdAt")} for c in ordered]
    return formatted


async def _related(fetch, ref: dict | None):
    if not ref or not ref.get("id"):
        return None
    return await fetch(ref["id"])


async def format_issues(client, issues: list[dict]) -> list[dict]:
    """Fetch state, assignee and team for every issue concurrently, then format."""

    async def _one(issue: dict) -> dict:
        state, assignee, team = await asyncio.gather(
            _related(client.workflow_state, issue.get("state")),
            _related(client.user, issue.get("assignee")),
            _related(client.team, issue.get("team")),
        )
        return format_issue(issue, state, assignee, team)

    return list(await asyncio.gather(*(_one(issue) for issue in issues)))


async def describe_issue(client, issue: dict) -> dict:
    """Detail view: relations, comments, labels and project fetched in one fan-out."""
    state, assignee, team, comments, labels, project = await asyncio.gather(
        _related(client.workflow_state, issue.get("state")),
        _related(client.user, issue.get("assignee")),
        _related(client.team, issue.get("team")),
        client.issue_comments(issue["id"]),
        client.issue_labels(issue["id"]),
        _related(client.project, issue.get("project")),
    )
    return format_issue_detail(issue, state, assignee, team, comments, labels, project)


def format_team(team: dict) -> dict:
    return {"key": team.get("key"), "name": team.get("name"), "description": team.get("description")}


def format_user(user: dict) -> dict:
    return {
        "name": user.get("name"),
        "email": user.get("email"),
        "displayName": user.get("displayName"),
        "active": user.get("active"),
        "admin": user.get("admin"),
    }


def format_project(project: dict) -> dict:
    return {
        "name": project.get("name"),
        "description": project.get("description"),
        "state": project.get("state"),
        "progress": format_progress(project.get("progress")),
        "startDate": project.get("startDate"),
        "targetDate": project.get("targetDate"),
        "url": project.get("url"),
    }


def format_cycle(cycle: dict) -> dict:
    return {
        "number": cycle.get("number"),
        "name": cycle.get("name"),
        "startsAt": cycle.get("startsAt"),
        "endsAt": cycle.get("endsAt"),
        "progress": format_progress(cycle.get("progress")),
    }


def format_label(label: dict) -> dict:
    return {"name": label.get("name"), "color": label.get("color"), "description": label.get("description")}


def format_workflow_state(state: dict) -> dict:
    return {
        "name": state.get("name"),
        "type": state.get("type"),
        "color": state.get("color"),
        "position": state.get("position"),
    }


def format_roadmap(roadmap: dict) -> dict:
    return {
        "name": roadmap.get("name"),
        "description": roadmap.get("description"),
        "url": roadmap.get("url"),
        "projects": [p.get("name") for p in (roadmap.get("projects") or {}).get("nodes") or []],
    }
