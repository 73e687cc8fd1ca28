"""Build Linear filter objects from optional tool arguments.

A clause is added only when its argument was supplied and resolved. Unresolved
references are skipped, so the filter widens instead of failing. Keys of one
filter object combine with AND on the Linear side.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from core.resolver import LABEL, PROJECT, TEAM, USER  # type: ignore

logger = logging.getLogger(__name__)


def id_eq(entity_id: str) -> dict:
    return {"id": {"eq": entity_id}}


async def build_issue_filter(resolver, args: dict[str, Any], base: dict | None = None) -> dict:
    """Issue filter from teamKey, status, assigneeEmail, projectName, labelName and inActiveCycle."""
    filter_: dict[str, Any] = dict(base or {})

    team = None
    if args.get("teamKey"):
        team = await resolver.resolve(TEAM, args["teamKey"])
        if team:
            filter_["team"] = id_eq(team["id"])
        else:
            logger.info(f"Ignoring teamKey filter: team {args['teamKey']!r} not found")

    if args.get("status"):
        filter_["state"] = {"name": {"eqIgnoreCase": args["status"]}}

    if args.get("inActiveCycle"):
        filter_["cycle"] = {"isActive": {"eq": True}}

    async def _none() -> None:
        return None

    user, project, label = await asyncio.gather(
        resolver.resolve(USER, args["assigneeEmail"]) if args.get("assigneeEmail") else _none(),
        resolver.resolve(PROJECT, args["projectName"]) if args.get("projectName") else _none(),
        resolver.resolve(LABEL, args["labelName"], team["id"] if team else None) if args.get("labelName") else _none(),
    )
    if user:
        filter_["assignee"] = id_eq(user["id"])
    if project:
        filter_["project"] = id_eq(project["id"])
    if label:
        filter_["labels"] = {"some": id_eq(label["id"])}

    return filter_


async def build_project_filter(resolver, args: dict[str, Any]) -> dict:
    """Project filter from teamKey and state."""
    filter_: dict[str, Any] = {}
    if args.get("teamKey"):
        team = await resolver.resolve(TEAM, args["teamKey"])
        if team:
            filter_["accessibleTeams"] = {"some": id_eq(team["id"])}
    if args.get("state"):
        filter_["state"] = {"eqIgnoreCase": args["state"]}
    return filter_
