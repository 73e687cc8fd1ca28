"""Resolve human-readable references (team key, email, names) to Linear entities.

Each lookup fetches the relevant collection and scans it for a case-insensitive
exact match. A miss returns None rather than raising, so callers choose
between dropping an optional filter and answering "X not found". Backend
failures while fetching still propagate.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

logger = logging.getLogger(__name__)

TEAM = "team"
USER = "user"
PROJECT = "project"
LABEL = "label"
WORKFLOW_STATE = "workflow_state"


def _norm(value: Any) -> str:
    return str(value or "").strip().casefold()


def find_first(items: Iterable[dict], field: str, value: str, kind: str = "entity") -> dict | None:
    """Return the first item whose `field` equals `value` ignoring case.

    Duplicates are logged; the first one in fetched order wins.
    """
    wanted = _norm(value)
    if not wanted:
        return None
    matches = [item for item in items if _norm(item.get(field)) == wanted]
    if len(matches) > 1:
        logger.warning(f"{len(matches)} {kind}s match {field}={value!r}; using the first one")
    return matches[0] if matches else None


class EntityResolver:
    """Name/key/email to entity lookups against one backend client."""

    def __init__(self, client) -> None:
        self.client = client
        self._resolvers: dict[str, Callable] = {
            TEAM: self.team_by_key,
            USER: self.user_by_email,
            PROJECT: self.project_by_name,
            LABEL: self.label_by_name,
            WORKFLOW_STATE: self.state_by_name,
        }

    async def resolve(self, kind: str, value: str, scope: str | None = None) -> dict | None:
        """Generic entry point: `kind` is one of team/user/project/label/workflow_state.

        `scope` is the team id for labels and workflow states. The filter
        builders go through here; handlers that need a typed lookup call the
        helpers below directly.
        """
        try:
            resolver = self._resolvers[kind]
        except KeyError:
            raise ValueError(f"Unknown entity kind: {kind}") from None
        if kind == WORKFLOW_STATE:
            if not scope:
                return None
            return await resolver(scope, value)
        if kind == LABEL:
            return await resolver(value, scope)
        return await resolver(value)

    async def team_by_key(self, key: str) -> dict | None:
        if not _norm(key):
            return None
        return find_first(await self.client.teams(), "key", key, TEAM)

    async def user_by_email(self, email: str) -> dict | None:
        if not _norm(email):
            return None
        return find_first(await self.client.users(include_disabled=True), "email", email, USER)

    async def project_by_name(self, name: str) -> dict | None:
        if not _norm(name):
            return None
        return find_first(await self.client.projects(), "name", name, PROJECT)

    async def label_by_name(self, name: str, team_id: str | None = None) -> dict | None:
        """Labels are scoped server-side: a team's labels plus workspace-wide ones."""
        if not _norm(name):
            return None
        return find_first(await self.client.labels(self._label_scope(team_id)), "name", name, LABEL)

    @staticmethod
    def _label_scope(team_id: str | None) -> dict | None:
        if not team_id:
            return None
        return {"or": [{"team": {"id": {"eq": team_id}}}, {"team": {"null": True}}]}

    async def state_by_name(self, team_id: str, name: str) -> dict | None:
        if not _norm(name):
            return None
        return find_first(await self.client.workflow_states(team_id), "name", name, WORKFLOW_STATE)

    async def teams_by_keys(self, keys: Iterable[str]) -> tuple[list[dict], list[str]]:
        """Resolve several team keys against a single fetch. Returns (found, missing keys)."""
        teams = await self.client.teams()
        found: list[dict] = []
        missing: list[str] = []
        for key in keys:
            team = find_first(teams, "key", key, TEAM)
            if team is None:
                missing.append(key)
            elif team not in found:
                found.append(team)
        return found, missing

    async def labels_by_names(self, names: Iterable[str], team_id: str | None = None) -> tuple[list[dict], list[str]]:
        """Resolve several label names against a single scoped fetch. Returns (found, missing names)."""
        labels = await self.client.labels(self._label_scope(team_id))
        found: list[dict] = []
        missing: list[str] = []
        for name in names:
            label = find_first(labels, "name", name, LABEL)
            if label is None:
                missing.append(name)
            elif label not in found:
                found.append(label)
        return found, missing
