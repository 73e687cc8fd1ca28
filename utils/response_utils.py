"""Utilities for pulling a readable message out of a backend error body.

The Linear API usually answers failures with a GraphQL envelope
(`{"errors": [{"message": ...}]}`), but proxies and rate limiters in front of it
may return plain text, NDJSON or a JSON object followed by noise.
`robust_parse_text` copes with all of these, and `extract_error_message`
reduces the parsed result to one line suitable for an `Error:` response.
"""
from __future__ import annotations

import json
from typing import Any


def robust_parse_text(text: str) -> Any:
    """Try to parse text as JSON. If it fails, try NDJSON (one JSON per line), then raw_decode the first JSON object, else return raw text."""
    try:
        return json.loads(text)
    except ValueError:
        pass

    # NDJSON: parse each non-empty line as JSON
    try:
        lines = [ln for ln in text.splitlines() if ln.strip()]
        objs = [json.loads(ln) for ln in lines]
        if objs:
            return objs if len(objs) > 1 else objs[0]
    except ValueError:
        pass

    # Extract the first JSON object from a noisy text blob
    try:
        decoder = json.JSONDecoder()
        obj, _ = decoder.raw_decode(text.lstrip())
        return obj
    except ValueError:
        pass

    return text


def graphql_error_messages(payload: Any) -> list[str]:
    """Return the `message` of every entry in a GraphQL `errors` list."""
    if isinstance(payload, list):
        return [m for item in payload for m in graphql_error_messages(item)]
    if not isinstance(payload, dict):
        return []
    messages = []
    for err in payload.get("errors") or []:
        if not isinstance(err, dict):
            continue
        extensions = err.get("extensions") or {}
        # userPresentableMessage is the friendlier text when Linear provides one
        message = extensions.get("userPresentableMessage") or err.get("message")
        if message:
            messages.append(str(message))
    return messages


def extract_error_message(text: str, default: str) -> str:
    """Best-effort single-line error message from an HTTP response body."""
    if not text or not text.strip():
        return default
    parsed = robust_parse_text(text)
    messages = graphql_error_messages(parsed)
    if messages:
        return "; ".join(messages)
    if isinstance(parsed, dict):
        for key in ("message", "error"):
            if isinstance(parsed.get(key), str):
                return parsed[key]
        return default
    if isinstance(parsed, str):
        first_line = parsed.strip().splitlines()[0]
        return first_line[:300]
    return default
