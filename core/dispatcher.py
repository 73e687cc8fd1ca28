"""Tool registry and dispatch.

Tool modules under `tools/` expose `get_tools()` returning descriptors:
`{"func", "title", "description", "input_schema"}`. Every handler has the
signature `async def handler(client, args) -> str`. `dispatch()` is the only
recovery point: any exception raised while handling a call becomes an
`Error: <message>` response with the error flag set.
"""
from __future__ import annotations

import logging
import pkgutil
from dataclasses import dataclass, field
from importlib import import_module
from pathlib import Path
from typing import Any

from core.linear_client import LinearClient  # type: ignore

logger = logging.getLogger(__name__)

TOOLS_PACKAGE = "tools"
TOOLS_PATH = Path(__file__).resolve().parent.parent / TOOLS_PACKAGE

_registry: dict[str, dict[str, Any]] | None = None


@dataclass
class ToolResponse:
    content: list[dict[str, str]] = field(default_factory=list)
    is_error: bool = False

    @classmethod
    def from_text(cls, text: str, is_error: bool = False) -> "ToolResponse":
        return cls(content=[{"type": "text", "text": text}], is_error=is_error)

    @property
    def text(self) -> str:
        return "".join(block.get("text", "") for block in self.content)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": list(self.content)}
        if self.is_error:
            result["isError"] = True
        return result


def load_tools() -> dict[str, dict[str, Any]]:
    """Import every public module of the tools package and merge their descriptors."""
    tools: dict[str, dict[str, Any]] = {}
    for _finder, name, _ispkg in pkgutil.iter_modules([str(TOOLS_PATH)]):
        if name.startswith("_"):
            continue
        module_name = f"{TOOLS_PACKAGE}.{name}"
        try:
            mod = import_module(module_name)
        except Exception:
            logger.exception(f"Failed to load tools from module {module_name}")
            continue
        if not hasattr(mod, "get_tools"):
            continue
        for tool_name, meta in mod.get_tools().items():
            if not callable(meta.get("func")):
                logger.warning(f"Tool {tool_name} in {module_name} did not provide a callable; skipping")
                continue
            if tool_name in tools:
                logger.warning(f"Tool {tool_name} from {module_name} overrides an earlier definition")
            tools[tool_name] = meta
    logger.info(f"Total tools registered: {len(tools)}")
    return tools


def get_registry() -> dict[str, dict[str, Any]]:
    global _registry
    if _registry is None:
        _registry = load_tools()
    return _registry


async def dispatch(name: str, arguments: dict[str, Any] | None = None, client=None) -> ToolResponse:
    """Run one tool call and always produce a response.

    A backend client is opened for the call unless one is passed in.
    """
    tool = get_registry().get(name)
    if tool is None:
        logger.info(f"Unknown tool requested: {name}")
        return ToolResponse.from_text(f"Unknown tool: {name}")

    args = dict(arguments or {})
    logger.info(f"Tool call {name} args={sorted(args)}")
    try:
        if client is None:
            async with LinearClient.from_env() as owned:
                text = await tool["func"](owned, args)
        else:
            text = await tool["func"](client, args)
    except Exception as e:
        logger.exception(f"Tool {name} failed")
        return ToolResponse.from_text(f"Error: {e}", is_error=True)
    return ToolResponse.from_text(text)
