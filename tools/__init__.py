# tools package for the Linear MCP server
# Modules in this package expose `get_tools() -> dict[str, dict]` mapping tool names to
# {"func", "title", "description", "input_schema"}; handlers are `async def (client, args) -> str`.
# core.dispatcher imports every public module here and serves the merged catalogue.
__all__ = []
