from core.logging_config import setup_logging
from core.dispatcher import dispatch, get_registry
from dotenv import load_dotenv
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
import mcp.types as types
import asyncio
import sys

load_dotenv()  # Loads LINEAR_API_KEY (and friends) from .env into the environment

# Set up logging using core.logging_config
logger = setup_logging()

logger.info("MCP server bootstrap starting.")


class ToolCallFailed(Exception):
    """Carries an error response text; the MCP server reports it with isError=True."""


###################################################### MCP Tools ######################################################

logger.info("Loading MCP tools...")
tool_registry = get_registry()
logger.info(f"Total tools registered: {len(tool_registry)}, tool names: {sorted(tool_registry)}")

server = Server("linear-mcp-server", version="1.0.0")


@server.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(
            name=name,
            title=meta.get("title"),
            description=meta.get("description"),
            inputSchema=meta.get("input_schema") or {"type": "object", "properties": {}},
        )
        for name, meta in tool_registry.items()
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
    response = await dispatch(name, arguments or {})
    if response.is_error:
        # the low-level server turns a raised exception into a CallToolResult with isError=True
        raise ToolCallFailed(response.text)
    return [types.TextContent(type="text", text=block["text"]) for block in response.content]


###################################################### Startup ######################################################

async def run() -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    logger.info("Linear MCP Server running on stdio")
    try:
        asyncio.run(run())
        logger.info("MCP server shut down.")
    except Exception:
        logger.exception("Unhandled exception running MCP server")
        print("Unhandled exception occurred. See logs/ for details.", file=sys.stderr)
        sys.exit(-1)


if __name__ == "__main__":
    main()
