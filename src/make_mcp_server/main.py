"""Main entry point for the Make MCP Server."""

import asyncio
import logging
import sys
from typing import List, Optional, Sequence

import click
import mcp.types as mt
import yaml
from fastmcp import FastMCP
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import Tool

from .bridge import ScenarioBridge
from .config import Config, ConfigError
from .errors import ScenarioBridgeError
from .make_api import MakeClient
from .models import ToolCallResult, ToolDescriptor
from .results import ResultsClient

logger = logging.getLogger(__name__)


def _configure_logging(log_level: str):
    """Configure logging with the specified level and suppress third-party library noise"""
    # stdout carries the stdio transport, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def to_call_tool_result(result: ToolCallResult) -> mt.CallToolResult:
    return mt.CallToolResult(
        content=[mt.TextContent(type="text", text=result.tool_result)],
        structuredContent={"toolResult": result.tool_result},
        isError=False,
    )


def to_tool(descriptor: ToolDescriptor) -> Tool:
    return Tool(
        name=descriptor.name,
        description=descriptor.description,
        parameters=descriptor.input_schema,
    )


class ScenarioToolsMiddleware(Middleware):
    """Serves scenario tools, discovered fresh on every list request."""

    def __init__(self, bridge: ScenarioBridge):
        self.bridge = bridge

    async def on_list_tools(
        self,
        context: MiddlewareContext[mt.ListToolsRequest],
        call_next: CallNext[mt.ListToolsRequest, Sequence[Tool]],
    ) -> Sequence[Tool]:
        tools: List[Tool] = list(await call_next(context))
        descriptors = await self.bridge.discover_tools()
        tools.extend(to_tool(d) for d in descriptors)
        return tools


class MakeMCPServer:
    """Main Make MCP Server class exposing scenarios through FastMCP."""

    def __init__(self, config: Config):
        """Initialize the server with validated configuration."""
        self.config = config
        self.make_client = MakeClient.from_config(config)
        self.results_client = ResultsClient.from_config(config)
        self.bridge = ScenarioBridge(
            self.make_client, self.results_client, config.team_id
        )
        self.mcp: Optional[FastMCP] = None  # Will be initialized in initialize()

    def initialize(self) -> FastMCP:
        """Create the FastMCP app with scenario tools attached."""
        logger.info(f"Starting Make MCP Server with config: {self.config.redacted()}")
        self.mcp = FastMCP(
            name="Make",
            instructions=(
                "Each tool runs an on-demand Make scenario with the given inputs "
                "and returns the scenario's output."
            ),
        )
        self.mcp.add_middleware(ScenarioToolsMiddleware(self.bridge))
        # The stock tools/call handler turns every exception into an isError
        # result. Registered directly, an McpError from the bridge reaches the
        # client as a JSON-RPC error carrying its code.
        self.mcp._mcp_server.request_handlers[mt.CallToolRequest] = (
            self._handle_call_tool
        )
        return self.mcp

    async def _handle_call_tool(self, request: mt.CallToolRequest) -> mt.ServerResult:
        result = await self.bridge.invoke(
            request.params.name, request.params.arguments or {}
        )
        return mt.ServerResult(to_call_tool_result(result))

    async def list_tools(self) -> List[ToolDescriptor]:
        return await self.bridge.discover_tools()

    async def run(self) -> None:
        """Run the MCP server over stdio."""
        app = self.mcp or self.initialize()
        try:
            await app.run_stdio_async(show_banner=False)
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        await self.make_client.aclose()
        await self.results_client.aclose()


@click.command()
@click.option(
    "--config", "-c", default=None, help="Optional YAML configuration file path"
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level (overrides LOG_LEVEL)",
)
@click.option(
    "--list-tools",
    is_flag=True,
    help="Discover scenario tools once, print them as YAML and exit",
)
def main(config: Optional[str], log_level: Optional[str], list_tools: bool) -> None:
    """Start the Make MCP Server."""
    try:
        server_config = Config.load(config)
    except ConfigError as e:
        click.echo(f"FATAL: {e}", err=True)
        sys.exit(1)

    _configure_logging(log_level or server_config.log_level)

    async def _main() -> None:
        server = MakeMCPServer(server_config)

        if list_tools:
            try:
                tools = await server.list_tools()
            finally:
                await server.aclose()
            click.echo(
                yaml.dump(
                    [tool.to_dict() for tool in tools],
                    sort_keys=False,
                    default_flow_style=False,
                    allow_unicode=True,
                )
            )
            return

        await server.run()

    try:
        asyncio.run(_main())
    except ScenarioBridgeError as e:
        click.echo(f"FATAL: {e.message}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
