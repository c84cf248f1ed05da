import os
import logging
import time
from typing import Dict, Optional

import anyio
import click

# Starlette and uvicorn imports
from starlette.applications import Starlette
from starlette.routing import Route, Mount

import uvicorn

# MCP imports
from mcp.server import Server
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    TextContent,
    Tool,
)

from workflow_tools.plugin import registry, discover_and_register_tools

from config import env

from server.tool_result_processor import process_tool_result

# Create the server
server = Server("workflow-mcp")


@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in registry.get_all_instances()
    ]


@server.call_tool()
async def call_tool_handler(name: str, arguments: dict) -> list[TextContent]:
    logging.info(f"Tool call: {name} with arguments: {arguments}")

    tool = registry.get_tool_instance(name)
    if not tool:
        available_tools = sorted(registry.tools)
        error_msg = f"Error: Tool '{name}' not found. Available tools: {', '.join(available_tools) if available_tools else 'None'}"
        logging.error(error_msg)
        return [TextContent(type="text", text=error_msg)]

    start_time = time.time()
    try:
        result = await tool.execute_tool(arguments or {})
        duration_ms = (time.time() - start_time) * 1000
        logging.info(f"Tool '{name}' executed in {duration_ms:.2f}ms")
        return process_tool_result(result)
    except Exception as e:
        logging.exception(f"Error executing tool {name}")
        return [TextContent(type="text", text=f"Error executing tool {name}: {str(e)}")]


@server.list_prompts()
async def list_prompts() -> list[Prompt]:
    return [
        Prompt(
            name=prompt.name,
            description=prompt.description,
            arguments=[
                PromptArgument(
                    name=arg["name"],
                    description=arg.get("description", ""),
                    required=arg.get("required", False),
                )
                for arg in prompt.arguments
            ],
        )
        for prompt in registry.get_all_prompts()
    ]


@server.get_prompt()
async def get_prompt(name: str, arguments: Optional[Dict[str, str]] = None) -> GetPromptResult:
    logging.info(f"Prompt request: {name} with arguments: {arguments}")

    prompt = registry.get_prompt_instance(name)
    if not prompt:
        raise ValueError(f"Unknown prompt: {name}")

    messages = await prompt.render(arguments or {})
    return GetPromptResult(
        description=prompt.description,
        messages=[
            PromptMessage(
                role=message.get("role", "user"),
                content=TextContent(type="text", text=message["text"]),
            )
            for message in messages
        ],
    )


# Setup SSE transport
sse = SseServerTransport("/messages/")


async def handle_sse(request):
    async with sse.connect_sse(
        request.scope, request.receive, request._send
    ) as streams:
        try:
            await server.run(
                streams[0],
                streams[1],
                server.create_initialization_options(),
                raise_exceptions=False,
            )
        except Exception as e:
            logging.error(f"SSE handler error: {type(e).__name__}: {e}")


routes = [
    Route("/sse", endpoint=handle_sse),
    Mount("/messages/", app=sse.handle_post_message),
]

# Create Starlette app
starlette_app = Starlette(routes=routes)


async def run_stdio():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )


def setup(project_path: Optional[str] = None, log_level: Optional[str] = None):
    """Load the environment, configure logging and register tools.

    An explicit project path is applied before loading, so its .env file is
    read, and again after, so it wins over environment variables.
    """
    if project_path:
        project_path = os.path.expanduser(project_path)
        env.set_setting("project_path", project_path)
    env.load()
    if project_path:
        env.set_setting("project_path", project_path)

    log_dir = env.get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    # basicConfig is a no-op once the root logger has handlers, so reset them
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # File handler
    file_handler = logging.FileHandler(str(log_file.absolute()))
    file_handler.setLevel(logging.DEBUG)

    # Console handler; stdout carries the MCP stream, so log to stderr
    console_handler = logging.StreamHandler()
    console_handler.setLevel((log_level or env.get_setting("log_level")).upper())

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info(f"Initialized environment: project path={env.get_project_path()}")
    logger.info(f"Workflow directory: {env.get_workflow_dir()}")

    discover_and_register_tools()


@click.command()
@click.argument("project_path", required=False, type=click.Path(file_okay=False))
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse"]),
    default="stdio",
    help="Transport to serve MCP over",
)
@click.option("--port", default=None, type=int, help="Port to run the SSE server on")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Console log level",
)
def main(
    project_path: Optional[str] = None,
    transport: str = "stdio",
    port: Optional[int] = None,
    log_level: Optional[str] = None,
) -> None:
    """Serve workflows of PROJECT_PATH (default: current directory) over MCP."""
    setup(project_path, log_level)

    logging.info(f"Workflow MCP server starting for project: {env.get_project_path()}")

    if transport == "sse":
        if port is None:
            port = env.get_setting("server_port")
        logging.info(f"Starting SSE server on port {port}")
        uvicorn.run(starlette_app, host="0.0.0.0", port=port)
    else:
        anyio.run(run_stdio)


if __name__ == "__main__":
    main()
