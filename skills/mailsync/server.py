"""
MCP server for the mailsync controller.

Uses the official `mcp` Python SDK. Handles tools/list and tools/call; every
call is dispatched against the controller the server was built with.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .config import load_config_file
from .controller import MailSyncController
from .handlers import dispatch_tool
from .tools import ALL_TOOLS

if TYPE_CHECKING:
  from collections.abc import Callable

log = logging.getLogger("skill.mailsync.server")


def create_mcp_server(controller: MailSyncController) -> Server:
  """Create and configure the MCP server with all tool handlers."""
  server = Server("mailsync-skill")

  @server.list_tools()
  async def list_tools() -> list[Tool]:
    return ALL_TOOLS

  @server.call_tool()
  async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
    result = await dispatch_tool(controller, name, arguments or {})
    return [TextContent(type="text", text=result.content)]

  return server


def load_services_factory(spec: str) -> Callable[[], Any]:
  """Resolve a `package.module:callable` reference to the services factory."""
  module_name, _, attr = spec.partition(":")
  if not module_name or not attr:
    raise ValueError(f"Invalid services factory '{spec}', expected 'module:callable'")
  module = importlib.import_module(module_name)
  factory = getattr(module, attr, None)
  if not callable(factory):
    raise ValueError(f"'{spec}' is not callable")
  return factory


async def build_controller(services_spec: str, config_path: str | None = None) -> MailSyncController:
  """Build a controller from a services factory.

  The factory returns the account service, message service, listener service
  and notification center, in that order. It may be sync or async.
  """
  factory = load_services_factory(services_spec)
  services = factory()
  if hasattr(services, "__await__"):
    services = await services
  account_service, message_service, listener_service, notification_center = services
  config = load_config_file(config_path) if config_path else None
  return MailSyncController(
    account_service,
    message_service,
    listener_service,
    notification_center,
    config=config,
  )


async def run_server(controller: MailSyncController) -> None:
  """Run the MCP server on stdio until the client disconnects."""
  server = create_mcp_server(controller)
  await controller.start()
  try:
    async with stdio_server() as (read_stream, write_stream):
      await server.run(read_stream, write_stream, server.create_initialization_options())
  finally:
    await controller.stop()
