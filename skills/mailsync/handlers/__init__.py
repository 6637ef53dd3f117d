"""Handler dispatch table: maps tool names to handler functions."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from ..helpers import ToolResult
from . import account, message

if TYPE_CHECKING:
  from ..controller import MailSyncController

# Build dispatch table from the coroutine functions each handler module defines
DISPATCH: dict[str, Any] = {}

for mod in (account, message):
  for name, fn in inspect.getmembers(mod, inspect.iscoroutinefunction):
    if not name.startswith("_") and fn.__module__ == mod.__name__:
      DISPATCH[name] = fn


async def dispatch_tool(
  controller: MailSyncController, name: str, arguments: dict[str, Any]
) -> ToolResult:
  """Look up and execute a tool handler by name."""
  handler = DISPATCH.get(name.replace("-", "_"))
  if handler is None:
    return ToolResult(content=f"Unknown tool: {name}", is_error=True)
  return await handler(controller, arguments)
