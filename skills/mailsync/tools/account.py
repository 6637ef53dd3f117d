"""
Account tools (8 tools).
"""

from __future__ import annotations

from mcp.types import Tool

_ACCOUNT_ID = {
  "type": "object",
  "properties": {
    "account_id": {"type": "string", "description": "Account ID"},
  },
  "required": ["account_id"],
}

account_tools: list[Tool] = [
  Tool(
    name="list_accounts",
    description="List active and archived mail accounts with channel and inbox status",
    inputSchema={"type": "object", "properties": {}},
  ),
  Tool(
    name="get_status",
    description="Get the current selection, unseen filter and any pending advisory",
    inputSchema={"type": "object", "properties": {}},
  ),
  Tool(
    name="select_account",
    description="Select the account whose messages are listed and opened",
    inputSchema=_ACCOUNT_ID,
  ),
  Tool(
    name="activate_account",
    description="Activate an archived account (subject to the active account limit)",
    inputSchema=_ACCOUNT_ID,
  ),
  Tool(
    name="archive_account",
    description="Archive an active account and stop listening for its messages",
    inputSchema=_ACCOUNT_ID,
  ),
  Tool(
    name="remove_account",
    description="Remove an account from this device without deleting it on the server",
    inputSchema=_ACCOUNT_ID,
  ),
  Tool(
    name="delete_account",
    description="Delete an account on the server and remove it from this device",
    inputSchema=_ACCOUNT_ID,
  ),
  Tool(
    name="refresh_account",
    description="Refresh an account: restart its live channel and reload its messages",
    inputSchema=_ACCOUNT_ID,
  ),
]
