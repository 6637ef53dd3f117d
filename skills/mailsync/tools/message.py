"""
Message tools (5 tools).
"""

from __future__ import annotations

from mcp.types import Tool

message_tools: list[Tool] = [
  Tool(
    name="list_messages",
    description="List messages of the selected account, newest first",
    inputSchema={
      "type": "object",
      "properties": {
        "limit": {"type": "number", "description": "Maximum results", "default": 20},
      },
    },
  ),
  Tool(
    name="open_message",
    description="Open a message: marks it seen and loads its full body",
    inputSchema={
      "type": "object",
      "properties": {
        "message_id": {"type": "string", "description": "Message ID"},
        "account_id": {
          "type": "string",
          "description": "Account ID (defaults to the selected account)",
        },
      },
      "required": ["message_id"],
    },
  ),
  Tool(
    name="delete_message",
    description="Delete a message of the selected account",
    inputSchema={
      "type": "object",
      "properties": {
        "message_id": {"type": "string", "description": "Message ID"},
      },
      "required": ["message_id"],
    },
  ),
  Tool(
    name="set_unseen_filter",
    description="Show only unread messages in list_messages, or all messages",
    inputSchema={
      "type": "object",
      "properties": {
        "enabled": {"type": "boolean", "description": "True to list unread messages only"},
      },
      "required": ["enabled"],
    },
  ),
  Tool(
    name="dismiss_alert",
    description="Dismiss the pending advisory",
    inputSchema={"type": "object", "properties": {}},
  ),
]
