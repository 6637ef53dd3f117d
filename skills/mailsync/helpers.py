"""
Shared formatting and error handling helpers for the tool surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from .state.types import Account, ConnectionStatus, Message, MessageAddress, MessageStore

log = logging.getLogger("skill.mailsync.helpers")


# ---------------------------------------------------------------------------
# Tool result
# ---------------------------------------------------------------------------


@dataclass
class ToolResult:
  content: str
  is_error: bool = False


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_address(addr: MessageAddress) -> str:
  if addr.name.strip():
    return f"{addr.name} <{addr.address}>"
  return addr.address


def format_account(account: Account, status: ConnectionStatus, store: MessageStore | None) -> str:
  """Format an account as one summary line."""
  line = f"{account.id} | {account.address or '(no address)'} | channel: {status}"
  if store is None:
    return line + " | archived"
  if store.is_fetching:
    return line + " | loading"
  if store.error is not None:
    return line + f" | error: {store.error}"
  unseen = sum(1 for m in store.messages if not m.data.seen)
  return line + f" | {len(store.messages)} messages ({unseen} unread)"


def format_message_summary(message: Message) -> str:
  """Format a single message as a summary line."""
  data = message.data
  unread = "" if data.seen else "[UNREAD] "
  attach = " [+att]" if data.has_attachments else ""
  date_str = data.created_at.strftime("%Y-%m-%d %H:%M")
  return (
    f"{unread}ID:{data.id} | {date_str} | From: {format_address(data.from_)} "
    f"| Subject: {data.subject}{attach}"
  )


def format_message_detail(message: Message) -> str:
  """Format a full message for display."""
  data = message.data
  lines = [
    f"ID: {data.id}",
    f"From: {format_address(data.from_)}",
  ]
  if data.to:
    lines.append(f"To: {', '.join(format_address(a) for a in data.to)}")
  if data.cc:
    lines.append(f"CC: {', '.join(format_address(a) for a in data.cc)}")
  lines.append(f"Subject: {data.subject}")
  lines.append(f"Date: {data.created_at.isoformat()}")
  lines.append(f"Seen: {'Yes' if data.seen else 'No'}")

  if data.attachments:
    lines.append(f"Attachments: {len(data.attachments)}")
    for att in data.attachments:
      lines.append(f"  {att.filename} ({att.content_type}, {att.size} B)")

  lines.append("")
  if message.is_complete and data.text:
    lines.append(data.text)
  elif data.intro:
    lines.append(f"[Preview] {data.intro}")
  return "\n".join(lines)


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


class ErrorCategory(str, Enum):
  ACCOUNT = "ACCOUNT"
  MSG = "MSG"
  STATUS = "STATUS"
  VALIDATION = "VALIDATION"


def log_and_format_error(
  function_name: str,
  error: Exception,
  category: str | ErrorCategory | None = None,
) -> ToolResult:
  prefix = category.value if isinstance(category, ErrorCategory) else (category or "GEN")
  hash_val = sum(ord(c) for c in function_name) % 1000
  error_code = f"{prefix}-ERR-{hash_val:03d}"

  log.error("[MCP] Error in %s - Code: %s - %s", function_name, error_code, error)

  from .validation import ValidationError

  if isinstance(error, ValidationError):
    user_message = str(error)
  else:
    user_message = f"An error occurred (code: {error_code}). Check logs for details."

  return ToolResult(content=user_message, is_error=True)
