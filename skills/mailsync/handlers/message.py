"""
Message tool handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..helpers import (
  ErrorCategory,
  ToolResult,
  format_message_detail,
  format_message_summary,
  log_and_format_error,
)
from ..validation import ValidationError, opt_number, opt_string, req_bool, req_string

if TYPE_CHECKING:
  from ..controller import MailSyncController


def _require_selected_account(controller: MailSyncController) -> str:
  account_id = controller.state.selected_account_id
  if account_id is None:
    raise ValidationError("No account selected. Use select_account first.")
  return account_id


async def list_messages(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    limit = opt_number(args, "limit", 20)
    await controller.wait_idle()
    account_id = _require_selected_account(controller)

    store = controller.store.get_message_store(account_id)
    if store is None:
      return ToolResult(content=f"Account {account_id} is not active.", is_error=True)
    if store.is_fetching:
      return ToolResult(content="Messages are still loading.")
    if store.error is not None:
      return ToolResult(content=f"Could not load messages: {store.error}", is_error=True)

    messages = controller.selected_account_messages
    if not messages:
      return ToolResult(content="No messages.")
    lines = [format_message_summary(m) for m in messages[:limit]]
    header = f"Messages in {account_id} ({len(messages)}):\n"
    return ToolResult(content=header + "\n".join(lines))
  except Exception as e:
    return log_and_format_error("list_messages", e, ErrorCategory.MSG)


async def open_message(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    message_id = req_string(args, "message_id")
    account_id = opt_string(args, "account_id") or _require_selected_account(controller)

    if controller.store.find_message(account_id, message_id) is None:
      raise ValidationError(f"Message {message_id} not found in account {account_id}")
    controller.open_message(account_id, message_id)
    await controller.wait_idle()

    selected = controller.state.selected_message
    if selected is None or selected.id != message_id:
      return ToolResult(content=f"Message {message_id} is no longer available.", is_error=True)
    return ToolResult(content=format_message_detail(selected))
  except Exception as e:
    return log_and_format_error("open_message", e, ErrorCategory.MSG)


async def delete_message(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    message_id = req_string(args, "message_id")
    account_id = _require_selected_account(controller)
    if controller.store.find_message(account_id, message_id) is None:
      raise ValidationError(f"Message {message_id} not found in account {account_id}")
    controller.delete_message(message_id, account_id)
    await controller.wait_idle()
    return ToolResult(content=f"Message {message_id} deleted.")
  except Exception as e:
    return log_and_format_error("delete_message", e, ErrorCategory.MSG)


async def set_unseen_filter(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    enabled = req_bool(args, "enabled")
    controller.set_filter_not_seen(enabled)
    await controller.wait_idle()
    return ToolResult(content="Listing unread messages only." if enabled else "Listing all messages.")
  except Exception as e:
    return log_and_format_error("set_unseen_filter", e, ErrorCategory.MSG)
