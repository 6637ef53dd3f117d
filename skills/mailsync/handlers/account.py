"""
Account and status tool handlers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..helpers import ErrorCategory, ToolResult, format_account, log_and_format_error
from ..validation import ValidationError, req_string

if TYPE_CHECKING:
  from ..controller import MailSyncController
  from ..state.types import Account


def _require_account(controller: MailSyncController, args: dict[str, Any]) -> Account:
  account_id = req_string(args, "account_id")
  account = controller.store.find_account(account_id)
  if account is None:
    raise ValidationError(f"Unknown account: {account_id}")
  return account


def _alert_result(controller: MailSyncController, fallback: str) -> ToolResult:
  alert = controller.state.alert
  if alert is None:
    return ToolResult(content=fallback)
  text = alert.title if not alert.message else f"{alert.title}: {alert.message}"
  return ToolResult(content=text, is_error=True)


async def list_accounts(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    await controller.wait_idle()
    s = controller.state
    if not s.active_accounts and not s.archived_accounts:
      return ToolResult(content="No accounts.")

    lines = [f"Active accounts ({len(s.active_accounts)}):"]
    for a in s.active_accounts:
      store = s.account_messages.get(a.id)
      lines.append("  " + format_account(a, controller.connection_status(a.id), store))
    if s.archived_accounts:
      lines.append(f"Archived accounts ({len(s.archived_accounts)}):")
      for a in s.archived_accounts:
        lines.append("  " + format_account(a, controller.connection_status(a.id), None))
    return ToolResult(content="\n".join(lines))
  except Exception as e:
    return log_and_format_error("list_accounts", e, ErrorCategory.ACCOUNT)


async def get_status(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    await controller.wait_idle()
    s = controller.state
    lines = [
      f"Selected account: {s.selected_account_id or 'None'}",
      f"Selected message: {s.selected_message.id if s.selected_message else 'None'}",
      f"Live channel active: {'Yes' if controller.selected_account_connection_is_active else 'No'}",
      f"Unread only: {'Yes' if s.filter_not_seen else 'No'}",
      f"Can activate accounts: {'Yes' if controller.can_activate_accounts else 'No'}",
    ]
    if s.alert:
      lines.append(f"Alert: {s.alert.title}" + (f": {s.alert.message}" if s.alert.message else ""))
    return ToolResult(content="\n".join(lines))
  except Exception as e:
    return log_and_format_error("get_status", e, ErrorCategory.STATUS)


async def select_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    if controller.store.get_active_account(account.id) is None:
      raise ValidationError(f"Account {account.id} is archived. Activate it first.")
    controller.select_account(account.id)
    await controller.wait_idle()
    return ToolResult(content=f"Selected account {account.id}.")
  except Exception as e:
    return log_and_format_error("select_account", e, ErrorCategory.ACCOUNT)


async def activate_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    controller.activate_account(account.id)
    await controller.wait_idle()
    return _alert_result(controller, f"Activation of {account.id} requested.")
  except Exception as e:
    return log_and_format_error("activate_account", e, ErrorCategory.ACCOUNT)


async def archive_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    controller.archive_account(account.id)
    await controller.wait_idle()
    return ToolResult(content=f"Archive of {account.id} requested.")
  except Exception as e:
    return log_and_format_error("archive_account", e, ErrorCategory.ACCOUNT)


async def remove_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    controller.remove_account(account.id)
    await controller.wait_idle()
    return ToolResult(content=f"Removal of {account.id} requested.")
  except Exception as e:
    return log_and_format_error("remove_account", e, ErrorCategory.ACCOUNT)


async def delete_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    controller.delete_account(account.id)
    await controller.wait_idle()
    return _alert_result(controller, f"Deletion of {account.id} requested.")
  except Exception as e:
    return log_and_format_error("delete_account", e, ErrorCategory.ACCOUNT)


async def refresh_account(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    account = _require_account(controller, args)
    controller.refresh_account(account.id)
    await controller.wait_idle()
    return _alert_result(controller, f"Refreshed {account.id}.")
  except Exception as e:
    return log_and_format_error("refresh_account", e, ErrorCategory.ACCOUNT)


async def dismiss_alert(controller: MailSyncController, args: dict[str, Any]) -> ToolResult:
  try:
    controller.dismiss_alert()
    await controller.wait_idle()
    return ToolResult(content="Alert dismissed.")
  except Exception as e:
    return log_and_format_error("dismiss_alert", e, ErrorCategory.STATUS)
