"""
In-process state store for the mailsync skill.

State mutations are synchronous and replace the snapshot wholesale, so a
reader never observes a half-applied change. After each mutation, listeners
are notified. Only the controller's dispatcher task mutates a store.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

from .types import (
  Account,
  AlertData,
  ConnectionStatus,
  MailSyncState,
  Message,
  MessageStore,
  initial_state,
)

if TYPE_CHECKING:
  from collections.abc import Callable


class MailSyncStore:
  def __init__(self, state: MailSyncState | None = None) -> None:
    self._state = state or initial_state()
    self._listeners: list[Callable[[], None]] = []

  # ---------------------------------------------------------------------------
  # Public API
  # ---------------------------------------------------------------------------

  def get_state(self) -> MailSyncState:
    return self._state

  def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
    self._listeners.append(listener)

    def unsubscribe() -> None:
      with contextlib.suppress(ValueError):
        self._listeners.remove(listener)

    return unsubscribe

  def _notify(self) -> None:
    for fn in list(self._listeners):
      fn()

  def _update(self, **updates: object) -> None:
    self._state = self._state.model_copy(update=updates)
    self._notify()

  # ---------------------------------------------------------------------------
  # Accounts
  # ---------------------------------------------------------------------------

  def set_active_accounts(self, accounts: list[Account]) -> None:
    self._update(active_accounts=list(accounts))

  def set_archived_accounts(self, accounts: list[Account]) -> None:
    self._update(archived_accounts=list(accounts))

  def find_account(self, account_id: str) -> Account | None:
    for account in (*self._state.active_accounts, *self._state.archived_accounts):
      if account.id == account_id:
        return account
    return None

  def get_active_account(self, account_id: str) -> Account | None:
    for account in self._state.active_accounts:
      if account.id == account_id:
        return account
    return None

  # ---------------------------------------------------------------------------
  # Message stores
  # ---------------------------------------------------------------------------

  def get_message_store(self, account_id: str) -> MessageStore | None:
    return self._state.account_messages.get(account_id)

  def set_message_store(self, account_id: str, message_store: MessageStore) -> None:
    self._update(account_messages={**self._state.account_messages, account_id: message_store})

  def remove_message_store(self, account_id: str) -> None:
    if account_id not in self._state.account_messages:
      return
    stores = {k: v for k, v in self._state.account_messages.items() if k != account_id}
    self._update(account_messages=stores)

  def set_messages(self, account_id: str, messages: list[Message]) -> None:
    existing = self._state.account_messages.get(account_id)
    if existing is None:
      return
    self.set_message_store(account_id, existing.model_copy(update={"messages": messages}))

  def set_fetching(self, account_id: str, is_fetching: bool) -> None:
    existing = self._state.account_messages.get(account_id)
    if existing is None:
      return
    self.set_message_store(account_id, existing.model_copy(update={"is_fetching": is_fetching}))

  def find_message(self, account_id: str, message_id: str) -> Message | None:
    message_store = self._state.account_messages.get(account_id)
    if message_store is None:
      return None
    return message_store.find(message_id)

  # ---------------------------------------------------------------------------
  # Connection status
  # ---------------------------------------------------------------------------

  def set_channels_status(self, statuses: dict[str, ConnectionStatus]) -> None:
    self._update(channels_status=dict(statuses))

  def get_connection_status(self, account_id: str) -> ConnectionStatus:
    return self._state.channels_status.get(account_id, "closed")

  # ---------------------------------------------------------------------------
  # Selection
  # ---------------------------------------------------------------------------

  def set_selected_account(self, account_id: str | None) -> None:
    self._update(selected_account_id=account_id)

  def set_selected_message(self, message: Message | None) -> None:
    self._update(selected_message=message)

  def clear_selection(self) -> None:
    self._update(selected_account_id=None, selected_message=None)

  def set_filter_not_seen(self, value: bool) -> None:
    self._update(filter_not_seen=value)

  # ---------------------------------------------------------------------------
  # Advisory
  # ---------------------------------------------------------------------------

  def set_alert(self, alert: AlertData | None) -> None:
    self._update(alert=alert)

  # ---------------------------------------------------------------------------
  # Reset
  # ---------------------------------------------------------------------------

  def reset_state(self) -> None:
    self._state = initial_state()
    self._notify()
