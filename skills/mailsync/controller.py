"""
Mailbox controller: wires the store, dispatcher, bridge and pipelines.

All collaborators are passed in; nothing is looked up globally. Public
methods never mutate state directly: they queue a call on the dispatcher so
user actions, push events and request completions are applied one at a time
in arrival order. Await `wait_idle()` to observe their effect.

Usage:
    controller = MailSyncController(accounts, messages, listener, notifications)
    await controller.start()
    controller.select_account(account_id)
    controller.select_message(message_id)
    await controller.wait_idle()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .config import MailSyncConfig
from .events.bridge import ListenerBridge
from .events.dispatcher import EventDispatcher
from .events.types import (
  ActivationRequest,
  ActiveAccountsChanged,
  ArchivedAccountsChanged,
  ChannelsStatusChanged,
  MessageDeleted,
  MessageReceived,
  MessagesFetched,
  MessageUpdated,
)
from .notifications import NotificationDispatcher
from .state.store import MailSyncStore
from .state.sync import HostSync
from .state.types import Message
from .sync.initial_fetch import InitialFetcher
from .sync.lifecycle import AccountLifecycle
from .sync.merge import MessageMerger
from .sync.reconciler import AccountReconciler
from .sync.selection import SelectionPipeline

if TYPE_CHECKING:
  from collections.abc import Awaitable, Callable

  from .client.services import (
    AccountService,
    MessageListenerService,
    MessageService,
    NotificationCenter,
  )
  from .state.types import Account, ConnectionStatus, MailSyncState

log = logging.getLogger("skill.mailsync.controller")


class MailSyncController:
  def __init__(
    self,
    account_service: AccountService,
    message_service: MessageService,
    listener_service: MessageListenerService,
    notification_center: NotificationCenter,
    config: MailSyncConfig | None = None,
    push_state: Callable[[dict[str, Any]], Awaitable[None]] | None = None,
  ) -> None:
    self.config = config or MailSyncConfig()
    self.store = MailSyncStore()
    self._account_service = account_service
    self._listener_service = listener_service
    self._notification_center = notification_center

    self._dispatcher = EventDispatcher()
    self._bridge = ListenerBridge(self._dispatcher)
    self._notifier = NotificationDispatcher(notification_center, self._dispatcher, self.config)
    self._merger = MessageMerger(self.store, self._notifier)
    self._fetcher = InitialFetcher(self.store, message_service, self._dispatcher, self._merger)
    self._reconciler = AccountReconciler(self.store, self._fetcher)
    self._selection = SelectionPipeline(
      self.store, message_service, self._dispatcher, self._merger
    )
    self._lifecycle = AccountLifecycle(
      self.store,
      self._dispatcher,
      self.config,
      account_service,
      message_service,
      listener_service,
      self._fetcher,
      self._merger,
    )
    self._host_sync = (
      HostSync(self.store, push_state, self.config.host_sync_debounce_s) if push_state else None
    )
    self._started = False
    self._register_handlers()

  # ---------------------------------------------------------------------------
  # Event handlers
  # ---------------------------------------------------------------------------

  def _register_handlers(self) -> None:
    on = self._dispatcher.on

    @on(ActiveAccountsChanged)
    def on_active_accounts(event: ActiveAccountsChanged) -> None:
      self._reconciler.on_active_accounts(event.accounts)

    @on(ArchivedAccountsChanged)
    def on_archived_accounts(event: ArchivedAccountsChanged) -> None:
      self._reconciler.on_archived_accounts(event.accounts)

    @on(MessageReceived)
    def on_message_received(event: MessageReceived) -> None:
      self._merger.upsert(Message(data=event.message), event.account.id)

    @on(MessageDeleted)
    def on_message_deleted(event: MessageDeleted) -> None:
      self._merger.remove(event.message_id, event.account.id)

    @on(ChannelsStatusChanged)
    def on_channels_status(event: ChannelsStatusChanged) -> None:
      self.store.set_channels_status(event.statuses)

    @on(ActivationRequest)
    def on_activation_request(event: ActivationRequest) -> None:
      self._open_message(event.account_id, event.message_id)

    on(MessagesFetched)(self._fetcher.on_fetched)
    on(MessageUpdated)(self._selection.on_message_updated)

  # ---------------------------------------------------------------------------
  # Lifecycle
  # ---------------------------------------------------------------------------

  async def start(self) -> None:
    """Start the dispatcher and subscribe to every external stream."""
    if self._started:
      return
    self._dispatcher.start()
    self._bridge.attach_account_service(self._account_service)
    self._bridge.attach_listener_service(self._listener_service)
    self._bridge.attach_notification_center(self._notification_center)
    if self._host_sync:
      self._host_sync.start()
    self._started = True
    log.info("Mailbox controller started")

  async def stop(self) -> None:
    if not self._started:
      return
    if self._host_sync:
      self._host_sync.stop()
    await self._dispatcher.stop()
    self._started = False
    log.info("Mailbox controller stopped")

  async def wait_idle(self) -> None:
    await self._dispatcher.wait_idle()

  # ---------------------------------------------------------------------------
  # Selection
  # ---------------------------------------------------------------------------

  def select_account(self, account_id: str | None) -> None:
    self._dispatcher.call_soon(self._selection.select_account, account_id)

  def select_message(self, message_id: str | None) -> None:
    """Select a message of the selected account, or clear the selection with None."""
    self._dispatcher.call_soon(self._select_message, message_id)

  def _select_message(self, message_id: str | None) -> None:
    if message_id is None:
      self._selection.select_message(None)
      return
    account_id = self.store.get_state().selected_account_id
    message = self.store.find_message(account_id, message_id) if account_id else None
    if message is None:
      log.warning("Cannot select unknown message %s", message_id)
      return
    self._selection.select_message(message)

  def open_message(self, account_id: str, message_id: str) -> None:
    """Select an account and one of its messages, as when a notification is opened."""
    self._dispatcher.post(ActivationRequest(account_id=account_id, message_id=message_id))

  def _open_message(self, account_id: str, message_id: str) -> None:
    account = self.store.get_active_account(account_id)
    if account is None:
      return
    message = self.store.find_message(account.id, message_id)
    if message is None:
      return
    self._selection.select_account(account.id)
    self._selection.select_message(message)

  def set_filter_not_seen(self, value: bool) -> None:
    self._dispatcher.call_soon(self.store.set_filter_not_seen, value)

  # ---------------------------------------------------------------------------
  # Account and message mutations
  # ---------------------------------------------------------------------------

  def activate_account(self, account_id: str) -> None:
    self._with_account(account_id, self._lifecycle.activate_account)

  def archive_account(self, account_id: str) -> None:
    self._with_account(account_id, self._lifecycle.archive_account)

  def remove_account(self, account_id: str) -> None:
    self._with_account(account_id, self._lifecycle.remove_account)

  def delete_account(self, account_id: str) -> None:
    self._with_account(account_id, self._lifecycle.delete_account)

  def refresh_account(self, account_id: str) -> None:
    self._with_account(account_id, self._lifecycle.refresh_account)

  def delete_message(self, message_id: str, account_id: str | None = None) -> None:
    """Delete a message of the given account (default: the selected one)."""

    def run() -> None:
      target = account_id or self.store.get_state().selected_account_id
      account = self.store.get_active_account(target) if target else None
      if account is None:
        log.warning("Cannot delete message %s: no active account %s", message_id, target)
        return
      self._lifecycle.delete_message(message_id, account)

    self._dispatcher.call_soon(run)

  def dismiss_alert(self) -> None:
    self._dispatcher.call_soon(self._lifecycle.dismiss_alert)

  def _with_account(self, account_id: str, action: Callable[[Account], Any]) -> None:
    def run() -> None:
      account = self.store.find_account(account_id)
      if account is None:
        log.warning("Unknown account %s", account_id)
        return
      action(account)

    self._dispatcher.call_soon(run)

  # ---------------------------------------------------------------------------
  # Views
  # ---------------------------------------------------------------------------

  @property
  def state(self) -> MailSyncState:
    return self.store.get_state()

  @property
  def selected_account_messages(self) -> list[Message]:
    s = self.store.get_state()
    if s.selected_account_id is None:
      return []
    message_store = s.account_messages.get(s.selected_account_id)
    if message_store is None:
      return []
    messages = message_store.messages
    if s.filter_not_seen:
      messages = [m for m in messages if not m.data.seen]
    return sorted(messages, key=lambda m: m.data.created_at, reverse=True)

  @property
  def selected_account_connection_is_active(self) -> bool:
    account_id = self.store.get_state().selected_account_id
    if account_id is None:
      return False
    return self.store.get_connection_status(account_id) == "opened"

  @property
  def can_activate_accounts(self) -> bool:
    return self._lifecycle.can_activate_accounts

  def connection_status(self, account_id: str) -> ConnectionStatus:
    return self.store.get_connection_status(account_id)
