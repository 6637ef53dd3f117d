"""
Account and message lifecycle mutations requested by the user.

Most are pass-throughs to the account service; its snapshot streams bring the
resulting membership change back through the reconciler. The exceptions are
the activation limit, the advisories raised from backend-reported errors,
refresh (which restarts the listener channel and the bulk fetch) and message
deletion (which removes locally before asking the backend).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ApiError
from ..state.types import AlertData

if TYPE_CHECKING:
  from collections.abc import Awaitable

  from ..client.services import AccountService, MessageListenerService, MessageService
  from ..config import MailSyncConfig
  from ..events.dispatcher import EventDispatcher
  from ..state.store import MailSyncStore
  from ..state.types import Account
  from .initial_fetch import InitialFetcher
  from .merge import MessageMerger

log = logging.getLogger("skill.mailsync.sync.lifecycle")

ACTIVE_LIMIT_TITLE = "Max Active Account limit reached"


class AccountLifecycle:
  def __init__(
    self,
    store: MailSyncStore,
    dispatcher: EventDispatcher,
    config: MailSyncConfig,
    account_service: AccountService,
    message_service: MessageService,
    listener_service: MessageListenerService,
    fetcher: InitialFetcher,
    merger: MessageMerger,
  ) -> None:
    self._store = store
    self._dispatcher = dispatcher
    self._config = config
    self._accounts = account_service
    self._messages = message_service
    self._listener = listener_service
    self._fetcher = fetcher
    self._merger = merger

  @property
  def can_activate_accounts(self) -> bool:
    return len(self._store.get_state().active_accounts) < self._config.max_active_accounts

  # ---------------------------------------------------------------------------
  # Pass-throughs
  # ---------------------------------------------------------------------------

  def archive_account(self, account: Account) -> None:
    self._dispatcher.spawn(
      self._pass_through("archive_account", account, self._accounts.archive_account(account)),
      name=f"archive-{account.id}",
    )

  def remove_account(self, account: Account) -> None:
    self._dispatcher.spawn(
      self._pass_through("remove_account", account, self._accounts.remove_account(account)),
      name=f"remove-{account.id}",
    )

  def activate_account(self, account: Account) -> bool:
    """Ask the service to activate an account, unless the active limit is reached."""
    if not self.can_activate_accounts:
      limit = self._config.max_active_accounts
      self._store.set_alert(
        AlertData(
          title=ACTIVE_LIMIT_TITLE,
          message=f"You cannot activate more than {limit} accounts",
        )
      )
      return False
    self._dispatcher.spawn(
      self._pass_through("activate_account", account, self._accounts.activate_account(account)),
      name=f"activate-{account.id}",
    )
    return True

  async def _pass_through(self, operation: str, account: Account, request: Awaitable[None]) -> None:
    try:
      await request
    except Exception as e:
      log.error("%s %s failed: %s", operation, account.id, e)

  # ---------------------------------------------------------------------------
  # Delete / refresh
  # ---------------------------------------------------------------------------

  def delete_account(self, account: Account) -> None:
    self._dispatcher.spawn(self._delete_account(account), name=f"delete-{account.id}")

  async def _delete_account(self, account: Account) -> None:
    error: Exception | None = None
    try:
      await self._accounts.delete_and_remove_account(account)
    except Exception as e:
      log.error("delete_account %s failed: %s", account.id, e)
      error = e
    self._dispatcher.call_soon(self._on_delete_done, error)

  def _on_delete_done(self, error: Exception | None) -> None:
    self._store.set_alert(None)
    if isinstance(error, ApiError):
      self._store.set_alert(AlertData(title=error.message))

  def refresh_account(self, account: Account) -> None:
    self._dispatcher.spawn(self._refresh_account(account), name=f"refresh-{account.id}")

  async def _refresh_account(self, account: Account) -> None:
    try:
      success = await self._accounts.refresh_account(account)
    except Exception as e:
      log.error("refresh_account %s failed: %s", account.id, e)
      if isinstance(e, ApiError):
        self._dispatcher.call_soon(self._store.set_alert, AlertData(title=e.message))
      return
    if success:
      self._dispatcher.call_soon(self._on_refreshed, account)
    else:
      log.warning("refresh_account %s was not accepted", account.id)

  def _on_refreshed(self, requested: Account) -> None:
    # The refresh may have rotated the token or deactivated the account
    account = self._store.get_active_account(requested.id)
    if account is None:
      log.info("Account %s left the active set during refresh", requested.id)
      return
    self._listener.stop_listening_and_remove_channel(account)
    self._listener.add_channel_and_start_listening(account)
    self._fetcher.fetch(account)

  # ---------------------------------------------------------------------------
  # Messages
  # ---------------------------------------------------------------------------

  def delete_message(self, message_id: str, account: Account) -> bool:
    """Remove a message locally, then delete it on the backend. No rollback on failure."""
    if not self._merger.remove(message_id, account.id):
      return False
    self._dispatcher.spawn(
      self._delete_message(message_id, account), name=f"delete-message-{message_id}"
    )
    return True

  async def _delete_message(self, message_id: str, account: Account) -> None:
    try:
      await self._messages.delete_message(message_id, account.token)
    except Exception as e:
      log.error("delete_message %s for %s failed: %s", message_id, account.id, e)

  def dismiss_alert(self) -> None:
    self._store.set_alert(None)
