"""
Selection pipeline: what happens when the user opens a message.

Opening a message under a selected account marks it seen and upgrades it to
the complete representation. Both requests are guarded so re-opening an
already processed message costs nothing. Failures are logged and leave the
stored message as it was; there is no optimistic update and no retry.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..events.types import MessageUpdated
from ..state.types import Message

if TYPE_CHECKING:
  from ..client.services import MessageService
  from ..events.dispatcher import EventDispatcher
  from ..state.store import MailSyncStore
  from ..state.types import Account
  from .merge import MessageMerger

log = logging.getLogger("skill.mailsync.sync.selection")


class SelectionPipeline:
  def __init__(
    self,
    store: MailSyncStore,
    service: MessageService,
    dispatcher: EventDispatcher,
    merger: MessageMerger,
  ) -> None:
    self._store = store
    self._service = service
    self._dispatcher = dispatcher
    self._merger = merger

  # ---------------------------------------------------------------------------
  # Selection
  # ---------------------------------------------------------------------------

  def select_account(self, account_id: str | None) -> None:
    self._store.set_selected_account(account_id)

  def select_message(self, message: Message | None) -> None:
    self._store.set_selected_message(message)
    account_id = self._store.get_state().selected_account_id
    if account_id is None or message is None:
      return
    account = self._store.get_active_account(account_id)
    if account is None:
      return
    self.mark_seen(message, account)
    self.fetch_complete(message, account)

  # ---------------------------------------------------------------------------
  # Requests
  # ---------------------------------------------------------------------------

  def mark_seen(self, message: Message, account: Account) -> bool:
    """Mark a stored, unseen message as seen. Returns whether a request was issued."""
    stored = self._store.find_message(account.id, message.id)
    if stored is None or stored.data.seen:
      return False
    self._dispatcher.spawn(self._mark_seen(stored.id, account), name=f"mark-seen-{stored.id}")
    return True

  async def _mark_seen(self, message_id: str, account: Account) -> None:
    try:
      data = await self._service.mark_message_as(message_id, True, account.token)
    except Exception as e:
      log.error("mark_seen %s for %s failed: %s", message_id, account.id, e)
      return
    self._dispatcher.post(MessageUpdated(account=account, message=Message(data=data)))

  def fetch_complete(self, message: Message, account: Account) -> bool:
    """Fetch the full body of a stored summary. Returns whether a request was issued."""
    stored = self._store.find_message(account.id, message.id)
    if stored is None or stored.is_complete:
      return False
    self._dispatcher.spawn(
      self._fetch_complete(stored.id, account), name=f"fetch-complete-{stored.id}"
    )
    return True

  async def _fetch_complete(self, message_id: str, account: Account) -> None:
    try:
      data = await self._service.get_message(message_id, account.token)
    except Exception as e:
      log.error("fetch_complete %s for %s failed: %s", message_id, account.id, e)
      return
    message = Message(data=data, is_complete=True)
    self._dispatcher.post(MessageUpdated(account=account, message=message))

  def on_message_updated(self, event: MessageUpdated) -> None:
    # A message deleted while its request was in flight stays deleted
    self._merger.upsert(event.message, event.account.id, insert=False)
