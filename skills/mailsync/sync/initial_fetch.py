"""
Initial bulk fetch of an account's messages.

Sequence:
  1. Mark the store as fetching (synchronously, before the request)
  2. Request the message list for the account token
  3. Post the result back to the dispatcher, tagged with a sequence number
  4. Replace the store wholesale with the result, unless a newer fetch for
     the same account was issued meanwhile or the account is gone
"""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING

from ..events.types import MessagesFetched
from ..state.types import Message

if TYPE_CHECKING:
  from ..client.services import MessageService
  from ..events.dispatcher import EventDispatcher
  from ..state.store import MailSyncStore
  from ..state.types import Account
  from .merge import MessageMerger

log = logging.getLogger("skill.mailsync.sync.initial_fetch")


class InitialFetcher:
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
    self._counter = itertools.count(1)
    self._latest: dict[str, int] = {}

  def fetch(self, account: Account) -> int:
    """Start a fetch for the account and return its sequence number."""
    sequence = next(self._counter)
    self._latest[account.id] = sequence
    self._store.set_fetching(account.id, True)
    self._dispatcher.spawn(self._request(account, sequence), name=f"fetch-all-{account.id}")
    return sequence

  def forget(self, account_id: str) -> None:
    self._latest.pop(account_id, None)

  async def _request(self, account: Account, sequence: int) -> None:
    try:
      data = await self._service.get_all_messages(account.token)
    except Exception as e:
      log.error("Fetching messages for %s failed: %s", account.id, e)
      self._dispatcher.post(MessagesFetched(account=account, sequence=sequence, error=e))
      return
    messages = [Message(data=d) for d in data]
    self._dispatcher.post(MessagesFetched(account=account, sequence=sequence, messages=messages))

  def on_fetched(self, event: MessagesFetched) -> None:
    account_id = event.account.id
    if self._latest.get(account_id) != event.sequence:
      log.debug("Discarding stale fetch #%d for %s", event.sequence, account_id)
      return
    if self._store.get_message_store(account_id) is None:
      log.debug("Discarding fetch for inactive account %s", account_id)
      return
    self._merger.bulk_replace(account_id, messages=event.messages, error=event.error)
    if event.error is None:
      log.info("Loaded %d messages for %s", len(event.messages), account_id)
