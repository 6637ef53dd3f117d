"""
Message merge engine.

Upserts keep two invariants on every stored message:
  - intro: a non-empty intro already held is never replaced by an empty one
  - completeness: complete never goes back to summary, and the body fields
    of a complete message survive a later summary-only update

The selected message is replaced with the merged value after every upsert so
an open message view stays current.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.types import COMPLETE_ONLY_FIELDS, Message, MessageStore

if TYPE_CHECKING:
  from ..notifications import NotificationDispatcher
  from ..state.store import MailSyncStore

log = logging.getLogger("skill.mailsync.sync.merge")


def merge_message(existing: Message, incoming: Message) -> Message:
  """Merge a new representation of a message onto the stored one."""
  updates: dict[str, object] = {"intro": existing.data.intro or incoming.data.intro or ""}
  is_complete = existing.is_complete or incoming.is_complete
  if existing.is_complete and not incoming.is_complete:
    for name in COMPLETE_ONLY_FIELDS:
      if getattr(incoming.data, name) is None:
        updates[name] = getattr(existing.data, name)
  data = incoming.data.model_copy(update=updates)
  return Message(data=data, is_complete=is_complete)


class MessageMerger:
  def __init__(self, store: MailSyncStore, notifier: NotificationDispatcher) -> None:
    self._store = store
    self._notifier = notifier

  def upsert(self, message: Message, account_id: str, insert: bool = True) -> bool:
    """Insert or merge a message. Returns True only for a new message id.

    Accounts without a message store are not active and are skipped. With
    `insert=False` an unknown id is dropped instead of appended.
    """
    message_store = self._store.get_message_store(account_id)
    if message_store is None:
      log.debug("Dropping message %s for inactive account %s", message.id, account_id)
      return False

    messages = list(message_store.messages)
    index = next((i for i, m in enumerate(messages) if m.id == message.id), None)
    inserted = False
    if index is not None:
      merged = merge_message(messages[index], message)
      messages[index] = merged
    elif insert:
      merged = message
      messages.append(merged)
      inserted = True
    else:
      log.debug("Message %s no longer in account %s, update dropped", message.id, account_id)
      return False

    self._store.set_messages(account_id, messages)

    selected = self._store.get_state().selected_message
    if selected is not None and selected.id == merged.id:
      self._store.set_selected_message(merged)

    if inserted:
      self._notifier.notify(merged, account_id)
    return inserted

  def remove(self, message_id: str, account_id: str) -> bool:
    """Delete a message if held. Clears the selection when it pointed at it."""
    message_store = self._store.get_message_store(account_id)
    if message_store is None:
      return False
    messages = [m for m in message_store.messages if m.id != message_id]
    if len(messages) == len(message_store.messages):
      return False
    self._store.set_messages(account_id, messages)

    state = self._store.get_state()
    if state.selected_message is not None and state.selected_message.id == message_id:
      self._store.set_selected_message(None)
    return True

  def bulk_replace(
    self,
    account_id: str,
    messages: list[Message] | None = None,
    error: Exception | None = None,
  ) -> None:
    """Replace the whole store with a fetch result."""
    if error is not None:
      replacement = MessageStore(is_fetching=False, error=error, messages=[])
    else:
      unique: dict[str, Message] = {}
      for message in messages or []:
        unique.setdefault(message.id, message)
      replacement = MessageStore(is_fetching=False, error=None, messages=list(unique.values()))
    self._store.set_message_store(account_id, replacement)
