"""
Push a state summary to the host after store changes, debounced.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from .types import MailSyncHostState

if TYPE_CHECKING:
  from collections.abc import Awaitable, Callable

  from .store import MailSyncStore

log = logging.getLogger("skill.mailsync.state.sync")

DEBOUNCE_S = 0.1


def build_host_state(store: MailSyncStore) -> MailSyncHostState:
  s = store.get_state()
  return MailSyncHostState(
    active_account_ids=[a.id for a in s.active_accounts],
    archived_account_ids=[a.id for a in s.archived_accounts],
    fetching_account_ids=[aid for aid, ms in s.account_messages.items() if ms.is_fetching],
    unseen_counts={
      aid: sum(1 for m in ms.messages if not m.data.seen) for aid, ms in s.account_messages.items()
    },
    channels_status=s.channels_status,
    selected_account_id=s.selected_account_id,
    selected_message_id=s.selected_message.id if s.selected_message else None,
    alert=s.alert,
  )


class HostSync:
  def __init__(
    self,
    store: MailSyncStore,
    push: Callable[[dict[str, Any]], Awaitable[None]],
    debounce_s: float = DEBOUNCE_S,
  ) -> None:
    self._store = store
    self._push = push
    self._debounce_s = debounce_s
    self._handle: asyncio.TimerHandle | None = None
    self._pending: asyncio.Task[None] | None = None
    self._unsubscribe: Callable[[], None] | None = None

  def start(self) -> None:
    """Subscribe to the store and push the initial state."""
    if self._unsubscribe is not None:
      return
    self._unsubscribe = self._store.subscribe(self._on_state_change)
    self._schedule_push()

  def stop(self) -> None:
    if self._unsubscribe is not None:
      self._unsubscribe()
      self._unsubscribe = None
    if self._handle is not None:
      self._handle.cancel()
      self._handle = None
    if self._pending is not None:
      self._pending.cancel()
      self._pending = None

  def _on_state_change(self) -> None:
    if self._handle is not None:
      self._handle.cancel()
    loop = asyncio.get_running_loop()
    self._handle = loop.call_later(self._debounce_s, self._schedule_push)

  def _schedule_push(self) -> None:
    self._handle = None
    self._pending = asyncio.get_running_loop().create_task(self.push_now())

  async def push_now(self) -> None:
    try:
      await self._push(build_host_state(self._store).model_dump(mode="json"))
    except Exception:
      log.exception("Failed to push state to host")
