"""
In-memory collaborators for testing the controller without a backend.

Usage:
    fakes = MailFakes()
    controller = fakes.create_controller()
    await controller.start()
    fakes.accounts.push_active([make_account("a")])
    await fakes.settle(controller)
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from skills.mailsync.client.services import ActivationRequest, MessageDeleted, MessageReceived
from skills.mailsync.controller import MailSyncController
from skills.mailsync.errors import NotificationDeliveryError
from skills.mailsync.state.types import (
  Account,
  MessageAddress,
  MessageData,
  NotificationPayload,
)

if TYPE_CHECKING:
  from collections.abc import AsyncIterator, Awaitable, Callable

  from skills.mailsync.config import MailSyncConfig
  from skills.mailsync.state.types import ConnectionStatus

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_account(account_id: str) -> Account:
  return Account(id=account_id, address=f"{account_id}@example.com", token=f"token-{account_id}")


def make_message(
  message_id: str,
  *,
  seen: bool = False,
  intro: str = "Hello",
  subject: str = "Subject",
  sender_name: str = "Alice",
  sender_address: str = "alice@example.com",
  minutes: int = 0,
  text: str | None = None,
) -> MessageData:
  return MessageData(
    id=message_id,
    msgid=f"<{message_id}@example.com>",
    from_=MessageAddress(name=sender_name, address=sender_address),
    subject=subject,
    intro=intro,
    seen=seen,
    created_at=BASE_TIME + timedelta(minutes=minutes),
    text=text,
  )


async def _drain(queue: asyncio.Queue[Any]) -> AsyncIterator[Any]:
  while True:
    yield await queue.get()


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class FakeAccountService:
  def __init__(self) -> None:
    self.active: asyncio.Queue[list[Account]] = asyncio.Queue()
    self.archived: asyncio.Queue[list[Account]] = asyncio.Queue()
    self.calls: list[tuple[str, str]] = []
    self.refresh_result = True
    self.errors: dict[str, Exception] = {}
    # Awaited inside refresh_account, before it returns
    self.during_refresh: Callable[[Account], Awaitable[None]] | None = None

  def push_active(self, accounts: list[Account]) -> None:
    self.active.put_nowait(list(accounts))

  def push_archived(self, accounts: list[Account]) -> None:
    self.archived.put_nowait(list(accounts))

  def active_accounts(self) -> AsyncIterator[list[Account]]:
    return _drain(self.active)

  def archived_accounts(self) -> AsyncIterator[list[Account]]:
    return _drain(self.archived)

  async def _call(self, name: str, account: Account) -> None:
    self.calls.append((name, account.id))
    error = self.errors.get(name)
    if error is not None:
      raise error

  async def refresh_account(self, account: Account) -> bool:
    await self._call("refresh_account", account)
    if self.during_refresh is not None:
      await self.during_refresh(account)
    return self.refresh_result

  async def archive_account(self, account: Account) -> None:
    await self._call("archive_account", account)

  async def activate_account(self, account: Account) -> None:
    await self._call("activate_account", account)

  async def remove_account(self, account: Account) -> None:
    await self._call("remove_account", account)

  async def delete_and_remove_account(self, account: Account) -> None:
    await self._call("delete_and_remove_account", account)


class FakeMessageService:
  """Serves summaries per token and full messages per id.

  `mark_message_as` answers with a summary (no body, empty intro) and
  `get_message` with the full message (empty intro), the way a backend that
  does not echo locally cached previews would.
  """

  def __init__(self) -> None:
    self.inbox: dict[str, list[MessageData]] = {}
    self.full: dict[str, MessageData] = {}
    self.calls: list[tuple[str, str]] = []
    self.errors: dict[str, Exception] = {}
    self._fetch_gates: list[asyncio.Event] = []

  def add(self, token: str, *messages: MessageData) -> None:
    self.inbox.setdefault(token, []).extend(messages)
    for m in messages:
      self.full.setdefault(m.id, m.model_copy(update={"text": m.text or f"Body of {m.id}"}))

  def gate_fetch(self) -> asyncio.Event:
    """Hold the next get_all_messages call until the returned event is set."""
    gate = asyncio.Event()
    self._fetch_gates.append(gate)
    return gate

  def count(self, name: str, key: str | None = None) -> int:
    return sum(1 for n, k in self.calls if n == name and (key is None or k == key))

  def _raise_if_failing(self, name: str) -> None:
    error = self.errors.get(name)
    if error is not None:
      raise error

  async def get_all_messages(self, token: str) -> list[MessageData]:
    self.calls.append(("get_all_messages", token))
    snapshot = list(self.inbox.get(token, []))
    if self._fetch_gates:
      await self._fetch_gates.pop(0).wait()
    self._raise_if_failing("get_all_messages")
    return snapshot

  async def get_message(self, id: str, token: str) -> MessageData:
    self.calls.append(("get_message", id))
    self._raise_if_failing("get_message")
    return self.full[id].model_copy(update={"intro": ""})

  async def mark_message_as(self, id: str, seen: bool, token: str) -> MessageData:
    self.calls.append(("mark_message_as", id))
    self._raise_if_failing("mark_message_as")
    base = self.full[id]
    self.full[id] = base.model_copy(update={"seen": seen})
    return base.model_copy(update={"seen": seen, "intro": "", "text": None})

  async def delete_message(self, id: str, token: str) -> None:
    self.calls.append(("delete_message", id))
    self._raise_if_failing("delete_message")


class FakeListenerService:
  def __init__(self) -> None:
    self.received: asyncio.Queue[MessageReceived] = asyncio.Queue()
    self.deleted: asyncio.Queue[MessageDeleted] = asyncio.Queue()
    self.status: asyncio.Queue[dict[str, ConnectionStatus]] = asyncio.Queue()
    self.channel_calls: list[tuple[str, str]] = []

  def push_received(self, account: Account, message: MessageData) -> None:
    self.received.put_nowait(MessageReceived(account=account, message=message))

  def push_deleted(self, account: Account, message_id: str) -> None:
    self.deleted.put_nowait(MessageDeleted(account=account, message_id=message_id))

  def push_status(self, statuses: dict[str, ConnectionStatus]) -> None:
    self.status.put_nowait(dict(statuses))

  def message_received(self) -> AsyncIterator[MessageReceived]:
    return _drain(self.received)

  def message_deleted(self) -> AsyncIterator[MessageDeleted]:
    return _drain(self.deleted)

  def channels_status(self) -> AsyncIterator[dict[str, ConnectionStatus]]:
    return _drain(self.status)

  def add_channel_and_start_listening(self, account: Account) -> None:
    self.channel_calls.append(("add", account.id))

  def stop_listening_and_remove_channel(self, account: Account) -> None:
    self.channel_calls.append(("stop", account.id))


class FakeNotificationCenter:
  def __init__(self) -> None:
    self.delivered: list[NotificationPayload] = []
    self.activations: asyncio.Queue[ActivationRequest] = asyncio.Queue()
    self.fail = False

  def push_activation(self, account_id: str, message_id: str) -> None:
    self.activations.put_nowait(ActivationRequest(account_id=account_id, message_id=message_id))

  async def add(self, payload: NotificationPayload) -> None:
    if self.fail:
      raise NotificationDeliveryError("notifications not authorized")
    self.delivered.append(payload)

  def activation_requests(self) -> AsyncIterator[ActivationRequest]:
    return _drain(self.activations)


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------


class MailFakes:
  def __init__(self) -> None:
    self.accounts = FakeAccountService()
    self.messages = FakeMessageService()
    self.listener = FakeListenerService()
    self.notifications = FakeNotificationCenter()

  def create_controller(
    self,
    config: MailSyncConfig | None = None,
    push_state: Any = None,
  ) -> MailSyncController:
    return MailSyncController(
      self.accounts,
      self.messages,
      self.listener,
      self.notifications,
      config=config,
      push_state=push_state,
    )

  def _streams_pending(self) -> bool:
    queues = (
      self.accounts.active,
      self.accounts.archived,
      self.listener.received,
      self.listener.deleted,
      self.listener.status,
      self.notifications.activations,
    )
    return any(not q.empty() for q in queues)

  async def settle(self, controller: MailSyncController) -> None:
    """Wait until every pushed item has been handled and no request is in flight."""
    while True:
      await wait_for(lambda: not self._streams_pending())
      await controller.wait_idle()
      if not self._streams_pending():
        return


async def wait_for(condition: Callable[[], bool], attempts: int = 500) -> None:
  for _ in range(attempts):
    if condition():
      return
    await asyncio.sleep(0)
  raise AssertionError("condition not reached")
