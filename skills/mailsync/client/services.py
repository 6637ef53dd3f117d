"""
Interfaces of the external collaborators the controller drives.

Implementations own transport, persistence and OS integration. The controller
only reads their push streams and awaits their request coroutines. Requests
signal failure by raising `MailServiceError` subclasses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

from ..state.types import Account, ConnectionStatus, MessageData, NotificationPayload

if TYPE_CHECKING:
  from collections.abc import AsyncIterator


# ---------------------------------------------------------------------------
# Stream items
# ---------------------------------------------------------------------------


class MessageReceived(BaseModel):
  account: Account
  message: MessageData


class MessageDeleted(BaseModel):
  account: Account
  message_id: str


class ActivationRequest(BaseModel):
  """Raised when the user opens a delivered notification."""

  account_id: str
  message_id: str


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


@runtime_checkable
class AccountService(Protocol):
  """Stored accounts and their backend lifecycle."""

  def active_accounts(self) -> AsyncIterator[list[Account]]: ...
  def archived_accounts(self) -> AsyncIterator[list[Account]]: ...
  async def refresh_account(self, account: Account) -> bool: ...
  async def archive_account(self, account: Account) -> None: ...
  async def activate_account(self, account: Account) -> None: ...
  async def remove_account(self, account: Account) -> None: ...
  async def delete_and_remove_account(self, account: Account) -> None: ...


@runtime_checkable
class MessageService(Protocol):
  """Request/response access to the backend mail API."""

  async def get_all_messages(self, token: str) -> list[MessageData]: ...
  async def get_message(self, id: str, token: str) -> MessageData: ...
  async def mark_message_as(self, id: str, seen: bool, token: str) -> MessageData: ...
  async def delete_message(self, id: str, token: str) -> None: ...


@runtime_checkable
class MessageListenerService(Protocol):
  """Live push channels, one per account."""

  def message_received(self) -> AsyncIterator[MessageReceived]: ...
  def message_deleted(self) -> AsyncIterator[MessageDeleted]: ...
  def channels_status(self) -> AsyncIterator[dict[str, ConnectionStatus]]: ...
  def add_channel_and_start_listening(self, account: Account) -> None: ...
  def stop_listening_and_remove_channel(self, account: Account) -> None: ...


@runtime_checkable
class NotificationCenter(Protocol):
  """OS notification surface."""

  async def add(self, payload: NotificationPayload) -> None: ...
  def activation_requests(self) -> AsyncIterator[ActivationRequest]: ...
