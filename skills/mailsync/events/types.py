"""
Events consumed by the controller's dispatcher.

Push-stream items (`MessageReceived`, `MessageDeleted`, `ActivationRequest`)
are posted as-is; the types below cover snapshots, request completions and
deferred user calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..client.services import ActivationRequest, MessageDeleted, MessageReceived

if TYPE_CHECKING:
  from collections.abc import Callable

  from ..state.types import Account, ConnectionStatus, Message

__all__ = [
  "ActivationRequest",
  "ActiveAccountsChanged",
  "ArchivedAccountsChanged",
  "ChannelsStatusChanged",
  "DeferredCall",
  "MessageDeleted",
  "MessageReceived",
  "MessageUpdated",
  "MessagesFetched",
]


@dataclass(frozen=True)
class ActiveAccountsChanged:
  accounts: list[Account]


@dataclass(frozen=True)
class ArchivedAccountsChanged:
  accounts: list[Account]


@dataclass(frozen=True)
class ChannelsStatusChanged:
  statuses: dict[str, ConnectionStatus]


@dataclass(frozen=True)
class MessagesFetched:
  """Completion of an initial bulk fetch."""

  account: Account
  sequence: int
  messages: list[Message] = field(default_factory=list)
  error: Exception | None = None


@dataclass(frozen=True)
class MessageUpdated:
  """Completion of a mark-seen or full-fetch request for one message."""

  account: Account
  message: Message


@dataclass(frozen=True)
class DeferredCall:
  """A user call queued so it runs in order with every other mutation."""

  fn: Callable[..., Any]
  args: tuple[Any, ...] = ()
  kwargs: dict[str, Any] = field(default_factory=dict)
