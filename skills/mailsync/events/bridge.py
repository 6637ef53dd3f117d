"""
Listener bridge: feeds external push streams into the dispatcher.

Each stream gets one producer task that posts every item as an event:
  - account service: active / archived snapshots
  - listener service: message received / deleted, channel status snapshots
  - notification center: "open from notification" activation requests

Nothing is buffered here; the dispatcher queue is the only buffer, so items
of one stream are handled in delivery order.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .types import ActiveAccountsChanged, ArchivedAccountsChanged, ChannelsStatusChanged

if TYPE_CHECKING:
  from collections.abc import AsyncIterator, Callable

  from ..client.services import AccountService, MessageListenerService, NotificationCenter
  from .dispatcher import EventDispatcher

log = logging.getLogger("skill.mailsync.events.bridge")


class ListenerBridge:
  def __init__(self, dispatcher: EventDispatcher) -> None:
    self._dispatcher = dispatcher

  def attach_stream(
    self,
    name: str,
    stream: AsyncIterator[Any],
    to_event: Callable[[Any], Any] | None = None,
  ) -> None:
    """Start forwarding one stream. `to_event` wraps raw items; default posts them as-is."""
    self._dispatcher.attach(self._forward(name, stream, to_event), name=f"mailsync-{name}")

  async def _forward(
    self,
    name: str,
    stream: AsyncIterator[Any],
    to_event: Callable[[Any], Any] | None,
  ) -> None:
    try:
      async for item in stream:
        self._dispatcher.post(to_event(item) if to_event else item)
    except Exception:
      log.exception("Stream %s failed, no further events from it", name)
    else:
      log.info("Stream %s ended", name)

  def attach_account_service(self, service: AccountService) -> None:
    self.attach_stream("active-accounts", service.active_accounts(), ActiveAccountsChanged)
    self.attach_stream("archived-accounts", service.archived_accounts(), ArchivedAccountsChanged)

  def attach_listener_service(self, service: MessageListenerService) -> None:
    self.attach_stream("message-received", service.message_received())
    self.attach_stream("message-deleted", service.message_deleted())
    self.attach_stream("channels-status", service.channels_status(), ChannelsStatusChanged)

  def attach_notification_center(self, center: NotificationCenter) -> None:
    self.attach_stream("activation-requests", center.activation_requests())
