"""
New-message notifications.

Only the merge engine calls `notify()`, and only for a message id it has
never held for that account. Delivery is fire-and-forget: a failure is
logged, never retried and never shown to the user.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .state.types import NotificationPayload

if TYPE_CHECKING:
  from .client.services import NotificationCenter
  from .config import MailSyncConfig
  from .events.dispatcher import EventDispatcher
  from .state.types import Message

log = logging.getLogger("skill.mailsync.notifications")

ACCOUNT_KEY = "account"
MESSAGE_KEY = "message"


def build_payload(message: Message, account_id: str, config: MailSyncConfig) -> NotificationPayload:
  sender = message.data.from_
  title = sender.name if sender.name.strip() else sender.address
  return NotificationPayload(
    title=title,
    subtitle=message.data.subject,
    body=message.data.excerpt(config.excerpt_length),
    sound=config.notification_sound,
    category=config.notification_category,
    user_info={ACCOUNT_KEY: account_id, MESSAGE_KEY: message.id},
  )


class NotificationDispatcher:
  def __init__(
    self,
    center: NotificationCenter,
    dispatcher: EventDispatcher,
    config: MailSyncConfig,
  ) -> None:
    self._center = center
    self._dispatcher = dispatcher
    self._config = config

  def notify(self, message: Message, account_id: str) -> None:
    payload = build_payload(message, account_id, self._config)
    self._dispatcher.spawn(self._deliver(payload), name=f"notify-{message.id}")

  async def _deliver(self, payload: NotificationPayload) -> None:
    try:
      await self._center.add(payload)
    except Exception as e:
      log.error(
        "Message notification for %s failed: %s",
        payload.user_info.get(MESSAGE_KEY),
        e,
      )
