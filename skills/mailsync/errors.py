"""
Failures reported by the external mail collaborators.

Services raise these from their request coroutines. The controller never lets
them escape: an `ApiError` can become a user-facing advisory, everything else
is logged or recorded on a message store.
"""

from __future__ import annotations


class MailServiceError(Exception):
  pass


class ApiError(MailServiceError):
  """The backend rejected the request and said why."""

  def __init__(self, message: str, status: int | None = None) -> None:
    super().__init__(message)
    self.message = message
    self.status = status


class NetworkError(MailServiceError):
  pass


class NotificationDeliveryError(MailServiceError):
  pass
