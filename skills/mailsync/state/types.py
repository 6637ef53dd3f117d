"""
Mailbox state types for the mailsync skill.

These types are used in-process by the controller and a summary
is pushed to the host for UI consumption.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ConnectionStatus = Literal["opened", "closed", "connecting", "errored"]

# Fields only a full message fetch populates.
COMPLETE_ONLY_FIELDS = ("text", "html", "cc", "bcc", "attachments")


class Account(BaseModel):
  id: str
  address: str = ""
  token: str = ""

  def __eq__(self, other: object) -> bool:
    if not isinstance(other, Account):
      return NotImplemented
    return self.id == other.id

  def __hash__(self) -> int:
    return hash(self.id)


class MessageAddress(BaseModel):
  address: str = ""
  name: str = ""


class MessageAttachment(BaseModel):
  id: str
  filename: str = ""
  content_type: str = ""
  size: int = 0
  download_url: str = ""


class MessageData(BaseModel):
  """A message as the backend returns it, summary or complete."""

  model_config = ConfigDict(populate_by_name=True)

  id: str
  account_id: str = ""
  msgid: str = ""
  from_: MessageAddress = Field(default_factory=MessageAddress, alias="from")
  to: list[MessageAddress] = Field(default_factory=list)
  subject: str = ""
  intro: str = ""
  seen: bool = False
  is_deleted: bool = False
  has_attachments: bool = False
  size: int = 0
  created_at: datetime = Field(default_factory=lambda: datetime.fromtimestamp(0, tz=UTC))
  updated_at: datetime | None = None
  # Complete-only
  text: str | None = None
  html: list[str] | None = None
  cc: list[MessageAddress] | None = None
  bcc: list[MessageAddress] | None = None
  attachments: list[MessageAttachment] | None = None

  def excerpt(self, length: int = 200) -> str:
    source = self.text if self.text else self.intro
    source = " ".join(source.split())
    if len(source) <= length:
      return source
    return source[: length - 1].rstrip() + "…"


class Message(BaseModel):
  data: MessageData
  is_complete: bool = False

  @property
  def id(self) -> str:
    return self.data.id


class MessageStore(BaseModel):
  model_config = ConfigDict(arbitrary_types_allowed=True)

  is_fetching: bool = False
  error: Exception | None = None
  messages: list[Message] = Field(default_factory=list)

  def find(self, message_id: str) -> Message | None:
    for message in self.messages:
      if message.id == message_id:
        return message
    return None


class AlertData(BaseModel):
  title: str
  message: str | None = None


class NotificationPayload(BaseModel):
  title: str
  subtitle: str = ""
  body: str = ""
  sound: bool = True
  category: str = ""
  user_info: dict[str, str] = Field(default_factory=dict)


class MailSyncState(BaseModel):
  """Full in-process state."""

  # Accounts
  active_accounts: list[Account] = Field(default_factory=list)
  archived_accounts: list[Account] = Field(default_factory=list)
  # Messages, keyed by account id
  account_messages: dict[str, MessageStore] = Field(default_factory=dict)
  # Live channels, keyed by account id
  channels_status: dict[str, ConnectionStatus] = Field(default_factory=dict)
  # Selection
  selected_account_id: str | None = None
  selected_message: Message | None = None
  filter_not_seen: bool = False
  # Advisory
  alert: AlertData | None = None


class MailSyncHostState(BaseModel):
  """Subset pushed to host for UI consumption."""

  active_account_ids: list[str] = Field(default_factory=list)
  archived_account_ids: list[str] = Field(default_factory=list)
  fetching_account_ids: list[str] = Field(default_factory=list)
  unseen_counts: dict[str, int] = Field(default_factory=dict)
  channels_status: dict[str, ConnectionStatus] = Field(default_factory=dict)
  selected_account_id: str | None = None
  selected_message_id: str | None = None
  alert: AlertData | None = None


def initial_state() -> MailSyncState:
  return MailSyncState()
