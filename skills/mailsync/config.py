"""
Controller configuration.

Read from the skill's config.json (or any dict the host passes in).
Unknown keys are ignored so a shared config file can carry other settings.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

log = logging.getLogger("skill.mailsync.config")

DEFAULT_CONFIG_FILE = "config.json"


class MailSyncConfig(BaseModel):
  model_config = ConfigDict(extra="ignore", frozen=True)

  max_active_accounts: int = Field(default=3, ge=1)
  notification_sound: bool = True
  notification_category: str = "activate_message"
  excerpt_length: int = Field(default=200, ge=1)
  host_sync_debounce_s: float = Field(default=0.1, ge=0)


def load_config(raw: dict[str, Any] | None = None) -> MailSyncConfig:
  """Build a config from a dict. Missing keys take their defaults."""
  return MailSyncConfig.model_validate(raw or {})


def load_config_file(path: str | Path) -> MailSyncConfig:
  """Load config from a JSON file. A missing or unreadable file yields the defaults."""
  config_path = Path(path)
  if config_path.is_dir():
    config_path = config_path / DEFAULT_CONFIG_FILE
  try:
    raw = json.loads(config_path.read_text())
  except FileNotFoundError:
    log.info("No config at %s, using defaults", config_path)
    return MailSyncConfig()
  except (json.JSONDecodeError, OSError):
    log.warning("Failed to read config at %s, using defaults", config_path, exc_info=True)
    return MailSyncConfig()
  if not isinstance(raw, dict):
    log.warning("Config at %s is not an object, using defaults", config_path)
    return MailSyncConfig()
  return load_config(raw)
