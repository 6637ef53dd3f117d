"""
Input validation helpers for mailsync tool arguments.
"""

from __future__ import annotations

from typing import Any


class ValidationError(Exception):
  pass


def req_string(args: dict[str, Any], name: str) -> str:
  value = args.get(name)
  if not isinstance(value, str) or not value.strip():
    raise ValidationError(f"Missing required parameter: {name}")
  return value.strip()


def opt_string(args: dict[str, Any], name: str) -> str | None:
  value = args.get(name)
  if value is None:
    return None
  if not isinstance(value, str):
    raise ValidationError(f"Invalid {name}: must be a string")
  return value.strip() or None


def req_bool(args: dict[str, Any], name: str) -> bool:
  value = args.get(name)
  if isinstance(value, bool):
    return value
  if isinstance(value, str) and value.lower() in ("true", "false"):
    return value.lower() == "true"
  raise ValidationError(f"Missing or invalid boolean parameter: {name}")


def opt_number(args: dict[str, Any], name: str, default: int) -> int:
  value = args.get(name)
  if value is None:
    return default
  if isinstance(value, bool) or not isinstance(value, (int, float)):
    raise ValidationError(f"Invalid {name}: must be a number")
  if value <= 0:
    raise ValidationError(f"Invalid {name}: must be positive")
  return int(value)
