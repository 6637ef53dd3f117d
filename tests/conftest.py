"""Shared fixtures for the mailsync test suite."""

from __future__ import annotations

import pytest
import pytest_asyncio

from skills.mailsync.config import MailSyncConfig

from .fakes import MailFakes


@pytest.fixture
def fakes():
  return MailFakes()


@pytest.fixture
def config():
  return MailSyncConfig(max_active_accounts=3)


@pytest_asyncio.fixture
async def controller(fakes, config):
  """A started controller wired to the in-memory fakes."""
  c = fakes.create_controller(config=config)
  await c.start()
  yield c
  await c.stop()
