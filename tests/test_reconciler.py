"""Tests for account snapshot reconciliation."""

from unittest.mock import MagicMock

import pytest

from skills.mailsync.state.store import MailSyncStore
from skills.mailsync.sync.reconciler import AccountReconciler

from .fakes import make_account, make_message

# --- Unit ---


def _reconciler():
  store = MailSyncStore()
  fetcher = MagicMock()
  return store, fetcher, AccountReconciler(store, fetcher)


def test_new_accounts_are_activated_once_each():
  store, fetcher, reconciler = _reconciler()
  reconciler.on_active_accounts([make_account("a"), make_account("b")])
  assert [c.args[0].id for c in fetcher.fetch.call_args_list] == ["a", "b"]
  assert store.get_message_store("a").is_fetching
  assert [a.id for a in store.get_state().active_accounts] == ["a", "b"]


def test_unchanged_and_reordered_snapshots_trigger_nothing():
  store, fetcher, reconciler = _reconciler()
  reconciler.on_active_accounts([make_account("a"), make_account("b"), make_account("c")])
  fetcher.reset_mock()

  reconciler.on_active_accounts([make_account("a"), make_account("b"), make_account("c")])
  reconciler.on_active_accounts([make_account("c"), make_account("a"), make_account("b")])

  fetcher.fetch.assert_not_called()
  fetcher.forget.assert_not_called()
  assert [a.id for a in store.get_state().active_accounts] == ["c", "a", "b"]
  assert set(store.get_state().account_messages) == {"a", "b", "c"}


def test_removed_account_is_deactivated():
  store, fetcher, reconciler = _reconciler()
  reconciler.on_active_accounts([make_account("a"), make_account("b")])
  store.set_selected_account("a")

  reconciler.on_active_accounts([make_account("b")])

  fetcher.forget.assert_called_once_with("a")
  assert store.get_message_store("a") is None
  assert store.get_message_store("b") is not None
  assert store.get_state().selected_account_id is None


def test_deactivating_another_account_keeps_the_selection():
  store, _, reconciler = _reconciler()
  reconciler.on_active_accounts([make_account("a"), make_account("b")])
  store.set_selected_account("b")
  reconciler.on_active_accounts([make_account("b")])
  assert store.get_state().selected_account_id == "b"


def test_archived_snapshot_is_stored_as_is():
  store, fetcher, reconciler = _reconciler()
  reconciler.on_archived_accounts([make_account("x"), make_account("y")])
  assert [a.id for a in store.get_state().archived_accounts] == ["x", "y"]
  fetcher.fetch.assert_not_called()


# --- Through the controller ---


@pytest.mark.asyncio
async def test_repeated_snapshots_fetch_once(controller, fakes):
  fakes.messages.add("token-a", make_message("m1"))
  fakes.accounts.push_active([make_account("a")])
  await fakes.settle(controller)
  fakes.accounts.push_active([make_account("a")])
  fakes.accounts.push_active([make_account("a").model_copy(update={"token": "token-a"})])
  await fakes.settle(controller)

  assert fakes.messages.count("get_all_messages", "token-a") == 1


@pytest.mark.asyncio
async def test_reactivated_account_is_fetched_again(controller, fakes):
  fakes.accounts.push_active([make_account("a")])
  await fakes.settle(controller)
  fakes.accounts.push_active([])
  await fakes.settle(controller)
  fakes.accounts.push_active([make_account("a")])
  await fakes.settle(controller)

  assert fakes.messages.count("get_all_messages", "token-a") == 2
  assert controller.store.get_message_store("a") is not None


@pytest.mark.asyncio
async def test_deactivation_clears_an_open_message(controller, fakes):
  fakes.messages.add("token-a", make_message("m1", seen=True))
  fakes.accounts.push_active([make_account("a")])
  await fakes.settle(controller)
  controller.select_account("a")
  controller.select_message("m1")
  await fakes.settle(controller)
  assert controller.state.selected_message is not None

  fakes.accounts.push_active([])
  await fakes.settle(controller)

  assert controller.state.selected_account_id is None
  assert controller.state.selected_message is None
  assert controller.selected_account_messages == []
