"""End-to-end tests for the mailbox controller and its derived views."""

import pytest

from skills.mailsync.events.dispatcher import EventDispatcher

from .fakes import make_account, make_message, wait_for


@pytest.mark.asyncio
async def test_activate_open_and_receive(controller, fakes):
  a, b = make_account("a"), make_account("b")
  fakes.messages.add("token-a", make_message("m1", minutes=0), make_message("m2", minutes=5))
  fakes.messages.add("token-b", make_message("x1"))

  fakes.accounts.push_active([a, b])
  fakes.listener.push_status({"a": "opened", "b": "connecting"})
  await fakes.settle(controller)

  controller.select_account("a")
  await fakes.settle(controller)
  assert [m.id for m in controller.selected_account_messages] == ["m2", "m1"]
  assert controller.selected_account_connection_is_active

  controller.select_message("m1")
  await fakes.settle(controller)
  opened = controller.state.selected_message
  assert opened.is_complete
  assert opened.data.seen

  fakes.listener.push_received(a, make_message("m3", minutes=10))
  await fakes.settle(controller)
  assert [m.id for m in controller.selected_account_messages] == ["m3", "m2", "m1"]
  assert len(fakes.notifications.delivered) == 1

  fakes.listener.push_deleted(a, "m1")
  await fakes.settle(controller)
  assert controller.state.selected_message is None
  assert [m.id for m in controller.selected_account_messages] == ["m3", "m2"]

  # Nothing leaked into the other account
  assert [m.id for m in controller.store.get_message_store("b").messages] == ["x1"]


@pytest.mark.asyncio
async def test_unseen_filter(controller, fakes):
  fakes.messages.add(
    "token-a",
    make_message("m1", seen=True),
    make_message("m2", minutes=1),
    make_message("m3", seen=True, minutes=2),
  )
  fakes.accounts.push_active([make_account("a")])
  controller.select_account("a")
  await fakes.settle(controller)

  controller.set_filter_not_seen(True)
  await fakes.settle(controller)
  assert [m.id for m in controller.selected_account_messages] == ["m2"]

  controller.set_filter_not_seen(False)
  await fakes.settle(controller)
  assert [m.id for m in controller.selected_account_messages] == ["m3", "m2", "m1"]


@pytest.mark.asyncio
async def test_views_without_a_selection(controller, fakes):
  fakes.accounts.push_active([make_account("a")])
  await fakes.settle(controller)

  assert controller.selected_account_messages == []
  assert not controller.selected_account_connection_is_active
  assert controller.connection_status("a") == "closed"


@pytest.mark.asyncio
async def test_channel_status_snapshots_replace_each_other(controller, fakes):
  fakes.listener.push_status({"a": "opened", "b": "opened"})
  fakes.listener.push_status({"a": "errored"})
  await fakes.settle(controller)

  assert controller.connection_status("a") == "errored"
  assert controller.connection_status("b") == "closed"


@pytest.mark.asyncio
async def test_archived_accounts_are_tracked(controller, fakes):
  fakes.accounts.push_archived([make_account("x")])
  await fakes.settle(controller)
  assert [a.id for a in controller.state.archived_accounts] == ["x"]
  assert "x" not in controller.state.account_messages


@pytest.mark.asyncio
async def test_can_activate_follows_the_active_count(controller, fakes):
  fakes.accounts.push_active([make_account("a"), make_account("b")])
  await fakes.settle(controller)
  assert controller.can_activate_accounts

  fakes.accounts.push_active([make_account("a"), make_account("b"), make_account("c")])
  await fakes.settle(controller)
  assert not controller.can_activate_accounts


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent(fakes):
  controller = fakes.create_controller()
  await controller.start()
  await controller.start()
  await controller.stop()
  await controller.stop()


@pytest.mark.asyncio
async def test_wait_idle_requires_a_started_dispatcher():
  with pytest.raises(RuntimeError, match="not started"):
    await EventDispatcher().wait_idle()


@pytest.mark.asyncio
async def test_push_state_receives_host_summaries(fakes, config):
  pushed = []

  async def push(state):
    pushed.append(state)

  controller = fakes.create_controller(
    config=config.model_copy(update={"host_sync_debounce_s": 0}), push_state=push
  )
  await controller.start()
  try:
    fakes.messages.add("token-a", make_message("m1"))
    fakes.accounts.push_active([make_account("a")])
    await fakes.settle(controller)
    await wait_for(lambda: bool(pushed) and pushed[-1]["unseen_counts"] == {"a": 1})
  finally:
    await controller.stop()

  assert pushed[-1]["active_account_ids"] == ["a"]
  assert pushed[-1]["unseen_counts"] == {"a": 1}
