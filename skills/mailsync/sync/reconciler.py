"""
Account reconciler: turns account snapshots into lifecycle transitions.

The account service pushes the whole active list on every change. The
reconciler diffs it against the list it stored last time, keyed by account
id, and activates or deactivates accounts whose membership actually changed.
Reordered accounts are moves and trigger nothing.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.diff import ordered_difference
from ..state.types import MessageStore

if TYPE_CHECKING:
  from ..state.store import MailSyncStore
  from ..state.types import Account
  from .initial_fetch import InitialFetcher

log = logging.getLogger("skill.mailsync.sync.reconciler")


def _account_key(account: Account) -> str:
  return account.id


class AccountReconciler:
  def __init__(self, store: MailSyncStore, fetcher: InitialFetcher) -> None:
    self._store = store
    self._fetcher = fetcher

  def on_active_accounts(self, accounts: list[Account]) -> None:
    previous = self._store.get_state().active_accounts
    difference = ordered_difference(previous, accounts, key=_account_key)

    for change in difference.insertions:
      if change.associated_with is None:
        self.activate(change.element)
    for change in difference.removals:
      if change.associated_with is None:
        self.deactivate(change.element)

    self._store.set_active_accounts(accounts)

  def on_archived_accounts(self, accounts: list[Account]) -> None:
    self._store.set_archived_accounts(accounts)

  def activate(self, account: Account) -> None:
    log.info("Account %s became active", account.id)
    self._store.set_message_store(account.id, MessageStore(is_fetching=True))
    self._fetcher.fetch(account)

  def deactivate(self, account: Account) -> None:
    log.info("Account %s is no longer active", account.id)
    self._store.remove_message_store(account.id)
    self._fetcher.forget(account.id)
    if self._store.get_state().selected_account_id == account.id:
      self._store.clear_selection()
