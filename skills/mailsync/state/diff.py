"""
Ordered collection difference.

Pure functions for computing the insertions and removals that turn one
ordered sequence into another, keyed by element identity. Used by the
account reconciler to turn full account snapshots into lifecycle events.

Usage:
    from skills.mailsync.state.diff import ordered_difference

    diff = ordered_difference(["a", "b", "c"], ["b", "c", "d"])
    diff.removals    → [Change(offset=0, element="a")]
    diff.insertions  → [Change(offset=2, element="d")]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
  from collections.abc import Callable, Hashable, Sequence

T = TypeVar("T")


@dataclass(frozen=True)
class Change(Generic[T]):
  """One insertion or removal.

  Removal offsets index into the old sequence, insertion offsets into the
  new one. `associated_with` is set when the same element was both removed
  and inserted (a move) and holds the offset of the counterpart change.
  """

  offset: int
  element: T
  associated_with: int | None = None


@dataclass(frozen=True)
class Difference(Generic[T]):
  insertions: list[Change[T]] = field(default_factory=list)
  removals: list[Change[T]] = field(default_factory=list)

  def __bool__(self) -> bool:
    return bool(self.insertions or self.removals)


def _identity(element: T) -> Hashable:
  return element  # type: ignore[return-value]


def _lcs_table(old_keys: list[Hashable], new_keys: list[Hashable]) -> list[list[int]]:
  """lengths[i][j] = length of the longest common subsequence of old[i:] and new[j:]."""
  rows, cols = len(old_keys), len(new_keys)
  lengths = [[0] * (cols + 1) for _ in range(rows + 1)]
  for i in range(rows - 1, -1, -1):
    for j in range(cols - 1, -1, -1):
      if old_keys[i] == new_keys[j]:
        lengths[i][j] = lengths[i + 1][j + 1] + 1
      else:
        lengths[i][j] = max(lengths[i + 1][j], lengths[i][j + 1])
  return lengths


def ordered_difference(
  old: Sequence[T],
  new: Sequence[T],
  key: Callable[[T], Hashable] = _identity,
  infer_moves: bool = True,
) -> Difference[T]:
  """Compute a minimal ordered difference from `old` to `new`.

  Elements kept in the longest common subsequence produce no change. With
  `infer_moves`, an element removed at one position and inserted at another
  is reported on both sides with `associated_with` pointing at the other
  change, so callers can skip reorders.
  """
  old_keys = [key(e) for e in old]
  new_keys = [key(e) for e in new]
  lengths = _lcs_table(old_keys, new_keys)

  removed: list[tuple[int, T]] = []
  inserted: list[tuple[int, T]] = []
  i = j = 0
  while i < len(old) and j < len(new):
    if old_keys[i] == new_keys[j]:
      i += 1
      j += 1
    elif lengths[i + 1][j] >= lengths[i][j + 1]:
      removed.append((i, old[i]))
      i += 1
    else:
      inserted.append((j, new[j]))
      j += 1
  removed.extend((k, old[k]) for k in range(i, len(old)))
  inserted.extend((k, new[k]) for k in range(j, len(new)))

  removal_partner: dict[int, int] = {}
  insertion_partner: dict[int, int] = {}
  if infer_moves:
    pending: dict[Hashable, list[int]] = {}
    for offset, element in removed:
      pending.setdefault(key(element), []).append(offset)
    for offset, element in inserted:
      candidates = pending.get(key(element))
      if candidates:
        partner = candidates.pop(0)
        insertion_partner[offset] = partner
        removal_partner[partner] = offset

  return Difference(
    insertions=[Change(o, e, insertion_partner.get(o)) for o, e in inserted],
    removals=[Change(o, e, removal_partner.get(o)) for o, e in removed],
  )
