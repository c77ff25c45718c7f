"""Which games may be played, given lock mode and the progress of their predecessors.

Games are gated in catalog order: with lock mode on, a game opens once the game
before it reaches ``UNLOCK_THRESHOLD`` percent progress. The first game is
always open. Re-evaluation only ever adds unlocks, so anything opened while
lock mode was off stays open when lock mode is switched back on.
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

UNLOCK_THRESHOLD = 50


class UnlockInput(Protocol):
    progress: int
    unlocked: bool


def reevaluate(records: Sequence[UnlockInput], lock_enabled: bool) -> List[bool]:
    """Return the unlocked flag for each record, in order."""
    if not lock_enabled:
        return [True] * len(records)
    flags: List[bool] = []
    for index, record in enumerate(records):
        if index == 0:
            flags.append(True)
        else:
            flags.append(bool(record.unlocked) or records[index - 1].progress >= UNLOCK_THRESHOLD)
    return flags


def initial_unlocks(progress: Sequence[int], lock_enabled: bool) -> List[bool]:
    """Unlock flags for a fresh start, when nothing has been granted yet."""
    if not lock_enabled:
        return [True] * len(progress)
    return [index == 0 or progress[index - 1] >= UNLOCK_THRESHOLD for index in range(len(progress))]
