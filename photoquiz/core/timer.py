from __future__ import annotations

DEFAULT_TIME_LIMIT = 15


class CountdownTimer:
    """Per-question countdown advanced by explicit one-second ticks.

    The owner decides where ticks come from (a ``QTimer`` in the app, direct
    calls in tests). A cancelled timer ignores ticks, so a late tick after an
    answer or after the round was abandoned has no effect.
    """

    def __init__(self, budget: int = DEFAULT_TIME_LIMIT) -> None:
        if budget <= 0:
            raise ValueError("Timer budget must be positive")
        self._budget = budget
        self._remaining = budget
        self._armed = False

    @property
    def budget(self) -> int:
        return self._budget

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def armed(self) -> bool:
        return self._armed

    def arm(self) -> None:
        """Start a fresh countdown from the full budget."""
        self._remaining = self._budget
        self._armed = True

    def cancel(self) -> None:
        self._armed = False

    def tick(self) -> bool:
        """Count one second down. Returns True once, on the tick that reaches zero."""
        if not self._armed:
            return False
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            self._armed = False
            return True
        return False
