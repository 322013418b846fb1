"""
revisit.classifier
---------

This module splits a collection of review states into due and upcoming items.

Classes:
    DueBoundary: Enum of the policies deciding where "due" ends.
    DueSplit: The due and upcoming review states, each ordered by next review date.
"""

from __future__ import annotations
from collections.abc import Iterable
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from revisit.instant import end_of_day, now_ms

if TYPE_CHECKING:
    from revisit.review_state import ReviewState


class DueBoundary(Enum):
    """
    Policy for the latest next review date that still counts as due.

    Instant: due once the next review date has been reached.
    EndOfDay: anything scheduled for the current (UTC) day is due, whatever the time of day.
    """

    Instant = "instant"
    EndOfDay = "end_of_day"

    def cutoff(self, now: int) -> int:
        if self is DueBoundary.EndOfDay:
            return end_of_day(now)
        return now


class DueSplit(NamedTuple):
    due: list[ReviewState]
    upcoming: list[ReviewState]


def classify(
    states: Iterable[ReviewState],
    now: int | None = None,
    boundary: DueBoundary = DueBoundary.Instant,
) -> DueSplit:
    """
    Partitions review states into those due for review and those still upcoming.

    Every state lands in exactly one of the two lists. Both lists are sorted by
    next review date; states sharing a date keep their input order.

    Args:
        states: The review states to classify.
        now: The reference instant in epoch milliseconds. Defaults to the current time.
        boundary: Which due boundary policy to apply.

    Returns:
        DueSplit: The due and upcoming review states.
    """

    if now is None:
        now = now_ms()

    cutoff = boundary.cutoff(now)

    ordered = sorted(states, key=lambda state: state.next_review_date)

    due = [state for state in ordered if state.next_review_date <= cutoff]
    upcoming = [state for state in ordered if state.next_review_date > cutoff]

    return DueSplit(due=due, upcoming=upcoming)


__all__ = ["DueBoundary", "DueSplit", "classify"]
