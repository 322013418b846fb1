"""
revisit.review_state
---------

This module defines the ReviewState class.

Classes:
    ReviewState: The scheduling record attached to a learned item.
    ReviewStatePatch: The fields the scheduler updates after a review.
"""

from __future__ import annotations
from copy import copy
from dataclasses import dataclass
import json
import math
from typing import Any, TypedDict
from typing_extensions import Self

from revisit.classifier import DueBoundary
from revisit.instant import now_ms

DEFAULT_INTERVAL = 1
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
DEFAULT_REPETITIONS = 0


class ReviewStateDict(TypedDict):
    """
    JSON-serializable dictionary representation of a ReviewState object.
    """

    item_id: str | None
    interval: float
    ease_factor: float
    repetitions: int
    next_review_date: int
    last_reviewed_date: int | None
    initial_rating: int | None


class ReviewStatePatch(TypedDict):
    """
    The scheduling fields produced by a single review.
    """

    interval: float
    ease_factor: float
    repetitions: int
    next_review_date: int
    last_reviewed_date: int


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def normalize_interval(interval: Any) -> float:
    if _is_number(interval) and interval > 0:
        return interval
    return DEFAULT_INTERVAL


def normalize_ease(
    ease_factor: Any,
    *,
    min_ease: float = MIN_EASE,
    default_ease: float = DEFAULT_EASE,
) -> float:
    if _is_number(ease_factor) and ease_factor >= min_ease:
        return ease_factor
    return default_ease


def normalize_repetitions(repetitions: Any) -> int:
    if isinstance(repetitions, float) and repetitions.is_integer():
        repetitions = int(repetitions)
    if _is_number(repetitions) and isinstance(repetitions, int) and repetitions >= 0:
        return repetitions
    return DEFAULT_REPETITIONS


@dataclass(init=False)
class ReviewState:
    """
    The spaced-repetition schedule of one learned item.

    Missing or invalid numeric fields are replaced with their defaults when the
    object is constructed, so every ReviewState is fully populated.

    Attributes:
        item_id: The id of the learned item this schedule belongs to, if known.
        interval: Number of days between the last review and the next one. Any positive value is kept
            on construction; intervals produced by a Scheduler are always >= 1.
        ease_factor: Multiplier controlling how fast the interval grows. Any positive value is kept
            on construction, so an ease produced by a Scheduler with a custom min_ease survives
            a reload; the Scheduler replaces an ease below its own min_ease when grading.
        repetitions: Consecutive reviews not graded Again since the last reset.
        next_review_date: Epoch milliseconds at which the item becomes due.
        last_reviewed_date: Epoch milliseconds of the most recent review, or None if never reviewed.
        initial_rating: The 1-5 rating the schedule was created from, if any.
    """

    item_id: str | None
    interval: float
    ease_factor: float
    repetitions: int
    next_review_date: int
    last_reviewed_date: int | None
    initial_rating: int | None

    def __init__(
        self,
        item_id: str | None = None,
        interval: float | None = None,
        ease_factor: float | None = None,
        repetitions: int | None = None,
        next_review_date: int | None = None,
        last_reviewed_date: int | None = None,
        initial_rating: int | None = None,
    ) -> None:
        self.item_id = item_id

        self.interval = normalize_interval(interval)
        # the lower bound belongs to the scheduler and is applied when grading
        self.ease_factor = (
            ease_factor
            if _is_number(ease_factor) and ease_factor > 0
            else DEFAULT_EASE
        )
        self.repetitions = normalize_repetitions(repetitions)

        if next_review_date is None:
            next_review_date = now_ms()
        self.next_review_date = next_review_date

        self.last_reviewed_date = last_reviewed_date
        self.initial_rating = initial_rating

    def apply(self, patch: ReviewStatePatch) -> Self:
        """
        Returns a copy of the ReviewState with the patch applied.

        Args:
            patch: The scheduling fields computed by a review.

        Returns:
            The updated ReviewState. The original object is left unchanged.
        """

        state = copy(self)

        state.interval = patch["interval"]
        state.ease_factor = patch["ease_factor"]
        state.repetitions = patch["repetitions"]
        state.next_review_date = patch["next_review_date"]
        state.last_reviewed_date = patch["last_reviewed_date"]

        return state

    def is_due(
        self, now: int | None = None, boundary: DueBoundary = DueBoundary.Instant
    ) -> bool:
        """
        Whether the item should be reviewed at the given instant.

        Args:
            now: The reference instant in epoch milliseconds. Defaults to the current time.
            boundary: Which due boundary policy to apply.

        Returns:
            True if the next review date is on or before the boundary.
        """

        if now is None:
            now = now_ms()

        return self.next_review_date <= boundary.cutoff(now)

    def to_dict(self) -> ReviewStateDict:
        """
        Returns a JSON-serializable dictionary representation of the ReviewState object.

        This method is specifically useful for storing ReviewState objects in a database.

        Returns:
            A dictionary representation of the ReviewState object.
        """

        return {
            "item_id": self.item_id,
            "interval": self.interval,
            "ease_factor": self.ease_factor,
            "repetitions": self.repetitions,
            "next_review_date": self.next_review_date,
            "last_reviewed_date": self.last_reviewed_date,
            "initial_rating": self.initial_rating,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewStateDict) -> Self:
        """
        Creates a ReviewState object from an existing dictionary.

        Stored records may predate some fields; missing keys fall back to their defaults.
        A stored ease factor is not checked against MIN_EASE, since a Scheduler with a
        custom min_ease may have produced it.

        Args:
            source_dict: A dictionary representing an existing ReviewState object.

        Returns:
            A ReviewState object created from the provided dictionary.
        """

        next_review_date = source_dict.get("next_review_date")
        last_reviewed_date = source_dict.get("last_reviewed_date")

        return cls(
            item_id=source_dict.get("item_id"),
            interval=source_dict.get("interval"),
            ease_factor=source_dict.get("ease_factor"),
            repetitions=source_dict.get("repetitions"),
            next_review_date=(
                int(next_review_date) if next_review_date is not None else None
            ),
            last_reviewed_date=(
                int(last_reviewed_date) if last_reviewed_date is not None else None
            ),
            initial_rating=source_dict.get("initial_rating"),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """Returns to_dict() serialized with json.dumps."""

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """Inverse of to_json()."""

        source_dict: ReviewStateDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["ReviewState", "ReviewStatePatch"]
