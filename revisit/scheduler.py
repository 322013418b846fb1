"""
revisit.scheduler
---------

This module defines the Scheduler class as well as the various constants used in its calculations.

Classes:
    Scheduler: The spaced-repetition scheduler.
"""

from __future__ import annotations
from collections.abc import Iterable, Sequence
from datetime import date, datetime
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, TypedDict
from typing_extensions import Self

from revisit.classifier import DueBoundary, DueSplit, classify
from revisit.grading import Grade, InvalidRatingError
from revisit.instant import DAY_MS, now_ms, to_epoch_ms
from revisit.review_log import ReviewLog
from revisit.review_state import (
    DEFAULT_EASE,
    MIN_EASE,
    ReviewState,
    ReviewStatePatch,
    normalize_ease,
    normalize_interval,
    normalize_repetitions,
)

logger = logging.getLogger(__name__)

AGAIN_INTERVAL = 1

AGAIN_EASE_DELTA = -0.20
HARD_EASE_DELTA = -0.15
EASY_EASE_DELTA = 0.15

HARD_INTERVAL_MULTIPLIER = 1.2
EASY_INTERVAL_BONUS = 1.3

# first interval in days for initial ratings 1 through 5
DEFAULT_RATING_INTERVALS = (1, 1, 2, 3, 4)

InstantLike = int | datetime | date | str


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    default_ease: float
    min_ease: float
    again_interval: int
    again_ease_delta: float
    hard_ease_delta: float
    easy_ease_delta: float
    hard_interval_multiplier: float
    easy_interval_bonus: float
    rating_intervals: list[int]
    due_boundary: str
    strict_initial_rating: bool


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


@dataclass(init=False)
class Scheduler:
    """
    The spaced-repetition scheduler.

    Creates the first schedule of newly learned items and reschedules them each
    time they are graded, growing the interval by a per-item ease factor.

    Attributes:
        default_ease: Ease factor given to new items and to items whose ease is invalid.
        min_ease: The lowest ease factor an item can be lowered to.
        again_interval: Interval in days after an Again grade.
        again_ease_delta: Change to the ease factor after an Again grade.
        hard_ease_delta: Change to the ease factor after a Hard grade.
        easy_ease_delta: Change to the ease factor after an Easy grade.
        hard_interval_multiplier: Interval growth applied by a Hard grade.
        easy_interval_bonus: Extra interval growth applied by an Easy grade.
        rating_intervals: First interval in days for each initial rating 1 through 5.
        due_boundary: The policy deciding which items count as due.
        strict_initial_rating: Whether an invalid initial rating raises instead of falling back to again_interval.
    """

    default_ease: float
    min_ease: float
    again_interval: int
    again_ease_delta: float
    hard_ease_delta: float
    easy_ease_delta: float
    hard_interval_multiplier: float
    easy_interval_bonus: float
    rating_intervals: tuple[int, ...]
    due_boundary: DueBoundary
    strict_initial_rating: bool

    def __init__(
        self,
        default_ease: float = DEFAULT_EASE,
        min_ease: float = MIN_EASE,
        again_interval: int = AGAIN_INTERVAL,
        again_ease_delta: float = AGAIN_EASE_DELTA,
        hard_ease_delta: float = HARD_EASE_DELTA,
        easy_ease_delta: float = EASY_EASE_DELTA,
        hard_interval_multiplier: float = HARD_INTERVAL_MULTIPLIER,
        easy_interval_bonus: float = EASY_INTERVAL_BONUS,
        rating_intervals: Sequence[int] = DEFAULT_RATING_INTERVALS,
        due_boundary: DueBoundary = DueBoundary.Instant,
        strict_initial_rating: bool = False,
    ) -> None:
        self._validate_settings(
            default_ease=default_ease,
            min_ease=min_ease,
            again_interval=again_interval,
            again_ease_delta=again_ease_delta,
            hard_ease_delta=hard_ease_delta,
            easy_ease_delta=easy_ease_delta,
            hard_interval_multiplier=hard_interval_multiplier,
            easy_interval_bonus=easy_interval_bonus,
            rating_intervals=rating_intervals,
        )

        self.default_ease = default_ease
        self.min_ease = min_ease
        self.again_interval = again_interval
        self.again_ease_delta = again_ease_delta
        self.hard_ease_delta = hard_ease_delta
        self.easy_ease_delta = easy_ease_delta
        self.hard_interval_multiplier = hard_interval_multiplier
        self.easy_interval_bonus = easy_interval_bonus
        self.rating_intervals = tuple(rating_intervals)
        self.due_boundary = DueBoundary(due_boundary)
        self.strict_initial_rating = strict_initial_rating

    def _validate_settings(
        self,
        *,
        default_ease: float,
        min_ease: float,
        again_interval: int,
        again_ease_delta: float,
        hard_ease_delta: float,
        easy_ease_delta: float,
        hard_interval_multiplier: float,
        easy_interval_bonus: float,
        rating_intervals: Sequence[int],
    ) -> None:
        error_messages = []

        if not min_ease > 0:
            error_messages.append(f"min_ease = {min_ease} must be positive")
        if not default_ease >= min_ease:
            error_messages.append(
                f"default_ease = {default_ease} is below min_ease = {min_ease}"
            )
        if not again_interval >= 1:
            error_messages.append(
                f"again_interval = {again_interval} must be at least 1 day"
            )
        if not again_ease_delta <= 0:
            error_messages.append(
                f"again_ease_delta = {again_ease_delta} must not be positive"
            )
        if not hard_ease_delta <= 0:
            error_messages.append(
                f"hard_ease_delta = {hard_ease_delta} must not be positive"
            )
        if not easy_ease_delta >= 0:
            error_messages.append(
                f"easy_ease_delta = {easy_ease_delta} must not be negative"
            )
        if not hard_interval_multiplier >= 1:
            error_messages.append(
                f"hard_interval_multiplier = {hard_interval_multiplier} must be at least 1"
            )
        if not easy_interval_bonus >= 1:
            error_messages.append(
                f"easy_interval_bonus = {easy_interval_bonus} must be at least 1"
            )

        if len(rating_intervals) != len(DEFAULT_RATING_INTERVALS):
            error_messages.append(
                f"Expected {len(DEFAULT_RATING_INTERVALS)} rating_intervals, got {len(rating_intervals)}"
            )
        for index, rating_interval in enumerate(rating_intervals):
            if not rating_interval >= 1:
                error_messages.append(
                    f"rating_intervals[{index}] = {rating_interval} must be at least 1 day"
                )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more scheduler settings are invalid:\n"
                + "\n".join(error_messages)
            )

    def schedule(
        self,
        rating: int | None = None,
        solved_at: InstantLike | None = None,
        item_id: str | None = None,
    ) -> ReviewState:
        """
        Creates the first schedule of a newly learned item.

        The first interval comes from the learner's 1-5 rating of how hard the item
        was to recall (5 is easiest). A missing or out of range rating schedules the
        item again_interval days out, unless the scheduler is strict.

        Args:
            rating: The initial 1-5 difficulty rating.
            solved_at: When the item was learned. Defaults to the current time.
            item_id: The id of the learned item.

        Returns:
            ReviewState: The new, never reviewed schedule.

        Raises:
            InvalidRatingError: If the scheduler is strict and the rating is present but not in 1-5.
        """

        solved_at = now_ms() if solved_at is None else to_epoch_ms(solved_at)

        if rating is not None and not self._is_valid_rating(rating):
            if self.strict_initial_rating:
                raise InvalidRatingError(f"Invalid initial rating: {rating!r}")
            logger.debug(
                "Initial rating %r is not in 1-5, scheduling %s day(s) out",
                rating,
                self.again_interval,
            )
            rating = None

        interval = self._initial_interval(rating=rating)

        return ReviewState(
            item_id=item_id,
            interval=interval,
            ease_factor=self.default_ease,
            repetitions=0,
            next_review_date=solved_at + interval * DAY_MS,
            last_reviewed_date=None,
            initial_rating=rating,
        )

    def next_review(
        self,
        state: ReviewState,
        grade: Grade | int | str,
        now: InstantLike | None = None,
    ) -> ReviewStatePatch:
        """
        Computes the schedule that follows from grading an item.

        This is a pure function of its arguments; the state is not modified.

        Args:
            state: The item's current schedule.
            grade: How well the learner recalled the item.
            now: The time of the review. Defaults to the current time.

        Returns:
            ReviewStatePatch: The updated scheduling fields.

        Raises:
            InvalidGradeError: If the grade is not one of Again, Hard, Good or Easy.
        """

        grade = Grade.coerce(grade)

        now = now_ms() if now is None else to_epoch_ms(now)

        interval = normalize_interval(state.interval)
        ease_factor = normalize_ease(
            state.ease_factor, min_ease=self.min_ease, default_ease=self.default_ease
        )
        repetitions = normalize_repetitions(state.repetitions)

        match grade:
            case Grade.Again:
                next_interval = self.again_interval
                next_ease_factor = max(self.min_ease, ease_factor + self.again_ease_delta)
                next_repetitions = 0

            case Grade.Hard:
                next_interval = max(
                    self.again_interval,
                    _round_half_up(interval * self.hard_interval_multiplier),
                )
                # must move past the previous interval unless it was already the minimum
                if next_interval <= interval and interval > self.again_interval:
                    next_interval = interval + 1

                next_ease_factor = max(self.min_ease, ease_factor + self.hard_ease_delta)
                next_repetitions = repetitions + 1

            case Grade.Good:
                # the first success keeps the interval chosen from the initial rating
                if repetitions == 0:
                    next_interval = interval
                else:
                    next_interval = max(
                        interval + 1, _round_half_up(interval * ease_factor)
                    )

                next_ease_factor = ease_factor
                next_repetitions = repetitions + 1

            case Grade.Easy:
                if repetitions == 0:
                    next_interval = max(
                        interval + 2,
                        _round_half_up(interval * self.easy_interval_bonus),
                    )
                else:
                    next_interval = max(
                        interval + 1,
                        _round_half_up(
                            interval * ease_factor * self.easy_interval_bonus
                        ),
                    )

                next_ease_factor = ease_factor + self.easy_ease_delta
                next_repetitions = repetitions + 1

        next_interval = max(1, next_interval)

        # whole days, so the item is never due before its nominal interval
        next_review_date = now + math.ceil(next_interval) * DAY_MS

        logger.debug(
            "Graded %s: interval=%s ease_factor=%s repetitions=%s -> interval=%s ease_factor=%s repetitions=%s next_review_date=%s",
            grade.name,
            interval,
            ease_factor,
            repetitions,
            next_interval,
            next_ease_factor,
            next_repetitions,
            next_review_date,
        )

        return {
            "interval": next_interval,
            "ease_factor": next_ease_factor,
            "repetitions": next_repetitions,
            "next_review_date": next_review_date,
            "last_reviewed_date": now,
        }

    def review_state(
        self,
        state: ReviewState,
        grade: Grade | int | str,
        review_time: InstantLike | None = None,
        review_duration: int | None = None,
    ) -> tuple[ReviewState, ReviewLog]:
        """
        Reviews an item with a given grade at a given time for a specified duration.

        Args:
            state: The schedule of the item being reviewed.
            grade: The chosen grade for the item being reviewed.
            review_time: The time of the review. Defaults to the current time.
            review_duration: The number of milliseconds it took to review the item or None if unspecified.

        Returns:
            tuple[ReviewState,ReviewLog]: A tuple containing the updated schedule and its corresponding review log.

        Raises:
            InvalidGradeError: If the grade is not one of Again, Hard, Good or Easy.
        """

        grade = Grade.coerce(grade)

        patch = self.next_review(state, grade, now=review_time)

        review_log = ReviewLog(
            item_id=state.item_id,
            grade=grade,
            reviewed_at=patch["last_reviewed_date"],
            review_duration=review_duration,
        )

        return state.apply(patch), review_log

    def reschedule_state(
        self, state: ReviewState, review_logs: Iterable[ReviewLog]
    ) -> ReviewState:
        """
        Recomputes an item's schedule with the current scheduler from its review logs.

        Useful after changing the scheduler's settings, to update items as if they had
        always been scheduled with it.

        Args:
            state: The schedule to be rescheduled.
            review_logs: That item's review logs (order doesn't matter).

        Returns:
            ReviewState: A new schedule computed with this scheduler.

        Raises:
            ValueError: If any of the review logs are for an item other than the one specified.
        """

        review_logs = list(review_logs)

        for review_log in review_logs:
            if review_log.item_id != state.item_id:
                raise ValueError(
                    f"ReviewLog item_id {review_log.item_id} does not match ReviewState item_id {state.item_id}"
                )

        review_logs = sorted(review_logs, key=lambda log: log.reviewed_at)

        initial_rating = (
            state.initial_rating if self._is_valid_rating(state.initial_rating) else None
        )

        rescheduled_state = ReviewState(
            item_id=state.item_id,
            interval=self._initial_interval(rating=initial_rating),
            ease_factor=self.default_ease,
            repetitions=0,
            next_review_date=state.next_review_date,
            initial_rating=initial_rating,
        )

        for review_log in review_logs:
            rescheduled_state, _ = self.review_state(
                state=rescheduled_state,
                grade=review_log.grade,
                review_time=review_log.reviewed_at,
            )

        return rescheduled_state

    def preview(
        self, state: ReviewState, now: InstantLike | None = None
    ) -> dict[Grade, float]:
        """
        Returns the interval in days each grade would schedule the item for.

        Args:
            state: The item's current schedule.
            now: The time of the review. Defaults to the current time.

        Returns:
            dict[Grade, float]: The next interval for every grade, in Grade order.
        """

        now = now_ms() if now is None else to_epoch_ms(now)

        return {
            grade: self.next_review(state, grade, now=now)["interval"]
            for grade in Grade
        }

    def classify(
        self, states: Iterable[ReviewState], now: InstantLike | None = None
    ) -> DueSplit:
        """
        Splits review states into due and upcoming items using this scheduler's due boundary.

        Args:
            states: The review states to classify.
            now: The reference time. Defaults to the current time.

        Returns:
            DueSplit: The due and upcoming review states, each sorted by next review date.
        """

        return classify(
            states,
            now=None if now is None else to_epoch_ms(now),
            boundary=self.due_boundary,
        )

    def to_dict(
        self,
    ) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.
        """

        return {
            "default_ease": self.default_ease,
            "min_ease": self.min_ease,
            "again_interval": self.again_interval,
            "again_ease_delta": self.again_ease_delta,
            "hard_ease_delta": self.hard_ease_delta,
            "easy_ease_delta": self.easy_ease_delta,
            "hard_interval_multiplier": self.hard_interval_multiplier,
            "easy_interval_bonus": self.easy_interval_bonus,
            "rating_intervals": list(self.rating_intervals),
            "due_boundary": self.due_boundary.value,
            "strict_initial_rating": self.strict_initial_rating,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        return cls(
            default_ease=source_dict["default_ease"],
            min_ease=source_dict["min_ease"],
            again_interval=source_dict["again_interval"],
            again_ease_delta=source_dict["again_ease_delta"],
            hard_ease_delta=source_dict["hard_ease_delta"],
            easy_ease_delta=source_dict["easy_ease_delta"],
            hard_interval_multiplier=source_dict["hard_interval_multiplier"],
            easy_interval_bonus=source_dict["easy_interval_bonus"],
            rating_intervals=source_dict["rating_intervals"],
            due_boundary=DueBoundary(source_dict["due_boundary"]),
            strict_initial_rating=source_dict["strict_initial_rating"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """Returns to_dict() serialized with json.dumps."""

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """Inverse of to_json()."""

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def _is_valid_rating(self, rating: Any) -> bool:
        return (
            isinstance(rating, int)
            and not isinstance(rating, bool)
            and 1 <= rating <= len(self.rating_intervals)
        )

    def _initial_interval(self, *, rating: int | None) -> int:
        if rating is None:
            return self.again_interval

        return self.rating_intervals[rating - 1]


_DEFAULT_SCHEDULER = Scheduler()


def schedule(
    rating: int | None = None,
    solved_at: InstantLike | None = None,
    item_id: str | None = None,
) -> ReviewState:
    """Creates the first schedule of a learned item with the default scheduler."""

    return _DEFAULT_SCHEDULER.schedule(
        rating=rating, solved_at=solved_at, item_id=item_id
    )


def grade(
    state: ReviewState, grade: Grade | int | str, now: InstantLike | None = None
) -> ReviewStatePatch:
    """Computes the schedule update for a graded item with the default scheduler."""

    return _DEFAULT_SCHEDULER.next_review(state, grade, now=now)


__all__ = ["Scheduler", "schedule", "grade"]
