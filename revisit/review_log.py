"""
revisit.review_log
---------

This module defines the ReviewLog class, one entry per graded review.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TypedDict
import json
from typing_extensions import Self
from revisit.grading import Grade


class ReviewLogDict(TypedDict):
    item_id: str | None
    grade: int
    reviewed_at: int
    review_duration: int | None


@dataclass
class ReviewLog:
    """
    A graded review of one item.

    Review logs are what Scheduler.reschedule_state replays, so they hold everything
    needed to recompute a schedule: which item, the grade and when it was given.

    Attributes:
        item_id: The id of the reviewed item.
        grade: The grade the learner gave.
        reviewed_at: Epoch milliseconds of the review.
        review_duration: Milliseconds the learner spent on the review, or None if unknown.
    """

    item_id: str | None
    grade: Grade
    reviewed_at: int
    review_duration: int | None = None

    def to_dict(self) -> ReviewLogDict:
        return {
            "item_id": self.item_id,
            "grade": int(self.grade),
            "reviewed_at": self.reviewed_at,
            "review_duration": self.review_duration,
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Raises:
            InvalidGradeError: If the stored grade is not a recognized grade.
        """

        return cls(
            item_id=source_dict["item_id"],
            grade=Grade.coerce(source_dict["grade"]),
            reviewed_at=int(source_dict["reviewed_at"]),
            review_duration=source_dict["review_duration"],
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        return cls.from_dict(json.loads(source_json))


__all__ = ["ReviewLog"]
