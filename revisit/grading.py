"""
revisit.grading
---------

This module defines the Grade enum and the errors raised for invalid review inputs.

Classes:
    Grade: Enum representing the four possible grades when reviewing an item.
    InvalidGradeError: Raised when a grade is not one of the four recognized grades.
    InvalidRatingError: Raised when a strict scheduler receives an invalid initial rating.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Any
from typing_extensions import Self


class InvalidGradeError(ValueError):
    """
    Raised when a value can not be interpreted as a Grade.
    """


class InvalidRatingError(ValueError):
    """
    Raised when an initial rating is outside of 1-5 and the scheduler is strict.
    """


class Grade(IntEnum):
    """
    Enum representing the four possible grades when reviewing an item.
    """

    Again = 1
    Hard = 2
    Good = 3
    Easy = 4

    @classmethod
    def coerce(cls, value: Any) -> Self:
        """
        Interprets a Grade, its integer value or its (case-insensitive) name as a Grade.

        Args:
            value: The value to interpret.

        Returns:
            The matching Grade.

        Raises:
            InvalidGradeError: If the value does not name one of the four grades.
        """

        if isinstance(value, cls):
            return value

        # bool is an int subclass, True would otherwise become Grade.Again
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass

        if isinstance(value, str):
            for grade in cls:
                if grade.name.lower() == value.strip().lower():
                    return grade

        raise InvalidGradeError(f"Invalid review grade: {value!r}")


__all__ = ["Grade", "InvalidGradeError", "InvalidRatingError"]
