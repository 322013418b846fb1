"""
py-revisit
-------

Py-Revisit schedules reviews of learned items with an ease-factor based spaced repetition algorithm.
"""

from revisit.scheduler import Scheduler, schedule, grade
from revisit.review_state import ReviewState, ReviewStatePatch
from revisit.grading import Grade, InvalidGradeError, InvalidRatingError
from revisit.review_log import ReviewLog
from revisit.classifier import DueBoundary, DueSplit, classify

__all__ = [
    "Scheduler",
    "ReviewState",
    "ReviewStatePatch",
    "Grade",
    "InvalidGradeError",
    "InvalidRatingError",
    "ReviewLog",
    "DueBoundary",
    "DueSplit",
    "schedule",
    "grade",
    "classify",
]
