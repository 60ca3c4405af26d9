"""
Grader - deterministic answer checking for practice problems.

The verdict that feeds record_attempt comes from here (or from an explicit
override by the caller), never from free-text tutor feedback.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


class Grader:
    """
    Compares a learner's answer to the expected one.

    Text answers match case-insensitively after trimming and collapsing
    whitespace. Numeric answers also match when they are numerically equal
    ("4.50" == "4.5", "1,000" == "1000").
    """

    @staticmethod
    def normalize(answer: Optional[str]) -> str:
        return _WHITESPACE.sub(" ", (answer or "").strip().lower())

    @staticmethod
    def as_number(answer: str) -> Optional[Decimal]:
        candidate = answer.replace(",", "").replace(" ", "")
        if candidate.startswith("$"):
            candidate = candidate[1:]
        try:
            value = Decimal(candidate)
        except InvalidOperation:
            return None
        return value if value.is_finite() else None

    @classmethod
    def answers_match(cls, user_answer: Optional[str], expected_answer: Optional[str]) -> bool:
        """True when the learner's answer is the expected answer."""
        given = cls.normalize(user_answer)
        expected = cls.normalize(expected_answer)
        if not given or not expected:
            return False
        if given == expected:
            return True
        given_number = cls.as_number(given)
        expected_number = cls.as_number(expected)
        if given_number is None or expected_number is None:
            return False
        return given_number == expected_number


def answers_match(user_answer: Optional[str], expected_answer: Optional[str]) -> bool:
    return Grader.answers_match(user_answer, expected_answer)
