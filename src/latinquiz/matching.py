"""Answer matching, hints and scoring.

Everything here is pure: the same input always gives the same output, which
is what allows :func:`expand_accepted_answers` to cache without ever
invalidating.
"""

import math
import re
from functools import lru_cache
from typing import FrozenSet, Sequence

from .models import Hint

_PARENS = re.compile(r"[()]")


def _round_half_up(value: float) -> float:
    # Math.round semantics; Python's round() would send 0.5 to the even side.
    return math.floor(value + 0.5)


def normalize(raw: str) -> str:
    """Lowercase, trim and drop the ``(be)`` marker and any other parenthesis."""
    # Trim last, "(be) groeten" would otherwise keep a leading space
    text = raw.lower().replace("(be)", "")
    return _PARENS.sub("", text).strip()


@lru_cache(maxsize=1024)
def _expand(accepted: tuple) -> FrozenSet[str]:
    fragments = set()
    for answer in accepted:
        base = normalize(answer).replace("/", ",")
        for part in base.split(","):
            part = part.strip()
            if part:
                fragments.add(part)
    return frozenset(fragments)


def expand_accepted_answers(accepted_answers: Sequence[str]) -> FrozenSet[str]:
    """Every individually acceptable answer, split on ``,`` and ``/``."""
    return _expand(tuple(accepted_answers))


def check_answer(raw_input: str, accepted_answers: Sequence[str]) -> bool:
    return normalize(raw_input) in expand_accepted_answers(accepted_answers)


def generate_hint(accepted_answers: Sequence[str]) -> Hint:
    """Hint built from the shortest answer as authored (first one on ties)."""
    if not accepted_answers:
        raise ValueError("cannot build a hint without accepted answers")

    shortest = accepted_answers[0]
    for answer in accepted_answers[1:]:
        if len(answer) < len(shortest):
            shortest = answer

    hint_length = max(2, len(shortest) // 3)
    return Hint(
        fragment=shortest[:hint_length],
        first_letter=shortest[:1].upper(),
        full_length=len(shortest),
    )


def calculate_percentage(score: float, total: int) -> float:
    if total == 0:
        return 0
    return _round_half_up(score / total * 1000) / 10


def calculate_grade(score: float, total: int) -> float:
    """Map the fraction correct linearly onto the Dutch 1-10 scale."""
    if total == 0:
        return 1.0
    grade = max(1.0, min(10.0, score / total * 9 + 1))
    return _round_half_up(grade * 10) / 10
