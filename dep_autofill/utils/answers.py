"""Small helpers for reading answers inside inference rules."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from dep_autofill.constants import SKIPPED_ANSWER


def known_answer(answers: Mapping[str, Any], question_id: str) -> Optional[Any]:
    """Return the answer for ``question_id``, or None when it is unknown.

    Unanswered questions and the skipped sentinel are both unknown.
    """
    value = answers.get(question_id)
    if value is None or value == SKIPPED_ANSWER:
        return None
    return value


def is_skipped(answers: Mapping[str, Any], *question_ids: str) -> bool:
    return any(answers.get(qid) == SKIPPED_ANSWER for qid in question_ids)


def mentions(value: Any, *needles: str) -> bool:
    """True if a single or multi-select answer contains any of ``needles``."""
    if value is None:
        return False
    items = value if isinstance(value, list) else [value]
    return any(needle in str(item) for item in items for needle in needles)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, list):
        return len(value) == 0
    return False


_QUESTION_NUMBER = re.compile(r"^(\d+\.\d+)")


def question_number(question_id: str) -> str:
    """``"2.7 Is personal health ..."`` → ``"2.7"``; other ids are returned as is."""
    match = _QUESTION_NUMBER.match(question_id)
    return match.group(1) if match else question_id
