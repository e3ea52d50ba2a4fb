"""
Rule Engine — fixed-point cascading inference over the question registry.

Each pass runs every unanswered question's own ``infer`` function in registry
order, then every block rule in INFERENCE_RULES order, merging results into
the working map as soon as they are produced. Passes repeat until one full
pass changes nothing.

Keys present in the input are never overwritten. A value inferred earlier in
the same run is only ever extended, and only for multi-select questions.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from dep_autofill.data.questions import QuestionRegistry, get_question_registry
from dep_autofill.models import AnswerMap, AnswerValue, Question
from dep_autofill.rules.inference_rules import INFERENCE_RULES, InferenceRule

logger = logging.getLogger(__name__)


class InferenceResult(BaseModel):
    answers: dict[str, AnswerValue] = {}
    merged: set[str] = set()  # multi-select keys extended by more than one contributor
    passes: int = 0


class RuleEngine:
    """Applies per-question and block inference rules until nothing changes."""

    def __init__(
        self,
        questions: Optional[Iterable[Question]] = None,
        rules: Optional[Iterable[InferenceRule]] = None,
        registry: Optional[QuestionRegistry] = None,
    ):
        self._registry = registry or get_question_registry()
        self._questions: tuple[Question, ...] = tuple(
            questions if questions is not None else self._registry
        )
        self._rules: tuple[InferenceRule, ...] = tuple(
            rules if rules is not None else INFERENCE_RULES
        )
        self._multi_select: set[str] = {q.id for q in self._questions if q.multi_select}

    def apply_all(self, answers: Mapping[str, Any]) -> AnswerMap:
        return self.run(answers).answers

    def run(self, answers: Mapping[str, Any]) -> InferenceResult:
        working: AnswerMap = dict(answers)
        fixed = frozenset(working)
        view = MappingProxyType(working)
        contributions: set[tuple[str, str]] = set()
        merged: set[str] = set()

        passes = 0
        while True:
            passes += 1
            changed = False

            # ── Per-question infer functions ─────────────
            for question in self._questions:
                if question.infer is None or question.id in working:
                    continue
                value = question.infer(view)
                if value is None:
                    continue
                contributor = f"question:{question.id}"
                if self._merge(working, fixed, contributions, merged, contributor, question.id, value):
                    changed = True

            # ── Block rules ──────────────────────────────
            for rule in self._rules:
                produced = rule(view)
                if not produced:
                    continue
                contributor = f"rule:{rule.__name__}"
                for key, value in produced.items():
                    if self._merge(working, fixed, contributions, merged, contributor, key, value):
                        changed = True

            if not changed:
                break

        inferred = len(working) - len(fixed)
        logger.debug(
            f"Inference reached a fixed point after {passes} pass(es): "
            f"{inferred} inferred, {len(merged)} merged"
        )
        return InferenceResult(answers=working, merged=merged, passes=passes)

    def _merge(
        self,
        working: AnswerMap,
        fixed: frozenset[str],
        contributions: set[tuple[str, str]],
        merged: set[str],
        contributor: str,
        key: str,
        value: AnswerValue,
    ) -> bool:
        """Merge one produced answer; return True if the working map changed."""
        if key in fixed or (contributor, key) in contributions:
            return False

        if key not in working:
            working[key] = list(value) if isinstance(value, list) else value
            contributions.add((contributor, key))
            return True

        if key not in self._multi_select and not self._registry.is_multi_select(key):
            return False

        # Only option lists are unioned; a scalar such as "Not Applicable" stays first-wins
        existing = working[key]
        if not isinstance(existing, list) or not isinstance(value, list):
            return False
        working[key] = existing + value
        contributions.add((contributor, key))
        merged.add(key)
        return True
