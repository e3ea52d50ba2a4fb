"""
Question Service — anchor-driven prediction for a DEP questionnaire.

Sequence for one prediction pass:
  1. Ask each unanswered anchor, in the fixed ANCHORS order, through the
     prompt collaborator. Failures and blank replies store SKIPPED_ANSWER.
  2. Run the RuleEngine to a fixed point.
  3. Fill anything still unanswered from the default-answer table.
  4. Fail loudly if any requested question is still without an answer.

Confidence and provenance are assigned when answers are mapped back onto
the workbook's question rows (predict_from_anchors / score_answer).
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Iterable, Mapping, Optional, Sequence

from dep_autofill.config import Settings, get_settings
from dep_autofill.constants import NOT_APPLICABLE, SECTION_REGIMES, SKIPPED_ANSWER
from dep_autofill.data.anchors import ANCHORS, get_anchor_prompt
from dep_autofill.data.default_answers import DEFAULT_ANSWERS, get_default_answer
from dep_autofill.data.questions import QuestionRegistry, get_question_registry
from dep_autofill.models import (
    AnchorQuestionPayload,
    AnswerMap,
    AnswerMetadata,
    AnswerProvenance,
    AnswerSource,
    AnswerValue,
    PredictionOutcome,
    PredictionResult,
    QuestionData,
    QuestionnaireSummary,
)
from dep_autofill.rules import RuleEngine, find_consistency_warnings
from dep_autofill.services.section_service import SectionClassifier, get_section_classifier
from dep_autofill.utils.answers import is_blank, question_number

logger = logging.getLogger(__name__)

PromptFn = Callable[[AnchorQuestionPayload], Awaitable[Optional[AnswerValue]]]

_NUMERIC_ANCHOR = re.compile(r"^\d+\.\d+$")
_SENTENCE_BREAK = re.compile(r"(?<=[?*.])(?=\s|$)")

# Rows in Sections 10-12 that stand in for the regulatory-regimes anchor
_REGIME_KEYWORDS: dict[str, str] = {"10": "quebec", "11": "gdpr", "12": "hipaa"}


class UnansweredQuestionsError(RuntimeError):
    """Questions left without an answer after inference and default fill."""

    def __init__(self, question_ids: list[str]):
        self.question_ids = question_ids
        super().__init__(
            f"Failed to provide answers for {len(question_ids)} questions: {', '.join(question_ids)}"
        )


class QuestionService:
    """Selects and collects anchors, then completes the questionnaire."""

    def __init__(
        self,
        engine: Optional[RuleEngine] = None,
        registry: Optional[QuestionRegistry] = None,
        classifier: Optional[SectionClassifier] = None,
        default_answers: Optional[Mapping[str, str]] = None,
        anchors: Optional[Sequence[str]] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.registry = registry or get_question_registry()
        self.engine = engine or RuleEngine(registry=self.registry)
        self.classifier = classifier or get_section_classifier()
        self.default_answers = DEFAULT_ANSWERS if default_answers is None else default_answers
        self.anchors: list[str] = list(anchors if anchors is not None else ANCHORS)
        self.total_questions = 0
        self.allowed_options: dict[str, list[str]] = {}

    # ── Collaborator state ───────────────────────────────

    def set_total_questions(self, count: int) -> None:
        self.total_questions = count

    def set_allowed_options(self, options: Mapping[str, list[str]]) -> None:
        """Option lists read from the workbook; these take precedence over the built-in ones."""
        self.allowed_options = {k: list(v) for k, v in options.items()}
        logger.info(f"Set allowed options for {len(self.allowed_options)} questions")

    # ── Prediction ───────────────────────────────────────

    async def predict_answers(
        self,
        existing_answers: Mapping[str, Any],
        all_question_ids: Iterable[str],
        prompt_for_answer: Optional[PromptFn] = None,
    ) -> PredictionResult:
        """Complete the questionnaire from ``existing_answers``.

        Raises UnansweredQuestionsError if any id of ``all_question_ids``
        (the registry ids when empty) still has no answer at the end.
        """
        answers: AnswerMap = {k: v for k, v in existing_answers.items() if not is_blank(v)}
        collected: set[str] = set()
        metadata: dict[str, AnswerMetadata] = {
            k: AnswerMetadata(skipped=True) for k, v in answers.items() if v == SKIPPED_ANSWER
        }

        # ── 1. Anchor collection ─────────────────────────
        for anchor_id in self.anchors:
            if anchor_id in answers:
                continue
            if self.registry.get(anchor_id) is None:
                logger.warning(f"Anchor question {anchor_id} not found in the registry, skipping")
                continue

            reply = await self._collect_anchor(anchor_id, answers, prompt_for_answer)
            if reply is None or reply == SKIPPED_ANSWER:
                answers[anchor_id] = SKIPPED_ANSWER
                metadata[anchor_id] = AnswerMetadata(skipped=True)
                logger.info(f"Anchor {anchor_id} skipped")
            else:
                answers[anchor_id] = reply
                collected.add(anchor_id)
                logger.info(f"Anchor {anchor_id} answered: {reply}")

        # ── 2. Cascading inference ───────────────────────
        before = len(answers)
        result = self.engine.run(answers)
        answers = result.answers
        for key in result.merged:
            metadata.setdefault(key, AnswerMetadata()).merged = True
        logger.info(
            f"Inference added {len(answers) - before} answers in {result.passes} pass(es) "
            f"({len(result.merged)} merged)"
        )

        for warning in find_consistency_warnings(answers):
            logger.warning(f"Consistency warning: {warning}")

        # ── 3. Default fill ──────────────────────────────
        question_ids = list(dict.fromkeys(all_question_ids)) or self.registry.ids()
        defaulted = 0
        for qid in question_ids:
            if not is_blank(answers.get(qid)):
                continue
            answers[qid] = get_default_answer(
                qid, self.default_answers, fallback=self.settings.fallback_answer
            )
            metadata.setdefault(qid, AnswerMetadata()).defaulted = True
            defaulted += 1
        if defaulted:
            logger.info(f"Filled {defaulted} unanswered questions with defaults")

        # ── 4. Post-condition ────────────────────────────
        unanswered = [qid for qid in question_ids if is_blank(answers.get(qid))]
        if unanswered:
            logger.error(f"{len(unanswered)} questions remain unanswered: {unanswered}")
            raise UnansweredQuestionsError(unanswered)

        logger.info(f"Prediction complete: {len(answers)} answers")
        return PredictionResult(answers=answers, metadata=metadata, collected=collected)

    async def _collect_anchor(
        self,
        anchor_id: str,
        answers: Mapping[str, Any],
        prompt_for_answer: Optional[PromptFn],
    ) -> Optional[AnswerValue]:
        """Ask one anchor; None means it could not be answered."""
        if prompt_for_answer is None:
            logger.warning(f"No prompt available for anchor {anchor_id}")
            return None

        payload = self.anchor_payload(anchor_id, answers)
        try:
            reply = await asyncio.wait_for(
                prompt_for_answer(payload),
                timeout=self.settings.prompt_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Prompt for anchor {anchor_id} timed out after {self.settings.prompt_timeout_seconds:g}s"
            )
            return None
        except Exception as e:
            logger.error(f"Error prompting user for question {anchor_id}: {e}")
            return None

        if is_blank(reply):
            return None
        return reply

    # ── Confidence ───────────────────────────────────────

    def score_answer(
        self,
        question_id: str,
        answer: Any,
        user_ids: Iterable[str],
        metadata: Optional[AnswerMetadata] = None,
    ) -> tuple[float, AnswerSource]:
        """Confidence and provenance of one answer, from how it was produced."""
        meta = metadata or AnswerMetadata()
        if answer == SKIPPED_ANSWER or meta.skipped:
            return 0.1, AnswerSource.SKIPPED
        if question_id in set(user_ids):
            return 1.0, AnswerSource.USER
        if meta.defaulted:
            return 0.2, AnswerSource.DEFAULT
        if meta.merged:
            return 0.6, AnswerSource.INFERENCE_MERGED
        if answer == NOT_APPLICABLE:
            return 0.9, AnswerSource.INFERENCE_DIRECT
        return 0.7, AnswerSource.INFERENCE

    # ── Anchor selection ─────────────────────────────────

    @staticmethod
    def _matches_anchor(question: QuestionData, anchor_id: str) -> bool:
        if _NUMERIC_ANCHOR.match(anchor_id):
            return question_number(question.id) == anchor_id
        if anchor_id == SECTION_REGIMES:
            if SECTION_REGIMES in question.id:
                return True
            section = question.id.split(".", 1)[0]
            keyword = _REGIME_KEYWORDS.get(section)
            return "." in question.id and keyword is not None and keyword in question.question.lower()
        return question.id == anchor_id

    def select_anchor_questions(
        self,
        questions: Sequence[QuestionData],
        existing_answers: Mapping[str, Any],
        max_questions: Optional[int] = None,
    ) -> list[QuestionData]:
        """Unanswered anchor rows, in anchor order, capped at ``max_questions``."""
        cap = max_questions if max_questions is not None else self.settings.max_anchor_questions
        logger.info(f"Selecting up to {cap} anchor questions from {len(questions)} total questions")

        unanswered = [
            q for q in questions
            if q.id not in existing_answers and is_blank(q.answer)
        ]
        if not unanswered:
            return []

        selected: list[QuestionData] = []
        for anchor_id in self.anchors:
            match = next((q for q in unanswered if self._matches_anchor(q, anchor_id)), None)
            if match is None:
                logger.warning(f"Could not find matching question for anchor {anchor_id}")
                continue
            if match not in selected:
                selected.append(match)
                logger.debug(f"Selected anchor question {match.id} for anchor {anchor_id}")

        logger.info(f"Selected {min(len(selected), cap)} anchor questions")
        return selected[:cap]

    def find_next_unanswered_anchor(self, questions: Sequence[QuestionData]) -> Optional[QuestionData]:
        unanswered = [q for q in questions if is_blank(q.answer)]
        for anchor_id in self.anchors:
            for q in unanswered:
                if self._matches_anchor(q, anchor_id):
                    logger.info(f"Found next unanswered anchor question: {q.id}")
                    return q
        logger.info("No more unanswered anchor questions found")
        return None

    # ── Prompts ──────────────────────────────────────────

    def _options_for(self, question_id: str, fallback: Optional[list[str]]) -> list[str]:
        return (
            self.allowed_options.get(question_id)
            or self.allowed_options.get(question_number(question_id))
            or list(fallback or [])
        )

    def anchor_payload(self, question_id: str, answers: Mapping[str, Any]) -> AnchorQuestionPayload:
        prompt = get_anchor_prompt(question_id) or get_anchor_prompt(question_number(question_id))
        if prompt is not None:
            payload = AnchorQuestionPayload(
                id=prompt.id,
                label=prompt.label,
                context=prompt.context,
                question_text=prompt.question_text,
                options=self._options_for(question_id, prompt.options),
            )
        else:
            question = self.registry.get(question_id)
            payload = AnchorQuestionPayload(
                id=question_id,
                question_text=question.text if question else question_id,
                options=self._options_for(question_id, question.options if question else None),
            )

        payload.answered_count = len(answers)
        payload.total_questions = self.total_questions or len(self.registry)
        payload.prompt = self._format_prompt(payload)
        return payload

    def build_prompt(self, question_id: str, answers: Optional[Mapping[str, Any]] = None) -> str:
        """Text shown to the user when asking ``question_id``."""
        return self.anchor_payload(question_id, answers or {}).prompt

    @staticmethod
    def _format_prompt(payload: AnchorQuestionPayload) -> str:
        options_text = (
            f"Available options: {' | '.join(payload.options)}"
            if payload.options else "Free text response"
        )
        if not payload.context:
            return f"Question {payload.id}: {payload.question_text}\n\n{options_text}"

        question_text = "\n".join(
            part.strip() for part in _SENTENCE_BREAK.split(payload.question_text) if part.strip()
        )
        return "\n".join([
            f"I've analyzed your DEP file and found {payload.total_questions} questions, "
            f"{payload.answered_count} already answered.",
            "",
            f"**Why we're asking {payload.id}:** {payload.context}",
            "",
            f"**Actual Question ({payload.id}):**",
            question_text,
            "",
            options_text,
            "",
            "Please type your answer exactly as required.",
        ])

    # ── Workbook rows ────────────────────────────────────

    async def predict_from_anchors(
        self,
        questions: Sequence[QuestionData],
        anchor_answers: Mapping[str, Any],
        prompt_for_answer: Optional[PromptFn] = None,
    ) -> PredictionOutcome:
        """Predict every row of a questionnaire and attach confidence and provenance.

        Rows are matched to answers by question number, so long workbook ids
        ("2.6 Is personal information in scope ...") line up with rule keys.
        """
        self.set_total_questions(len(questions))
        logger.info(
            f"Predicting answers for {len(questions)} questions based on {len(anchor_answers)} anchor answers"
        )

        user_answers: AnswerMap = {}
        for q in questions:
            if not is_blank(q.answer):
                user_answers[question_number(q.id)] = q.answer
        for key, value in anchor_answers.items():
            if not is_blank(value):
                user_answers[question_number(key)] = value

        question_ids = list(dict.fromkeys(question_number(q.id) for q in questions))
        result = await self.predict_answers(user_answers, question_ids, prompt_for_answer)
        user_ids = set(user_answers) | result.collected

        predicted: list[QuestionData] = []
        for q in questions:
            qid = question_number(q.id)
            answer = result.answers.get(qid)
            if answer is None:
                predicted.append(q)
                continue
            meta = result.metadata.get(qid) or AnswerMetadata()
            confidence, source = self.score_answer(qid, answer, user_ids, meta)
            predicted.append(q.model_copy(update={
                "answer": ", ".join(answer) if isinstance(answer, list) else answer,
                "confidence": confidence,
                "metadata": AnswerProvenance(**meta.model_dump(), source=source),
            }))

        answered = sum(1 for q in predicted if not is_blank(q.answer))
        logger.info(f"Prediction complete. {answered} questions now have answers")

        pending = [q for q in questions if question_number(q.id) not in user_ids]
        next_anchor = self.find_next_unanswered_anchor(pending)
        next_prompt = self.build_prompt(next_anchor.id, user_answers) if next_anchor else ""

        return PredictionOutcome(
            predicted_questions=predicted,
            answers=result.answers,
            metadata=result.metadata,
            next_prompt=next_prompt,
        )

    # ── Summary ──────────────────────────────────────────

    def summarize(self, questions: Sequence[QuestionData]) -> QuestionnaireSummary:
        section_counts: dict[str, int] = {}
        for q in questions:
            section = self.classifier.classify(q.id)
            key = section.value if section is not None else "unknown"
            section_counts[key] = section_counts.get(key, 0) + 1

        return QuestionnaireSummary(
            total_questions=len(questions),
            pre_existing_answers=sum(1 for q in questions if not is_blank(q.answer)),
            section_counts=section_counts,
        )
