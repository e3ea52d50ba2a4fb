"""
Reusable data schemas shared by the engine and its collaborators.
Registry objects (Question, SectionRelation) are immutable; session objects
(answers, metadata) are created per prediction pass.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from .enums import AnswerSource, Section


# A single answer is either one string or an ordered list (multi-select).
AnswerValue = Union[str, list[str]]
AnswerMap = dict[str, AnswerValue]

# Per-question inference: given the answers observed so far, return the
# derived answer or None when nothing can be inferred.
InferFn = Callable[[Mapping[str, Any]], Optional[AnswerValue]]


# ── Registry ─────────────────────────────────────────────


class Question(BaseModel):
    """A questionnaire item as defined in the static registry."""
    model_config = ConfigDict(frozen=True)

    id: str  # e.g. "2.6"
    text: str
    section: Section
    options: Optional[list[str]] = None
    depends_on: list[str] = []
    infer: Optional[InferFn] = None
    priority: Optional[int] = None  # anchor questions only
    multi_select: bool = False
    optional: bool = False
    explanation: Optional[str] = None


class SectionRelation(BaseModel):
    """Which sections influence or follow from one another."""
    model_config = ConfigDict(frozen=True)

    section: Section
    related_to: list[Section] = []


class AnchorPrompt(BaseModel):
    """Context shown to the user when an anchor question is asked."""
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    context: str  # why this question matters
    question_text: str
    options: list[str] = []


# ── Prediction pass ──────────────────────────────────────


class AnswerMetadata(BaseModel):
    """How an answer was produced, independent of its value."""
    merged: bool = False
    skipped: bool = False
    defaulted: bool = False


class PredictionResult(BaseModel):
    answers: dict[str, AnswerValue] = {}
    metadata: dict[str, AnswerMetadata] = {}
    collected: set[str] = set()  # anchors answered through the prompt


class AnchorQuestionPayload(BaseModel):
    """What the prompt collaborator receives for one anchor."""
    id: str
    label: str = ""
    context: str = ""
    question_text: str
    options: list[str] = []
    prompt: str = ""  # fully formatted text, ready to display
    answered_count: int = 0
    total_questions: int = 0


# ── Collaborator records ─────────────────────────────────


class AnswerProvenance(AnswerMetadata):
    source: Optional[AnswerSource] = None


class QuestionData(BaseModel):
    """A question row as read from the questionnaire workbook."""
    id: str
    question: str = ""
    question_text: Optional[str] = None
    answer: Optional[str] = None
    options: list[str] = []
    confidence: Optional[float] = None
    unique_id: Optional[str] = None
    metadata: Optional[AnswerProvenance] = None


class QuestionnaireSummary(BaseModel):
    total_questions: int = 0
    pre_existing_answers: int = 0
    section_counts: dict[str, int] = {}


class PredictionOutcome(BaseModel):
    predicted_questions: list[QuestionData] = []
    answers: dict[str, AnswerValue] = {}
    metadata: dict[str, AnswerMetadata] = {}
    next_prompt: str = ""


# ── Classifier monitoring ────────────────────────────────


class CacheMetrics(BaseModel):
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalid: int = 0
    hit_ratio: float = 0.0
    size: int = 0


class CacheHealth(BaseModel):
    healthy: bool = True
    eviction_rate: float = 0.0  # evictions per second over the window
    recent_evictions: int = 0
    message: Optional[str] = None
    anomalies: list[str] = Field(default_factory=list)
