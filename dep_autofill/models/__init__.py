"""Models — enums and pydantic schemas."""

from .enums import AnswerSource, Section
from .schemas import (
    AnchorPrompt,
    AnchorQuestionPayload,
    AnswerMap,
    AnswerMetadata,
    AnswerProvenance,
    AnswerValue,
    CacheHealth,
    CacheMetrics,
    InferFn,
    PredictionOutcome,
    PredictionResult,
    Question,
    QuestionData,
    QuestionnaireSummary,
    SectionRelation,
)

__all__ = [
    "AnchorPrompt",
    "AnchorQuestionPayload",
    "AnswerMap",
    "AnswerMetadata",
    "AnswerProvenance",
    "AnswerSource",
    "AnswerValue",
    "CacheHealth",
    "CacheMetrics",
    "InferFn",
    "PredictionOutcome",
    "PredictionResult",
    "Question",
    "QuestionData",
    "QuestionnaireSummary",
    "Section",
    "SectionRelation",
]
