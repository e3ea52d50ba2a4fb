"""Static registries: sections, questions, anchors and default answers."""

from .anchors import ANCHOR_PROMPTS, ANCHORS, get_anchor_prompt
from .default_answers import DEFAULT_ANSWERS, get_default_answer, has_default_answer
from .questions import (
    PRIMARY_QUESTIONS,
    REFERENCE_QUESTIONS,
    QuestionRegistry,
    get_question_registry,
)
from .sections import SECTION_RELATIONS, SECTION_TITLES

__all__ = [
    "ANCHOR_PROMPTS",
    "ANCHORS",
    "DEFAULT_ANSWERS",
    "PRIMARY_QUESTIONS",
    "REFERENCE_QUESTIONS",
    "SECTION_RELATIONS",
    "SECTION_TITLES",
    "QuestionRegistry",
    "get_anchor_prompt",
    "get_default_answer",
    "get_question_registry",
    "has_default_answer",
]
