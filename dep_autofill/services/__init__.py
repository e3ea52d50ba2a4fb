"""Services — SectionClassifier, RelationGraph, QuestionService."""

from dep_autofill.services.section_service import SectionClassifier, get_section_classifier
from dep_autofill.services.relation_graph import RelationGraph, RelationTableError
from dep_autofill.services.question_service import QuestionService, UnansweredQuestionsError

__all__ = [
    "SectionClassifier",
    "get_section_classifier",
    "RelationGraph",
    "RelationTableError",
    "QuestionService",
    "UnansweredQuestionsError",
]
