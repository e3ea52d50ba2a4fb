from .logger import setup_logging
from .answers import is_blank, is_skipped, known_answer, mentions, question_number

__all__ = ["setup_logging", "is_blank", "is_skipped", "known_answer", "mentions", "question_number"]
