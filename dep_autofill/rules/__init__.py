from .inference_rules import INFERENCE_RULES, InferenceRule, find_consistency_warnings
from .rule_engine import InferenceResult, RuleEngine

__all__ = [
    "INFERENCE_RULES",
    "InferenceRule",
    "InferenceResult",
    "RuleEngine",
    "find_consistency_warnings",
]
