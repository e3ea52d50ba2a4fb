"""
Anchor-driven block rules for the DEP questionnaire.

Each rule is a named pure function: it reads the answers observed so far and
returns the answers it can derive from them. Rules never mutate their input
and only fire on known anchor values; an unanswered or skipped anchor yields
an empty result.

INFERENCE_RULES is the ordered list the RuleEngine applies on every pass.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from dep_autofill.constants import NOT_APPLICABLE, SECTION_REGIMES
from dep_autofill.models import AnswerMap
from dep_autofill.utils.answers import is_skipped, known_answer, mentions

InferenceRule = Callable[[Mapping[str, Any]], AnswerMap]

CARD_THIRD_PARTY = "Third-party service provider"
CARD_INTERNAL = "TELUS internal payment system (Avalon/EPS)"
CARD_NONE = "Not applicable / No credit card data involved"

THIRD_PARTY_NONE = "No third parties"
THIRD_PARTY_PRESENT = ("Yes, one third party", "Yes, multiple third parties")


def _block(section: int, first: int, last: int, value: str) -> AnswerMap:
    """``{"<section>.<first>": value, ..., "<section>.<last>": value}``."""
    return {f"{section}.{i}": value for i in range(first, last + 1)}


# ── Data scope ───────────────────────────────────────────

def infer_from_pi_scope(answers: Mapping[str, Any]) -> AnswerMap:
    """Q2.6 drives Sections 4 and 5 and part of the classification."""
    pi = known_answer(answers, "2.6")
    if pi == "No":
        return {**_block(4, 1, 20, NOT_APPLICABLE), **_block(5, 1, 24, NOT_APPLICABLE)}
    if pi != "Yes":
        return {}

    result: AnswerMap = {
        "2.9": ["Internal", "Confidential"],
        "4.1": "Yes",
        "4.2": "Directly from the individual",
        "4.3": "Yes, express consent will be obtained",
        "4.4": "Electronically (via application/website)",
        "4.5": "No",
        "4.6": NOT_APPLICABLE,
        "4.7": "No",
        "4.8": "By contract (vendor agreement)",
    }
    result.update(_block(4, 9, 20, "Yes"))
    return result


def infer_from_phi_scope(answers: Mapping[str, Any]) -> AnswerMap:
    """Q2.7 drives Section 5 and the HIPAA questions 12.3-12.7."""
    phi = known_answer(answers, "2.7")
    if phi == "No":
        return {**_block(5, 1, 24, NOT_APPLICABLE), **_block(12, 3, 7, NOT_APPLICABLE)}
    if phi != "Yes":
        return {}

    result: AnswerMap = {"2.9": ["Restricted"]}
    result.update(_block(5, 1, 17, "Yes"))
    result["5.18"] = "Electronically (via application/website)"
    result["5.19"] = "No"
    result["5.20"] = NOT_APPLICABLE
    result.update(_block(5, 21, 24, "Yes"))
    result.update(_block(12, 3, 7, "Yes"))
    return result


def infer_from_volume_and_sensitivity(answers: Mapping[str, Any]) -> AnswerMap:
    """Large volumes or restricted data call for strict retention and Tier 1 controls."""
    if is_skipped(answers, "2.27", "2.9"):
        return {}

    volume = known_answer(answers, "2.27")
    classification = known_answer(answers, "2.9")
    if volume == "Large" or mentions(classification, "Restricted"):
        return {
            **_block(3, 1, 5, "Strict retention policy"),
            **_block(8, 1, 10, "High controls (Tier 1)"),
        }
    return {}


# ── Third parties ────────────────────────────────────────

def infer_from_third_party(answers: Mapping[str, Any]) -> AnswerMap:
    vendors = known_answer(answers, "13.1")
    if vendors is None:
        return {}

    if vendors == THIRD_PARTY_NONE or vendors == [THIRD_PARTY_NONE]:
        return _block(13, 3, 14, NOT_APPLICABLE)

    if mentions(vendors, *THIRD_PARTY_PRESENT):
        # 13.3 (vendor type) and 13.4, 13.8 need the user
        return {
            "13.5": "Yes",
            "13.6": "Yes",
            "13.7": "Yes",
            "13.9": "In progress",
            "13.10": "Yes",
            "13.11": "Compliant",
            "13.12": "Yes",
            "13.13": "Yes",
            "13.14": "Yes",
        }
    return {}


def infer_from_vendor_contract(answers: Mapping[str, Any]) -> AnswerMap:
    if mentions(known_answer(answers, "13.9"), "progress"):
        return {"4.8": "By contract (vendor agreement)"}
    return {}


# ── AI and automation ────────────────────────────────────

def infer_from_ai_ml(answers: Mapping[str, Any]) -> AnswerMap:
    """Q7.1 drives Section 7, except 7.3 which stays an anchor of its own."""
    ai = known_answer(answers, "7.1")
    if ai == "No":
        result = _block(7, 2, 22, NOT_APPLICABLE)
        del result["7.3"]
        return result
    if ai != "Yes":
        return {}

    result = {
        "7.2": "Predictive analytics (machine learning)",
        "7.4": "Automate manual processes; Improve decision-making accuracy",
        "7.5": "No",
        "7.6": "Humans review outcomes periodically",
        "7.7": "Minimal inconvenience",
        "7.8": "6–12 months (annual retraining)",
        "7.9": "No direct influence, just informative",
    }
    result.update(_block(7, 10, 14, NOT_APPLICABLE))
    return result


def infer_from_gen_ai(answers: Mapping[str, Any]) -> AnswerMap:
    gen_ai = known_answer(answers, "7.3")
    if gen_ai == "No":
        return _block(7, 15, 22, NOT_APPLICABLE)
    if gen_ai == "Yes":
        return _block(7, 15, 22, "Yes")
    return {}


# ── Payment card ─────────────────────────────────────────

def infer_from_credit_card(answers: Mapping[str, Any]) -> AnswerMap:
    card = known_answer(answers, "9.1")
    if card in (CARD_NONE, CARD_INTERNAL):
        return _block(9, 3, 17, NOT_APPLICABLE)
    if card != CARD_THIRD_PARTY:
        return {}

    result: AnswerMap = {
        "9.3": "Yes",
        "9.7": "Level 1 PCI compliant",
        "9.8": "Yes (provided in Q2.1)",
    }
    result.update(_block(9, 10, 13, "Standard PCI defaults"))
    result["9.17"] = "Yes (provided in Q2.1)"
    return result


# ── Regulatory regimes ───────────────────────────────────

def _regime_answers(answers: Mapping[str, Any], *question_ids: str) -> list[Any] | None:
    """Known answers among ``question_ids``; None if any is skipped or none is known."""
    if is_skipped(answers, *question_ids):
        return None
    values = [known_answer(answers, qid) for qid in question_ids]
    values = [v for v in values if v is not None]
    return values or None


def infer_from_quebec(answers: Mapping[str, Any]) -> AnswerMap:
    values = _regime_answers(answers, "2.26", "2.35", SECTION_REGIMES)
    if values is None:
        return {}
    if any(mentions(v, "Quebec") for v in values):
        return _block(10, 2, 6, "Yes")
    return _block(10, 2, 6, NOT_APPLICABLE)


def infer_from_gdpr(answers: Mapping[str, Any]) -> AnswerMap:
    values = _regime_answers(answers, SECTION_REGIMES)
    if values is None:
        return {}
    if any(mentions(v, "EU", "GDPR") for v in values):
        return _block(11, 2, 12, "Yes")
    return _block(11, 2, 12, NOT_APPLICABLE)


def infer_from_hipaa(answers: Mapping[str, Any]) -> AnswerMap:
    values = _regime_answers(answers, "12.2", SECTION_REGIMES)
    if values is None:
        return {}
    if any(mentions(v, "U.S. health", "HIPAA") for v in values):
        return _block(12, 3, 7, "Yes")
    return _block(12, 3, 7, NOT_APPLICABLE)


# ── Attachments ──────────────────────────────────────────

def infer_from_attachments(answers: Mapping[str, Any]) -> AnswerMap:
    if mentions(known_answer(answers, "2.1"), "diagram"):
        return {"9.8": "Yes (provided in Q2.1)", "9.17": "Yes (provided in Q2.1)"}
    return {}


INFERENCE_RULES: list[InferenceRule] = [
    infer_from_pi_scope,
    infer_from_phi_scope,
    infer_from_volume_and_sensitivity,
    infer_from_third_party,
    infer_from_ai_ml,
    infer_from_gen_ai,
    infer_from_credit_card,
    infer_from_quebec,
    infer_from_gdpr,
    infer_from_hipaa,
    infer_from_attachments,
    infer_from_vendor_contract,
]


def find_consistency_warnings(answers: Mapping[str, Any]) -> list[str]:
    """Contradictions between answers that no rule can resolve on its own."""
    warnings: list[str] = []
    if known_answer(answers, "2.7") == "No" and mentions(known_answer(answers, "2.9"), "Restricted"):
        warnings.append("PHI is not in scope (2.7) but the data classification (2.9) includes Restricted")
    if known_answer(answers, "2.6") == "No" and known_answer(answers, "2.7") == "Yes":
        warnings.append("PHI is in scope (2.7) but personal information is not (2.6)")
    return warnings
