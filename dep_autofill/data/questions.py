"""
Question registry for the DEP questionnaire.

Two tiers:
  1. PRIMARY_QUESTIONS: questions the engine knows in full, including the
     per-question ``infer`` functions used by the RuleEngine.
  2. REFERENCE_QUESTIONS: anchor definitions keyed by the long identifiers
     used in the workbook ("2.6 Is personal information in scope ..."),
     consulted only when the primary tier has no match.

QuestionRegistry.get() is the single lookup across both tiers.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator, Mapping, Optional

from dep_autofill.constants import NOT_APPLICABLE, SECTION_REGIMES
from dep_autofill.models import AnswerValue, Question, Section
from dep_autofill.utils.answers import is_skipped, known_answer

logger = logging.getLogger(__name__)

_QUESTION_NUMBER = re.compile(r"^(\d+\.\d+)")
_SECTION_NUMBER = re.compile(r"^(\d+)\.")


# ── Per-question inference ───────────────────────────────

def infer_phi_in_scope(answers: Mapping[str, Any]) -> Optional[AnswerValue]:
    """No personal information means no personal health information."""
    if known_answer(answers, "2.6") == "No":
        return "No"
    return None


def infer_privacy_commitment(answers: Mapping[str, Any]) -> Optional[AnswerValue]:
    if known_answer(answers, "2.6") == "No":
        return NOT_APPLICABLE
    return None


def infer_minors(answers: Mapping[str, Any]) -> Optional[AnswerValue]:
    if known_answer(answers, "2.6") == "No":
        return NOT_APPLICABLE
    return None


def infer_health_data(answers: Mapping[str, Any]) -> Optional[AnswerValue]:
    if is_skipped(answers, "2.6", "2.7"):
        return None
    pi = answers.get("2.6")
    phi = answers.get("2.7")
    if pi == "No":
        return NOT_APPLICABLE
    if phi == "Yes":
        return "Yes"
    if phi == "No":
        return "No"
    return None


def infer_generative_ai(answers: Mapping[str, Any]) -> Optional[AnswerValue]:
    """No AI at all means no generative AI; with AI, the user must say."""
    if known_answer(answers, "7.1") == "No":
        return "No"
    return None


# ── Primary tier ─────────────────────────────────────────

PRIMARY_QUESTIONS: list[Question] = [
    # Section 2: Data Scope & Classification
    Question(
        id="2.6",
        text="Is personal information in scope for this initiative? (Single selection allowed) *",
        section=Section.DATA_SCOPE,
        options=["Yes", "No"],
        priority=1,
        explanation="This question is a pivotal gatekeeper for the majority of privacy-related questions in the DEP.",
    ),
    Question(
        id="2.7",
        text="Is personal health information (PHI) in scope for this initiative? (Single selection allowed) *",
        section=Section.DATA_SCOPE,
        options=["Yes", "No"],
        priority=2,
        explanation="PHI is sensitive data subject to stricter rules.",
        depends_on=["2.6"],
        infer=infer_phi_in_scope,
    ),
    Question(
        id="2.9",
        text="Select the applicable data classification(s) in scope for this initiative (Multiple selections allowed) *",
        section=Section.DATA_SCOPE,
        options=["Public", "Internal", "Confidential", "Restricted"],
        multi_select=True,
        depends_on=["2.6", "2.7"],
    ),
    # Section 4: Privacy
    Question(
        id="4.1",
        text="Which Privacy Commitment does this initiative fall under? (Multiple selections allowed) (Justification allowed) (Allows other) *",
        section=Section.PRIVACY,
        options=[
            "Commitment 1: We are accountable to you for how we collect, use and disclose your personal information.",
            "Commitment 2: We will be clear about how we collect, use and disclose your personal information.",
        ],
        multi_select=True,
        depends_on=["2.6"],
        infer=infer_privacy_commitment,
    ),
    Question(
        id="4.5",
        text="Does your initiative collect or infer personal information of minors (under the age of majority)? (Single selection allowed) *",
        section=Section.PRIVACY,
        options=["Yes", "No"],
        priority=8,
        optional=True,
        explanation="Involvement of minors triggers specific consent and privacy requirements.",
        depends_on=["2.6"],
        infer=infer_minors,
    ),
    # Section 5: Personal Health Information
    Question(
        id="5.1",
        text="Does your initiative collect, use, or disclose personal health information? (Single selection allowed) *",
        section=Section.HEALTH_DATA,
        options=["Yes", "No"],
        depends_on=["2.6", "2.7"],
        infer=infer_health_data,
    ),
    # Section 7: AI and Machine Learning
    Question(
        id="7.1",
        text="Is your initiative building or leveraging AI agents? (Single selection allowed) *",
        section=Section.AI_ML,
        options=["Yes", "No"],
        priority=5,
        explanation="AI/ML usage activates the dedicated Section 7 on AI risks and considerations.",
    ),
    Question(
        id="7.3",
        text="Does this initiative use Generative AI? (Single selection allowed) *",
        section=Section.AI_ML,
        options=["Yes", "No"],
        priority=6,
        explanation="Generative AI has specific sub-questions within the AI section.",
        depends_on=["7.1"],
        infer=infer_generative_ai,
    ),
    # Section 9: Payment Card Industry
    Question(
        id="9.1",
        text="How is credit card data (including PAN, CVV, expiry date, etc.) processed in your initiative? (Single selection allowed) (Justification allowed) (Allows other) *",
        section=Section.PAYMENT_CARD,
        options=[
            "TELUS internal payment system (Avalon/EPS)",
            "Third-party service provider",
            "Not applicable / No credit card data involved",
        ],
        priority=4,
        explanation="Handling credit card data necessitates compliance with PCI standards.",
    ),
    # Sections 10-12: Regulatory regimes
    Question(
        id=SECTION_REGIMES,
        text="Which special regulatory regimes apply to this initiative? (Multiple selections allowed) *",
        section=Section.GDPR,
        options=["Quebec's Law 25", "GDPR (EU)", "HIPAA (US health)", "None of these"],
        multi_select=True,
        priority=7,
        explanation="Applicable regional laws determine the need for Sections 10, 11 and 12.",
    ),
    # Section 13: Third-Party Risk
    Question(
        id="13.1",
        text="Identify any third parties involved in this initiative (Multiple selections allowed) (Justification allowed) (Allows other) *",
        section=Section.VENDOR_RISK,
        options=["No third parties", "Yes, one third party", "Yes, multiple third parties"],
        priority=3,
        explanation="Third-party involvement triggers the assessment of vendor risk.",
    ),
]


# ── Reference tier ───────────────────────────────────────

_REFERENCE_ENTRIES: list[dict[str, Any]] = [
    {
        "id": "2.6 Is personal information in scope for this initiative? (Single selection allowed) *",
        "question_text": "Does the initiative involve Personal Information (PI)? Please list all types of personal information in scope, such as name, email, SIN, health history, etc.",
        "explanation": "We need to know if PI is in scope so we can determine if the Privacy & Consent sections (Clusters 4 & 5) are required.",
        "options": ["Yes", "No"],
        "priority": 1,
    },
    {
        "id": "2.7 Is personal health information (PHI) in scope for this initiative? (Single selection allowed) *",
        "question_text": "Does the initiative involve Personal Health Information (PHI)? PHI is a subset of personal information that relates to an individual's physical or mental health, including information about health services provided to them.",
        "explanation": "PHI is sensitive data subject to stricter rules and specific sections in the DEP (Section 5 and potentially Section 12).",
        "options": ["Yes", "No"],
        "priority": 2,
    },
    {
        "id": "13.1 Identify any third parties involved in this initiative (Multiple selections allowed) (Justification allowed) (Allows other) *",
        "question_text": "Please identify any third parties involved in this initiative. This includes vendors, partners, contractors, or any external organizations that will have access to TELUS data or systems.",
        "explanation": "Third-party involvement triggers the assessment of vendor risk, opening up the entire Section 13.",
        "options": ["No third parties", "Yes, one third party", "Yes, multiple third parties"],
        "priority": 3,
    },
    {
        "id": "9.1 How is credit card data (including PAN, CVV, expiry date, etc.) processed in your initiative? (Single selection allowed) (Justification allowed) (Allows other) *",
        "question_text": "How is credit card data (including PAN, CVV, expiry date, etc.) processed in your initiative? Please select the most appropriate option.",
        "explanation": "Handling credit card data necessitates compliance with PCI standards, making Section 9 relevant.",
        "options": [
            "TELUS internal payment system (Avalon/EPS)",
            "Third-party service provider",
            "Not applicable / No credit card data involved",
        ],
        "priority": 4,
    },
    {
        "id": "7.1 Is your initiative building or leveraging AI agents? (Single selection allowed) *",
        "question_text": "Is your initiative building or leveraging any AI agents (i.e. Agentic AI) in this implementation? AI agents are systems that can make autonomous decisions or take actions on behalf of users.",
        "explanation": "AI/ML usage activates the dedicated Section 7 on AI risks and considerations.",
        "options": ["Yes", "No"],
        "priority": 5,
    },
    {
        "id": "7.3 Does this initiative use Generative AI? (Single selection allowed) *",
        "question_text": "Does this initiative use Generative AI? Generative AI refers to artificial intelligence systems that can generate new content, such as text, images, audio, or video, in response to prompts or based on patterns learned from training data.",
        "explanation": "Generative AI has specific sub-questions within the AI section (Q7.15-7.22) and unique risks to address.",
        "options": ["Yes", "No"],
        "priority": 6,
    },
    {
        "id": "11.1 General Data Protection Regulation (GDPR)",
        "question_text": "Which special regulatory regimes apply to this initiative? Please select all that apply to your project's data processing activities and jurisdictions.",
        "explanation": "Applicable regional laws (Quebec, GDPR, HIPAA) determine the need for specific compliance sections (10, 11, 12).",
        "options": ["Quebec's Law 25", "GDPR (EU)", "HIPAA (US health)", "None of these"],
        "multi_select": True,
        "priority": 7,
    },
    {
        "id": "4.5 Does your initiative collect or infer personal information of minors (under the age of majority)? (Single selection allowed) *",
        "question_text": "Does your initiative collect or infer personal information of minors (under the age of majority)? This includes any data about individuals who are under 18 or 19 years old, depending on the jurisdiction.",
        "explanation": "Involvement of minors triggers specific consent and privacy requirements (Q4.5, Q5.19, Q5.20).",
        "options": ["Yes", "No"],
        "priority": 8,
        "optional": True,
    },
]


def _from_reference_entry(entry: dict[str, Any]) -> Question:
    match = _SECTION_NUMBER.match(entry["id"])
    section_number = match.group(1) if match else Section.DATA_SCOPE.value
    return Question(
        id=entry["id"],
        text=entry["question_text"],
        section=Section(section_number),
        options=entry.get("options"),
        explanation=entry.get("explanation"),
        priority=entry.get("priority"),
        multi_select=entry.get("multi_select", False),
        optional=entry.get("optional", False),
    )


REFERENCE_QUESTIONS: list[Question] = [_from_reference_entry(e) for e in _REFERENCE_ENTRIES]


# ── Registry ─────────────────────────────────────────────

class QuestionRegistry:
    """Ordered, read-only question registry with a two-tier lookup."""

    def __init__(
        self,
        questions: Iterable[Question],
        secondary: Iterable[Question] | None = None,
    ):
        self._questions: tuple[Question, ...] = tuple(questions)
        self._by_id: dict[str, Question] = {q.id: q for q in self._questions}
        self._secondary: tuple[Question, ...] = tuple(secondary or ())

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def ids(self) -> list[str]:
        return [q.id for q in self._questions]

    def get(self, question_id: str) -> Optional[Question]:
        """Look up the primary tier first, then the reference tier."""
        question = self._by_id.get(question_id)
        if question is not None:
            return question
        return self._lookup_secondary(question_id)

    def _lookup_secondary(self, question_id: str) -> Optional[Question]:
        for q in self._secondary:
            if q.id == question_id:
                return q

        # "2.7 Is personal health ..." → match on "2.7 "
        if " " in question_id:
            match = _QUESTION_NUMBER.match(question_id)
            if match is None:
                return None
            number = match.group(1)
        else:
            number = question_id

        for q in self._secondary:
            if q.id.startswith(number + " "):
                logger.debug(f"Resolved {question_id!r} through the reference tier: {q.id!r}")
                return q
        return None

    def anchors(self) -> list[Question]:
        """Questions carrying a priority, ordered by it."""
        return sorted(
            (q for q in self._questions if q.priority is not None),
            key=lambda q: q.priority or 0,
        )

    def is_multi_select(self, question_id: str) -> bool:
        question = self.get(question_id)
        return bool(question and question.multi_select)


def get_question_registry() -> QuestionRegistry:
    """Registry of the built-in DEP questions."""
    return QuestionRegistry(PRIMARY_QUESTIONS, REFERENCE_QUESTIONS)
