"""
Default answers for every DEP question.

Used only for questions that neither the user nor the inference rules
answered. Values are the conservative choice for each item; anchors
(2.6, 2.7) have no entry because they are always asked.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from dep_autofill.config import get_settings
from dep_autofill.utils.answers import question_number

logger = logging.getLogger(__name__)

DEFAULT_ANSWERS: dict[str, str] = {
    # Section 1
    "1.1": "No",
    "1.2": "Not Applicable",
    "1.3": "No",
    "1.4": "Not Applicable",
    "1.5": "No",
    "1.6": "No",
    "1.7": "Not Applicable",
    "1.8": "No",
    "1.9": "Not Applicable",
    "1.10": "No",
    "1.11": "Not Applicable",
    "1.12": "No",
    "1.13": "Not Applicable",
    "1.14": "No",
    "1.15": "Not Applicable",

    # Section 2
    "2.1": "No",
    "2.2": "No",
    "2.3": "No",
    "2.4": "No",
    "2.5": "No",
    "2.8": "Not Applicable",
    "2.9": "Not Applicable",
    "2.10": "No",
    "2.11": "No",
    "2.12": "No",
    "2.13": "No",
    "2.14": "No",
    "2.15": "No",
    "2.16": "No",
    "2.17": "No",
    "2.18": "No",
    "2.19": "No",
    "2.20": "No",
    "2.21": "No",
    "2.22": "No",
    "2.23": "No",
    "2.24": "No",
    "2.25": "No",
    "2.28": "No",
    "2.29": "No",
    "2.30": "No",

    # Section 3
    "3.1": "Standard retention policy",
    "3.2": "3",
    "3.3": "Secure deletion",
    "3.4": "Yes",
    "3.5": "Not Applicable",
    "3.6": "Not Applicable",
    "3.7": "Not Applicable",
    "3.8": "Not Applicable",
    "3.9": "Not Applicable",
    "3.10": "Not Applicable",
    "3.11": "Not Applicable",
    "3.12": "Not Applicable",

    # Section 4
    "4.1": "Yes",
    "4.2": "Directly from the individual",
    "4.3": "Yes, express consent will be obtained",
    "4.4": "Electronically (via application/website)",
    "4.5": "No",
    "4.6": "Not Applicable",
    "4.7": "No",
    "4.8": "By contract (vendor agreement)",
    "4.9": "Yes",
    "4.10": "Yes",
    "4.11": "Yes",
    "4.12": "Yes",
    "4.13": "Yes",
    "4.14": "Yes",
    "4.15": "Yes",
    "4.16": "Yes",
    "4.17": "Yes",
    "4.18": "Yes",
    "4.19": "Yes",
    "4.20": "Yes",

    # Section 5
    "5.1": "Yes",
    "5.2": "Yes",
    "5.3": "Yes",
    "5.4": "Yes",
    "5.5": "Yes",
    "5.6": "Yes",
    "5.7": "Yes",
    "5.8": "Yes",
    "5.9": "Yes",
    "5.10": "Yes",
    "5.11": "Yes",
    "5.12": "Yes",
    "5.13": "Electronically (via application/website)",
    "5.14": "No",
    "5.15": "Not Applicable",
    "5.16": "Yes",
    "5.17": "Yes",
    "5.18": "Electronically (via application/website)",
    "5.19": "No",
    "5.20": "Not Applicable",
    "5.21": "Yes",
    "5.22": "Yes",
    "5.23": "Yes",
    "5.24": "Yes",

    # Section 6
    "6.1": "No",
    "6.2": "No",
    "6.3": "Not Applicable",
    "6.4": "No",
    "6.5": "Not Applicable",
    "6.6": "No",
    "6.7": "Not Applicable",
    "6.8": "Not Applicable",

    # Section 7
    "7.1": "Yes",
    "7.2": "Predictive analytics (machine learning)",
    "7.4": "Automate manual processes; Improve decision-making accuracy",
    "7.5": "No",
    "7.6": "Humans review outcomes periodically",
    "7.7": "Minimal inconvenience",
    "7.8": "6–12 months (annual retraining)",
    "7.9": "No direct influence, just informative",
    "7.10": "Not Applicable",
    "7.11": "Not Applicable",
    "7.12": "Not Applicable",
    "7.13": "Not Applicable",
    "7.14": "Not Applicable",
    "7.15": "Yes",
    "7.16": "Yes",
    "7.17": "Yes",
    "7.18": "Yes",
    "7.19": "Yes",
    "7.20": "Yes",
    "7.21": "Yes",
    "7.22": "Yes",

    # Section 8
    "8.1": "High controls (Tier 1)",
    "8.2": "Yes",
    "8.3": "Yes",
    "8.4": "Yes",
    "8.5": "Tier 2 controls",
    "8.6": "Not Applicable",
    "8.7": "Quarterly",
    "8.8": "Annually",
    "8.9": "In-house key management",
    "8.10": "Not Applicable",
    "8.11": "Not Applicable",
    "8.12": "Not Applicable",
    "8.13": "Not Applicable",
    "8.14": "Not Applicable",
    "8.15": "Not Applicable",

    # Section 9
    "9.1": "Not applicable / No credit card data involved",
    "9.2": "Yes",
    "9.3": "Yes",
    "9.4": "Yes (provided in Q2.1)",
    "9.5": "Yes",
    "9.6": "Not Applicable",
    "9.7": "Level 1 PCI compliant",
    "9.8": "Yes (provided in Q2.1)",
    "9.9": "Yes",
    "9.10": "Standard PCI defaults",
    "9.11": "Standard PCI defaults",
    "9.12": "Standard PCI defaults",
    "9.13": "Standard PCI defaults",
    "9.14": "Not Applicable",
    "9.15": "Not Applicable",
    "9.16": "Not Applicable",
    "9.17": "Yes (provided in Q2.1)",

    # Section 10
    "10.1": "Yes",
    "10.2": "Yes",
    "10.3": "Yes",
    "10.4": "Yes",
    "10.5": "Yes",
    "10.6": "Yes",

    # Section 11
    "11.1": "Yes",
    "11.2": "Yes",
    "11.3": "Not Applicable",
    "11.4": "Yes",
    "11.5": "Yes",
    "11.6": "Yes",
    "11.7": "Yes",
    "11.8": "Yes",
    "11.9": "Yes",
    "11.10": "Yes",
    "11.11": "Not Applicable",
    "11.12": "Yes",

    # Section 12
    "12.1": "Yes",
    "12.2": "Health",
    "12.3": "Yes",
    "12.4": "Yes",
    "12.5": "Yes",
    "12.6": "Yes",
    "12.7": "Yes",

    # Section 13
    "13.1": "No third parties",
    "13.2": "No",
    "13.3": "Not Applicable",
    "13.4": "Not Applicable",
    "13.5": "Yes",
    "13.6": "Yes",
    "13.7": "Yes",
    "13.8": "Not Applicable",
    "13.9": "In progress",
    "13.10": "Yes",
    "13.11": "Compliant",
    "13.12": "Yes",
    "13.13": "Yes",
    "13.14": "Yes",

    # Regulatory regimes anchor
    "SECTION_REGIMES": "None of these",
}


def _lookup(question_id: str, table: Mapping[str, str]) -> Optional[str]:
    value = table.get(question_id)
    if value is None:
        # "4.2 How will personal information be collected? ..." → "4.2"
        number = question_number(question_id)
        if number != question_id:
            value = table.get(number)
    return value


def has_default_answer(question_id: str, table: Optional[Mapping[str, str]] = None) -> bool:
    return _lookup(question_id, DEFAULT_ANSWERS if table is None else table) is not None


def get_default_answer(
    question_id: str,
    table: Optional[Mapping[str, str]] = None,
    fallback: Optional[str] = None,
) -> str:
    """Return the default for ``question_id``, or the fallback answer with a warning."""
    value = _lookup(question_id, DEFAULT_ANSWERS if table is None else table)
    if value is not None:
        return value

    if fallback is None:
        fallback = get_settings().fallback_answer
    logger.warning(f"No default answer found for question {question_id}, using {fallback!r}")
    return fallback
