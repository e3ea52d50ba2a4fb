"""
Section relation table for the DEP questionnaire.

Defines which sections influence or follow from one another. Used for
grouping answered questions by topic and for sanity checks; it does not feed
the inference rules.

All relationships are bidirectional: if A lists B, B must list A.
RelationGraph.find_violations() checks this.
"""

from __future__ import annotations

from dep_autofill.models import Section, SectionRelation

S = Section

SECTION_RELATIONS: list[SectionRelation] = [
    SectionRelation(section=S.PROJECT_INFO,    related_to=[S.DATA_SCOPE]),
    SectionRelation(section=S.DATA_SCOPE,      related_to=[S.PROJECT_INFO, S.PRIVACY, S.HEALTH_DATA, S.DATA_RETENTION]),
    SectionRelation(section=S.DATA_RETENTION,  related_to=[S.DATA_SCOPE, S.PRIVACY, S.QUEBEC_LAW_25, S.GDPR]),
    SectionRelation(section=S.PRIVACY,         related_to=[S.HEALTH_DATA, S.DATA_SCOPE, S.DATA_RETENTION, S.AI_ML, S.QUEBEC_LAW_25, S.GDPR, S.HIPAA]),
    SectionRelation(section=S.HEALTH_DATA,     related_to=[S.PRIVACY, S.DATA_SCOPE, S.HIPAA]),
    SectionRelation(section=S.SECURITY,        related_to=[S.VENDOR_RISK, S.CYBER_ASSURANCE, S.AI_ML, S.PAYMENT_CARD]),
    SectionRelation(section=S.AI_ML,           related_to=[S.SECURITY, S.PRIVACY]),
    SectionRelation(section=S.CYBER_ASSURANCE, related_to=[S.SECURITY]),
    SectionRelation(section=S.PAYMENT_CARD,    related_to=[S.SECURITY]),
    SectionRelation(section=S.QUEBEC_LAW_25,   related_to=[S.PRIVACY, S.DATA_RETENTION]),
    SectionRelation(section=S.GDPR,            related_to=[S.PRIVACY, S.DATA_RETENTION]),
    SectionRelation(section=S.HIPAA,           related_to=[S.HEALTH_DATA, S.PRIVACY]),
    SectionRelation(section=S.VENDOR_RISK,     related_to=[S.SECURITY]),
]

SECTION_TITLES: dict[Section, str] = {
    S.PROJECT_INFO: "Project Information",
    S.DATA_SCOPE: "Data Flow and Classification",
    S.DATA_RETENTION: "Data Retention",
    S.PRIVACY: "Privacy",
    S.HEALTH_DATA: "Personal Health Information",
    S.SECURITY: "Security",
    S.AI_ML: "AI and Automation",
    S.CYBER_ASSURANCE: "Cyber Assurance",
    S.PAYMENT_CARD: "Payment Card Industry",
    S.QUEBEC_LAW_25: "Quebec's Law 25",
    S.GDPR: "GDPR",
    S.HIPAA: "HIPAA",
    S.VENDOR_RISK: "Third-Party Risk",
}
