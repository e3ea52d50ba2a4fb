"""Reserved answer values shared by the rules, the orchestrator and the API."""

# Recorded when the user declines (or fails) to answer an anchor.
# Rules treat it as unknown: it is kept as the question's value but never
# triggers downstream inference.
SKIPPED_ANSWER = "__SKIPPED__"

NOT_APPLICABLE = "Not Applicable"

# Pseudo-identifier of the "applicable regulatory regimes" anchor
# (Quebec Law 25 / GDPR / HIPAA). It has no numeric prefix.
SECTION_REGIMES = "SECTION_REGIMES"
