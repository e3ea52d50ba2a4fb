"""DEP Autofill — anchor-driven inference for the Data Ethics & Privacy questionnaire."""

__version__ = "0.1.0"
