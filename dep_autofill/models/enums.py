from enum import Enum

class Section(str, Enum):
    PROJECT_INFO = "1"
    DATA_SCOPE = "2"
    DATA_RETENTION = "3"
    PRIVACY = "4"
    HEALTH_DATA = "5"
    SECURITY = "6"
    AI_ML = "7"
    CYBER_ASSURANCE = "8"
    PAYMENT_CARD = "9"
    QUEBEC_LAW_25 = "10"
    GDPR = "11"
    HIPAA = "12"
    VENDOR_RISK = "13"

class AnswerSource(str, Enum):
    USER = "user"
    SKIPPED = "skipped"
    INFERENCE_DIRECT = "inference-direct"
    INFERENCE = "inference"
    INFERENCE_MERGED = "inference-merged"
    DEFAULT = "default"
