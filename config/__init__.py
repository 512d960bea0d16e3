"""
Configuration module - Fixed, environment-independent constants.
"""

from config.email_config import (
    RESEND_API_URL,
    EMAIL_DEFAULTS,
    INTRODUCTION_SEND_TIMEOUT_SECONDS,
)
from config.matching_config import (
    MIN_GROUP_SIZE,
    MAX_GROUP_SIZE,
    MAX_AGE_GAP_MONTHS,
    DAYS_PER_MONTH,
)

__all__ = [
    "RESEND_API_URL",
    "EMAIL_DEFAULTS",
    "INTRODUCTION_SEND_TIMEOUT_SECONDS",
    "MIN_GROUP_SIZE",
    "MAX_GROUP_SIZE",
    "MAX_AGE_GAP_MONTHS",
    "DAYS_PER_MONTH",
]
