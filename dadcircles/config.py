"""
DadCircles application settings.

Extends the base settings with matching and email configuration.
"""

from typing import Optional
from common.config import BaseAppSettings

from config.email_config import EMAIL_DEFAULTS, INTRODUCTION_SEND_TIMEOUT_SECONDS
from config.matching_config import MIN_GROUP_SIZE, MAX_GROUP_SIZE, MAX_AGE_GAP_MONTHS
from dadcircles.models.group import LifeStage
from dadcircles.models.matching import MatchingConfig


class Settings(BaseAppSettings):
    """DadCircles-specific settings."""

    # ==========================================================================
    # Matching Settings
    # ==========================================================================
    MATCHING_MIN_GROUP_SIZE: int = MIN_GROUP_SIZE
    MATCHING_MAX_GROUP_SIZE: int = MAX_GROUP_SIZE

    # Maximum age spread within a group, in months, per life stage
    MATCHING_MAX_AGE_GAP_EXPECTING: float = MAX_AGE_GAP_MONTHS["Expecting"]
    MATCHING_MAX_AGE_GAP_NEWBORN: float = MAX_AGE_GAP_MONTHS["Newborn"]
    MATCHING_MAX_AGE_GAP_INFANT: float = MAX_AGE_GAP_MONTHS["Infant"]
    MATCHING_MAX_AGE_GAP_TODDLER: float = MAX_AGE_GAP_MONTHS["Toddler"]

    # Requires a replica set (Atlas or local rs)
    MATCHING_USE_TRANSACTIONS: bool = False

    # ==========================================================================
    # Email Settings
    # ==========================================================================
    EMAIL_MODE: str = EMAIL_DEFAULTS["mode"]  # console, smtp, resend
    RESEND_API_KEY: Optional[str] = None
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 465
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = EMAIL_DEFAULTS["from_email"]
    SMTP_FROM_NAME: str = EMAIL_DEFAULTS["from_name"]
    EMAIL_TEAM_NAME: str = EMAIL_DEFAULTS["team_name"]

    # Per-recipient timeout for group introduction emails
    INTRODUCTION_SEND_TIMEOUT_SECONDS: float = INTRODUCTION_SEND_TIMEOUT_SECONDS

    def get_matching_config(self) -> MatchingConfig:
        """Build the matching config from environment overrides."""
        return MatchingConfig(
            min_group_size=self.MATCHING_MIN_GROUP_SIZE,
            max_group_size=self.MATCHING_MAX_GROUP_SIZE,
            max_age_gap_months={
                LifeStage.EXPECTING: self.MATCHING_MAX_AGE_GAP_EXPECTING,
                LifeStage.NEWBORN: self.MATCHING_MAX_AGE_GAP_NEWBORN,
                LifeStage.INFANT: self.MATCHING_MAX_AGE_GAP_INFANT,
                LifeStage.TODDLER: self.MATCHING_MAX_AGE_GAP_TODDLER,
            },
        )


# Global settings instance
settings = Settings()
