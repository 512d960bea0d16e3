"""
FastAPI dependencies for DadCircles.

Provides dependency injection for matching services and admin auth.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTAuth, create_admin_dependency
from dadcircles.config import Settings
from dadcircles.models.matching import MatchingConfig
from dadcircles.services.email.email_service import EmailService
from dadcircles.services.matching.member_pool_service import MemberPoolService
from dadcircles.services.matching.assignment_service import GroupAssignmentService
from dadcircles.services.matching.lifecycle_service import GroupLifecycleService


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

_jwt_auth: Optional[JWTAuth] = None

_email_service: Optional[EmailService] = None
_member_pool_service: Optional[MemberPoolService] = None
_assignment_service: Optional[GroupAssignmentService] = None
_lifecycle_service: Optional[GroupLifecycleService] = None
_matching_config: Optional[MatchingConfig] = None


# ─────────────────────────────────────────────────────────────────
# Initialization functions
# ─────────────────────────────────────────────────────────────────

def init_auth_services(settings: Settings) -> None:
    """Initialize auth services."""
    global _jwt_auth

    _jwt_auth = JWTAuth(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def init_email_services(settings: Settings) -> None:
    """Initialize email services."""
    global _email_service

    _email_service = EmailService(
        mode=settings.EMAIL_MODE,
        resend_api_key=settings.RESEND_API_KEY,
        from_email=settings.SMTP_FROM_EMAIL,
        from_name=settings.SMTP_FROM_NAME,
        team_name=settings.EMAIL_TEAM_NAME,
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        smtp_user=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
    )


def init_matching_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """
    Initialize matching services with database connection.

    Called once at application startup, after init_email_services.

    Args:
        db: MongoDB database connection
        settings: Application settings
    """
    global _member_pool_service, _assignment_service, _lifecycle_service, _matching_config

    _matching_config = settings.get_matching_config()
    _member_pool_service = MemberPoolService(db=db)
    _assignment_service = GroupAssignmentService(
        db=db,
        use_transactions=settings.MATCHING_USE_TRANSACTIONS,
    )
    _lifecycle_service = GroupLifecycleService(
        db=db,
        email_service=get_email_service(),
        send_timeout=settings.INTRODUCTION_SEND_TIMEOUT_SECONDS,
    )


# ─────────────────────────────────────────────────────────────────
# Getters
# ─────────────────────────────────────────────────────────────────

def get_jwt_auth() -> JWTAuth:
    """Get JWT auth provider instance."""
    if _jwt_auth is None:
        raise RuntimeError("Auth services not initialized.")
    return _jwt_auth


def get_email_service() -> EmailService:
    """Get email service instance."""
    if _email_service is None:
        raise RuntimeError("Email services not initialized.")
    return _email_service


def get_member_pool_service() -> MemberPoolService:
    """Get member pool service instance."""
    if _member_pool_service is None:
        raise RuntimeError("Matching services not initialized.")
    return _member_pool_service


def get_assignment_service() -> GroupAssignmentService:
    """Get group assignment service instance."""
    if _assignment_service is None:
        raise RuntimeError("Matching services not initialized.")
    return _assignment_service


def get_lifecycle_service() -> GroupLifecycleService:
    """Get group lifecycle service instance."""
    if _lifecycle_service is None:
        raise RuntimeError("Matching services not initialized.")
    return _lifecycle_service


def get_matching_config() -> MatchingConfig:
    """Get the active matching config."""
    if _matching_config is None:
        raise RuntimeError("Matching services not initialized.")
    return _matching_config


# ─────────────────────────────────────────────────────────────────
# Auth dependencies
# ─────────────────────────────────────────────────────────────────

require_admin = create_admin_dependency(get_jwt_auth)
