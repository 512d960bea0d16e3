"""
Email services.
"""

from dadcircles.services.email.email_service import EmailService

__all__ = ["EmailService"]
