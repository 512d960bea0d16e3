"""
Email service for group introduction emails.

Supports SMTP, Resend API, and console logging modes.
"""

import asyncio
import os
import logging
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from html import escape
from typing import Dict, List, Optional

import httpx
import aiosmtplib

from config.email_config import (
    RESEND_API_URL,
    EMAIL_DEFAULTS,
    INTRODUCTION_SEND_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)


class EmailService:
    """
    Email service with multi-mode support.

    Modes:
        - console: Log emails to console (development)
        - smtp: Send via SMTP (e.g., Resend SMTP relay)
        - resend: Send via Resend HTTP API
    """

    def __init__(
        self,
        mode: Optional[str] = None,
        resend_api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        from_name: Optional[str] = None,
        team_name: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
    ):
        """
        Initialize email service.

        Args:
            mode: "console", "smtp", or "resend" (default from EMAIL_MODE env var)
            resend_api_key: Resend API key (default from RESEND_API_KEY env var)
            from_email: Sender email address
            from_name: Sender display name
            team_name: Team name for email signatures
            smtp_host: SMTP server host
            smtp_port: SMTP server port
            smtp_user: SMTP username
            smtp_password: SMTP password
        """
        self._mode = mode or os.environ.get("EMAIL_MODE", EMAIL_DEFAULTS["mode"])
        self._from_email = from_email or os.environ.get("SMTP_FROM_EMAIL", EMAIL_DEFAULTS["from_email"])
        self._from_name = from_name or os.environ.get("SMTP_FROM_NAME", EMAIL_DEFAULTS["from_name"])
        self._team_name = team_name or os.environ.get("EMAIL_TEAM_NAME", EMAIL_DEFAULTS["team_name"])

        self._resend_api_key = resend_api_key or os.environ.get("RESEND_API_KEY")

        self._smtp_host = smtp_host or os.environ.get("SMTP_HOST")
        self._smtp_port = smtp_port or int(os.environ.get("SMTP_PORT", "465"))
        self._smtp_user = smtp_user or os.environ.get("SMTP_USER", "resend")
        self._smtp_password = smtp_password or os.environ.get("SMTP_PASSWORD")

        # Normalize mode: if smtp mode with Resend API key, use Resend HTTP API
        if self._mode == "smtp" and self._resend_api_key:
            logger.info("EMAIL_MODE=smtp with Resend API key detected, using Resend HTTP API")
            self._mode = "resend"
        elif self._mode == "resend" and not self._resend_api_key:
            logger.warning("Resend API key not configured, falling back to console mode")
            self._mode = "console"
        elif self._mode == "smtp" and not self._smtp_host:
            logger.warning("SMTP host not configured, falling back to console mode")
            self._mode = "console"

        logger.info(f"Email service initialized in {self._mode} mode")

    @property
    def mode(self) -> str:
        return self._mode

    async def send_group_introduction_email(
        self,
        to_email: str,
        user_name: Optional[str],
        group_name: str,
        members: List[Dict[str, str]],
    ) -> dict:
        """
        Introduce a recipient to the rest of their new group.

        Args:
            to_email: Recipient email
            user_name: Recipient display name
            group_name: Name of the group
            members: Every group member as {"name", "email", "childSummary"}

        Returns:
            dict with success status and details
        """
        name = user_name or "there"

        rows_html = "\n".join(
            f'<li style="margin: 0 0 8px 0;"><strong>{escape(m["name"])}</strong>'
            f' ({escape(m.get("childSummary", ""))}) &middot; '
            f'<a href="mailto:{escape(m["email"])}">{escape(m["email"])}</a></li>'
            for m in members
        )
        rows_text = "\n".join(
            f'- {m["name"]} ({m.get("childSummary", "")}): {m["email"]}'
            for m in members
        )

        html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="margin: 0; padding: 0; background-color: #f5f5f5; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; line-height: 1.6; color: #333333;">
    <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="background-color: #f5f5f5;">
        <tr>
            <td align="center" style="padding: 20px 0;">
                <table role="presentation" width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; max-width: 600px;">
                    <tr>
                        <td align="center" bgcolor="#1F3A5F" style="background-color: #1F3A5F; padding: 40px 20px;">
                            <h1 style="margin: 0; font-size: 28px; color: #ffffff; font-weight: 600;">Meet Your Dad Circle</h1>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 40px 30px;">
                            <p style="margin: 0 0 16px 0; font-size: 16px; color: #333333;">Hi {escape(name)},</p>
                            <p style="margin: 0 0 24px 0; font-size: 16px; color: #333333;">You've been matched into <strong>{escape(group_name)}</strong>. Here's who is in your circle:</p>
                            <ul style="margin: 0 0 24px 0; padding-left: 20px; font-size: 15px; color: #333333;">
{rows_html}
                            </ul>
                            <p style="margin: 0; font-size: 16px; color: #333333;">Reply-all to say hello and set up your first meetup.</p>
                        </td>
                    </tr>
                    <tr>
                        <td style="padding: 20px 30px; border-top: 1px solid #eeeeee;">
                            <p style="margin: 0; font-size: 14px; color: #666666; text-align: center;">Cheers,<br>{escape(self._team_name)}</p>
                        </td>
                    </tr>
                </table>
            </td>
        </tr>
    </table>
</body>
</html>
"""

        text_content = f"""Meet Your Dad Circle

Hi {name},

You've been matched into {group_name}. Here's who is in your circle:

{rows_text}

Reply-all to say hello and set up your first meetup.

Cheers,
{self._team_name}
"""

        return await self._send(
            to=to_email,
            subject=f"Meet your Dad Circle: {group_name}",
            html=html_content,
            text=text_content,
        )

    async def send_group_introduction_emails(
        self,
        group_name: str,
        recipients: List[Dict[str, str]],
        timeout: float = INTRODUCTION_SEND_TIMEOUT_SECONDS,
    ) -> List[str]:
        """
        Send the introduction to every recipient concurrently.

        Each send is bounded by ``timeout`` seconds. A failed or timed-out
        send is logged and does not affect the others.

        Args:
            group_name: Name of the group
            recipients: Group members as {"memberId", "name", "email", "childSummary"}
            timeout: Per-recipient timeout in seconds

        Returns:
            memberIds of recipients whose email was delivered
        """
        async def send_one(recipient: Dict[str, str]) -> bool:
            try:
                result = await asyncio.wait_for(
                    self.send_group_introduction_email(
                        to_email=recipient["email"],
                        user_name=recipient.get("name"),
                        group_name=group_name,
                        members=recipients,
                    ),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"Introduction to {recipient['email']} timed out after {timeout}s")
                return False
            except Exception as e:
                logger.error(f"Introduction to {recipient['email']} failed: {e}")
                return False

            if not result.get("success"):
                logger.warning(f"Introduction to {recipient['email']} not delivered: {result.get('error')}")
                return False
            return True

        outcomes = await asyncio.gather(*(send_one(r) for r in recipients))

        delivered = [r["memberId"] for r, ok in zip(recipients, outcomes) if ok]
        logger.info(f"Introductions for {group_name}: {len(delivered)}/{len(recipients)} delivered")
        return delivered

    async def _send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """
        Send email via configured provider.

        Args:
            to: Recipient email
            subject: Email subject
            html: HTML content
            text: Plain text content

        Returns:
            dict with success status and details
        """
        if self._mode == "console":
            return self._send_console(to, subject, html, text)
        elif self._mode == "smtp":
            return await self._send_smtp(to, subject, html, text)
        elif self._mode == "resend":
            return await self._send_resend(to, subject, html, text)
        else:
            logger.error(f"Unknown email mode: {self._mode}")
            return {"success": False, "error": f"Unknown email mode: {self._mode}"}

    def _send_console(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Log email to console (development mode)."""
        logger.info("=" * 60)
        logger.info("EMAIL (console mode)")
        logger.info(f"To: {to}")
        logger.info(f"Subject: {subject}")
        logger.info("-" * 60)
        logger.info(text)
        logger.info("=" * 60)

        return {
            "success": True,
            "mode": "console",
            "message": "Email logged to console",
        }

    async def _send_smtp(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via SMTP."""
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self._from_name} <{self._from_email}>"
        message["To"] = to
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))

        # SSL on 465, STARTTLS otherwise
        use_tls = self._smtp_port == 465

        try:
            await aiosmtplib.send(
                message,
                hostname=self._smtp_host,
                port=self._smtp_port,
                username=self._smtp_user,
                password=self._smtp_password,
                use_tls=use_tls,
                start_tls=not use_tls,
            )
        except aiosmtplib.SMTPException as e:
            logger.error(f"Failed to send email via SMTP: {e}")
            return {"success": False, "error": str(e)}

        logger.info(f"Email sent via SMTP to {to}")
        return {
            "success": True,
            "mode": "smtp",
            "message": "Email sent via SMTP",
        }

    async def _send_resend(
        self,
        to: str,
        subject: str,
        html: str,
        text: str,
    ) -> dict:
        """Send email via Resend API."""
        if not self._resend_api_key:
            return {"success": False, "error": "Resend API key not configured"}

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    RESEND_API_URL,
                    headers={
                        "Authorization": f"Bearer {self._resend_api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "from": f"{self._from_name} <{self._from_email}>",
                        "to": [to],
                        "subject": subject,
                        "html": html,
                        "text": text,
                    },
                )
            except httpx.HTTPError as e:
                logger.error(f"Failed to send email via Resend: {e}")
                return {"success": False, "error": str(e)}

        if response.status_code == 200:
            return {
                "success": True,
                "mode": "resend",
                "messageId": response.json().get("id"),
            }

        error_msg = response.json().get("message", "Unknown error")
        logger.error(f"Resend API error: {error_msg}")
        return {"success": False, "error": error_msg}
