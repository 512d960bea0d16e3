"""
Email service configuration constants.

These are fixed values that don't change per environment.
Environment-specific values (API keys, SMTP hosts) are loaded from env vars.
"""

# Resend API endpoint
RESEND_API_URL = "https://api.resend.com/emails"

# Seconds to wait for a single recipient before giving up on them
INTRODUCTION_SEND_TIMEOUT_SECONDS = 10.0

# Default values (can be overridden by env vars)
EMAIL_DEFAULTS = {
    "mode": "console",
    "from_name": "DadCircles",
    "from_email": "hello@dadcircles.com",
    "team_name": "The DadCircles Team",
}
