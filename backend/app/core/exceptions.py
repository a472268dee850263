"""
Service-level exceptions.

Handlers translate these into HTTP responses; the cron job logs them and moves
on to the next interaction.
"""

from typing import Any, Dict, Optional


class LaunchpadError(Exception):
    """Base exception for service failures."""

    def __init__(self, message: str, code: str = "INTERNAL_ERROR", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class EmailDeliveryError(LaunchpadError):
    """SMTP is not configured or the message could not be sent."""

    def __init__(self, message: str, recipient: Optional[str] = None):
        super().__init__(message, code="EMAIL_DELIVERY_FAILED", details={"recipient": recipient} if recipient else None)
        self.recipient = recipient


class AIProviderError(LaunchpadError):
    """An AI provider could not produce a summary."""

    def __init__(self, message: str, provider: str):
        super().__init__(message, code="AI_PROVIDER_FAILED", details={"provider": provider})
        self.provider = provider


class CSVFormatError(LaunchpadError):
    """Uploaded CSV is missing required structure."""

    def __init__(self, message: str):
        super().__init__(message, code="CSV_FORMAT_INVALID")
