"""Email test and custom send schemas."""

from typing import Optional

from pydantic import BaseModel


class EmailSendRequest(BaseModel):
    to: Optional[str] = None
    # Older clients send only ``email``
    email: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    reply_to: Optional[str] = None

    @property
    def recipient(self) -> Optional[str]:
        return (self.to or self.email or "").strip() or None


class EmailSendResponse(BaseModel):
    success: bool
    message: str
    message_id: Optional[str] = None
