"""AI summary request and response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel

Provider = Literal["playlab", "openai"]


class AIRequest(BaseModel):
    message: str = ""
    provider: Optional[Provider] = None


class AIResponse(BaseModel):
    result: str
