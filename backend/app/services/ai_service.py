"""
AI summarization proxy.

Playlab is the primary provider: a conversation is created, the message is
posted to it and the streamed reply is collected. OpenAI chat completions is
the fallback, or the only provider when explicitly requested.
"""

import json
from typing import Optional

import httpx

from backend.app.core.exceptions import AIProviderError
from backend.app.core.logging_config import get_logger
from backend.app.core.settings import Settings, get_settings

logger = get_logger(__name__)

PROVIDER_PLAYLAB = "playlab"
PROVIDER_OPENAI = "openai"
PROVIDERS = (PROVIDER_PLAYLAB, PROVIDER_OPENAI)

OPENAI_SYSTEM_PROMPT = "You are an expert assistant. Summarize and analyze the following as requested."


def parse_event_stream(text: str) -> Optional[str]:
    """Join the ``data:`` payloads of a server-sent event stream.

    Returns None when the text has no ``data:`` line at all.
    """
    parts = []
    seen_data = False
    for line in text.splitlines():
        if not line.startswith("data:"):
            continue
        seen_data = True
        payload = line[len("data:"):].strip()
        if not payload or payload == "[DONE]":
            continue
        try:
            event = json.loads(payload)
        except json.JSONDecodeError:
            parts.append(payload)
            continue
        if isinstance(event, dict):
            parts.append(str(event.get("delta") or event.get("content") or ""))
    if not seen_data:
        return None
    return "".join(parts)


class AIService:
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=self.settings.ai_timeout_seconds)

    async def summarize_with_playlab(self, message: str) -> str:
        api_key = self.settings.playlab_api_key
        project_id = self.settings.playlab_project_id
        if not api_key or not project_id:
            raise AIProviderError("Playlab credentials missing", PROVIDER_PLAYLAB)

        base = f"{self.settings.playlab_base_url.rstrip('/')}/projects/{project_id}/conversations"
        headers = {"Authorization": f"Bearer {api_key}"}
        try:
            async with self._client() as client:
                conversation = await client.post(base, headers=headers, json={})
                if conversation.is_error:
                    raise AIProviderError("Playlab: failed to create conversation", PROVIDER_PLAYLAB)
                conversation_id = (conversation.json().get("conversation") or {}).get("id")
                if not conversation_id:
                    raise AIProviderError("Playlab: no conversation ID", PROVIDER_PLAYLAB)

                reply = await client.post(
                    f"{base}/{conversation_id}/messages",
                    headers=headers,
                    json={"input": {"message": message}},
                )
                if reply.is_error:
                    raise AIProviderError(f"Playlab: message failed with status {reply.status_code}", PROVIDER_PLAYLAB)
                body = reply.text
        except (httpx.HTTPError, ValueError) as exc:
            raise AIProviderError(f"Playlab: {exc}", PROVIDER_PLAYLAB) from exc

        parsed = parse_event_stream(body)
        return body if parsed is None else parsed

    async def summarize_with_openai(self, message: str) -> str:
        api_key = self.settings.openai_api_key
        if not api_key:
            raise AIProviderError("OpenAI API key missing", PROVIDER_OPENAI)

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.settings.openai_base_url.rstrip('/')}/chat/completions",
                    headers={"Authorization": f"Bearer {api_key}"},
                    json={
                        "model": self.settings.openai_model,
                        "messages": [
                            {"role": "system", "content": OPENAI_SYSTEM_PROMPT},
                            {"role": "user", "content": message},
                        ],
                        "max_tokens": 1024,
                        "temperature": 0.7,
                    },
                )
                if response.is_error:
                    raise AIProviderError(f"OpenAI: {response.text}", PROVIDER_OPENAI)
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AIProviderError(f"OpenAI: {exc}", PROVIDER_OPENAI) from exc

        choices = data.get("choices") or [{}]
        return ((choices[0] or {}).get("message") or {}).get("content") or ""

    async def summarize(self, message: str, provider: Optional[str] = None) -> str:
        if provider == PROVIDER_OPENAI:
            return await self.summarize_with_openai(message)
        try:
            return await self.summarize_with_playlab(message)
        except AIProviderError as exc:
            if provider == PROVIDER_PLAYLAB:
                raise
            logger.warning("Playlab failed, falling back to OpenAI: %s", exc.message)
            return await self.summarize_with_openai(message)


def get_ai_service() -> AIService:
    return AIService()
