from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from app.core.errors import EmptyResponseError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationPayload:
    """Everything one generation call needs; built fresh for each request."""

    instruction: str
    query: str
    schema: Any


class GenerationClient(Protocol):
    async def generate(self, payload: GenerationPayload) -> str: ...


def extract_text(resp: Any) -> Optional[str]:
    """Text of the first part of the first candidate, or None."""
    candidates = getattr(resp, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    if not parts:
        return None
    return getattr(parts[0], "text", None)


def _error_body(err: Any) -> str:
    details = getattr(err, "details", None)
    if details:
        try:
            return json.dumps(details, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            pass
    return str(getattr(err, "message", None) or err)


@dataclass
class LLMConfig:
    provider: str
    model: str
    gemini_api_key: Optional[str] = None


class GeminiGenerationClient:
    """Schema-constrained JSON generation over the google-genai SDK.

    One attempt per call: no retry and no timeout.
    """

    def __init__(self, api_key: str, model: str):
        from google import genai
        from google.genai import errors, types

        self._types = types
        self._errors = errors
        self.client = genai.Client(api_key=api_key)
        self.model = model

    async def generate(self, payload: GenerationPayload) -> str:
        config = self._types.GenerateContentConfig(
            system_instruction=payload.instruction,
            response_mime_type="application/json",
            response_schema=payload.schema,
        )

        try:
            resp = await self.client.aio.models.generate_content(
                model=self.model,
                contents=payload.query,
                config=config,
            )
        except self._errors.APIError as e:
            raise UpstreamError(status=e.code, raw_body=_error_body(e)) from e

        text = extract_text(resp)
        if not text:
            raise EmptyResponseError()
        return text


def build_generation_client(cfg: LLMConfig) -> GenerationClient:
    provider = (cfg.provider or "").lower().strip()

    if provider == "gemini":
        if not cfg.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is missing. Add it to .env")
        return GeminiGenerationClient(api_key=cfg.gemini_api_key, model=cfg.model)

    raise ValueError(f"Unsupported llm provider: {cfg.provider}. Use provider: gemini")
