"""Async client for Google's Generative Language (Gemini) REST API.

Every call is a single ``generateContent`` request in JSON response mode.
There is no retry: any transport, HTTP or payload problem surfaces as an
``AIServiceError`` carrying the flow name.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import httpx

from optitalent.common.exceptions import AIServiceError
from optitalent.config import settings

logger = logging.getLogger(__name__)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


@dataclass(frozen=True)
class MediaPart:
    """Inline binary attachment (image, PDF) sent alongside the prompt."""

    mime_type: str
    data: str  # base64

    @classmethod
    def from_data_uri(cls, uri: str) -> "MediaPart":
        match = _DATA_URI_RE.match(uri.strip())
        if match is None:
            raise ValueError("Expected a data URI of the form 'data:<mimetype>;base64,<data>'.")
        data = match.group("data")
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Data URI payload is not valid base64.") from exc
        return cls(mime_type=match.group("mime"), data=data)

    def to_part(self) -> dict[str, Any]:
        return {"inlineData": {"mimeType": self.mime_type, "data": self.data}}


@dataclass(frozen=True)
class ChatTurn:
    role: str  # "user" | "model"
    text: str


class GeminiClient:
    """Thin async wrapper over ``models/{model}:generateContent``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GEMINI_TIMEOUT_SECONDS
        self.temperature = (
            temperature if temperature is not None else settings.GEMINI_TEMPERATURE
        )
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def build_payload(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        media: Sequence[MediaPart] = (),
        history: Sequence[ChatTurn] = (),
        json_mode: bool = True,
    ) -> dict[str, Any]:
        contents: list[dict[str, Any]] = [
            {"role": turn.role, "parts": [{"text": turn.text}]} for turn in history
        ]
        parts: list[dict[str, Any]] = [{"text": prompt}]
        parts.extend(m.to_part() for m in media)
        contents.append({"role": "user", "parts": parts})

        generation_config: dict[str, Any] = {"temperature": self.temperature}
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        payload: dict[str, Any] = {
            "contents": contents,
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    async def generate(
        self,
        prompt: str,
        *,
        flow: str = "generate",
        system_instruction: Optional[str] = None,
        media: Sequence[MediaPart] = (),
        history: Sequence[ChatTurn] = (),
        json_mode: bool = True,
    ) -> str:
        """Send one request and return the concatenated candidate text."""
        if not self.api_key:
            raise AIServiceError(flow, "GEMINI_API_KEY is not configured")

        payload = self.build_payload(
            prompt,
            system_instruction=system_instruction,
            media=media,
            history=history,
            json_mode=json_mode,
        )

        logger.info("AI flow %s → %s", flow, self.model)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint, params={"key": self.api_key}, json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AIServiceError(flow, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise AIServiceError(flow, f"transport error: {exc}") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise AIServiceError(flow, "response body is not JSON") from exc

        candidates = data.get("candidates") if isinstance(data, dict) else None
        if not isinstance(candidates, list) or not candidates:
            raise AIServiceError(flow, "response did not include candidates")
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            raise AIServiceError(flow, "candidate has no content parts")
        text = "".join(
            part["text"] for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
        if not text.strip():
            raise AIServiceError(flow, "empty response")
        return text


def get_ai_client() -> GeminiClient:
    """FastAPI dependency / default factory for the configured client."""
    return GeminiClient()
