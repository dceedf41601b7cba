"""AI flow base: typed input → prompt → model → schema-validated output."""

from __future__ import annotations

import json
import logging
import re
from typing import ClassVar, Generic, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from optitalent.ai.client import ChatTurn, GeminiClient, MediaPart, get_ai_client
from optitalent.common.exceptions import AIServiceError

logger = logging.getLogger(__name__)

InT = TypeVar("InT", bound=BaseModel)
OutT = TypeVar("OutT", bound=BaseModel)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(?P<body>.*?)\s*```\s*$", re.DOTALL)


def parse_json_reply(text: str) -> object:
    """Decode a model reply, tolerating a surrounding Markdown code fence."""
    match = _FENCE_RE.match(text)
    if match:
        text = match.group("body")
    return json.loads(text)


class Flow(Generic[InT, OutT]):
    """A named prompt template paired with input and output schemas.

    Subclasses set ``name``, ``input_model``, ``output_model`` and
    ``prompt_template`` (``str.format`` fields are the input's field
    names), and override ``build_prompt`` / ``media`` / ``history`` when
    the template needs more than plain substitution.
    """

    name: ClassVar[str]
    input_model: ClassVar[type[BaseModel]]
    output_model: ClassVar[type[BaseModel]]
    prompt_template: ClassVar[str] = ""
    system_prompt: ClassVar[Optional[str]] = None
    json_mode: ClassVar[bool] = True

    def build_prompt(self, data: InT) -> str:
        return self.prompt_template.format(**data.model_dump())

    def media(self, data: InT) -> Sequence[MediaPart]:
        return ()

    def history(self, data: InT) -> Sequence[ChatTurn]:
        return ()

    def schema_hint(self) -> str:
        schema = json.dumps(self.output_model.model_json_schema(), separators=(",", ":"))
        return f"\n\nRespond with a single JSON object that validates against this JSON Schema:\n{schema}"

    def parse(self, text: str) -> OutT:
        try:
            payload = parse_json_reply(text)
        except ValueError as exc:
            raise AIServiceError(self.name, "reply is not valid JSON") from exc
        try:
            return self.output_model.model_validate(payload)  # type: ignore[return-value]
        except ValidationError as exc:
            raise AIServiceError(
                self.name, f"reply failed schema validation ({exc.error_count()} errors)",
            ) from exc

    async def run(self, data: InT, client: Optional[GeminiClient] = None) -> OutT:
        client = client or get_ai_client()
        prompt = self.build_prompt(data)
        if self.json_mode:
            prompt += self.schema_hint()
        text = await client.generate(
            prompt,
            flow=self.name,
            system_instruction=self.system_prompt,
            media=self.media(data),
            history=self.history(data),
            json_mode=self.json_mode,
        )
        result = self.parse(text)
        logger.debug("AI flow %s produced %s", self.name, type(result).__name__)
        return result
