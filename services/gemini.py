"""
Thin wrapper around the Gemini SDK.

Every AI-backed feature goes through `GeminiClient`; responses are parsed as
JSON and validated against a pydantic schema before anyone trusts them.
"""
import json
import logging
import re
from functools import lru_cache
from typing import Any, Optional, Type, TypeVar

from google import genai
from google.genai import errors, types
from pydantic import BaseModel, ValidationError as SchemaError

from config.settings import GEMINI_MODEL, GOOGLE_API_KEY
from services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

CODE_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

UPSTREAM_MESSAGES = {
    429: "Rate limit exceeded. Please try again later.",
    402: "Payment required. AI service credits are exhausted.",
}


def load_model_json(text: Optional[str]) -> Any:
    """Decode the model's answer, tolerating markdown code fences around it."""
    if not text:
        raise ExternalServiceError("AI service returned an empty response", 502)
    cleaned = CODE_FENCE.sub("", text).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {text[:500]}")
        raise ExternalServiceError("Failed to parse AI response", 502) from e


def parse_model_json(text: Optional[str], schema: Type[T]) -> T:
    data = load_model_json(text)
    try:
        return schema.model_validate(data)
    except SchemaError as e:
        logger.error(f"AI response did not match {schema.__name__}: {e}")
        raise ExternalServiceError(f"AI response did not match the expected {schema.__name__} shape", 502) from e


class GeminiClient:
    def __init__(self, client: Optional[genai.Client] = None, model: str = GEMINI_MODEL):
        self._client = client
        self.model = model

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not GOOGLE_API_KEY:
                raise ExternalServiceError("AI service is not configured", 503)
            self._client = genai.Client(api_key=GOOGLE_API_KEY)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        contents: list,
        json_output: bool = True,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Sends a prompt (text and optional image parts) to Gemini and returns the
        raw text of the answer. Upstream failures keep their status code.
        """
        config = types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=temperature,
            response_mime_type="application/json" if json_output else None,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                config=config,
                contents=contents,
            )
        except errors.APIError as e:
            logger.error(f"Gemini API error {e.code}: {e.message}")
            message = UPSTREAM_MESSAGES.get(e.code, f"AI service error: {e.message}")
            status = e.code if e.code in UPSTREAM_MESSAGES else 502
            raise ExternalServiceError(message, status) from e

        if not response.text:
            raise ExternalServiceError("AI service returned an empty response", 502)
        return response.text

    async def generate_json(
        self,
        system_prompt: str,
        contents: list,
        schema: Type[T],
        temperature: Optional[float] = None,
    ) -> T:
        text = await self.generate(system_prompt, contents, temperature=temperature)
        return parse_model_json(text, schema)


@lru_cache
def get_gemini() -> GeminiClient:
    return GeminiClient()


def image_part(data: bytes, mime_type: Optional[str]) -> types.Part:
    return types.Part.from_bytes(data=data, mime_type=mime_type or "image/jpeg")


def chat_turn(role: str, text: str) -> types.Content:
    """One turn of a conversation; Gemini calls the assistant side `model`."""
    return types.Content(
        role="model" if role == "assistant" else "user",
        parts=[types.Part.from_text(text=text)],
    )
