import json
import logging
import time
from typing import AsyncIterator, Optional

import httpx
from sqlalchemy.orm import Session

from src.config import settings
from src.models.domain import LLMProvider
from src.services.credentials import CredentialResolver
from src.services.errors import LLMError

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_TOOL = {"google_search": {}}


def text_part(text: str) -> dict:
    return {"text": text}


def inline_part(mime_type: str, data_b64: str) -> dict:
    return {"inline_data": {"mime_type": mime_type, "data": data_b64}}


def user_content(*parts: dict) -> dict:
    return {"role": "user", "parts": list(parts)}


class GeminiService:
    """Thin client for the Gemini generateContent REST API."""

    provider = LLMProvider.GEMINI
    temperature: Optional[float] = None

    def __init__(self, db: Optional[Session] = None, api_key: Optional[str] = None):
        self.credentials = CredentialResolver(db, api_key, self.provider)
        self.api_base = settings.gemini_api_base.rstrip("/")
        self.default_model = settings.gemini_model_standard
        self.timeout = httpx.Timeout(settings.llm_timeout_seconds, connect=10.0)

    def _get_api_key(self) -> str:
        return self.credentials.resolve()

    def require_api_key(self) -> None:
        self.credentials.resolve()

    def _build_headers(self, api_key: str) -> dict:
        return {
            "x-goog-api-key": api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(
        self,
        contents: list[dict],
        system_instruction: Optional[str] = None,
        tools: Optional[list[dict]] = None,
        response_schema: Optional[dict] = None,
        response_mime_type: Optional[str] = None,
    ) -> dict:
        payload: dict = {"contents": contents}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [text_part(system_instruction)]}
        if tools:
            payload["tools"] = tools

        generation_config: dict = {}
        if response_mime_type or response_schema:
            generation_config["responseMimeType"] = response_mime_type or "application/json"
        if response_schema:
            generation_config["responseSchema"] = response_schema
        if self.temperature is not None:
            generation_config["temperature"] = self.temperature
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    def _url(self, model: str, method: str) -> str:
        return f"{self.api_base}/models/{model}:{method}"

    async def generate(
        self,
        contents: list[dict],
        model_name: Optional[str] = None,
        **kwargs,
    ) -> str:
        api_key = self._get_api_key()
        model = model_name or self.default_model
        payload = self._build_payload(contents, **kwargs)

        start_time = time.time()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self._url(model, "generateContent"),
                    json=payload,
                    headers=self._build_headers(api_key),
                )
                response.raise_for_status()
                result = response.json()
            except httpx.HTTPError as e:
                logger.error(f"{self.provider.value} API error: {e}")
                raise LLMError(str(e)) from e
            except ValueError as e:
                raise LLMError("Gemini response body was not JSON") from e

        logger.debug(f"{model} answered in {time.time() - start_time:.2f}s")
        return self._parse_response(result)

    async def stream(
        self,
        contents: list[dict],
        model_name: Optional[str] = None,
        **kwargs,
    ) -> AsyncIterator[str]:
        api_key = self._get_api_key()
        model = model_name or self.default_model
        payload = self._build_payload(contents, **kwargs)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                async with client.stream(
                    "POST",
                    self._url(model, "streamGenerateContent"),
                    params={"alt": "sse"},
                    json=payload,
                    headers=self._build_headers(api_key),
                ) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        chunk = self._parse_sse_line(line)
                        if chunk:
                            yield chunk
            except httpx.HTTPError as e:
                logger.error(f"{self.provider.value} streaming error: {e}")
                raise LLMError(str(e)) from e

    def _parse_sse_line(self, line: str) -> str:
        if not line.startswith("data:"):
            return ""
        data = line[len("data:"):].strip()
        if not data:
            return ""
        try:
            return self._parse_response(json.loads(data))
        except json.JSONDecodeError as e:
            raise LLMError("Malformed chunk in Gemini stream") from e

    def _parse_response(self, result: dict) -> str:
        if not isinstance(result, dict):
            raise LLMError(f"Unexpected Gemini response of type {type(result).__name__}")
        candidates = result.get("candidates") or []
        if not candidates:
            feedback = result.get("promptFeedback", {})
            if feedback.get("blockReason"):
                raise LLMError(f"Request blocked: {feedback['blockReason']}")
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts if not part.get("thought"))
