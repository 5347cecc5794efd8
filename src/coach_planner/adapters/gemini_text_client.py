"""Gemini REST client for text generation."""

import asyncio
import logging
from dataclasses import dataclass

import httpx

from coach_planner.domain.errors import ExternalGenerationError
from coach_planner.services.generation import TextGenerator

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})
MAX_ATTEMPTS = 3

_logger = logging.getLogger(__name__)


@dataclass
class HttpxGeminiTextClient(TextGenerator):
    """Gemini generateContent client implemented with httpx."""

    api_key: str
    model: str
    http_client: httpx.AsyncClient
    base_url: str = GEMINI_BASE_URL
    use_web_search: bool = False
    retry_delay_seconds: float = 0.25

    @classmethod
    def create(
        cls, api_key: str, model: str, use_web_search: bool = False
    ) -> "HttpxGeminiTextClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            http_client=httpx.AsyncClient(),
            use_web_search=use_web_search,
        )

    async def generate_text(self, prompt: str) -> str:
        """Generate text, retrying throttling, server errors and dropped sockets."""
        cleaned = prompt.strip()
        if not cleaned:
            raise ExternalGenerationError("Prompt must not be empty")
        payload: dict[str, object] = {
            "contents": [{"role": "user", "parts": [{"text": cleaned}]}],
            "generationConfig": {"responseMimeType": "text/plain"},
        }
        if self.use_web_search:
            payload["tools"] = [{"google_search": {}}]
        url = f"{self.base_url}/models/{self.model}:generateContent"

        for attempt in range(MAX_ATTEMPTS):
            last_attempt = attempt == MAX_ATTEMPTS - 1
            try:
                response = await self.http_client.post(
                    url, params={"key": self.api_key}, json=payload, timeout=60
                )
            except httpx.TransportError as exc:
                if last_attempt:
                    raise ExternalGenerationError("Gemini is unreachable") from exc
                _logger.warning("Gemini transport error (attempt %s): %s", attempt, exc)
                await asyncio.sleep(self.retry_delay_seconds * (attempt + 1))
                continue
            if response.is_success:
                try:
                    payload = response.json()
                except ValueError as exc:
                    raise ExternalGenerationError(
                        "Gemini returned invalid JSON"
                    ) from exc
                text = parse_gemini_text(payload)
                if not text:
                    raise ExternalGenerationError("Gemini returned no usable text")
                return text
            message = f"Gemini error ({response.status_code}): {response.text[:220]}"
            if response.status_code not in RETRYABLE_STATUS_CODES or last_attempt:
                raise ExternalGenerationError(message)
            _logger.warning("%s, retrying (attempt %s)", message, attempt + 1)
            await asyncio.sleep(self.retry_delay_seconds * (attempt + 1))
        raise ExternalGenerationError("Gemini is unreachable")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def parse_gemini_text(payload: object) -> str | None:
    """Join the text parts of the first candidate."""
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return None
    content = candidate.get("content")
    if not isinstance(content, dict):
        return None
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts:
        return None
    text = "\n".join(
        part["text"]
        for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    ).strip()
    return text or None
