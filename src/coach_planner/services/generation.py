"""Text generation interface with retry handling."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from coach_planner.domain.errors import ExternalGenerationError

_logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Interface for an LLM that turns a prompt into text."""

    async def generate_text(self, prompt: str) -> str:
        """Return generated text for a prompt."""


@dataclass
class RetryingTextGenerator(TextGenerator):
    """Wraps a generator with a short retry and domain error mapping."""

    client: TextGenerator
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.25

    async def generate_text(self, prompt: str) -> str:
        """Generate text, retrying transient failures."""
        cleaned = prompt.strip()
        if not cleaned:
            raise ExternalGenerationError("Prompt must not be empty")
        attempt = 0
        while True:
            try:
                text = await self.client.generate_text(cleaned)
            except ExternalGenerationError:
                raise
            except Exception as exc:
                attempt += 1
                _logger.warning(
                    "Text generation failed (attempt %s/%s, status=%s): %s",
                    attempt,
                    self.retry_attempts + 1,
                    _status_code_from_exception(exc),
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise ExternalGenerationError(
                        "Text generation is currently unavailable"
                    ) from exc
                await asyncio.sleep(self.retry_delay_seconds * attempt)
                continue
            if not text or not text.strip():
                raise ExternalGenerationError("Text generator returned no text")
            return text


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
