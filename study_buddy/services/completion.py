from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from study_buddy.core.config import settings
from study_buddy.utils.logger import get_logger

logger = get_logger("study_buddy.services.completion")

# Fallback reasons
NOT_CONFIGURED = "not_configured"
TIMEOUT = "timeout"
HTTP_ERROR = "http_error"
BAD_STATUS = "bad_status"
MALFORMED_RESPONSE = "malformed_response"
UNEXPECTED_ERROR = "unexpected_error"


class CompletionError(Exception):
    """The provider could not produce a reply. `reason` is one of the fallback reasons."""

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


@dataclass(frozen=True)
class CompletionResult:
    """A reply plus where it came from.

    `fallback_reason` is None for a genuine provider answer and names the
    failure otherwise, so callers can tell degraded replies apart.
    """
    text: str
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None

    @classmethod
    def ok(cls, text: str) -> "CompletionResult":
        return cls(text=text)

    @classmethod
    def fallback(cls, text: str, reason: str) -> "CompletionResult":
        return cls(text=text, fallback_reason=reason)


class OpenRouterClient:
    """
    Minimal client for an OpenAI-compatible chat-completions endpoint.

    One attempt per call, bounded by `timeout`. No retries; every failure is
    raised as a CompletionError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        url: str,
        timeout: float = 30.0,
        referer: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.referer = referer
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> str:
        if not self.configured:
            raise CompletionError(NOT_CONFIGURED)

        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.referer:
            headers["HTTP-Referer"] = self.referer

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    headers=headers,
                    json={
                        "model": self.model,
                        "messages": messages,
                        "temperature": temperature,
                        "max_tokens": max_tokens,
                    },
                )
            except httpx.TimeoutException as e:
                raise CompletionError(TIMEOUT, str(e)) from e
            except httpx.HTTPError as e:
                raise CompletionError(HTTP_ERROR, str(e)) from e

        if response.is_error:
            raise CompletionError(BAD_STATUS, f"status {response.status_code}")

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise CompletionError(MALFORMED_RESPONSE, repr(e)) from e

        if not isinstance(content, str) or not content.strip():
            raise CompletionError(MALFORMED_RESPONSE, "empty completion")

        logger.info("Completion received", extra={"model": self.model, "answer_length": len(content)})
        return content.strip()


def get_completion_client() -> OpenRouterClient:
    return OpenRouterClient(
        api_key=settings.OPENROUTER_API_KEY,
        model=settings.OPENROUTER_MODEL_ID,
        url=settings.OPENROUTER_URL,
        timeout=settings.OPENROUTER_TIMEOUT,
        referer=settings.OPENROUTER_REFERER,
    )
