"""
AI gateway client (OpenAI-compatible chat completions)
"""
import logging
import httpx
from typing import Dict, List, Optional, Any
from techmate.core.config import settings
from techmate.core.errors import (
    GenerationError,
    MissingCredentialsError,
    PaymentRequiredError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)


class AIClient:
    """Abstraction for AI gateway operations"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = (base_url or settings.AI_GATEWAY_URL).rstrip("/")
        self.api_key = settings.AI_GATEWAY_API_KEY if api_key is None else api_key
        self.model = model or settings.AI_MODEL
        self.client = http_client or httpx.AsyncClient(timeout=settings.AI_TIMEOUT_SECONDS)

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Send a chat completion request and return the first choice's content

        Raises:
            MissingCredentialsError: no API key configured
            RateLimitExceededError: gateway answered 429
            PaymentRequiredError: gateway answered 402
            GenerationError: any other failure, including an empty answer
        """
        if not self.api_key:
            logger.error("AI_GATEWAY_API_KEY not configured")
            raise MissingCredentialsError()

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens or settings.AI_MAX_TOKENS,
        }

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("AI gateway request failed: %s", e)
            raise GenerationError(detail=str(e)) from e

        if response.status_code == 429:
            logger.warning("AI gateway rate limited the request")
            raise RateLimitExceededError()
        if response.status_code == 402:
            logger.warning("AI gateway requires payment")
            raise PaymentRequiredError()
        if response.is_error:
            logger.error("AI gateway error: %s %s", response.status_code, response.text[:500])
            raise GenerationError(detail=f"AI Gateway error: {response.status_code}")

        try:
            result = response.json()
            content = result["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise GenerationError(detail="Malformed AI gateway response") from e

        if not content:
            raise GenerationError(detail="AI gateway returned an empty answer")
        return content

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()


# Singleton instance
_ai_client: Optional[AIClient] = None


def get_ai_client() -> AIClient:
    """Get singleton AI client instance"""
    global _ai_client
    if _ai_client is None:
        _ai_client = AIClient()
    return _ai_client


async def close_ai_client() -> None:
    """Close the singleton on shutdown"""
    global _ai_client
    if _ai_client is not None:
        await _ai_client.close()
        _ai_client = None
