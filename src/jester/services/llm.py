"""LLM service: Gemini through its OpenAI-compatible endpoint."""
from typing import Optional

import httpx
from openai import OpenAI, OpenAIError

from jester.core.config import AIConfig
from jester.core.errors import AIGatewayError
from jester.core.logging import logger


class LLMService:
    """Service for LLM interactions."""

    def __init__(self, config: AIConfig, client: Optional[OpenAI] = None):
        """Initialize LLM client. Without an API key the service stays unavailable."""
        self.config = config
        self.client = client
        if self.client is None and self.is_configured:
            self.client = OpenAI(
                base_url=config.base_url,
                api_key=config.api_key,
                timeout=httpx.Timeout(config.read_timeout, connect=config.connect_timeout),
                max_retries=0,
            )
            logger.info(f"LLM client initialized: {config.base_url} ({config.model_name})")
        elif self.client is None:
            logger.warning("GOOGLE_AI_API_KEY is not set, AI answers are disabled")

    @property
    def is_configured(self) -> bool:
        return bool(self.config.api_key.strip())

    def is_available(self) -> bool:
        return self.client is not None

    def complete(self, prompt: str) -> str:
        """Send a single user prompt and return the model's text answer."""
        if self.client is None:
            raise AIGatewayError("AI gateway is not configured")

        try:
            resp = self.client.chat.completions.create(
                model=self.config.model_name,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as e:
            logger.error(f"LLM call failed: {e}")
            raise AIGatewayError(f"LLM service unavailable: {e}") from e

        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AIGatewayError(f"Unexpected LLM response format: {e}") from e
        if not content:
            raise AIGatewayError("LLM returned an empty answer")
        return content

    def health_check(self) -> str:
        """Check LLM service health."""
        if self.client is None:
            return "not configured"
        try:
            self.client.models.list()
            return "healthy"
        except OpenAIError as e:
            logger.error(f"LLM health check failed: {e}")
            return f"unhealthy: {str(e)}"
