"""
Chat assistant - forwards a conversation to a hosted chat-completion model
"""

import logging
from typing import Any

import requests

from agri_monitor.core.config import Settings
from agri_monitor.core.errors import InternalError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPTS = {
    "english": (
        "You are a helpful agricultural assistant. You provide information about crops, soil, "
        "weather, and farming techniques to help farmers improve their agricultural practices."
    ),
    "hindi": (
        "आप एक सहायक कृषि सहायक हैं। आप हिंदी में उत्तर देते हैं और किसानों को फसल, मिट्टी, "
        "मौसम और कृषि तकनीकों के बारे में जानकारी प्रदान करते हैं।"
    ),
}

MAX_TOKENS = 1000
TEMPERATURE = 0.7


def system_prompt(language: str) -> str:
    return SYSTEM_PROMPTS.get(language, SYSTEM_PROMPTS["english"])


class ChatAssistant:
    """Thin client for an OpenAI-compatible /chat/completions endpoint."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_request(self, messages: list[dict[str, str]], language: str) -> dict[str, Any]:
        return {
            "model": self.settings.openai_model,
            "messages": [{"role": "system", "content": system_prompt(language)}, *messages],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    def complete(self, messages: list[dict[str, str]], language: str = "english") -> dict[str, Any]:
        """
        Send the conversation and return {"message": ..., "usage": ...}.

        Raises:
            InternalError: API key not configured
            ValidationError: empty conversation
            UpstreamError: transport failure, non-2xx status or malformed reply
        """
        if not self.settings.openai_api_key:
            logger.error("OPENAI_API_KEY is not set")
            raise InternalError("OpenAI API key is not configured")

        if not messages:
            raise ValidationError("Invalid messages format")

        body = self.build_request(messages, language)
        logger.info(f"Sending chat request with model: {body['model']} (language: {language})")

        try:
            response = requests.post(
                f"{self.settings.openai_base_url.rstrip('/')}/chat/completions",
                headers={
                    "Authorization": f"Bearer {self.settings.openai_api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=self.settings.openai_timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Chat request failed: {e}")
            raise UpstreamError(f"OpenAI request failed: {e}") from e

        if not response.ok:
            logger.error(f"OpenAI API Error: {response.status_code} {response.text}")
            raise UpstreamError(f"OpenAI API Error: {response.status_code} - {response.text}")

        try:
            data = response.json()
            message = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Invalid OpenAI response format: {e}")
            raise UpstreamError("Invalid response format from OpenAI") from e

        return {"message": message, "usage": data.get("usage")}
