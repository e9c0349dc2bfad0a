"""
LLM service routing prompts to Anthropic or OpenAI based on model name.
Used by ad analysis and report generation.
"""

import logging
from typing import Dict, Optional

import httpx
from anthropic import Anthropic
from openai import OpenAI

from creative_analytics.errors import ConfigurationMissingError, ExternalApiError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


class LLMService:
    """Prompt-in, text-out wrapper over the provider SDKs. Failures are not retried."""

    def __init__(
        self,
        anthropic_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        default_model: str = DEFAULT_MODEL,
    ):
        self.anthropic_api_key = anthropic_api_key
        self.openai_api_key = openai_api_key
        self.default_model = default_model

    def _is_anthropic_model(self, model: str) -> bool:
        """Check if model is an Anthropic model"""
        return model.lower().startswith("claude-")

    def _is_openai_model(self, model: str) -> bool:
        """Check if model is an OpenAI model"""
        model_lower = model.lower()
        return model_lower.startswith("gpt-") or model_lower.startswith("o1-")

    def ensure_configured(self, model: Optional[str] = None) -> None:
        """Raise ConfigurationMissingError if the provider for model has no API key."""
        model = model or self.default_model
        if self._is_openai_model(model):
            if not self.openai_api_key:
                raise ConfigurationMissingError("OpenAI service is not configured. Set OPENAI_API_KEY.")
        elif not self.anthropic_api_key:
            raise ConfigurationMissingError("Anthropic API key is not configured")

    def execute_prompt(
        self,
        user_message: str,
        system_message: str = "",
        model: Optional[str] = None,
        max_tokens: int = 1024,
    ) -> Dict:
        """
        Execute a prompt and return the completion text.

        Args:
            user_message: The user prompt
            system_message: Optional system prompt
            model: Model identifier; defaults to the service's default model
            max_tokens: Completion token cap

        Returns:
            Dict with content, tokens_used, and model
        """
        model = model or self.default_model
        if self._is_openai_model(model):
            logger.info(f"Routing prompt to OpenAI. Model: {model}")
            return self._execute_openai(system_message, user_message, model, max_tokens)
        if not self._is_anthropic_model(model):
            logger.warning(f"Unknown model pattern '{model}', defaulting to Anthropic")
        logger.info(f"Routing prompt to Anthropic. Model: {model}")
        return self._execute_anthropic(system_message, user_message, model, max_tokens)

    def _execute_anthropic(
        self,
        system_message: str,
        user_message: str,
        model: str,
        max_tokens: int,
    ) -> Dict:
        """Execute prompt using Anthropic API"""
        if not self.anthropic_api_key:
            raise ConfigurationMissingError("Anthropic API key is not configured")

        request_params = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": [
                {"role": "user", "content": user_message.strip() or "Please proceed."}
            ],
        }
        if system_message and system_message.strip():
            request_params["system"] = system_message.strip()

        try:
            with httpx.Client(timeout=60.0) as http_client:
                client = Anthropic(api_key=self.anthropic_api_key, http_client=http_client)
                response = client.messages.create(**request_params)
        except Exception as e:
            logger.error(f"Failed to execute prompt with Anthropic: {e}")
            raise ExternalApiError(f"Failed to execute prompt: {str(e)}")

        content = "".join(
            getattr(block, "text", "") for block in (response.content or [])
            if getattr(block, "type", "text") == "text"
        )
        usage = getattr(response, "usage", None)
        tokens_used = None
        if usage is not None:
            tokens_used = (getattr(usage, "input_tokens", 0) or 0) + (getattr(usage, "output_tokens", 0) or 0)

        return {
            "content": content,
            "tokens_used": tokens_used,
            "model": model,
        }

    def _execute_openai(
        self,
        system_message: str,
        user_message: str,
        model: str,
        max_tokens: int,
    ) -> Dict:
        """Execute prompt using OpenAI API"""
        if not self.openai_api_key:
            raise ConfigurationMissingError("OpenAI service is not configured. Set OPENAI_API_KEY.")

        messages = []
        if system_message and system_message.strip():
            messages.append({"role": "system", "content": system_message})
        messages.append({"role": "user", "content": user_message})

        request_params = {"model": model, "messages": messages}
        # o1 models reject max_tokens
        if not model.lower().startswith("o1"):
            request_params["max_tokens"] = max_tokens

        try:
            with httpx.Client(timeout=60.0) as http_client:
                client = OpenAI(api_key=self.openai_api_key, http_client=http_client)
                response = client.chat.completions.create(**request_params)
        except Exception as e:
            logger.error(f"Failed to execute prompt with OpenAI: {e}")
            raise ExternalApiError(f"Failed to execute prompt: {str(e)}")

        usage = getattr(response, "usage", None)
        return {
            "content": response.choices[0].message.content or "",
            "tokens_used": getattr(usage, "total_tokens", None),
            "model": model,
        }
