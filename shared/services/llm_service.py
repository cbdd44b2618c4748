"""
LLM Service - centralized interface for all LLM API calls.

Routes chat calls to the configured provider (OpenAI Chat Completions or
Anthropic Messages) and normalizes every answer into a provider-neutral
`ModelResponse` carrying a list of candidate choices.

The primary entry point is `chat()`.
"""

import json
import time
from typing import Any, Dict, Optional, Sequence, Union
from openai import OpenAI, OpenAIError, RateLimitError, APITimeoutError
import logging

from shared.models.domain import ChatMessage, ModelChoice, ModelResponse

logger = logging.getLogger(__name__)

MessageLike = Union[ChatMessage, Dict[str, Any]]


class LLMService:
    """
    Service for making LLM API calls with optional retry and error handling.

    Both `provider` and `model_id` are required; the entry point builds one
    instance from settings (see `from_settings`) and injects it everywhere.
    """

    def __init__(
        self,
        *,
        provider: str,
        model_id: str,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        max_retries: int = 1,
        initial_retry_delay: float = 1.0,
        timeout: int = 60,
    ):
        self.provider = provider
        self.model_id = model_id
        self.max_retries = max(1, max_retries)
        self.initial_retry_delay = initial_retry_delay
        self.timeout = timeout

        self.client = OpenAI(api_key=openai_api_key) if openai_api_key else None

        self.anthropic_adapter = None
        if anthropic_api_key:
            from shared.services.anthropic_adapter import AnthropicAdapter
            self.anthropic_adapter = AnthropicAdapter(
                api_key=anthropic_api_key, timeout=timeout, model=model_id
            )

    @classmethod
    def from_settings(cls, settings) -> "LLMService":
        """Build the service from application settings."""
        return cls(
            provider=settings.llm_provider,
            model_id=settings.llm_model,
            openai_api_key=settings.openai_api_key or None,
            anthropic_api_key=settings.anthropic_api_key or None,
            max_retries=settings.llm_max_retries,
            timeout=settings.llm_timeout,
        )

    # ─── Primary entry point ───────────────────────────────────────────

    def chat(
        self,
        messages: Sequence[MessageLike],
        max_tokens: int = 2048,
        response_format: Optional[Dict[str, Any]] = None,
        temperature: float = 0.7,
    ) -> ModelResponse:
        """
        Send an ordered message list to the configured provider.

        Args:
            messages: [{role: system|user|assistant, content: str}, ...]
            max_tokens: Completion token budget
            response_format: Optional structured-output hint, e.g. {"type": "json_object"}

        Returns:
            ModelResponse with zero or more choices; content is not validated here.

        Raises:
            LLMServiceError: when the provider call fails
        """
        payload = [_as_dict(m) for m in messages]

        if self.provider == "anthropic":
            return self._call_anthropic(payload, max_tokens, response_format, temperature)
        return self._call_chat_completions(payload, max_tokens, response_format, temperature)

    # ─── OpenAI Chat Completions API ──────────────────────────────────

    def _call_chat_completions(
        self,
        messages: list[Dict[str, str]],
        max_tokens: int,
        response_format: Optional[Dict[str, Any]],
        temperature: float,
    ) -> ModelResponse:
        """Call OpenAI Chat Completions and normalize the choices."""
        if self.client is None:
            raise LLMServiceError("OpenAI client not configured (missing API key)")

        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": self.model_id,
            "params": {
                "message_count": len(messages),
                "max_tokens": max_tokens,
                "response_format": (response_format or {}).get("type"),
            }
        }))

        def _api_call():
            kwargs = {
                "model": self.model_id,
                "messages": messages,
                "max_completion_tokens": max_tokens,
                "temperature": temperature,
                "timeout": self.timeout,
            }
            if response_format:
                kwargs["response_format"] = response_format
            response = self.client.chat.completions.create(**kwargs)
            choices = [
                ModelChoice(content=getattr(getattr(choice, "message", None), "content", None))
                for choice in (response.choices or [])
            ]
            model = getattr(response, "model", None)
            return ModelResponse(choices=choices, model=model if isinstance(model, str) else None)

        return self._execute_with_retry(_api_call, self.model_id)

    # ─── Anthropic ────────────────────────────────────────────────────

    def _call_anthropic(
        self,
        messages: list[Dict[str, str]],
        max_tokens: int,
        response_format: Optional[Dict[str, Any]],
        temperature: float,
    ) -> ModelResponse:
        """Call Anthropic Claude via the adapter."""
        if not self.anthropic_adapter:
            raise LLMServiceError("Anthropic adapter not configured (missing API key)")

        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "model": self.model_id,
            "params": {"message_count": len(messages), "max_tokens": max_tokens}
        }))

        def _api_call():
            return self.anthropic_adapter.chat(
                messages=messages,
                max_tokens=max_tokens,
                json_mode=bool(response_format),
                temperature=temperature,
            )

        return self._execute_with_retry(_api_call, f"Anthropic-{self.model_id}")

    # ─── Helpers ──────────────────────────────────────────────────────

    def _execute_with_retry(self, api_call_fn, model_name: str) -> Any:
        """Execute API call, retrying rate limits and timeouts with exponential backoff."""
        last_error = None
        delay = self.initial_retry_delay
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                result = api_call_fn()
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(json.dumps({
                    "step": "LLM_CALL",
                    "status": "complete",
                    "model": model_name,
                    "output": {"choice_count": len(result.choices) if result else 0},
                    "duration_ms": duration_ms,
                    "attempts": attempt + 1
                }))

                if attempt > 0:
                    logger.info(f"{model_name} call succeeded on attempt {attempt + 1}")
                return result

            except RateLimitError as e:
                last_error = e
                logger.warning(
                    f"{model_name} rate limit hit (attempt {attempt + 1}/{self.max_retries})."
                )
                if attempt + 1 < self.max_retries:
                    time.sleep(delay)
                    delay *= 2

            except APITimeoutError as e:
                last_error = e
                logger.warning(
                    f"{model_name} timeout (attempt {attempt + 1}/{self.max_retries})."
                )
                if attempt + 1 < self.max_retries:
                    time.sleep(delay)
                    delay *= 2

            except OpenAIError as e:
                logger.error(f"{model_name} API error: {str(e)}")
                raise LLMServiceError(f"{model_name} API error: {str(e)}") from e

            except LLMServiceError:
                raise

            except Exception as e:
                logger.error(f"{model_name} unexpected error: {str(e)}")
                raise LLMServiceError(f"{model_name} unexpected error: {str(e)}") from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(last_error),
            "duration_ms": duration_ms,
            "attempts": self.max_retries
        }))
        raise LLMServiceError(
            f"{model_name} failed after {self.max_retries} attempts. Last error: {str(last_error)}"
        ) from last_error


def _as_dict(message: MessageLike) -> Dict[str, str]:
    if isinstance(message, ChatMessage):
        return message.model_dump()
    return {"role": message["role"], "content": message["content"]}


class LLMServiceError(Exception):
    """Custom exception for LLM service errors"""
    pass
