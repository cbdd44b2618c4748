"""
Anthropic (Claude) Adapter

Maps the chat-style interface used by LLMService onto the Anthropic Messages API.

Handles:
- System messages -> top-level `system` parameter
- Role alternation required by the Messages API
- JSON mode -> prompt-based JSON instruction
- Response parsing into the provider-neutral ModelResponse
"""

import logging
from typing import Any, Dict, List

import anthropic

from shared.models.domain import ModelChoice, ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5"

JSON_ONLY_INSTRUCTION = (
    "You MUST respond with valid JSON only. No markdown, no explanation outside the JSON."
)


class AnthropicAdapter:
    """Adapter that translates OpenAI-style chat calls to Anthropic's Messages API."""

    def __init__(self, api_key: str, timeout: int = 60, model: str = DEFAULT_CLAUDE_MODEL):
        self.model = model
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout)

    def _build_kwargs(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int,
        json_mode: bool = False,
        temperature: float = 0.7,
    ) -> Dict[str, Any]:
        """Build kwargs for anthropic messages.create()."""
        system_parts = [m["content"] for m in messages if m["role"] == "system"]
        if json_mode:
            system_parts.append(JSON_ONLY_INSTRUCTION)

        conversation: List[Dict[str, str]] = []
        for m in messages:
            if m["role"] == "system":
                continue
            if conversation and conversation[-1]["role"] == m["role"]:
                # Messages API requires alternating roles
                conversation[-1] = {
                    "role": m["role"],
                    "content": f"{conversation[-1]['content']}\n\n{m['content']}",
                }
            else:
                conversation.append({"role": m["role"], "content": m["content"]})

        if not conversation or conversation[0]["role"] != "user":
            conversation.insert(0, {"role": "user", "content": "(conversation start)"})

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": conversation,
        }
        if system_parts:
            kwargs["system"] = "\n\n".join(system_parts)
        return kwargs

    @staticmethod
    def _parse_response(response: Any) -> ModelResponse:
        """Collect text blocks as choices; thinking and tool blocks are ignored."""
        choices = [
            ModelChoice(content=block.text)
            for block in getattr(response, "content", None) or []
            if getattr(block, "type", None) == "text"
        ]
        model = getattr(response, "model", None)
        return ModelResponse(choices=choices, model=model if isinstance(model, str) else None)

    def chat(
        self,
        messages: List[Dict[str, str]],
        max_tokens: int = 2048,
        json_mode: bool = False,
        temperature: float = 0.7,
    ) -> ModelResponse:
        """Sync call to Claude, returning the normalized response."""
        kwargs = self._build_kwargs(messages, max_tokens, json_mode, temperature)
        response = self.client.messages.create(**kwargs)
        return self._parse_response(response)
