"""
Conversation orchestration.

Assembles the message list (system prompt, stored history, new user
message), calls the model once and validates that usable text came back.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.orm import Session as DBSession

from shared.models.domain import ChatMessage, ModelResponse
from shared.repositories import ChatLogRepository
from shared.services.llm_service import LLMService, LLMServiceError
from shared.utils.constants import CHAT_MAX_TOKENS
from shared.utils.exceptions import LLMProviderException, MalformedModelResponseException

logger = logging.getLogger("tutor.conversation_service")


def first_choice_text(response: ModelResponse) -> str:
    """
    Return the text of the first choice.

    Raises:
        MalformedModelResponseException: no choices, missing content or non-text content
    """
    if response is None or not response.choices:
        raise MalformedModelResponseException("no choices returned")
    content = response.choices[0].content
    if content is None:
        raise MalformedModelResponseException("first choice has no content")
    if not isinstance(content, str):
        raise MalformedModelResponseException(f"content is {type(content).__name__}, expected text")
    return content


class ConversationOrchestrator:
    """Runs a single model exchange grounded in a session's chat history."""

    def __init__(self, db: DBSession, llm_service: LLMService):
        self.db = db
        self.llm = llm_service
        self.chat_logs = ChatLogRepository(db)

    def build_messages(
        self,
        session_id: str,
        system_prompt: str,
        user_message: Optional[str] = None,
    ) -> list[ChatMessage]:
        """System prompt, then history oldest first, then the new user message if any."""
        messages = [ChatMessage(role="system", content=system_prompt)]
        for log in self.chat_logs.list_for_session(session_id):
            role = "user" if log.sender == "user" else "assistant"
            messages.append(ChatMessage(role=role, content=log.content))
        if user_message is not None:
            messages.append(ChatMessage(role="user", content=user_message))
        return messages

    def complete(
        self,
        messages: Sequence[ChatMessage],
        max_tokens: int = CHAT_MAX_TOKENS,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Call the model with a prepared message list and return its text.

        Raises:
            LLMProviderException: the provider call failed
            MalformedModelResponseException: the model answered without usable text
        """
        try:
            response = self.llm.chat(
                list(messages),
                max_tokens=max_tokens,
                response_format=response_format,
            )
        except LLMServiceError as e:
            logger.error(f"Model call failed: {e}")
            raise LLMProviderException(e) from e
        return first_choice_text(response)

    def converse(
        self,
        session_id: str,
        user_message: str,
        system_prompt: str,
        max_tokens: int = CHAT_MAX_TOKENS,
        response_format: Optional[Dict[str, Any]] = None,
    ) -> str:
        """One tutor turn. Nothing is written to the chat log here."""
        messages = self.build_messages(session_id, system_prompt, user_message)
        return self.complete(messages, max_tokens=max_tokens, response_format=response_format)
