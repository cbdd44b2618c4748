"""Unit tests for tutor/services/conversation_service.py"""

import pytest

from shared.models.domain import ChatMessage, ModelChoice, ModelResponse
from shared.models.entities import ChatLog
from shared.services.llm_service import LLMServiceError
from shared.utils.exceptions import LLMProviderException, MalformedModelResponseException
from tutor.services.conversation_service import ConversationOrchestrator, first_choice_text


def _log(db_session, sender, content):
    db_session.add(ChatLog(session_id="sess-1", sender=sender, content=content))
    db_session.commit()


# ===========================================================================
# Message assembly
# ===========================================================================

class TestBuildMessages:
    def test_system_history_then_user(self, db_session, learning_session, fake_llm):
        _log(db_session, "user", "What is a limit?")
        _log(db_session, "assistant", "A limit describes...")

        messages = ConversationOrchestrator(db_session, fake_llm).build_messages(
            "sess-1", "SYSTEM", "And a derivative?"
        )

        assert [(m.role, m.content) for m in messages] == [
            ("system", "SYSTEM"),
            ("user", "What is a limit?"),
            ("assistant", "A limit describes..."),
            ("user", "And a derivative?"),
        ]

    def test_without_new_user_message(self, db_session, learning_session, fake_llm):
        _log(db_session, "user", "hi")

        messages = ConversationOrchestrator(db_session, fake_llm).build_messages("sess-1", "SYSTEM")
        assert [m.role for m in messages] == ["system", "user"]

    def test_empty_history(self, db_session, learning_session, fake_llm):
        messages = ConversationOrchestrator(db_session, fake_llm).build_messages("sess-1", "SYSTEM", "hello")
        assert len(messages) == 2


# ===========================================================================
# converse / complete
# ===========================================================================

class TestConverse:
    def test_returns_first_choice_text(self, db_session, learning_session, fake_llm):
        fake_llm.chat.return_value = ModelResponse(choices=[
            ModelChoice(content="first"), ModelChoice(content="second"),
        ])
        reply = ConversationOrchestrator(db_session, fake_llm).converse("sess-1", "hi", "SYSTEM")

        assert reply == "first"

    def test_passes_budget_and_format(self, db_session, learning_session, fake_llm):
        ConversationOrchestrator(db_session, fake_llm).converse(
            "sess-1", "hi", "SYSTEM", max_tokens=123, response_format={"type": "json_object"}
        )

        kwargs = fake_llm.chat.call_args.kwargs
        assert kwargs["max_tokens"] == 123
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_does_not_write_history(self, db_session, learning_session, fake_llm):
        ConversationOrchestrator(db_session, fake_llm).converse("sess-1", "hi", "SYSTEM")
        assert db_session.query(ChatLog).count() == 0

    def test_provider_failure(self, db_session, learning_session, fake_llm):
        fake_llm.chat.side_effect = LLMServiceError("rate limited")

        with pytest.raises(LLMProviderException):
            ConversationOrchestrator(db_session, fake_llm).converse("sess-1", "hi", "SYSTEM")

    def test_single_call_no_retry(self, db_session, learning_session, fake_llm):
        fake_llm.chat.side_effect = LLMServiceError("down")

        with pytest.raises(LLMProviderException):
            ConversationOrchestrator(db_session, fake_llm).converse("sess-1", "hi", "SYSTEM")
        assert fake_llm.chat.call_count == 1


# ===========================================================================
# first_choice_text
# ===========================================================================

class TestFirstChoiceText:
    def test_no_choices(self):
        with pytest.raises(MalformedModelResponseException):
            first_choice_text(ModelResponse(choices=[]))

    def test_missing_content(self):
        with pytest.raises(MalformedModelResponseException):
            first_choice_text(ModelResponse(choices=[ModelChoice(content=None)]))

    def test_non_text_content(self):
        with pytest.raises(MalformedModelResponseException, match="expected text"):
            first_choice_text(ModelResponse(choices=[ModelChoice(content=[{"type": "image"}])]))

    def test_empty_string_is_valid_text(self):
        assert first_choice_text(ModelResponse(choices=[ModelChoice(content="")])) == ""
