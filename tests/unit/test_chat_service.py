"""Unit tests for tutor/services/chat_service.py"""

import pytest
from unittest.mock import Mock

from shared.models.domain import ModelChoice, ModelResponse
from shared.models.entities import ChatLog
from shared.utils.exceptions import LLMProviderException, SessionNotFoundException
from shared.services.llm_service import LLMServiceError
from tutor.services.chat_service import ChatService
from tutor.services.performance_service import PerformanceTracker


def _reply(text):
    return ModelResponse(choices=[ModelChoice(content=text)])


@pytest.fixture
def tracker():
    return Mock(spec=PerformanceTracker)


# ---------------------------------------------------------------------------
# send_message
# ---------------------------------------------------------------------------

class TestSendMessage:
    def test_plain_reply_is_not_an_evaluation(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("A derivative measures rate of change.")
        result = ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "What is a derivative?")

        assert result.response == "A derivative measures rate of change."
        assert result.is_answer_evaluation is False
        assert result.is_correct is None
        tracker.update.assert_not_called()

    def test_verdict_updates_performance(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("Correct! The derivative of x^2 is 2x.")
        result = ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "2x")

        assert result.is_answer_evaluation is True
        assert result.is_correct is True
        tracker.update.assert_called_once_with("sess-1", True)

    def test_negative_verdict(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("Not quite, check the power rule.")
        result = ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "x")

        assert result.is_correct is False
        tracker.update.assert_called_once_with("sess-1", False)

    def test_persists_both_sides(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("**Hello**")
        ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "hi")

        logs = db_session.query(ChatLog).order_by(ChatLog.id).all()
        assert [(l.sender, l.content, l.content_type) for l in logs] == [
            ("user", "hi", "text"),
            ("assistant", "**Hello**", "markdown"),
        ]

    def test_history_is_sent_on_next_turn(self, db_session, learning_session, fake_llm, tracker):
        service = ChatService(db_session, fake_llm, performance_tracker=tracker)
        fake_llm.chat.return_value = _reply("first reply")
        service.send_message("sess-1", "first")
        service.send_message("sess-1", "second")

        messages = fake_llm.chat.call_args[0][0]
        assert [m.content for m in messages[1:]] == ["first", "first reply", "second"]

    def test_performance_failure_is_swallowed(self, db_session, learning_session, fake_llm, tracker):
        tracker.update.side_effect = RuntimeError("db down")
        fake_llm.chat.return_value = _reply("Excellent work!")

        result = ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "42")
        assert result.is_correct is True

    def test_model_failure_writes_nothing(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.side_effect = LLMServiceError("down")

        with pytest.raises(LLMProviderException):
            ChatService(db_session, fake_llm, performance_tracker=tracker).send_message("sess-1", "hi")
        assert db_session.query(ChatLog).count() == 0

    def test_unknown_session(self, db_session, fake_llm):
        with pytest.raises(SessionNotFoundException):
            ChatService(db_session, fake_llm).send_message("missing", "hi")
        fake_llm.chat.assert_not_called()


# ---------------------------------------------------------------------------
# evaluate_answer
# ---------------------------------------------------------------------------

class TestEvaluateAnswer:
    def test_incorrect_verdict(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("Incorrect. The integral of 1/x is ln|x|.")
        result = ChatService(db_session, fake_llm, performance_tracker=tracker).evaluate_answer(
            "sess-1", "Integrate 1/x", "x^0"
        )

        assert result.is_correct is False
        tracker.update.assert_called_once_with("sess-1", False)

    def test_prompt_contains_question_and_answer(self, db_session, learning_session, fake_llm, tracker):
        ChatService(db_session, fake_llm, performance_tracker=tracker).evaluate_answer("sess-1", "2+2?", "4")

        user_message = fake_llm.chat.call_args[0][0][-1]
        assert user_message.role == "user"
        assert "Question: 2+2?" in user_message.content
        assert "Student's answer: 4" in user_message.content

    def test_no_verdict_skips_update(self, db_session, learning_session, fake_llm, tracker):
        fake_llm.chat.return_value = _reply("Let's think about it together.")
        result = ChatService(db_session, fake_llm, performance_tracker=tracker).evaluate_answer("sess-1", "q", "a")

        assert result.is_correct is None
        tracker.update.assert_not_called()

    def test_uses_injected_classifier(self, db_session, learning_session, fake_llm, tracker):
        classifier = Mock()
        classifier.infer.return_value = True

        result = ChatService(db_session, fake_llm, classifier, tracker).evaluate_answer("sess-1", "q", "a")
        assert result.is_correct is True
        classifier.infer.assert_called_once_with("Let's get started!")
