"""Unit tests for shared/utils/exceptions.py"""

import pytest
from fastapi import HTTPException

from shared.utils.exceptions import (
    DatabaseException,
    LLMProviderException,
    MalformedModelResponseException,
    MathMentorException,
    NoteNotFoundException,
    PromptTemplateError,
    QuizNotFoundException,
    SessionNotFoundException,
    StaleStateError,
)


class TestHttpMapping:
    @pytest.mark.parametrize("exc,status", [
        (MathMentorException("x"), 500),
        (SessionNotFoundException("s1"), 404),
        (QuizNotFoundException(7, "s1"), 404),
        (NoteNotFoundException(3), 404),
        (LLMProviderException(RuntimeError("down")), 503),
        (MalformedModelResponseException("no choices returned"), 502),
        (DatabaseException("save", RuntimeError("locked")), 500),
        (StaleStateError("conflict"), 409),
        (PromptTemplateError("quiz", ["topic"]), 500),
    ])
    def test_status_codes(self, exc, status):
        http_exc = exc.to_http_exception()
        assert isinstance(http_exc, HTTPException)
        assert http_exc.status_code == status

    def test_all_share_base(self):
        for cls in (SessionNotFoundException, QuizNotFoundException, NoteNotFoundException,
                    LLMProviderException, MalformedModelResponseException, DatabaseException,
                    StaleStateError, PromptTemplateError):
            assert issubclass(cls, MathMentorException)


class TestMessages:
    def test_session_not_found(self):
        exc = SessionNotFoundException("abc")
        assert exc.session_id == "abc"
        assert "abc" in exc.to_http_exception().detail

    def test_quiz_not_found_mentions_session(self):
        assert str(QuizNotFoundException(5, "s1")) == "Quiz 5 not found in session s1"
        assert str(QuizNotFoundException(5)) == "Quiz 5 not found"

    def test_malformed_response(self):
        exc = MalformedModelResponseException("content is list, expected text")
        assert str(exc) == "Unexpected response format from LLM: content is list, expected text"

    def test_provider_detail_hides_internals(self):
        exc = LLMProviderException(RuntimeError("api key sk-123 rejected"))
        assert "sk-123" not in exc.to_http_exception().detail
        assert exc.original_error.args[0] == "api key sk-123 rejected"

    def test_database_detail_hides_internals(self):
        exc = DatabaseException("save", RuntimeError("password=secret"))
        assert exc.to_http_exception().detail == "Database operation failed"

    def test_prompt_template_missing_vars(self):
        exc = PromptTemplateError("quiz", ["count", "topic"])
        assert exc.missing_vars == ["count", "topic"]
        assert "quiz" in str(exc)
