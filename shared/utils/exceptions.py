"""Custom exception hierarchy for better error handling."""
from typing import Optional

from fastapi import HTTPException, status


class MathMentorException(Exception):
    """Base exception for all application errors."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(self)
        )


class SessionNotFoundException(MathMentorException):
    """Raised when a learning session is not found."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {self.session_id} not found"
        )


class QuizNotFoundException(MathMentorException):
    """Raised when a quiz does not exist within the given session."""

    def __init__(self, quiz_id: int, session_id: Optional[str] = None):
        self.quiz_id = quiz_id
        self.session_id = session_id
        message = f"Quiz {quiz_id} not found"
        if session_id:
            message += f" in session {session_id}"
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(self)
        )


class NoteNotFoundException(MathMentorException):
    """Raised when a learning note is not found."""

    def __init__(self, note_id: int):
        self.note_id = note_id
        super().__init__(f"Note {note_id} not found")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Note {self.note_id} not found"
        )


class LLMProviderException(MathMentorException):
    """Raised when the LLM provider call fails."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"LLM provider error: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service temporarily unavailable"
        )


class MalformedModelResponseException(MathMentorException):
    """Raised when the model answered without usable text (no choices, missing or non-text content)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Unexpected response format from LLM: {reason}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Unexpected response format from AI service: {self.reason}"
        )


class DatabaseException(MathMentorException):
    """Raised when database operations fail."""

    def __init__(self, operation: str, original_error: Exception):
        self.operation = operation
        self.original_error = original_error
        super().__init__(f"Database {operation} failed: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database operation failed"
        )


class StaleStateError(MathMentorException):
    """Raised when an optimistic locking conflict cannot be resolved within the retry budget."""

    def __init__(self, message: str):
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(self)
        )


class PromptTemplateError(MathMentorException):
    """Raised when a prompt template is rendered with missing variables."""

    def __init__(self, template_name: str, missing_vars: Optional[list[str]] = None):
        self.template_name = template_name
        self.missing_vars = missing_vars or []
        message = f"Failed to render template '{template_name}'"
        if self.missing_vars:
            message += f": missing variables {self.missing_vars}"
        super().__init__(message)
