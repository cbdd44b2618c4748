"""Shared services."""
from shared.services.llm_service import LLMService, LLMServiceError
