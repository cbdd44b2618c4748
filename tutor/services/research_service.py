"""Research assistant: deep analysis, thought experiments and graph data."""

import logging

from sqlalchemy.orm import Session as DBSession

from shared.repositories import LearningSessionRepository
from shared.services.llm_service import LLMService
from shared.utils.constants import RESEARCH_MAX_TOKENS, SCENARIO_MAX_TOKENS
from shared.utils.exceptions import MalformedModelResponseException, SessionNotFoundException
from tutor.prompts.templates import (
    ANALYZE_QUESTION_TEMPLATE,
    GRAPH_DATA_SYSTEM_PROMPT,
    GRAPH_DATA_TEMPLATE,
    REAL_WORLD_SYSTEM_PROMPT,
    REAL_WORLD_TEMPLATE,
    RESEARCH_ANALYSIS_SYSTEM_PROMPT,
    SCENARIO_SYSTEM_PROMPT,
    SCENARIO_TEMPLATE,
)
from tutor.services.conversation_service import ConversationOrchestrator
from tutor.utils.json_extraction import parse_json_object

logger = logging.getLogger("tutor.research_service")


class ResearchService:
    """Single-shot research prompts grounded in the session's chat history."""

    def __init__(self, db: DBSession, llm_service: LLMService):
        self.conversation = ConversationOrchestrator(db, llm_service)
        self.sessions = LearningSessionRepository(db)

    def analyze_question(self, session_id: str, question: str) -> str:
        self._require_session(session_id)
        return self.conversation.converse(
            session_id,
            ANALYZE_QUESTION_TEMPLATE.render(question=question),
            RESEARCH_ANALYSIS_SYSTEM_PROMPT,
            max_tokens=RESEARCH_MAX_TOKENS,
        )

    def generate_scenarios(self, session_id: str, scenario: str) -> str:
        self._require_session(session_id)
        return self.conversation.converse(
            session_id,
            SCENARIO_TEMPLATE.render(scenario=scenario),
            SCENARIO_SYSTEM_PROMPT,
            max_tokens=SCENARIO_MAX_TOKENS,
        )

    def apply_to_real_world(self, session_id: str, theory: str, context: str) -> str:
        self._require_session(session_id)
        return self.conversation.converse(
            session_id,
            REAL_WORLD_TEMPLATE.render(theory=theory, context=context),
            REAL_WORLD_SYSTEM_PROMPT,
            max_tokens=RESEARCH_MAX_TOKENS,
        )

    def generate_graph_data(self, session_id: str, description: str) -> dict:
        """
        Ask for chart data as a JSON object. Rendering is left to the client.

        Raises:
            MalformedModelResponseException: the reply is not a JSON object
        """
        self._require_session(session_id)
        raw = self.conversation.converse(
            session_id,
            GRAPH_DATA_TEMPLATE.render(description=description),
            GRAPH_DATA_SYSTEM_PROMPT,
            max_tokens=RESEARCH_MAX_TOKENS,
            response_format={"type": "json_object"},
        )
        graph = parse_json_object(raw)
        if graph is None:
            logger.warning(f"Graph data for session {session_id} was not a JSON object")
            raise MalformedModelResponseException("graph data is not a JSON object")
        return graph

    def _require_session(self, session_id: str) -> None:
        if not self.sessions.exists(session_id):
            raise SessionNotFoundException(session_id)
