"""Unit tests for tutor/services/research_service.py"""

import pytest

from shared.models.domain import ModelChoice, ModelResponse
from shared.utils.exceptions import MalformedModelResponseException, SessionNotFoundException
from tutor.services.research_service import ResearchService


def _reply(text):
    return ModelResponse(choices=[ModelChoice(content=text)])


class TestResearchPrompts:
    def test_analyze_question(self, db_session, learning_session, fake_llm):
        fake_llm.chat.return_value = _reply("## Analysis")
        result = ResearchService(db_session, fake_llm).analyze_question("sess-1", "Why does e appear everywhere?")

        assert result == "## Analysis"
        messages = fake_llm.chat.call_args[0][0]
        assert "mathematics and economics researcher" in messages[0].content
        assert messages[-1].content == "Please analyze this question deeply: Why does e appear everywhere?"

    def test_generate_scenarios_budget(self, db_session, learning_session, fake_llm):
        ResearchService(db_session, fake_llm).generate_scenarios("sess-1", "interest rates double")
        assert fake_llm.chat.call_args.kwargs["max_tokens"] == 3000

    def test_apply_to_real_world(self, db_session, learning_session, fake_llm):
        ResearchService(db_session, fake_llm).apply_to_real_world("sess-1", "Game theory", "pricing")

        last = fake_llm.chat.call_args[0][0][-1].content
        assert last == 'Apply the theory "Game theory" to this real-world context: pricing'

    def test_unknown_session(self, db_session, fake_llm):
        with pytest.raises(SessionNotFoundException):
            ResearchService(db_session, fake_llm).analyze_question("missing", "q")


class TestGraphData:
    def test_parses_object_and_requests_json(self, db_session, learning_session, fake_llm):
        fake_llm.chat.return_value = _reply('{"type": "line", "title": "y = x^2", "series": []}')
        graph = ResearchService(db_session, fake_llm).generate_graph_data("sess-1", "a parabola")

        assert graph["type"] == "line"
        assert fake_llm.chat.call_args.kwargs["response_format"] == {"type": "json_object"}

    def test_fenced_object(self, db_session, learning_session, fake_llm):
        fake_llm.chat.return_value = _reply('```json\n{"type": "bar"}\n```')
        assert ResearchService(db_session, fake_llm).generate_graph_data("sess-1", "bars")["type"] == "bar"

    def test_unparseable_raises(self, db_session, learning_session, fake_llm):
        fake_llm.chat.return_value = _reply("I cannot draw that.")

        with pytest.raises(MalformedModelResponseException):
            ResearchService(db_session, fake_llm).generate_graph_data("sess-1", "something")
