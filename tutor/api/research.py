"""Research assistant API endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from shared.models import (
    AnalyzeQuestionRequest,
    ApplyTheoryRequest,
    GraphDataRequest,
    GraphDataResponse,
    ResearchResponse,
    ScenarioRequest,
)
from shared.services.llm_service import LLMService
from shared.utils.exceptions import MathMentorException
from tutor.api.dependencies import get_llm_service
from tutor.services import ResearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/research", tags=["research"])


def _research_service(
    db: DBSession = Depends(get_db),
    llm_service: LLMService = Depends(get_llm_service),
) -> ResearchService:
    return ResearchService(db, llm_service)


@router.post("/{session_id}/analyze", response_model=ResearchResponse)
def analyze_question(
    session_id: str,
    request: AnalyzeQuestionRequest,
    service: ResearchService = Depends(_research_service),
):
    try:
        return ResearchResponse(content=service.analyze_question(session_id, request.question))
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error analyzing question: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error analyzing question: {str(e)}")


@router.post("/{session_id}/scenarios", response_model=ResearchResponse)
def generate_scenarios(
    session_id: str,
    request: ScenarioRequest,
    service: ResearchService = Depends(_research_service),
):
    try:
        return ResearchResponse(content=service.generate_scenarios(session_id, request.scenario))
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error generating scenarios: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating scenarios: {str(e)}")


@router.post("/{session_id}/apply", response_model=ResearchResponse)
def apply_to_real_world(
    session_id: str,
    request: ApplyTheoryRequest,
    service: ResearchService = Depends(_research_service),
):
    try:
        return ResearchResponse(
            content=service.apply_to_real_world(session_id, request.theory, request.context)
        )
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error applying theory: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error applying theory: {str(e)}")


@router.post("/{session_id}/graph", response_model=GraphDataResponse)
def generate_graph_data(
    session_id: str,
    request: GraphDataRequest,
    service: ResearchService = Depends(_research_service),
):
    """Chart data only; the client renders it."""
    try:
        return GraphDataResponse(graph=service.generate_graph_data(session_id, request.description))
    except MathMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error generating graph data: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error generating graph data: {str(e)}")
