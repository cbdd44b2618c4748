"""Health check API endpoints."""
from fastapi import APIRouter, Request

from config import get_settings
from database import get_db_manager

router = APIRouter(tags=["health"])


@router.get("/")
def read_root(request: Request):
    """Health check endpoint."""
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return {
        "status": "ok",
        "service": "Math Mentor Backend",
        "version": "1.0.0",
        "llm_provider": settings.llm_provider,
        "llm_model": settings.llm_model,
    }


@router.get("/health/db")
def database_health(request: Request):
    """Database health check."""
    try:
        is_healthy = get_db_manager(request).health_check()
        if is_healthy:
            return {"status": "ok", "database": "connected"}
        return {"status": "error", "database": "connection_failed"}
    except Exception as e:
        return {"status": "error", "database": f"error: {str(e)}"}
