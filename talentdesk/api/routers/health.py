"""Health check endpoints for TalentDesk."""

from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from talentdesk import __version__
from talentdesk.api.deps import get_db, get_rbac_session
from talentdesk.core.rbac.session import RBACSession

router = APIRouter(tags=["health"])


def check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1")).fetchone()
        return {"status": "healthy"}
    except Exception as e:
        return {"status": "unhealthy", "error": str(e)}


@router.get("/health")
async def health_check(
    db: Session = Depends(get_db),
    session: RBACSession = Depends(get_rbac_session),
):
    database = check_database(db)
    healthy = database["status"] == "healthy"
    body = {
        "status": "healthy" if healthy else "unhealthy",
        "version": __version__,
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {
            "database": database,
            "session": {"status": "loading" if session.is_loading else "loaded"},
        },
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body,
    )
