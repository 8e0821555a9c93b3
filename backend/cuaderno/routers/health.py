"""
Health check endpoint for service monitoring and readiness probes.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from cuaderno.database import get_db
from cuaderno.deps import get_mabot_client
from cuaderno.clients.mabot_client import MabotClient

router = APIRouter(prefix="/healthz", tags=["health"])

@router.get("")
def health_check(db: Session = Depends(get_db), client: MabotClient = Depends(get_mabot_client)):
    db.execute(text("SELECT 1"))
    return {"status": "ok", "assistant_configured": client.config.configured}
