import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auroapi.deps import get_db
from auroapi.schemas.health import HealthCheckResponse

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthCheckResponse)
def health_check(db: Session = Depends(get_db)) -> HealthCheckResponse:
    """Health check endpoint."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error(f"Database health check failed: {exc}")
        return HealthCheckResponse(status="degraded", database="unavailable")
    return HealthCheckResponse()
