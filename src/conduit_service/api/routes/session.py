import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...services import AssignmentOutcome, ShardAssignmentService
from ..dependencies import get_assignment_service

router = APIRouter(tags=["Session"])
logger = logging.getLogger(__name__)

# Missing or malformed headers are answered with 401 below, not FastAPI's default
bearer_scheme = HTTPBearer(auto_error=False)

ASSIGN_CONFIRMATION = "Shard transport assignment dispatched"


@router.post("/assign", response_class=PlainTextResponse)
async def assign_session(
    request: Request,
    shard: Optional[str] = Query(
        None,
        description="Shard to reassign (defaults to the configured shard)",
    ),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    service: ShardAssignmentService = Depends(get_assignment_service),
) -> str:
    """
    Point a conduit shard at a new websocket session.

    The raw request body is the session identifier. A correct bearer token is
    answered with 200 once the update has been dispatched, whatever the
    provider made of it; the provider's answer is only logged.
    """
    provided_secret = credentials.credentials if credentials else None
    body = (await request.body()).decode("utf-8", errors="replace")

    outcome = await service.assign_transport(provided_secret, shard, body)
    if outcome is AssignmentOutcome.UNAUTHORIZED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid control token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if outcome is AssignmentOutcome.ERROR:
        logger.warning("Shard reassignment dispatched but not confirmed")

    return ASSIGN_CONFIRMATION
