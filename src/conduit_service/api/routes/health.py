from fastapi import APIRouter, Depends

from ...models import HealthResponse
from ...services import ControlState
from ..dependencies import get_control_state

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(state: ControlState = Depends(get_control_state)) -> HealthResponse:
    """
    Health check endpoint.

    Returns the bootstrapped conduit and the outcome of subscription setup.
    """
    return HealthResponse(
        status="healthy" if not state.report.failed else "degraded",
        provider=state.provider.name,
        conduit_id=state.conduit.id,
        shard_count=state.conduit.shard_count,
        default_shard_id=state.default_shard_id,
        subscriptions=state.report,
    )
