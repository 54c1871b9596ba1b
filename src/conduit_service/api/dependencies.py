"""FastAPI dependencies for control request handling."""

from fastapi import HTTPException, Request, status

from ..services import ControlState, ShardAssignmentService


def get_control_state(request: Request) -> ControlState:
    """
    Return the ControlState built during startup.

    The lifespan stores it before the server accepts connections, so a missing
    state means the app was served without running its lifespan.
    """
    state = getattr(request.app.state, "control_state", None)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Conduit not bootstrapped",
        )
    return state


def get_assignment_service(request: Request) -> ShardAssignmentService:
    return ShardAssignmentService(get_control_state(request))
