"""
Conduit lifecycle and control services.
"""
from .assignment import AssignmentOutcome, ShardAssignmentService
from .bootstrap import BootstrapError, ConduitBootstrapper
from .control_state import ControlState

__all__ = [
    "AssignmentOutcome",
    "BootstrapError",
    "ConduitBootstrapper",
    "ControlState",
    "ShardAssignmentService",
]
