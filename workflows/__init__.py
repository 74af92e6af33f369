from .state import CompositeResult, CompositeState
from .composite import CompositeWorkflow
from .replicate_workflow import ReplicateRunResult, ReplicateWorkflow

__all__ = [
    "CompositeResult",
    "CompositeState",
    "CompositeWorkflow",
    "ReplicateRunResult",
    "ReplicateWorkflow",
]
