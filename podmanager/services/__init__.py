from .auth import check_auth
from .operations import (
    FailoverOperation,
    PodOperation,
    RemoveOperation,
    ResetOperation,
    ValidateSentinelsOperation,
    failover,
    remove,
    reset,
    validate_sentinels,
)
from .pod_service import PodManager
from .quorum import QuorumExecutor
from .rotation import rotate_credential
from .topology import find_entangled, walk_topology

__all__ = [
    "check_auth",
    "FailoverOperation",
    "PodOperation",
    "RemoveOperation",
    "ResetOperation",
    "ValidateSentinelsOperation",
    "failover",
    "remove",
    "reset",
    "validate_sentinels",
    "PodManager",
    "QuorumExecutor",
    "rotate_credential",
    "find_entangled",
    "walk_topology",
]
