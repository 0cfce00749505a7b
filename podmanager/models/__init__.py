from .api import (
    Address,
    QuorumResponse,
    AuthCheckResponse,
    TopologyResponse,
    CredentialRotationRequest,
    CredentialRotationResponse,
    PodSummary,
    PodsResponse,
    HealthResponse,
)
from .config import Settings
from .domain import PodConfig, Policy, MasterInfo, QuorumResult, RotationReport

__all__ = [
    "Address",
    "QuorumResponse",
    "AuthCheckResponse",
    "TopologyResponse",
    "CredentialRotationRequest",
    "CredentialRotationResponse",
    "PodSummary",
    "PodsResponse",
    "HealthResponse",
    "Settings",
    "PodConfig",
    "Policy",
    "MasterInfo",
    "QuorumResult",
    "RotationReport",
]
