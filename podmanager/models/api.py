from pydantic import BaseModel, Field
from typing import Dict, List, Optional


class Address(BaseModel):
    host: str = Field(..., description="Node host address")
    port: int = Field(..., description="Node port number", gt=0, lt=65536)

    @classmethod
    def parse(cls, value: str) -> "Address":
        host, sep, port = value.rpartition(":")
        if not sep or not host:
            raise ValueError(f"Address '{value}' is not in host:port form")
        return cls(host=host, port=int(port))

    def __hash__(self) -> int:
        return hash((self.host, self.port))

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


class QuorumResponse(BaseModel):
    pod: str = Field(..., description="Pod the operation was issued for")
    operation: str = Field(..., description="Operation name")
    succeeded: bool = Field(..., description="Whether the success policy was satisfied")
    successes: int = Field(..., description="Number of sentinels that succeeded")
    total: int = Field(..., description="Number of sentinels targeted")
    failures: Dict[str, str] = Field(default_factory=dict, description="Diagnostic per failed sentinel")
    message: str = Field(..., description="Human readable tally")


class AuthCheckResponse(BaseModel):
    pod: str = Field(..., description="Pod that was checked")
    valid: bool = Field(..., description="Whether every tested node accepted the credential")
    results: Dict[str, bool] = Field(..., description="Outcome per node, 'master' or replica address")


class TopologyResponse(BaseModel):
    pod: str = Field(..., description="Pod the walk started from")
    isolated: bool = Field(..., description="True when no other pod shares an address with this one")
    depth: Optional[int] = Field(None, description="Expansion depth used, null for full closure")
    entangled: List[str] = Field(default_factory=list, description="Names of entangled pods in discovery order")


class CredentialRotationRequest(BaseModel):
    old_password: str = Field(..., description="Currently configured pod password")
    new_password: str = Field(..., min_length=1, description="Password to roll out")


class CredentialRotationResponse(BaseModel):
    pod: str = Field(..., description="Pod whose credential was rotated")
    complete: bool = Field(..., description="True only if every sentinel holds the new password")
    replicas_updated: int
    replicas_total: int
    sentinels_updated: int
    sentinels_total: int
    stale_replicas: List[str] = Field(default_factory=list, description="Replicas still on the old password")
    stale_sentinels: List[str] = Field(default_factory=list, description="Sentinels still on the old password")
    message: str


class PodSummary(BaseModel):
    name: str
    master: str
    replicas: int
    sentinels: int


class PodsResponse(BaseModel):
    total_pods: int = Field(..., description="Number of pods known to the registry")
    pods: List[PodSummary] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str = Field("ok", description="Health status")
    message: str = Field("Service is healthy", description="Health message")
