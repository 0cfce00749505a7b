from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .api import Address


class PodConfig(BaseModel):
    """
    Point-in-time view of one monitored pod as the registry describes it.

    ``known_slaves`` and ``known_sentinels`` are advisory: entries may be
    stale or unreachable by the time an operation uses them.
    """
    name: str = Field(..., description="Pod name, unique within a registry")
    master_ip: str = Field(..., description="Master host at resolution time")
    master_port: int = Field(..., description="Master port at resolution time", gt=0, lt=65536)
    authpass: str = Field("", description="Password shared by master and replicas")
    quorum: int = Field(0, description="Sentinel quorum for this pod", ge=0)
    known_slaves: List[Address] = Field(default_factory=list, description="Replica addresses")
    known_sentinels: List[Address] = Field(default_factory=list, description="Sentinel addresses")

    @property
    def master_address(self) -> Address:
        return Address(host=self.master_ip, port=self.master_port)

    def addresses(self) -> set[Address]:
        return {self.master_address, *self.known_slaves}


class Policy(Enum):
    ALL = "all"
    FIRST = "first"


@dataclass
class MasterInfo:
    name: str
    ip: Optional[str] = None
    port: Optional[int] = None
    flags: List[str] = field(default_factory=list)


@dataclass
class QuorumResult:
    operation: str
    policy: Policy
    total: int
    successes: int = 0
    attempted: int = 0
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        if self.policy == Policy.FIRST:
            return self.successes > 0
        return self.successes == self.total

    def tally(self) -> str:
        return f"{self.successes} of {self.total} sentinels"


@dataclass
class RotationReport:
    pod: str
    replicas_total: int = 0
    replicas_updated: int = 0
    sentinels_total: int = 0
    sentinels_updated: int = 0
    stale_replicas: List[str] = field(default_factory=list)
    stale_sentinels: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.sentinels_updated == self.sentinels_total

    def summary(self) -> str:
        text = (
            f"{self.replicas_updated} of {self.replicas_total} replicas updated, "
            f"{self.sentinels_updated} of {self.sentinels_total} sentinels updated"
        )
        if not self.complete:
            text += (
                f"; sentinels {', '.join(self.stale_sentinels)} still hold the old password "
                f"and need manual remediation"
            )
        return text
