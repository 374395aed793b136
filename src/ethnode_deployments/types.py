"""Data types and dataclasses for ethnode-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class CompiledContract:
    """Deployable output of compiling one contract."""

    name: str
    bytecode: bytes
    abi: List[Dict[str, Any]]


@dataclass(frozen=True)
class DeploymentRequest:
    """Intent to have a compiled contract deployed."""

    contract: CompiledContract
    constructor_args: Sequence[Any] = field(default_factory=tuple)
    known_address: Optional[str] = None  # From a prior deployment
    known_tx_hash: Optional[str] = None


@dataclass(frozen=True)
class DeploymentHandle:
    """A deployed (or re-attached) contract instance."""

    address: str
    abi: List[Dict[str, Any]]
    transaction_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "abi": self.abi,
            "transaction_hash": self.transaction_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentHandle":
        return cls(
            address=data["address"],
            abi=data.get("abi", []),
            transaction_hash=data["transaction_hash"],
        )


class SubmissionStage(Enum):
    """Milestones reported while a deployment transaction settles."""

    TRANSACTION_HASH = "transaction_hash"
    CONTRACT_ADDRESS = "contract_address"


@dataclass(frozen=True)
class SubmissionEvent:
    """One milestone of a submitted deployment."""

    stage: SubmissionStage
    value: str
