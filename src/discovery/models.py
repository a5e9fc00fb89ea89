"""
Discovery data structures and models
"""

import time
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, FrozenSet, List, Optional

class DiscoveryStatus(IntEnum):
    """Discovery profile status codes as reported by Orion"""
    UNKNOWN = 0
    IN_PROGRESS = 1
    FINISHED = 2
    ERROR = 3
    NOT_SCHEDULED = 4
    SCHEDULED = 5
    NOT_COMPLETED = 6
    CANCELING = 7
    READY_FOR_IMPORT = 8

    @property
    def is_terminal(self) -> bool:
        return self is not DiscoveryStatus.IN_PROGRESS

    @classmethod
    def from_code(cls, code: Any) -> "DiscoveryStatus":
        try:
            return cls(int(code))
        except (TypeError, ValueError):
            return cls.UNKNOWN

class EntityType(Enum):
    NODE = "Node"
    OTHER = "Other"

class CredentialNotFoundError(LookupError):
    """Named credential set does not exist on the server"""

class DiscoveryTimeoutError(TimeoutError):
    """Caller-supplied poll timeout elapsed while the job was still running"""

class DiscoveryCancelledError(Exception):
    """Caller asked to stop waiting; the remote job is left running"""

@dataclass
class DiscoveryJob:
    """A submitted discovery job; ``id`` is the profile id returned by StartDiscovery"""
    id: str
    target_addresses: FrozenSet[str]
    credential_ref: int
    name: str = ""
    status: DiscoveryStatus = DiscoveryStatus.UNKNOWN
    submitted_at: float = field(default_factory=time.time)

@dataclass
class DiscoveryLog:
    """Terminal result row; outlives the profile when it self-deletes"""
    result: DiscoveryStatus
    description: str
    error_message: str
    batch_id: Optional[str]

@dataclass
class DiscoveredEntity:
    """One object listed in a discovery batch"""
    type: EntityType
    display_name: str
    external_ref: str

    @property
    def node_id(self) -> Optional[int]:
        """Numeric node id from a ``N:<id>`` net object reference"""
        prefix, _, value = self.external_ref.partition(":")
        if prefix != "N" or not value.isdigit():
            return None
        return int(value)

@dataclass
class ManagedInterface:
    display_name: str
    ref: str

@dataclass
class NodeReport:
    name: str
    node_id: int
    address: str
    uri: str
    interfaces: List[ManagedInterface] = field(default_factory=list)

@dataclass
class DiscoveryReport:
    """Final outcome of a discovery run

    Non-finished jobs come back with no nodes; per-node and per-interface
    failures are listed in ``errors`` instead of being raised.
    """
    job_id: str
    status: DiscoveryStatus
    description: str = ""
    error_message: str = ""
    nodes: List[NodeReport] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status is DiscoveryStatus.FINISHED

@dataclass
class DiscoveryProgress:
    """Emitted on every poll tick"""
    job_id: str
    status: DiscoveryStatus
    elapsed_seconds: float
    polls: int
