"""
Core data models for the agent explorer filter core.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .constants import SCORE_MAX, SCORE_MIN


# Type aliases
AgentId = str  # "chainId:tokenId" (e.g., "84532:12")
ChainId = int
Address = str  # 0x-hex
Timestamp = int  # unix seconds


class Protocol(Enum):
    """Protocols an agent can advertise support for."""
    MCP = "mcp"
    A2A = "a2a"
    X402 = "x402"


class FilterMode(Enum):
    """How selected protocol filters combine."""
    AND = "AND"
    OR = "OR"


class SortField(Enum):
    """Fields the result list can be sorted by."""
    RELEVANCE = "relevance"
    NAME = "name"
    REPUTATION = "reputation"
    CREATED_AT = "createdAt"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


class Transport(Enum):
    """Which search endpoint a request goes to."""
    GET = "GET"
    POST = "POST"


class CaseCategory(Enum):
    SINGLE_FILTER = "single-filter"
    COMBINATION = "combination"
    EDGE_CASE = "edge-case"
    SORTING = "sorting"


STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
VALID_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)
VALID_PROTOCOLS = tuple(p.value for p in Protocol)


def _check_range(name: str, low: int, high: int) -> None:
    if low < SCORE_MIN or high > SCORE_MAX:
        raise ValueError(f"{name} range must be within {SCORE_MIN}-{SCORE_MAX}, got {low}-{high}")
    if low > high:
        raise ValueError(f"{name} minimum {low} is greater than maximum {high}")


@dataclass
class FilterState:
    """Filter selections as held by the explore UI."""
    status: List[str] = field(default_factory=list)  # "active" / "inactive"
    protocols: List[str] = field(default_factory=list)  # "mcp" / "a2a" / "x402"
    chains: List[ChainId] = field(default_factory=list)
    filterMode: FilterMode = FilterMode.AND
    minReputation: int = SCORE_MIN
    maxReputation: int = SCORE_MAX
    skills: List[str] = field(default_factory=list)  # OASF skill slugs
    domains: List[str] = field(default_factory=list)  # OASF domain slugs
    showAllAgents: bool = False
    minTrustScore: int = SCORE_MIN
    maxTrustScore: int = SCORE_MAX
    erc8004Version: str = ""
    mcpVersion: str = ""
    a2aVersion: str = ""
    isCurated: bool = False
    curatedBy: str = ""
    hasEmail: bool = False
    hasOasfEndpoint: bool = False
    hasRecentReachability: bool = False

    def __post_init__(self):
        if isinstance(self.filterMode, str):
            self.filterMode = FilterMode(self.filterMode)
        for status in self.status:
            if status not in VALID_STATUSES:
                raise ValueError(f"Unknown status filter: {status}")
        for protocol in self.protocols:
            if protocol not in VALID_PROTOCOLS:
                raise ValueError(f"Unknown protocol filter: {protocol}")
        _check_range("Reputation", self.minReputation, self.maxReputation)
        _check_range("Trust score", self.minTrustScore, self.maxTrustScore)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        data = dict(self.__dict__)
        data["filterMode"] = self.filterMode.value
        for key in ("status", "protocols", "chains", "skills", "domains"):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> FilterState:
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass
class SearchParams:
    """Wire-level search parameters. Unset fields are never sent."""
    q: Optional[str] = None
    active: Optional[bool] = None
    hasRegistrationFile: Optional[bool] = None
    mcp: Optional[bool] = None
    a2a: Optional[bool] = None
    x402: Optional[bool] = None
    chains: Optional[List[ChainId]] = None
    skills: Optional[List[str]] = None
    domains: Optional[List[str]] = None
    minRep: Optional[int] = None
    maxRep: Optional[int] = None
    minTrust: Optional[int] = None
    maxTrust: Optional[int] = None
    isCurated: Optional[bool] = None
    curatedBy: Optional[Address] = None
    erc8004Version: Optional[str] = None
    mcpVersion: Optional[str] = None
    a2aVersion: Optional[str] = None
    hasEmail: Optional[bool] = None
    hasOasfEndpoint: Optional[bool] = None
    hasRecentReachability: Optional[bool] = None
    filterMode: Optional[str] = None  # only ever "OR"; AND is implicit
    sort: Optional[str] = None
    order: Optional[str] = None
    limit: Optional[int] = None
    cursor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, filtering out None values."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass
class ParsedFilters:
    """Filters decoded from a GET query string or POST body."""
    query: Optional[str] = None
    mcp: Optional[bool] = None
    a2a: Optional[bool] = None
    x402: Optional[bool] = None
    active: Optional[bool] = None
    chainIds: Optional[List[ChainId]] = None
    minRep: Optional[int] = None
    maxRep: Optional[int] = None
    skills: Optional[List[str]] = None
    domains: Optional[List[str]] = None
    filterMode: Optional[str] = None
    sort: Optional[str] = None
    order: Optional[str] = None
    limit: Optional[int] = None
    cursor: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, filtering out None values."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


@dataclass(frozen=True)
class AgentRecord:
    """Agent entry as returned by the list and search endpoints."""
    id: AgentId
    chainId: ChainId
    tokenId: str
    name: str
    description: str
    walletAddress: Address
    active: bool
    reputationScore: int
    reputationCount: int
    hasMcp: bool
    hasA2a: bool
    x402Support: bool
    createdAt: Timestamp
    updatedAt: Timestamp
    relevanceScore: Optional[int] = None
    matchReasons: Tuple[str, ...] = ()

    def supports(self, protocol: str) -> bool:
        """Whether the agent advertises the given protocol."""
        if protocol == Protocol.MCP.value:
            return self.hasMcp
        if protocol == Protocol.A2A.value:
            return self.hasA2a
        if protocol == Protocol.X402.value:
            return self.x402Support
        raise ValueError(f"Unknown protocol: {protocol}")

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.__dict__)
        data["matchReasons"] = list(self.matchReasons)
        if self.relevanceScore is None:
            del data["relevanceScore"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AgentRecord:
        """Create from dictionary."""
        return cls(
            id=data["id"],
            chainId=int(data["chainId"]),
            tokenId=str(data.get("tokenId", data["id"].split(":")[-1])),
            name=data.get("name", ""),
            description=data.get("description", ""),
            walletAddress=data.get("walletAddress", ""),
            active=bool(data.get("active", False)),
            reputationScore=int(data.get("reputationScore", 0)),
            reputationCount=int(data.get("reputationCount", 0)),
            hasMcp=bool(data.get("hasMcp", False)),
            hasA2a=bool(data.get("hasA2a", False)),
            x402Support=bool(data.get("x402Support", False)),
            createdAt=int(data.get("createdAt", 0)),
            updatedAt=int(data.get("updatedAt", 0)),
            relevanceScore=data.get("relevanceScore"),
            matchReasons=tuple(data.get("matchReasons", ())),
        )


@dataclass
class FilterTestCase:
    """One concrete filter combination to run against the search stack."""
    id: str
    name: str
    query: str
    filters: FilterState
    sortBy: SortField = SortField.RELEVANCE
    sortOrder: SortOrder = SortOrder.DESC
    expectedTransport: Transport = Transport.GET
    category: CaseCategory = CaseCategory.SINGLE_FILTER


@dataclass
class AgentValidationResult:
    """Constraint violations found for a single agent."""
    valid: bool
    agent: AgentRecord
    violations: List[str] = field(default_factory=list)


@dataclass
class ValidationResult:
    """Validation summary for a whole result set."""
    valid: bool
    totalAgents: int
    validAgents: int
    violations: List[AgentValidationResult] = field(default_factory=list)


@dataclass
class ImportResult:
    imported: int = 0
    errors: int = 0


