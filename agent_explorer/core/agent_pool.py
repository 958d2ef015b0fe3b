"""
Deterministic synthetic agent pool used as ground truth for filter tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from .constants import POOL_REFERENCE_EPOCH, REPUTATION_BUCKETS, SUPPORTED_CHAINS
from .models import AgentRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProtocolConfig:
    hasMcp: bool
    hasA2a: bool
    x402Support: bool


# Every combination of the three protocol flags
PROTOCOL_CONFIGS: List[ProtocolConfig] = [
    ProtocolConfig(hasMcp=False, hasA2a=False, x402Support=False),
    ProtocolConfig(hasMcp=True, hasA2a=False, x402Support=False),
    ProtocolConfig(hasMcp=False, hasA2a=True, x402Support=False),
    ProtocolConfig(hasMcp=False, hasA2a=False, x402Support=True),
    ProtocolConfig(hasMcp=True, hasA2a=True, x402Support=False),
    ProtocolConfig(hasMcp=True, hasA2a=False, x402Support=True),
    ProtocolConfig(hasMcp=False, hasA2a=True, x402Support=True),
    ProtocolConfig(hasMcp=True, hasA2a=True, x402Support=True),
]

ACTIVE_STATES = (True, False)

PoolKey = Tuple[int, ProtocolConfig, bool, int]


def generate_pool() -> List[AgentRecord]:
    """
    Build the full cross product of chains, protocol configs, active states
    and reputation buckets (3 * 8 * 2 * 6 = 288 agents).

    Output is identical on every call. Agent N is created N hours before the
    reference epoch, so later ids are older.
    """
    agents: List[AgentRecord] = []
    agent_number = 1

    for chain_id in SUPPORTED_CHAINS:
        for proto in PROTOCOL_CONFIGS:
            for active in ACTIVE_STATES:
                for rep_score in REPUTATION_BUCKETS:
                    created_at = POOL_REFERENCE_EPOCH - agent_number * 60 * 60
                    agents.append(AgentRecord(
                        id=f"{chain_id}:{agent_number}",
                        chainId=chain_id,
                        tokenId=str(agent_number),
                        name=f"Test Agent {agent_number}",
                        description=f"Test agent on chain {chain_id} with rep {rep_score}",
                        walletAddress=f"0x{agent_number:040d}",
                        active=active,
                        reputationScore=rep_score,
                        reputationCount=10,
                        hasMcp=proto.hasMcp,
                        hasA2a=proto.hasA2a,
                        x402Support=proto.x402Support,
                        createdAt=created_at,
                        updatedAt=created_at,
                    ))
                    agent_number += 1

    logger.debug(f"Generated synthetic pool of {len(agents)} agents")
    return agents


def protocol_config_of(agent: AgentRecord) -> ProtocolConfig:
    return ProtocolConfig(hasMcp=agent.hasMcp, hasA2a=agent.hasA2a, x402Support=agent.x402Support)


def pool_index(pool: List[AgentRecord]) -> Dict[PoolKey, List[AgentRecord]]:
    """Group agents by (chainId, protocol config, active, reputation bucket)."""
    index: Dict[PoolKey, List[AgentRecord]] = {}
    for agent in pool:
        key = (agent.chainId, protocol_config_of(agent), agent.active, agent.reputationScore)
        index.setdefault(key, []).append(agent)
    return index


def expected_pool_keys() -> List[PoolKey]:
    """Every tuple the pool must contain at least one agent for."""
    return [
        (chain_id, proto, active, rep_score)
        for chain_id in SUPPORTED_CHAINS
        for proto in PROTOCOL_CONFIGS
        for active in ACTIVE_STATES
        for rep_score in REPUTATION_BUCKETS
    ]
