"""
Sentinel-G - Consensus Module
Verification policy and the consensus engine.
"""

from sentinelg.consensus.policy import ConsensusPolicy, DeterministicReasoner
from sentinelg.consensus.engine import (
    ConsensusEngine,
    Reasoner,
    auto_verify_check,
    describe_vision,
)

__all__ = [
    "ConsensusPolicy",
    "DeterministicReasoner",
    "ConsensusEngine",
    "Reasoner",
    "auto_verify_check",
    "describe_vision",
]
