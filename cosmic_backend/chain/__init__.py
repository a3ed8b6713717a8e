"""
On-chain collaborator: the astrology contract on Base.

Read calls (hasProfile, getProfile, matchWithAddress) and signed transactions
(createProfile, claimDailyFortune) through web3. The chain is authoritative;
the database only caches what is read here.
"""

from cosmic_backend.chain.contract import (
    COSMIC_ABI,
    CosmicContract,
    OnChainProfile,
    connect_contract,
)

__all__ = ["COSMIC_ABI", "CosmicContract", "OnChainProfile", "connect_contract"]
