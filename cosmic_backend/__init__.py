"""
Cosmic Astrology backend: wallet session cache and activity/match ledgers.

Caches display data for the on-chain astrology contract on Base, keeps a global
activity feed and per-wallet match history, and serves both over a FastAPI app.
The chain stays the source of truth; everything stored here is advisory.
"""

__version__ = "0.1.0"
