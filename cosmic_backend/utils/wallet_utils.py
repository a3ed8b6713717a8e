"""Wallet address helpers: storage key normalization and display formatting."""

from web3 import Web3


def normalize_wallet(address: str) -> str:
    """
    Return the storage/lookup key for a wallet address (case-folded).

    No validation: a malformed address is keyed as given, lower-cased.
    """
    return address.lower()


def is_valid_evm_address(address: str) -> bool:
    """Return True if address is a 20-byte hex EVM address (any case, checksum-valid if mixed)."""
    try:
        return bool(Web3.is_address(address.strip()))
    except (TypeError, ValueError):
        return False


def short_address(address: str) -> str:
    """0x1234...abcd form used in activity details; keeps the caller's casing."""
    return f"{address[:6]}...{address[-4:]}"
