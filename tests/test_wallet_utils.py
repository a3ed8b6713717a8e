"""Wallet key normalization and display helpers."""

from __future__ import annotations

from cosmic_backend.utils.wallet_utils import is_valid_evm_address, normalize_wallet, short_address

from conftest import ALICE


def test_normalize_wallet_case_folds():
    assert normalize_wallet(ALICE) == "0x" + "ab" * 20
    assert normalize_wallet("0xAbC") == normalize_wallet("0xabc")


def test_normalize_wallet_does_not_validate():
    """Malformed input is keyed as given, only lower-cased (no strip, no rejection)."""
    assert normalize_wallet("Not-An-Address ") == "not-an-address "
    assert normalize_wallet("") == ""


def test_is_valid_evm_address():
    assert is_valid_evm_address(ALICE) is True
    assert is_valid_evm_address("0x" + "ab" * 20) is True
    assert is_valid_evm_address("0x1234") is False
    assert is_valid_evm_address("not-an-address") is False


def test_short_address_keeps_casing():
    assert short_address(ALICE) == "0xABAB...ABAB"
