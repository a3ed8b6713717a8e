"""
CosmicContract over a mocked web3 instance: reads, network check, signed
transactions and error translation. No RPC.
"""

from __future__ import annotations

import pytest
from web3.exceptions import ContractLogicError

from cosmic_backend.chain import COSMIC_ABI, CosmicContract, OnChainProfile
from cosmic_backend.core.exceptions import (
    ChainCallError,
    InvalidAddressError,
    SignerNotConfiguredError,
    TransactionFailedError,
    WrongNetworkError,
)

from conftest import ALICE, BOB, SIGNER_ADDRESS, SIGNER_KEY, make_contract


def test_abi_exposes_contract_functions():
    names = {entry["name"] for entry in COSMIC_ABI}
    assert names == {"createProfile", "claimDailyFortune", "matchWithAddress", "getProfile", "hasProfile"}


def test_get_profile_maps_outputs(contract_and_w3):
    contract, w3 = contract_and_w3
    profile = contract.get_profile(ALICE.lower())
    assert profile == OnChainProfile(1, 2, 3, 4, 5, 6, 7)
    assert profile.as_cache_fields() == {
        "cached_element": 1,
        "cached_level": 2,
        "cached_xp": 3,
        "cached_energy": 4,
        "cached_lucky_number": 5,
        "cached_win_streak": 6,
        "cached_last_fortune": 7,
    }
    fns = w3.eth.contract.return_value.functions
    fns.getProfile.assert_called_once_with(CosmicContract.checksum(ALICE))


def test_get_profile_none_without_profile():
    contract, w3 = make_contract(has_profile=False)
    assert contract.get_profile(ALICE) is None
    w3.eth.contract.return_value.functions.getProfile.assert_not_called()


def test_match_with_address_sets_sender(contract_and_w3):
    contract, w3 = contract_and_w3
    assert contract.match_with_address(BOB, sender=ALICE) == 80
    fns = w3.eth.contract.return_value.functions
    fns.matchWithAddress.assert_called_once_with(CosmicContract.checksum(BOB))
    fns.matchWithAddress.return_value.call.assert_called_once_with({"from": CosmicContract.checksum(ALICE)})


def test_invalid_address_rejected(contract):
    with pytest.raises(InvalidAddressError):
        contract.has_profile("0x1234")
    with pytest.raises(InvalidAddressError):
        contract.match_with_address("nope", sender=ALICE)


def test_network_check():
    contract, _ = make_contract(chain_id=1)
    assert contract.is_correct_network() is False
    with pytest.raises(WrongNetworkError) as exc_info:
        contract.ensure_network()
    assert exc_info.value.expected == 8453
    assert exc_info.value.actual == 1

    good, _ = make_contract()
    assert good.is_correct_network() is True
    good.ensure_network()


def test_contract_errors_wrapped(contract_and_w3):
    contract, w3 = contract_and_w3
    w3.eth.contract.return_value.functions.hasProfile.return_value.call.side_effect = ContractLogicError("revert")
    with pytest.raises(ChainCallError) as exc_info:
        contract.has_profile(ALICE)
    assert isinstance(exc_info.value.__cause__, ContractLogicError)


def test_transport_errors_wrapped(contract_and_w3):
    contract, w3 = contract_and_w3
    w3.eth.contract.return_value.functions.hasProfile.return_value.call.side_effect = ConnectionError("down")
    with pytest.raises(ChainCallError):
        contract.has_profile(ALICE)


def test_transactions_need_signer(contract):
    assert contract.signer_address is None
    with pytest.raises(SignerNotConfiguredError):
        contract.create_profile()
    with pytest.raises(SignerNotConfiguredError):
        contract.claim_daily_fortune()


def test_create_profile_signs_and_waits():
    contract, w3 = make_contract(private_key=SIGNER_KEY)
    assert contract.signer_address == SIGNER_ADDRESS
    tx_hash = contract.create_profile()
    assert tx_hash == "0x" + "aa" * 32

    build = w3.eth.contract.return_value.functions.createProfile.return_value.build_transaction
    build.assert_called_once_with({"from": SIGNER_ADDRESS, "value": 0, "nonce": 3, "chainId": 8453})
    w3.eth.send_raw_transaction.assert_called_once_with(b"\x01\x02")
    w3.eth.wait_for_transaction_receipt.assert_called_once_with(b"\xaa" * 32, timeout=120.0)


def test_reverted_transaction_raises():
    contract, w3 = make_contract(private_key=SIGNER_KEY)
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}
    with pytest.raises(TransactionFailedError) as exc_info:
        contract.claim_daily_fortune()
    assert exc_info.value.tx_hash == "0x" + "aa" * 32


def test_profile_value_beyond_int64_is_chain_error():
    contract, _ = make_contract(profile=(0, 1, 2**200, 0, 0, 0, 0))
    with pytest.raises(ChainCallError, match="storable range"):
        contract.get_profile(ALICE)


def test_compatibility_beyond_int64_is_chain_error():
    contract, _ = make_contract(compatibility=2**64)
    with pytest.raises(ChainCallError):
        contract.match_with_address(BOB, sender=ALICE)
