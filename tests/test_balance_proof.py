"""
Tests for the direct USDT storage-proof flow.
"""
import pytest

from conftest import BLOCK_NUMBER, PROOF_NODES, WALLET

from proof_of_riches.balance_proof import USDT_BALANCE_SLOT, USDT_DECIMALS, USDT_MAINNET, BalanceProofService
from proof_of_riches.exceptions import InsufficientBalanceError, InvalidInputError, UpstreamUnavailableError
from proof_of_riches.models import NetworkName, ProofKind, ProofStatus
from proof_of_riches.oracle import BalanceOracle, derive_slot

USDT = 10 ** USDT_DECIMALS


def test_usdt_descriptor():
    assert USDT_MAINNET.contract_address == "0xdAC17F958D2ee523a2206206994597C13D831ec7"
    assert USDT_MAINNET.balance_slot == USDT_BALANCE_SLOT == 2
    assert USDT_MAINNET.decimals == 6
    assert USDT_MAINNET.network == NetworkName.MAINNET


def test_generate(balance_service, store, set_usdt_balance, mock_w3):
    set_usdt_balance(1500 * USDT)

    record = balance_service.generate(WALLET, 1000)

    assert record.status == ProofStatus.COMPLETED
    assert record.kind == ProofKind.STORAGE
    assert record.balance_as_proved == 1500
    assert record.min_amount_required == 1000
    assert record.claim_text == "Proof that wallet has ≥ 1000 USDT"
    assert record.verification_code is None
    assert record.payment_tx_hash is None
    assert record.storage_proof.block_number == BLOCK_NUMBER
    assert record.storage_proof.storage_slot_hash == derive_slot(WALLET, 2)
    assert record.proof_artifact == "0x" + "".join(node[2:] for node in PROOF_NODES)
    assert store.get_by_share_id(record.share_id) == record

    contract, slots, block = mock_w3.eth.get_proof.call_args[0]
    assert contract == USDT_MAINNET.contract_address
    assert block == BLOCK_NUMBER


def test_balance_is_floored(balance_service, set_usdt_balance):
    set_usdt_balance(1000 * USDT + USDT - 1)

    record = balance_service.generate(WALLET, 1000)

    assert record.balance_as_proved == 1000
    assert balance_service.success_message(record) == "Successfully proved balance of 1000 USDT"


def test_insufficient_balance_is_not_stored(balance_service, store, set_usdt_balance):
    set_usdt_balance(999 * USDT)

    with pytest.raises(InsufficientBalanceError) as excinfo:
        balance_service.generate(WALLET, 1000)

    assert str(excinfo.value) == "Insufficient balance. Have 999 USDT, need 1000 USDT"
    assert excinfo.value.balance == 999
    assert excinfo.value.required == 1000
    assert len(store) == 0


def test_empty_slot_is_zero_balance(balance_service):
    with pytest.raises(InsufficientBalanceError) as excinfo:
        balance_service.generate(WALLET, 1)

    assert "Have 0 USDT" in str(excinfo.value)


@pytest.mark.parametrize("minimum", [0, -1, 1.5, "1000", True, None])
def test_minimum_must_be_positive_integer(balance_service, minimum):
    with pytest.raises(InvalidInputError) as excinfo:
        balance_service.generate(WALLET, minimum)

    assert str(excinfo.value) == "Minimum balance must be a positive integer"


def test_invalid_wallet(balance_service, mock_w3):
    with pytest.raises(InvalidInputError) as excinfo:
        balance_service.generate("0xnope", 10)

    assert str(excinfo.value) == "Invalid wallet address"
    mock_w3.eth.get_proof.assert_not_called()


def test_node_failure(balance_service, mock_w3):
    mock_w3.eth.get_proof.side_effect = ConnectionError("connection reset")

    with pytest.raises(UpstreamUnavailableError):
        balance_service.generate(WALLET, 10)


def test_empty_merkle_path_is_not_persisted(balance_service, store, chain, set_usdt_balance):
    set_usdt_balance(1500 * USDT)
    chain["proof_nodes"] = []

    with pytest.raises(UpstreamUnavailableError):
        balance_service.generate(WALLET, 1000)

    assert len(store) == 0


def test_uses_balance_proof_endpoint(settings, resolver, store, web3_factory, set_usdt_balance):
    set_usdt_balance(10 * USDT)
    service = BalanceProofService(settings, BalanceOracle(resolver, rpc_url="https://eth.example.com"), store)
    service.generate(WALLET, 5)

    web3_factory.assert_called_once_with("https://eth.example.com")
