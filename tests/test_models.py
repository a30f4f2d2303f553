"""
Tests for the data models and the record lifecycle.
"""
import pytest

from conftest import TOKEN, WALLET

from proof_of_riches.models import (
    NetworkName,
    ProofMetadata,
    ProofRecord,
    ProofStatus,
    StorageProof,
    TokenDescriptor,
    VerificationResult,
)


@pytest.fixture
def record():
    return ProofRecord(
        wallet_address="0x" + WALLET[2:].upper(),
        token=TokenDescriptor(contract_address=TOKEN),
        min_amount_required=50,
        network=NetworkName.SEPOLIA,
        created_at=1_000,
        expires_at=2_000,
    )


def test_wallet_is_normalized(record):
    assert record.wallet_address == WALLET.lower()
    assert record.status == ProofStatus.PENDING


def test_expiry_must_follow_creation():
    with pytest.raises(ValueError):
        ProofRecord(
            wallet_address=WALLET,
            token=TokenDescriptor(contract_address=TOKEN),
            min_amount_required=1,
            network=NetworkName.SEPOLIA,
            created_at=1_000,
            expires_at=1_000,
        )


def test_share_ids_are_unique(record):
    other = record.model_copy(update={"id": "x", "share_id": "y"})
    fresh = ProofRecord(
        wallet_address=WALLET,
        token=TokenDescriptor(contract_address=TOKEN),
        min_amount_required=1,
        network=NetworkName.SEPOLIA,
        expires_at=10 ** 15,
    )
    assert fresh.share_id != record.share_id != other.share_id
    assert fresh.id != fresh.share_id


def test_lifecycle(record):
    record.advance(ProofStatus.GENERATING)
    record.complete("0xaabbccddee", "0x1122334455", "PROOF_A_BCDEFG")

    assert record.status == ProofStatus.COMPLETED
    assert record.verification_code == "PROOF_A_BCDEFG"


def test_terminal_states_do_not_move(record):
    record.fail("prover down")

    assert record.status == ProofStatus.FAILED
    assert record.error == "prover down"
    with pytest.raises(ValueError):
        record.advance(ProofStatus.GENERATING)
    with pytest.raises(ValueError):
        record.complete("0xaabbccddee", "0x1122334455")


def test_no_regression(record):
    record.advance(ProofStatus.GENERATING)
    with pytest.raises(ValueError):
        record.advance(ProofStatus.PENDING)


def test_completion_requires_artifacts(record):
    with pytest.raises(ValueError):
        record.complete("", "0x1122334455")
    assert record.status == ProofStatus.PENDING


def test_is_expired(record):
    assert not record.is_expired(1_999)
    assert record.is_expired(2_000)


def test_storage_proof_encoding():
    proof = StorageProof(
        contract_address=TOKEN,
        storage_slot_hash="0x" + "01" * 32,
        raw_value_wei=5,
        merkle_path=["0xaabb", "0xccdd"],
        block_number=16,
    )

    assert proof.artifact_hex() == "0xaabbccdd"
    inputs = proof.public_inputs_hex()
    assert len(inputs) == 2 + 3 * 64
    assert inputs.endswith("0" * 63 + "5" + "0" * 62 + "10")


def test_metadata_response_uses_wire_names():
    metadata = ProofMetadata(social_handle="@rich", token_symbol="USDT")
    assert metadata.to_response() == {"socialHandle": "@rich", "tokenSymbol": "USDT"}


def test_verification_result_response():
    result = VerificationResult(
        is_valid=True,
        message="Proof is valid",
        wallet=WALLET,
        token=TOKEN,
        metadata=ProofMetadata(display_amount="1,000"),
    )
    assert result.to_response() == {
        "isValid": True,
        "message": "Proof is valid",
        "wallet": WALLET,
        "token": TOKEN,
        "displayAmount": "1,000",
    }
