"""
Tests for ProofIssuer.
"""
import re
from unittest.mock import MagicMock, patch

import pytest

from conftest import PROOF_COST_WEI, TOKEN, TX_HASH, WALLET

from proof_of_riches.exceptions import (
    ConfigurationError,
    InvalidInputError,
    PaymentNotVerifiedError,
    ProofOfRichesError,
    ProverError,
    ProverTimeoutError,
    UpstreamUnavailableError,
)
from proof_of_riches.issuer import MAX_CODE_ATTEMPTS, ProofIssuer, generate_verification_code
from proof_of_riches.models import (
    NetworkName, ProofKind, ProofMetadata, ProofStatus, ProverMode, TokenDescriptor
)
from proof_of_riches.oracle import BalanceOracle
from proof_of_riches.payment import PaymentVerifier
from proof_of_riches.prover import MOCK_PROOF, MOCK_PUBLIC_INPUTS

CODE_RE = re.compile(r"^PROOF_[0-9A-Z]+_[0-9A-Z]{6}$")


@pytest.fixture
def paid(record_payment, set_token_balance):
    """A wallet holding 100 tokens that has paid for its proof"""
    record_payment()
    set_token_balance(100)


def test_verification_code_format():
    code = generate_verification_code(timestamp_ms=1700000000000)

    assert CODE_RE.match(code)
    assert code.startswith("PROOF_LOYW3V28_")


def test_issue_happy_path(issuer, store, paid, settings):
    record = issuer.issue(WALLET, TOKEN, "50", TX_HASH)

    assert record.status == ProofStatus.COMPLETED
    assert record.proof_artifact == MOCK_PROOF
    assert record.public_inputs == MOCK_PUBLIC_INPUTS
    assert record.prover_mode == ProverMode.MOCK
    assert record.kind == ProofKind.ZK
    assert record.balance_as_proved == 100
    assert record.min_amount_required == 50
    assert record.payment_tx_hash == TX_HASH
    assert record.network == NetworkName.SEPOLIA
    assert record.claim_text == "Proof that wallet has ≥ 50 TOKEN"
    assert CODE_RE.match(record.verification_code)
    assert record.expires_at == record.created_at + settings.proof_ttl_seconds * 1000

    assert store.get_by_share_id(record.share_id) == record


def test_prover_receives_normalized_inputs(settings, resolver, store, paid):
    prover = MagicMock()
    prover.prove.return_value = MagicMock(proof="0xaa", public_inputs="0xbb", mode=ProverMode.LIVE)
    issuer = ProofIssuer(settings, resolver, PaymentVerifier(resolver), BalanceOracle(resolver), prover, store)

    issuer.issue("0x" + WALLET[2:].upper(), TOKEN, 50, TX_HASH)

    prover.prove.assert_called_once_with({
        "wallet": WALLET[2:].lower(),
        "balance": "100",
        "min_amount": "50",
    })


def test_metadata_symbol_is_used(issuer, paid):
    record = issuer.issue(WALLET, TOKEN, "50", TX_HASH, ProofMetadata(token_symbol="USDC"))

    assert record.token.symbol == "USDC"
    assert record.claim_text == "Proof that wallet has ≥ 50 USDC"
    assert record.metadata.token_symbol == "USDC"


def test_storage_proof_attached_when_slot_known(issuer, paid, set_usdt_balance):
    set_usdt_balance(100)
    token = TokenDescriptor(symbol="TKN", contract_address=TOKEN, decimals=0, balance_slot=2)

    record = issuer.issue(WALLET, token, "50", TX_HASH)

    assert record.storage_proof is not None
    assert record.storage_proof.raw_value_wei == 100


@pytest.mark.parametrize("wallet, token, amount, tx, message", [
    ("0x1234", TOKEN, "50", TX_HASH, "Invalid wallet address"),
    (WALLET, "not-a-token", "50", TX_HASH, "Invalid token address"),
    (WALLET, TOKEN, "-5", TX_HASH, "Invalid minAmount format"),
    (WALLET, TOKEN, "1.5", TX_HASH, "Invalid minAmount format"),
    (WALLET, TOKEN, "50", "0x1234", "Invalid transaction hash format"),
    (WALLET, TOKEN, "50", "ab" * 32, "Invalid transaction hash format"),
])
def test_invalid_input(issuer, store, wallet, token, amount, tx, message):
    with pytest.raises(InvalidInputError) as excinfo:
        issuer.issue(wallet, token, amount, tx)

    assert str(excinfo.value) == message
    assert len(store) == 0


def test_unknown_payment(issuer, store, set_token_balance):
    set_token_balance(100)

    with pytest.raises(PaymentNotVerifiedError):
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)
    assert len(store) == 0


def test_underpaid(issuer, record_payment, set_token_balance):
    record_payment(value=PROOF_COST_WEI - 1)
    set_token_balance(100)

    with pytest.raises(PaymentNotVerifiedError):
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)


def test_node_down_during_payment_check(issuer, mock_w3):
    mock_w3.eth.get_transaction.side_effect = ConnectionError("connection refused")

    with pytest.raises(UpstreamUnavailableError):
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)


def test_unconfigured_backend_wallet(settings, resolver, store, mock_prover, paid):
    settings.backend_wallet = ""
    issuer = ProofIssuer(settings, resolver, PaymentVerifier(resolver), BalanceOracle(resolver), mock_prover, store)

    with pytest.raises(ConfigurationError):
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)


def test_prover_failure_persists_failed_record(settings, resolver, store, paid):
    prover = MagicMock()
    prover.prove.side_effect = ProverTimeoutError("Prover did not respond within 120s")
    issuer = ProofIssuer(settings, resolver, PaymentVerifier(resolver), BalanceOracle(resolver), prover, store)

    outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)

    assert not outcome.ok
    assert outcome.failed_stage == "prove"
    assert isinstance(outcome.error, UpstreamUnavailableError)
    assert outcome.receipt is not None

    stored = store.get_by_share_id(outcome.record.share_id)
    assert stored.status == ProofStatus.FAILED
    assert "120s" in stored.error
    assert stored.verification_code is None


def test_non_upstream_prover_error_is_wrapped(settings, resolver, store, paid):
    prover = MagicMock()
    prover.prove.side_effect = ProofOfRichesError("bad circuit input")
    issuer = ProofIssuer(settings, resolver, PaymentVerifier(resolver), BalanceOracle(resolver), prover, store)

    with pytest.raises(UpstreamUnavailableError) as excinfo:
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)

    assert "bad circuit input" in str(excinfo.value)


def test_prover_error_is_raised_from_issue(settings, resolver, store, paid):
    prover = MagicMock()
    prover.prove.side_effect = ProverError("Prover API error: 500 - Internal Server Error", status_code=500)
    issuer = ProofIssuer(settings, resolver, PaymentVerifier(resolver), BalanceOracle(resolver), prover, store)

    with pytest.raises(ProverError) as excinfo:
        issuer.issue(WALLET, TOKEN, "50", TX_HASH)

    assert excinfo.value.status_code == 500


def test_run_reports_every_stage(issuer, paid):
    outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)

    assert outcome.ok
    assert [stage.stage for stage in outcome.stages] == [
        "validate", "verify_payment", "fetch_balance", "prove", "finalize"
    ]
    assert outcome.failed_stage is None
    assert outcome.error is None


def test_pipeline_stops_at_first_failure(issuer, mock_w3):
    outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)

    assert outcome.failed_stage == "verify_payment"
    assert [stage.stage for stage in outcome.stages] == ["validate", "verify_payment"]
    assert outcome.record is None
    mock_w3.eth.contract.assert_not_called()


def test_unexpected_error_is_wrapped(issuer, paid):
    with patch.object(issuer, "_verify_payment", return_value=MagicMock()), \
            patch.object(issuer.oracle, "get_token_balance", side_effect=KeyError("boom")):
        outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)

    assert outcome.failed_stage == "fetch_balance"
    assert type(outcome.error) is ProofOfRichesError
    assert "Proof generation failed" in str(outcome.error)


def test_verification_code_collision_is_retried(issuer, store, paid):
    codes = iter(["PROOF_TAKEN_AAAAAA", "PROOF_FRESH_BBBBBB"])
    with patch.object(store, "has_verification_code", side_effect=lambda code: code == "PROOF_TAKEN_AAAAAA"), \
            patch("proof_of_riches.issuer.generate_verification_code", side_effect=lambda: next(codes)):
        record = issuer.issue(WALLET, TOKEN, "50", TX_HASH)

    assert record.verification_code == "PROOF_FRESH_BBBBBB"


def test_verification_code_exhaustion(issuer, store, paid):
    with patch.object(store, "has_verification_code", return_value=True):
        outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)
        assert store.has_verification_code.call_count == MAX_CODE_ATTEMPTS

    assert outcome.failed_stage == "finalize"


def test_finalize_failure_persists_failed_record(issuer, store, paid):
    with patch.object(store, "has_verification_code", return_value=True):
        outcome = issuer.run(WALLET, TOKEN, "50", TX_HASH)

    assert outcome.record.status == ProofStatus.FAILED
    assert "unique verification code" in outcome.record.error
    stored = store.get_by_share_id(outcome.record.share_id)
    assert stored is not None
    assert stored.status == ProofStatus.FAILED
    assert stored.payment_tx_hash == TX_HASH
    assert stored.verification_code is None


def test_same_wallet_may_issue_repeatedly(issuer, store, paid):
    first = issuer.issue(WALLET, TOKEN, "50", TX_HASH)
    second = issuer.issue(WALLET, TOKEN, "50", TX_HASH)

    assert first.share_id != second.share_id
    assert len(store.get_by_wallet(WALLET)) == 2
