"""
ProofIssuer - sequences payment verification, balance lookup and proving.

Issuance runs as an explicit pipeline of stages. Each stage returns a
StageResult holding either its value or a taxonomy error, and the pipeline
stops at the first failure. A failure after the record exists (the prove
stage) is recorded on the record itself, which is persisted as failed.
"""
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from .config import Settings
from .exceptions import (
    InvalidInputError, PaymentNotVerifiedError, ProofOfRichesError, UpstreamUnavailableError
)
from .models import (
    PaymentReceipt, ProofMetadata, ProofRecord, ProofStatus, ProverOutput, StorageProof, TokenDescriptor,
    now_ms
)
from .network import NetworkResolver
from .oracle import BalanceOracle
from .payment import PaymentVerifier
from .prover import ProverClient
from .store import ProofStore
from .utils import is_tx_hash, is_valid_address, parse_amount, random_base36, strip_0x, to_base36

MAX_CODE_ATTEMPTS = 5


@dataclass
class StageResult:
    """Result of one pipeline stage: a value or an error, never both."""
    stage: str
    value: Any = None
    error: Optional[ProofOfRichesError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class IssuanceOutcome:
    """Everything one issuance attempt produced."""
    stages: List[StageResult] = field(default_factory=list)
    record: Optional[ProofRecord] = None
    receipt: Optional[PaymentReceipt] = None

    @property
    def ok(self) -> bool:
        return bool(self.stages) and all(stage.ok for stage in self.stages)

    @property
    def failed_stage(self) -> Optional[str]:
        for stage in self.stages:
            if not stage.ok:
                return stage.stage
        return None

    @property
    def error(self) -> Optional[ProofOfRichesError]:
        for stage in self.stages:
            if not stage.ok:
                return stage.error
        return None


@dataclass
class _IssueRequest:
    wallet: str
    token: TokenDescriptor
    min_amount: int
    tx_hash: str
    metadata: ProofMetadata


@dataclass
class _BalanceSnapshot:
    balance: int
    storage_proof: Optional[StorageProof] = None


def generate_verification_code(timestamp_ms: Optional[int] = None) -> str:
    """
    Build a shareable code: PROOF_<base36 ms timestamp>_<6 random base36 chars>.
    """
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"proof_{to_base36(ts)}_{random_base36(6)}".upper()


class ProofIssuer:
    """
    Orchestrates proof issuance.

    All collaborators are injected; the issuer owns no global state.
    """

    def __init__(
        self,
        settings: Settings,
        resolver: NetworkResolver,
        payment_verifier: PaymentVerifier,
        oracle: BalanceOracle,
        prover: ProverClient,
        store: ProofStore,
        logger: Optional[logging.Logger] = None
    ):
        self.settings = settings
        self.resolver = resolver
        self.payment_verifier = payment_verifier
        self.oracle = oracle
        self.prover = prover
        self.store = store
        self.logger = logger or logging.getLogger(__name__)

    def issue(
        self,
        wallet: str,
        token: Union[str, TokenDescriptor],
        min_amount: Union[str, int],
        payment_tx_ref: str,
        metadata: Optional[ProofMetadata] = None
    ) -> ProofRecord:
        """
        Issue a proof

        Args:
            wallet: Wallet address whose balance is proved
            token: Token contract address or full descriptor
            min_amount: Minimum balance to prove, in raw token units
            payment_tx_ref: Hash of the payment transaction
            metadata: Optional presentation fields

        Returns:
            The completed ProofRecord

        Raises:
            InvalidInputError: If the request is malformed
            PaymentNotVerifiedError: If the payment does not check out
            UpstreamUnavailableError: If the node or prover could not be used
        """
        outcome = self.run(wallet, token, min_amount, payment_tx_ref, metadata)
        if not outcome.ok:
            raise outcome.error
        return outcome.record

    def run(
        self,
        wallet: str,
        token: Union[str, TokenDescriptor],
        min_amount: Union[str, int],
        payment_tx_ref: str,
        metadata: Optional[ProofMetadata] = None
    ) -> IssuanceOutcome:
        """Run the issuance pipeline and report every stage."""
        started = time.monotonic()
        outcome = IssuanceOutcome()
        self.logger.info(f"Starting proof generation for wallet={wallet} token={token} tx={payment_tx_ref}")

        validated = self._stage(outcome, "validate", self._validate,
                                wallet, token, min_amount, payment_tx_ref, metadata)
        if not validated.ok:
            return outcome
        request: _IssueRequest = validated.value

        paid = self._stage(outcome, "verify_payment", self._verify_payment, request)
        if not paid.ok:
            return outcome
        outcome.receipt = paid.value

        snapshot = self._stage(outcome, "fetch_balance", self._fetch_balance, request)
        if not snapshot.ok:
            return outcome

        outcome.record = self._new_record(request, snapshot.value)

        proved = self._stage(outcome, "prove", self._prove, outcome.record, request, snapshot.value)
        if not proved.ok:
            outcome.record.fail(str(proved.error))
            self.store.save(outcome.record)
            return outcome

        finalized = self._stage(outcome, "finalize", self._finalize, outcome.record, proved.value)
        if not finalized.ok:
            outcome.record.fail(str(finalized.error))
            self.store.save(outcome.record)
            return outcome

        duration_ms = int((time.monotonic() - started) * 1000)
        self.logger.info(
            f"Proof generation completed in {duration_ms}ms "
            f"(code={outcome.record.verification_code}, mode={outcome.record.prover_mode.value})"
        )
        return outcome

    def _stage(self, outcome: IssuanceOutcome, name: str, func: Callable[..., Any], *args: Any) -> StageResult:
        try:
            result = StageResult(stage=name, value=func(*args))
        except ProofOfRichesError as e:
            self.logger.warning(f"Stage {name} failed: {e}")
            result = StageResult(stage=name, error=e)
        except Exception as e:
            self.logger.exception(f"Unexpected error in stage {name}")
            result = StageResult(stage=name, error=ProofOfRichesError(f"Proof generation failed: {str(e)}"))
        outcome.stages.append(result)
        return result

    def _validate(self, wallet, token, min_amount, tx_hash, metadata) -> _IssueRequest:
        if not is_valid_address(wallet):
            raise InvalidInputError("Invalid wallet address")

        if isinstance(token, TokenDescriptor):
            descriptor = token
        else:
            if not is_valid_address(token):
                raise InvalidInputError("Invalid token address")
            metadata_symbol = metadata.token_symbol if metadata else None
            descriptor = TokenDescriptor(
                symbol=metadata_symbol or "TOKEN",
                contract_address=token,
                network=self.resolver.resolve().name,
            )
        if not is_valid_address(descriptor.contract_address):
            raise InvalidInputError("Invalid token address")

        amount = parse_amount(min_amount, "minAmount")

        if not is_tx_hash(tx_hash):
            raise InvalidInputError("Invalid transaction hash format")

        return _IssueRequest(
            wallet=wallet,
            token=descriptor,
            min_amount=amount,
            tx_hash=tx_hash,
            metadata=metadata or ProofMetadata(),
        )

    def _verify_payment(self, request: _IssueRequest) -> PaymentReceipt:
        receipt = self.payment_verifier.verify(
            request.tx_hash,
            self.settings.backend_wallet,
            self.settings.proof_cost_wei
        )
        if receipt is None:
            raise PaymentNotVerifiedError("Payment verification failed")
        self.logger.info(f"Payment verified: {request.tx_hash}")
        return receipt

    def _fetch_balance(self, request: _IssueRequest) -> _BalanceSnapshot:
        balance = self.oracle.get_token_balance(request.token.contract_address, request.wallet)
        storage_proof = None
        if request.token.balance_slot is not None:
            storage_proof = self.oracle.prove_balance(
                request.token.contract_address, request.wallet, request.token.balance_slot
            )
        self.logger.info(f"Current balance: {balance}")
        return _BalanceSnapshot(balance=balance, storage_proof=storage_proof)

    def _new_record(self, request: _IssueRequest, snapshot: _BalanceSnapshot) -> ProofRecord:
        created = now_ms()
        return ProofRecord(
            wallet_address=request.wallet,
            token=request.token,
            min_amount_required=request.min_amount,
            balance_as_proved=snapshot.balance,
            payment_tx_hash=request.tx_hash,
            network=self.resolver.resolve().name,
            storage_proof=snapshot.storage_proof,
            claim_text=f"Proof that wallet has ≥ {request.min_amount} {request.token.symbol}",
            metadata=request.metadata,
            created_at=created,
            expires_at=created + self.settings.proof_ttl_seconds * 1000,
        )

    def _prove(self, record: ProofRecord, request: _IssueRequest, snapshot: _BalanceSnapshot) -> ProverOutput:
        record.advance(ProofStatus.GENERATING)
        inputs = {
            "wallet": strip_0x(request.wallet.lower()),
            "balance": str(snapshot.balance),
            "min_amount": str(request.min_amount),
        }
        self.logger.debug(f"Proof inputs prepared: {inputs}")
        try:
            return self.prover.prove(inputs)
        except UpstreamUnavailableError:
            raise
        except ProofOfRichesError as e:
            raise UpstreamUnavailableError(str(e))

    def _finalize(self, record: ProofRecord, output: ProverOutput) -> ProofRecord:
        code = None
        for _ in range(MAX_CODE_ATTEMPTS):
            candidate = generate_verification_code()
            if not self.store.has_verification_code(candidate):
                code = candidate
                break
            self.logger.warning(f"Verification code collision on {candidate}; retrying")
        if code is None:
            raise ProofOfRichesError("Could not allocate a unique verification code")

        record.complete(output.proof, output.public_inputs, code)
        record.prover_mode = output.mode
        self.store.save(record)
        return record
