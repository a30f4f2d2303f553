"""
Pytest fixtures for the Proof of Riches tests.
"""
import pytest
from unittest.mock import MagicMock
from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.providers.rpc import HTTPProvider
from fastapi.testclient import TestClient

from proof_of_riches._rate_limited_log import reset_rate_limited_log
from proof_of_riches.api.app import create_app
from proof_of_riches.balance_proof import BalanceProofService
from proof_of_riches.config import Settings
from proof_of_riches.issuer import ProofIssuer
from proof_of_riches.network import NetworkResolver
from proof_of_riches.oracle import BalanceOracle, derive_slot
from proof_of_riches.payment import PaymentVerifier
from proof_of_riches.prover import MockProver
from proof_of_riches.store import ProofStore

# Test constants
BACKEND_WALLET = "0x1111111111111111111111111111111111111111"
WALLET = "0x2222222222222222222222222222222222222222"
TOKEN = "0x3333333333333333333333333333333333333333"
OTHER_ADDRESS = "0x4444444444444444444444444444444444444444"
TX_HASH = "0x" + "ab" * 32
PROOF_COST_WEI = 1000000000000000
BLOCK_NUMBER = 19000000
PROOF_NODES = ["0x" + "f8" * 40, "0x" + "e2" * 20]

_ENV_VARS = ("ETH_RPC_SEPOLIA", "ETH_RPC_MAINNET", "ETHEREUM_RPC_URL", "PROOF_ENV", "SP1_API_KEY",
             "SP1_PROVER_URL", "MOCK_SP1", "BACKEND_WALLET", "PROOF_COST_WEI", "PROOF_TTL_SECONDS",
             "RPC_TIMEOUT_SECONDS", "API_HOST", "API_PORT", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    Works for all tests because it is autouse.
    """
    def _dummy(self, method, params=None, _=None):      # signature match
        if method in {"eth_chainId"}:
            return {"jsonrpc": "2.0", "id": 1, "result": "0xaa36a7"}    # sepolia
        if method in {"eth_blockNumber"}:
            return {"jsonrpc": "2.0", "id": 1, "result": hex(BLOCK_NUMBER)}
        # everything else – return something harmless
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's environment out of configuration lookups."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_rate_limited_log()


@pytest.fixture
def chain():
    """
    In-memory chain state behind the mock Web3 handle.

    transactions / receipts: keyed by tx hash
    balances: keyed by (token, wallet), lowercase, raw units
    storage: keyed by integer slot, raw values
    """
    return {
        "transactions": {},
        "receipts": {},
        "balances": {},
        "storage": {},
        "proof_nodes": list(PROOF_NODES),
    }


@pytest.fixture
def mock_w3(chain):
    """Create a mock Web3 instance answering from the chain fixture"""
    eth = MagicMock()
    eth.block_number = BLOCK_NUMBER

    def get_transaction(tx_hash):
        if tx_hash not in chain["transactions"]:
            raise TransactionNotFound(f"Transaction with hash: '{tx_hash}' not found.")
        return chain["transactions"][tx_hash]

    def get_transaction_receipt(tx_hash):
        if tx_hash not in chain["receipts"]:
            raise TransactionNotFound(f"Transaction with hash: '{tx_hash}' not found.")
        return chain["receipts"][tx_hash]

    def contract(address, abi):
        contract_mock = MagicMock()

        def balance_of(account):
            call = MagicMock()
            call.call = MagicMock(
                side_effect=lambda **_: chain["balances"].get((address.lower(), account.lower()), 0)
            )
            return call

        contract_mock.functions.balanceOf = MagicMock(side_effect=balance_of)
        return contract_mock

    def get_proof(address, slots, block):
        return {
            "address": address,
            "storageProof": [
                {
                    "key": slots[0],
                    "value": chain["storage"].get(slots[0], 0),
                    "proof": chain["proof_nodes"],
                }
            ],
        }

    eth.get_transaction = MagicMock(side_effect=get_transaction)
    eth.get_transaction_receipt = MagicMock(side_effect=get_transaction_receipt)
    eth.contract = MagicMock(side_effect=contract)
    eth.get_proof = MagicMock(side_effect=get_proof)

    mock = MagicMock(spec=Web3)
    mock.eth = eth
    return mock


@pytest.fixture
def record_payment(chain):
    """Put a payment transaction (and optionally its receipt) on the mock chain"""
    def _record(tx_hash=TX_HASH, to=BACKEND_WALLET, value=PROOF_COST_WEI, status=1, mined=True):
        chain["transactions"][tx_hash] = {
            "hash": tx_hash,
            "from": WALLET,
            "to": to,
            "value": value,
        }
        if mined:
            chain["receipts"][tx_hash] = {"status": status, "blockNumber": BLOCK_NUMBER - 1}
    return _record


@pytest.fixture
def set_token_balance(chain):
    def _set(raw_value, token=TOKEN, wallet=WALLET):
        chain["balances"][(token.lower(), wallet.lower())] = raw_value
    return _set


@pytest.fixture
def set_usdt_balance(chain):
    """Store a raw USDT balance in the wallet's mapping slot"""
    def _set(raw_value, wallet=WALLET):
        chain["storage"][int(derive_slot(wallet, 2), 16)] = raw_value
    return _set


@pytest.fixture
def web3_factory(mock_w3):
    return MagicMock(return_value=mock_w3)


@pytest.fixture
def settings():
    return Settings(backend_wallet=BACKEND_WALLET, proof_cost_wei=PROOF_COST_WEI, mock_prover=True)


@pytest.fixture
def resolver(settings, web3_factory):
    return NetworkResolver(settings, web3_factory=web3_factory)


@pytest.fixture
def store():
    return ProofStore()


@pytest.fixture
def mock_prover():
    return MockProver()


@pytest.fixture
def issuer(settings, resolver, store, mock_prover):
    return ProofIssuer(
        settings=settings,
        resolver=resolver,
        payment_verifier=PaymentVerifier(resolver),
        oracle=BalanceOracle(resolver),
        prover=mock_prover,
        store=store,
    )


@pytest.fixture
def balance_service(settings, resolver, store):
    return BalanceProofService(
        settings=settings,
        oracle=BalanceOracle(resolver, rpc_url=settings.balance_proof_rpc_url),
        store=store,
    )


@pytest.fixture
def app(settings, web3_factory, mock_prover, store):
    return create_app(settings=settings, web3_factory=web3_factory, prover=mock_prover, store=store)


@pytest.fixture
def client(app):
    """FastAPI TestClient over the fully wired application."""
    return TestClient(app)
