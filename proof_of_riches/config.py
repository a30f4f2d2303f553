"""
Configuration for the Proof of Riches service.

Two layers:
- Networks: the static per-network table shipped as networks.json
- Settings: process configuration read from the environment (and .env)
"""
import importlib.resources
import json
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from .models import NetworkName

DEFAULT_SP1_PROVER_URL = "https://api.succinct.xyz/api/provers/"
DEFAULT_BALANCE_PROOF_RPC_URL = "https://eth.llamarpc.com"
DEFAULT_PROOF_COST_WEI = 1000000000000000  # 0.001 ETH
DEFAULT_PROOF_TTL_SECONDS = 7 * 24 * 3600
DEFAULT_RPC_TIMEOUT_SECONDS = 30
DEFAULT_API_PORT = 3001

_TRUTHY = ("1", "true", "yes", "on")


class Networks:
    """
    Access to the packaged network table.

    The table is loaded once and cached at class level.
    """
    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None
    _lock = threading.RLock()

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the network table from the package resources.

        Returns:
            Mapping of network name to its settings
        """
        with cls._lock:
            if cls._networks_cache is None:
                resource = importlib.resources.files("proof_of_riches").joinpath("networks.json")
                cls._networks_cache = json.loads(resource.read_text(encoding="utf-8"))
            return cls._networks_cache

    @classmethod
    def get_network(cls, name: str) -> Dict[str, Any]:
        """
        Get the settings for one network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if name not in networks:
            raise ValueError(
                f"Unknown network '{name}'. Available networks: {', '.join(sorted(networks))}"
            )
        return networks[name]

    @classmethod
    def get_rpc_url(cls, name: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC endpoint for a network.

        Precedence: explicit override, then ETH_RPC_<NAME>, then the table default.
        """
        if override:
            return override
        env_url = (os.environ.get(f"ETH_RPC_{name.upper()}") or "").strip()
        if env_url:
            return env_url
        return cls.get_network(name)["rpc"]

    @classmethod
    def get_default_rpc_url(cls, name: str) -> str:
        return cls.get_network(name)["rpc"]

    @classmethod
    def get_chain_id(cls, name: str) -> int:
        return int(cls.get_network(name)["chainId"])

    @classmethod
    def get_usdt_address(cls, name: str) -> str:
        return cls.get_network(name)["usdt"]


def _env_bool(name: str, default: bool = False) -> bool:
    raw = (os.environ.get(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw!r}")


@dataclass
class Settings:
    """
    Process configuration.

    Attributes:
        environment: "development" or "production"; production selects mainnet
        sp1_prover_url: Base URL of the proving service
        sp1_api_key: Bearer credential for the proving service (empty selects the mock prover)
        mock_prover: Force the mock prover even when a credential is present
        backend_wallet: Address that must receive proof payments
        proof_cost_wei: Fixed price of one proof
        proof_ttl_seconds: Lifetime horizon stamped on issued records
        rpc_timeout: HTTP timeout for RPC calls in seconds
        balance_proof_rpc_url: RPC endpoint for direct storage-proof requests
        rpc_overrides: Per-network RPC endpoint overrides
    """
    environment: str = "development"
    sp1_prover_url: str = DEFAULT_SP1_PROVER_URL
    sp1_api_key: str = ""
    mock_prover: bool = False
    backend_wallet: str = ""
    proof_cost_wei: int = DEFAULT_PROOF_COST_WEI
    proof_ttl_seconds: int = DEFAULT_PROOF_TTL_SECONDS
    rpc_timeout: int = DEFAULT_RPC_TIMEOUT_SECONDS
    balance_proof_rpc_url: str = DEFAULT_BALANCE_PROOF_RPC_URL
    api_host: str = "0.0.0.0"
    api_port: int = DEFAULT_API_PORT
    rpc_overrides: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            load_env_file: Whether to read a .env file first (existing variables win)
        """
        if load_env_file:
            load_dotenv()

        overrides = {}
        for network in NetworkName:
            url = (os.environ.get(f"ETH_RPC_{network.value.upper()}") or "").strip()
            if url:
                overrides[network.value] = url

        return cls(
            environment=(os.environ.get("PROOF_ENV") or "development").strip().lower(),
            sp1_prover_url=(os.environ.get("SP1_PROVER_URL") or DEFAULT_SP1_PROVER_URL).strip(),
            sp1_api_key=(os.environ.get("SP1_API_KEY") or "").strip(),
            mock_prover=_env_bool("MOCK_SP1"),
            backend_wallet=(os.environ.get("BACKEND_WALLET") or "").strip(),
            proof_cost_wei=_env_int("PROOF_COST_WEI", DEFAULT_PROOF_COST_WEI),
            proof_ttl_seconds=_env_int("PROOF_TTL_SECONDS", DEFAULT_PROOF_TTL_SECONDS),
            rpc_timeout=_env_int("RPC_TIMEOUT_SECONDS", DEFAULT_RPC_TIMEOUT_SECONDS),
            balance_proof_rpc_url=(os.environ.get("ETHEREUM_RPC_URL") or DEFAULT_BALANCE_PROOF_RPC_URL).strip(),
            api_host=(os.environ.get("API_HOST") or "0.0.0.0").strip(),
            api_port=_env_int("API_PORT", DEFAULT_API_PORT),
            rpc_overrides=overrides,
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def network_name(self) -> NetworkName:
        return NetworkName.MAINNET if self.is_production else NetworkName.SEPOLIA

    @property
    def prover_configured(self) -> bool:
        return bool(self.sp1_api_key)
