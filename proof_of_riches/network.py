"""
Network resolution and pooled Web3 connection handles.
"""
import logging
import threading
from typing import Callable, Dict, Optional

from web3 import Web3

from ._rate_limited_log import rate_limited_log
from .config import Networks, Settings
from .models import NetworkConfig

logger = logging.getLogger(__name__)

Web3Factory = Callable[[str], Web3]


class NetworkResolver:
    """
    Decides which network applies to this process and hands out Web3 handles.

    The selection is made once from settings and memoized. Handles are pooled
    per endpoint so repeated calls reuse the same connection.
    """

    def __init__(
        self,
        settings: Settings,
        web3_factory: Optional[Web3Factory] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the resolver

        Args:
            settings: Process settings
            web3_factory: Callable building a Web3 handle for an endpoint URL
                (defaults to an HTTPProvider with the configured timeout)
            logger: Optional logger instance
        """
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self._web3_factory = web3_factory or self._default_web3_factory
        self._config: Optional[NetworkConfig] = None
        self._handles: Dict[str, Web3] = {}
        self._lock = threading.RLock()

    def _default_web3_factory(self, url: str) -> Web3:
        return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": self.settings.rpc_timeout}))

    def resolve(self) -> NetworkConfig:
        """
        Return the network for this process.

        An empty configured endpoint falls back to the table's placeholder URL;
        this keeps local development working without credentials.
        """
        with self._lock:
            if self._config is None:
                name = self.settings.network_name
                override = self.settings.rpc_overrides.get(name.value)
                rpc_url = Networks.get_rpc_url(name.value, override=override)
                if rpc_url == Networks.get_default_rpc_url(name.value):
                    rate_limited_log(
                        f"No RPC endpoint configured for {name.value}; using placeholder {rpc_url}",
                        logger_instance=self.logger
                    )
                self._config = NetworkConfig(
                    name=name,
                    rpc_endpoint=rpc_url,
                    chain_id=Networks.get_chain_id(name.value)
                )
                self.logger.info(f"Using {name.value} network (chain id {self._config.chain_id})")
            return self._config

    def web3(self) -> Web3:
        """Return the pooled Web3 handle for the resolved network."""
        return self.web3_for_url(self.resolve().rpc_endpoint)

    def web3_for_url(self, url: str) -> Web3:
        """Return a pooled Web3 handle for an arbitrary endpoint."""
        with self._lock:
            handle = self._handles.get(url)
            if handle is None:
                handle = self._web3_factory(url)
                self._handles[url] = handle
                self.logger.debug(f"Created Web3 handle for {url}")
            return handle
