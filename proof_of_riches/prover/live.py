"""
Client for the remote proving network.
"""
import concurrent.futures
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import ProverError, ProverTimeoutError
from ..models import ProverMode, ProverOutput
from .base import PROVER_TIMEOUT_SECONDS, ProverClient

PROVER_PROGRAM = "balance-proof"
PROVER_PROOF_MODE = "plonk"


class LiveProver(ProverClient):
    """
    Posts balance-claim inputs to the proving network and waits for the artifact.

    Proving is expensive, so only connection failures are retried; a request
    that reached the provider is never replayed.

    The timeout bounds the whole call, connection retries and body transfer
    included, not just each socket read.
    """

    mode = ProverMode.LIVE

    def __init__(
        self,
        prover_url: str,
        api_key: str,
        timeout: int = PROVER_TIMEOUT_SECONDS,
        retry_count: int = 2,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the live prover

        Args:
            prover_url: Base URL of the proving network (the "prove" path is appended)
            api_key: Bearer credential
            timeout: Deadline for the whole request in seconds
            retry_count: Number of retries for connection errors
            logger: Optional logger instance
        """
        self.prover_url = prover_url if prover_url.endswith("/") else prover_url + "/"
        self.api_key = api_key
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            connect=retry_count,
            read=0,
            status=0,
            other=0,
            backoff_factor=0.5,
            allowed_methods=["POST"],
            raise_on_status=False
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))
        self._executor = concurrent.futures.ThreadPoolExecutor(thread_name_prefix="prover")

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def prove(self, inputs: Dict[str, Any]) -> ProverOutput:
        """
        Request a proof from the proving network

        Args:
            inputs: Balance-claim inputs

        Returns:
            ProverOutput marked as live

        Raises:
            ProverTimeoutError: If the provider does not answer within the timeout
            ProverError: On transport errors, error statuses or malformed responses
        """
        payload = {
            "program": PROVER_PROGRAM,
            "inputs": inputs,
            "mode": PROVER_PROOF_MODE,
        }
        self.logger.info("Calling prover network...")

        future = self._executor.submit(
            self.session.post,
            f"{self.prover_url}prove",
            json=payload,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout
        )
        try:
            response = future.result(timeout=self.timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            self.logger.error(f"Prover request exceeded the {self.timeout}s deadline")
            raise ProverTimeoutError(f"Prover did not respond within {self.timeout}s")
        except requests.Timeout as e:
            self.logger.error(f"Prover request timed out after {self.timeout}s: {e}")
            raise ProverTimeoutError(f"Prover did not respond within {self.timeout}s")
        except requests.RequestException as e:
            self.logger.error(f"Prover request failed: {e}")
            raise ProverError(f"Prover API call failed: {str(e)}")

        if response.status_code != 200:
            self.logger.error(f"Prover returned HTTP {response.status_code}")
            raise ProverError(
                f"Prover API error: {response.status_code} - {response.reason}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProverError(f"Invalid JSON response from prover: {str(e)}")

        if not isinstance(data, dict):
            raise ProverError(f"Unexpected prover response: {data!r}")

        proof = data.get("proof") or ""
        public_inputs = data.get("public_inputs") or ""
        if len(proof) <= 2 or len(public_inputs) <= 2:
            raise ProverError("Prover response is missing the proof or public inputs")

        self.logger.info("Prover response received")
        return ProverOutput(
            proof=proof,
            public_inputs=public_inputs,
            vkey_hash=data.get("vkey_hash") or "",
            mode=self.mode,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        self.session.close()
