"""
Volatile in-process store of issued proof records.
"""
import logging
import threading
from typing import Dict, List, Optional

from .models import ProofRecord, now_ms

logger = logging.getLogger(__name__)


class ProofStore:
    """
    Thread-safe registry of proof records keyed by share identifier.

    Records are copied on the way in and out, so the store is the only owner
    of its state. Nothing survives a process restart.
    """

    def __init__(self):
        self._records: Dict[str, ProofRecord] = {}
        self._lock = threading.RLock()

    def save(self, record: ProofRecord) -> None:
        """
        Store a record under its share identifier.

        Raises:
            ValueError: If another record already uses the same share id
        """
        with self._lock:
            existing = self._records.get(record.share_id)
            if existing is not None and existing.id != record.id:
                raise ValueError(f"Share id already in use: {record.share_id}")
            self._records[record.share_id] = record.model_copy(deep=True)
        logger.debug(f"Saved proof {record.share_id} ({record.status.value})")

    def get_by_share_id(self, share_id: str) -> Optional[ProofRecord]:
        with self._lock:
            record = self._records.get(share_id)
            return record.model_copy(deep=True) if record is not None else None

    def get_by_wallet(self, address: str) -> List[ProofRecord]:
        """
        List records for a wallet in insertion order.

        The comparison is case-insensitive; this is a full scan.
        """
        wallet = address.lower()
        with self._lock:
            return [
                record.model_copy(deep=True)
                for record in self._records.values()
                if record.wallet_address == wallet
            ]

    def get_by_verification_code(self, code: str) -> Optional[ProofRecord]:
        with self._lock:
            for record in self._records.values():
                if record.verification_code == code:
                    return record.model_copy(deep=True)
        return None

    def has_verification_code(self, code: str) -> bool:
        return self.get_by_verification_code(code) is not None

    def delete(self, share_id: str) -> bool:
        """
        Remove a record.

        Returns:
            True if a record was removed, False if the id was unknown
        """
        with self._lock:
            return self._records.pop(share_id, None) is not None

    def purge_expired(self, at_ms: Optional[int] = None) -> int:
        """
        Evict every record whose expiry has passed.

        Returns:
            Number of records removed
        """
        cutoff = at_ms if at_ms is not None else now_ms()
        with self._lock:
            expired = [key for key, record in self._records.items() if record.is_expired(cutoff)]
            for key in expired:
                del self._records[key]
        if expired:
            logger.info(f"Purged {len(expired)} expired proofs")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
