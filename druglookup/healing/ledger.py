from __future__ import annotations
import threading
from typing import Dict

DEFAULT_MAX_ATTEMPTS = 2


class HealingAttemptLedger:
    """
    Per-record count of healing attempts for the life of the process.

    `try_acquire` checks and increments under one lock so two concurrent
    requests for the same record cannot both slip under the cap.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.max_attempts = max_attempts
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def try_acquire(self, drug_id: str) -> bool:
        with self._lock:
            count = self._counts.get(drug_id, 0)
            if count >= self.max_attempts:
                return False
            self._counts[drug_id] = count + 1
            return True

    def attempts(self, drug_id: str) -> int:
        with self._lock:
            return self._counts.get(drug_id, 0)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
