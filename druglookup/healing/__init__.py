"""
Bounded self-repair of records whose text carries label markup.
"""

from .coordinator import HealingCoordinator
from .ledger import HealingAttemptLedger

__all__ = ["HealingAttemptLedger", "HealingCoordinator"]
