"""Credit ledger: checks and atomically decrements a user's search-credit balance."""

import asyncio
from typing import Dict, Optional, Protocol

from jobgenie.utils.logger import get_logger

logger = get_logger(__name__)


class CreditLedger(Protocol):
    """External credit store. Implementations may raise CreditLedgerError when unreachable."""

    async def has_credits(self, user_id: str) -> bool:
        ...

    async def deduct(self, user_id: str) -> bool:
        """Atomically take one credit; False (and no change) when the balance is already zero."""
        ...


class InMemoryCreditLedger:
    """Process-local ledger for the CLI and tests. Safe under concurrent deductions."""

    def __init__(self, balances: Optional[Dict[str, int]] = None) -> None:
        self._balances: Dict[str, int] = dict(balances or {})
        self._lock = asyncio.Lock()

    def balance(self, user_id: str) -> int:
        return self._balances.get(user_id, 0)

    def grant(self, user_id: str, credits: int) -> None:
        if credits <= 0:
            raise ValueError("credits must be positive")
        self._balances[user_id] = self._balances.get(user_id, 0) + credits

    async def has_credits(self, user_id: str) -> bool:
        return self._balances.get(user_id, 0) > 0

    async def deduct(self, user_id: str) -> bool:
        async with self._lock:
            current = self._balances.get(user_id, 0)
            if current <= 0:
                logger.info("Credit deduction refused for user %s: balance is zero", user_id)
                return False
            self._balances[user_id] = current - 1
            return True
