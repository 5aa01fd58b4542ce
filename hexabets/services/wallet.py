from typing import Dict

from hexabets.domain.games import is_valid_stake
from hexabets.errors import InvalidBet


class InMemoryWallet:
    """Demo balance store standing in for the external wallet collaborator.

    The betting core only ever calls ``ensure_funds`` and ``apply``; any ledger
    exposing those two methods can replace this one.
    """

    def __init__(self, starting_balance: float):
        self.starting_balance = starting_balance
        self._balances: Dict[str, float] = {}

    def balance(self, session_id: str) -> float:
        if session_id not in self._balances:
            self._balances[session_id] = self.starting_balance
        return self._balances[session_id]

    def ensure_funds(self, session_id: str, amount: float):
        """Reject non-positive or non-finite stakes and stakes above the balance

        Raises:
            InvalidBet: The stake can not be placed
        """
        if not is_valid_stake(amount):
            raise InvalidBet("bet must be a positive amount")
        if self.balance(session_id) < amount:
            raise InvalidBet("insufficient balance")

    def apply(self, session_id: str, delta: float) -> float:
        self._balances[session_id] = round(self.balance(session_id) + delta, 2)
        return self._balances[session_id]
