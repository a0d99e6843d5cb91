"""
fake_view.py - Test Helper for TokenView

Provides a minimal TokenView implementation for testing pure functions
without requiring a full TokenLedger instance. Unlike the ledger, it will
happily hold state that breaks the ledger's invariants.
"""

from __future__ import annotations
from typing import Dict, Optional, Any

from tokenledger import AllowanceKey, TokenView


class FakeView:
    """
    Minimal TokenView implementation over plain dicts.

    Example:
        view = FakeView(
            balances={'alice': 100, 'bob': 50},
            supply=150,
            allowances={('alice', 'bob'): 25},
        )

        view.allowance_of('alice', 'bob')
        # Returns: 25
    """

    def __init__(
        self,
        balances: Dict[Any, int],
        supply: Optional[int] = None,
        allowances: Optional[Dict[tuple, int]] = None,
    ):
        self._balances = balances
        self._supply = sum(balances.values()) if supply is None else supply
        self._allowances = {
            AllowanceKey(owner, spender): amount
            for (owner, spender), amount in (allowances or {}).items()
        }

    def balance_of(self, principal: Any) -> int:
        return self._balances.get(principal, 0)

    def allowance_of(self, owner: Any, spender: Any) -> int:
        return self._allowances.get(AllowanceKey(owner, spender), 0)

    def total_supply(self) -> int:
        return self._supply

    def holders(self) -> Dict[Any, int]:
        return {p: b for p, b in self._balances.items() if b != 0}

    def allowances(self) -> Dict[AllowanceKey, int]:
        return {k: a for k, a in self._allowances.items() if a != 0}


assert isinstance(FakeView({}), TokenView)
