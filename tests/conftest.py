"""
conftest.py - Shared pytest fixtures for TokenLedger tests

Provides common fixtures used across unit, conformance and functional tests:
- Empty and funded ledgers
- Principal names matching the wallet_1/wallet_2/wallet_3 test accounts
- State comparison utilities
"""

import pytest
from typing import Iterable, Tuple

from hypothesis import HealthCheck, settings

from tokenledger import TokenLedger, LedgerEngine, usd_stable

# Input generation can exceed the too_slow threshold on a cold start;
# that health check is timing-only and does not affect test outcomes.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")


OWNER = "wallet_1"
ALICE = "wallet_2"
BOB = "wallet_3"
CAROL = "wallet_4"

PRINCIPALS = (OWNER, ALICE, BOB, CAROL)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def new_ledger(owner=OWNER) -> TokenLedger:
    """Create a quiet USDStable ledger owned by `owner`."""
    return TokenLedger(usd_stable(), owner=owner, verbose=False)


def fund(ledger: TokenLedger, allocations: Iterable[Tuple[object, int]]) -> TokenLedger:
    """Mint each (principal, amount) as the current owner; fails loudly."""
    for principal, amount in allocations:
        result = ledger.mint(ledger.owner(), principal, amount)
        assert result.is_ok, f"funding {principal} failed: {result}"
    return ledger


def sum_of_balances(ledger: TokenLedger, principals: Iterable = PRINCIPALS) -> int:
    return sum(ledger.balance_of(p) for p in principals)


def verify_conservation(ledger: TokenLedger, principals: Iterable = PRINCIPALS) -> bool:
    """Supply equals the sum of balances over every known principal."""
    report = ledger.verify_supply()
    return report['valid'] and ledger.total_supply() == sum_of_balances(ledger, principals)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def ledger():
    """Empty USDStable ledger owned by OWNER."""
    return new_ledger()


@pytest.fixture
def funded_ledger():
    """Ledger where ALICE holds 1000 and BOB holds 500 (supply 1500)."""
    return fund(new_ledger(), [(ALICE, 1000), (BOB, 500)])


@pytest.fixture
def engine(funded_ledger):
    """Engine in front of the funded ledger."""
    return LedgerEngine(funded_ledger)
