"""
test_check_ordering.py - Which error wins when several checks fail

Every operation evaluates its preconditions in a fixed order and reports the
first failure. These tests set up states where two or more checks would
fail and pin down which kind is returned.
"""

import pytest

from tokenledger import ErrorKind, Err
from tests.conftest import OWNER, ALICE, BOB, CAROL


def _paused_and_barred(ledger, *principals):
    for principal in principals:
        ledger.blacklist(OWNER, principal)
    ledger.pause(OWNER)
    return ledger


class TestTransferOrdering:

    def test_paused_beats_blacklist_and_balance(self, funded_ledger):
        _paused_and_barred(funded_ledger, CAROL)
        assert funded_ledger.transfer(CAROL, ALICE, 10_000) == Err(ErrorKind.CONTRACT_PAUSED)

    def test_blacklist_beats_balance(self, funded_ledger):
        funded_ledger.blacklist(OWNER, CAROL)
        assert funded_ledger.transfer(CAROL, ALICE, 10_000) == Err(ErrorKind.ADDRESS_BLACKLISTED)

    def test_memo_transfer_follows_same_order(self, funded_ledger):
        _paused_and_barred(funded_ledger, CAROL)
        result = funded_ledger.transfer_with_memo(CAROL, ALICE, 10_000, b"ref")
        assert result == Err(ErrorKind.CONTRACT_PAUSED)
        funded_ledger.unpause(OWNER)
        result = funded_ledger.transfer_with_memo(CAROL, ALICE, 10_000, b"ref")
        assert result == Err(ErrorKind.ADDRESS_BLACKLISTED)


class TestTransferFromOrdering:

    def test_paused_first(self, funded_ledger):
        _paused_and_barred(funded_ledger, CAROL)
        assert funded_ledger.transfer_from(CAROL, ALICE, BOB, 10_000) == Err(ErrorKind.CONTRACT_PAUSED)

    def test_blacklist_before_balance(self, funded_ledger):
        funded_ledger.blacklist(OWNER, BOB)
        assert funded_ledger.transfer_from(CAROL, ALICE, BOB, 10_000) == Err(ErrorKind.ADDRESS_BLACKLISTED)

    def test_balance_before_allowance(self, funded_ledger):
        """Both balance and allowance are short; the balance check runs first."""
        assert funded_ledger.allowance_of(BOB, CAROL) == 0
        assert funded_ledger.transfer_from(CAROL, BOB, ALICE, 501) == Err(ErrorKind.INSUFFICIENT_BALANCE)


class TestMintOrdering:

    def test_authorization_before_pause(self, ledger):
        ledger.pause(OWNER)
        assert ledger.mint(ALICE, ALICE, 10) == Err(ErrorKind.NOT_AUTHORIZED)

    def test_authorization_before_everything(self, ledger):
        _paused_and_barred(ledger, ALICE)
        assert ledger.mint(ALICE, ALICE, 0) == Err(ErrorKind.NOT_AUTHORIZED)

    def test_pause_before_blacklist(self, ledger):
        _paused_and_barred(ledger, ALICE)
        assert ledger.mint(OWNER, ALICE, 0) == Err(ErrorKind.CONTRACT_PAUSED)

    def test_blacklist_before_amount(self, ledger):
        ledger.blacklist(OWNER, ALICE)
        assert ledger.mint(OWNER, ALICE, 0) == Err(ErrorKind.ADDRESS_BLACKLISTED)

    def test_negative_amount_by_non_owner(self, ledger):
        assert ledger.mint("mallory", ALICE, -5) == Err(ErrorKind.NOT_AUTHORIZED)

    def test_negative_amount_while_paused(self, ledger):
        ledger.pause(OWNER)
        assert ledger.mint(OWNER, ALICE, -5) == Err(ErrorKind.CONTRACT_PAUSED)

    def test_negative_amount_by_owner(self, ledger):
        assert ledger.mint(OWNER, ALICE, -5) == Err(ErrorKind.INVALID_AMOUNT)
        assert ledger.total_supply() == 0


class TestBurnOrdering:

    def test_pause_before_blacklist(self, funded_ledger):
        _paused_and_barred(funded_ledger, ALICE)
        assert funded_ledger.burn(ALICE, 10_000) == Err(ErrorKind.CONTRACT_PAUSED)

    def test_blacklist_before_balance(self, funded_ledger):
        funded_ledger.blacklist(OWNER, CAROL)
        assert funded_ledger.burn(CAROL, 1) == Err(ErrorKind.ADDRESS_BLACKLISTED)

    def test_blacklist_before_amount(self, funded_ledger):
        funded_ledger.blacklist(OWNER, ALICE)
        assert funded_ledger.burn(ALICE, 0) == Err(ErrorKind.ADDRESS_BLACKLISTED)

    def test_negative_amount_passes_balance_check(self, funded_ledger):
        """balance < -5 is false, so the amount check reports the failure."""
        assert funded_ledger.burn(CAROL, -5) == Err(ErrorKind.INVALID_AMOUNT)
        assert funded_ledger.burn(ALICE, -5) == Err(ErrorKind.INVALID_AMOUNT)
        assert funded_ledger.total_supply() == 1500

    def test_negative_amount_while_blacklisted(self, funded_ledger):
        funded_ledger.blacklist(OWNER, ALICE)
        assert funded_ledger.burn(ALICE, -5) == Err(ErrorKind.ADDRESS_BLACKLISTED)


class TestApproveOrdering:

    def test_pause_before_blacklist(self, funded_ledger):
        _paused_and_barred(funded_ledger, ALICE)
        assert funded_ledger.approve(ALICE, CAROL, 1) == Err(ErrorKind.CONTRACT_PAUSED)


class TestAdminIgnoresPauseAndBlacklist:
    """Administrative operations only check the caller against the owner."""

    @pytest.mark.parametrize("operation, args", [
        ("set_owner", (OWNER,)),
        ("unpause", ()),
        ("pause", ()),
        ("blacklist", (ALICE,)),
        ("unblacklist", (ALICE,)),
        ("set_token_uri", ("https://example.com/usds.json",)),
    ])
    def test_owner_succeeds_while_paused_and_blacklisted(self, ledger, operation, args):
        _paused_and_barred(ledger, OWNER)
        result = getattr(ledger, operation)(OWNER, *args)
        assert result.is_ok

    @pytest.mark.parametrize("operation, args", [
        ("set_owner", (ALICE,)),
        ("pause", ()),
        ("unpause", ()),
        ("blacklist", (BOB,)),
        ("unblacklist", (BOB,)),
        ("set_token_uri", (None,)),
    ])
    def test_non_owner_rejected_while_paused(self, ledger, operation, args):
        ledger.pause(OWNER)
        result = getattr(ledger, operation)(ALICE, *args)
        assert result == Err(ErrorKind.NOT_AUTHORIZED)
