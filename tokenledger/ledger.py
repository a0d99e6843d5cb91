"""
ledger.py - Fungible Token Ledger State Machine

The TokenLedger class owns all token state and is the only module that mutates it.

Key responsibilities:
    - Implements the TokenView protocol for safe read-only access by pure functions
    - Validates every operation in a fixed check order before touching state
    - Applies each operation atomically (all checks pass and all mutations
      apply, or nothing changes)
    - Logs every applied operation, enabling clone() and replay()
"""

from __future__ import annotations
from typing import Dict, List, Set, Optional, Any

from .core import (
    # Types
    AllowanceKey, TokenMetadata, Call, OperationRecord,
    ErrorKind, Ok, Err, Result, OK,
    Principal, Amount, BalanceMap,
    # Operation names
    OP_TRANSFER, OP_TRANSFER_WITH_MEMO, OP_TRANSFER_FROM, OP_MINT, OP_BURN,
    OP_APPROVE, OP_SET_OWNER, OP_PAUSE, OP_UNPAUSE, OP_BLACKLIST,
    OP_UNBLACKLIST, OP_SET_TOKEN_URI,
    # Exceptions
    LedgerError,
    # Helper functions
    check_invariants, compute_digest,
)


class TokenLedger:
    """
    Single-asset token ledger with owner-controlled administration.

    Implements the TokenView protocol, allowing the ledger to be passed to pure
    functions that only query it.

    Design Principles:
        - Checks in order: every operation evaluates its preconditions in a
          documented order and returns the first failure as Err(kind).
        - Check before mutate: no balance or allowance is ever driven negative
          and then repaired; a failed call leaves no trace.
        - Always logs: every applied operation is recorded in the operation log.

    Thread Safety:
        Not thread-safe. Callers on several threads go through LedgerEngine,
        which serializes calls into the ledger.

    Example:
        ledger = TokenLedger(usd_stable(), owner="issuer")
        ledger.mint("issuer", "alice", 1000)
        ledger.transfer("alice", "bob", 300)
        ledger.balance_of("bob")   # 300
    """

    def __init__(
        self,
        metadata: TokenMetadata,
        owner: Principal,
        verbose: bool = True,
    ):
        """
        Create a ledger with zero supply and empty collections.

        Args:
            metadata: Immutable name, symbol and decimals
            owner: Initial owner principal (holds administrative rights)
            verbose: Print one line per applied or rejected operation (default: True)
        """
        if not isinstance(metadata, TokenMetadata):
            raise TypeError(f"metadata must be TokenMetadata, got {type(metadata)}")
        self.metadata = metadata
        self.verbose = verbose
        self._initial_owner = owner
        self._owner: Principal = owner
        self._paused: bool = False
        self._token_uri: Optional[str] = None
        self._supply: Amount = 0
        self._balances: Dict[Principal, Amount] = {}
        self._allowances: Dict[AllowanceKey, Amount] = {}
        self._blacklist: Set[Principal] = set()
        self.operation_log: List[OperationRecord] = []

    # ========================================================================
    # READ-ONLY QUERIES (TokenView protocol)
    # ========================================================================

    def balance_of(self, principal: Principal) -> Amount:
        return self._balances.get(principal, 0)

    def allowance_of(self, owner: Principal, spender: Principal) -> Amount:
        return self._allowances.get(AllowanceKey(owner, spender), 0)

    def total_supply(self) -> Amount:
        return self._supply

    def name(self) -> str:
        return self.metadata.name

    def symbol(self) -> str:
        return self.metadata.symbol

    def decimals(self) -> int:
        return self.metadata.decimals

    def token_uri(self) -> Optional[str]:
        return self._token_uri

    def is_paused(self) -> bool:
        return self._paused

    def is_blacklisted(self, principal: Principal) -> bool:
        return principal in self._blacklist

    def owner(self) -> Principal:
        return self._owner

    def holders(self) -> BalanceMap:
        """Return every principal with a non-zero balance."""
        return {p: amount for p, amount in self._balances.items() if amount}

    def allowances(self) -> Dict[AllowanceKey, Amount]:
        """Return every non-zero allowance."""
        return {key: amount for key, amount in self._allowances.items() if amount}

    def blacklisted(self) -> frozenset:
        return frozenset(self._blacklist)

    def events(self, since: int = 0) -> List[OperationRecord]:
        """Return logged operations with sequence_number >= since."""
        return self.operation_log[max(since, 0):]

    def memo_events(self, since: int = 0) -> List[OperationRecord]:
        """Return logged memo transfers with sequence_number >= since."""
        return [record for record in self.events(since) if record.memo is not None]

    # ========================================================================
    # VALUE-MOVING OPERATIONS (Mutating)
    # ========================================================================

    def transfer(self, caller: Principal, recipient: Principal, amount: Amount) -> Result:
        """
        Move amount from caller to recipient.

        Checks: paused, caller/recipient blacklisted, caller balance.
        """
        call = Call.of(OP_TRANSFER, caller, recipient=recipient, amount=amount)
        failure = self._check_transfer(caller, recipient, amount)
        if failure is not None:
            return self._reject(call, failure)
        self._move(caller, recipient, amount)
        return self._commit(call)

    def transfer_with_memo(
        self,
        caller: Principal,
        recipient: Principal,
        amount: Amount,
        memo: bytes,
    ) -> Result:
        """
        Transfer that also publishes an opaque memo (at most MAX_MEMO_BYTES).

        Same checks and effects as transfer(); the memo only appears in the
        operation log, where memo_events() exposes it.
        """
        call = Call.of(OP_TRANSFER_WITH_MEMO, caller, recipient=recipient, amount=amount, memo=memo)
        failure = self._check_transfer(caller, recipient, amount)
        if failure is not None:
            return self._reject(call, failure)
        self._move(caller, recipient, amount)
        return self._commit(call)

    def transfer_from(
        self,
        caller: Principal,
        owner: Principal,
        recipient: Principal,
        amount: Amount,
    ) -> Result:
        """
        Spend amount of owner's balance on owner's behalf.

        The caller is the spender. Checks, in order: paused, any of
        spender/owner/recipient blacklisted, owner balance, allowance.
        """
        call = Call.of(OP_TRANSFER_FROM, caller, owner=owner, recipient=recipient, amount=amount)
        if self._paused:
            return self._reject(call, ErrorKind.CONTRACT_PAUSED)
        if self._any_blacklisted(caller, owner, recipient):
            return self._reject(call, ErrorKind.ADDRESS_BLACKLISTED)
        if self.balance_of(owner) < amount:
            return self._reject(call, ErrorKind.INSUFFICIENT_BALANCE)
        key = AllowanceKey(owner, caller)
        allowance = self._allowances.get(key, 0)
        if allowance < amount:
            return self._reject(call, ErrorKind.INSUFFICIENT_ALLOWANCE)
        self._move(owner, recipient, amount)
        self._allowances[key] = allowance - amount
        return self._commit(call)

    def mint(self, caller: Principal, recipient: Principal, amount: Amount) -> Result:
        """
        Create amount new tokens in recipient's balance. Owner only.

        Authorization is checked before the pause flag.
        """
        call = Call.of(OP_MINT, caller, recipient=recipient, amount=amount)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        if self._paused:
            return self._reject(call, ErrorKind.CONTRACT_PAUSED)
        if recipient in self._blacklist:
            return self._reject(call, ErrorKind.ADDRESS_BLACKLISTED)
        if amount <= 0:
            return self._reject(call, ErrorKind.INVALID_AMOUNT)
        self._balances[recipient] = self.balance_of(recipient) + amount
        self._supply += amount
        return self._commit(call)

    def burn(self, caller: Principal, amount: Amount) -> Result:
        """
        Destroy amount of the caller's own tokens.

        The balance check runs before the amount check, so burning 0 from an
        empty account reports INVALID_AMOUNT, not INSUFFICIENT_BALANCE.
        """
        call = Call.of(OP_BURN, caller, amount=amount)
        if self._paused:
            return self._reject(call, ErrorKind.CONTRACT_PAUSED)
        if caller in self._blacklist:
            return self._reject(call, ErrorKind.ADDRESS_BLACKLISTED)
        if self.balance_of(caller) < amount:
            return self._reject(call, ErrorKind.INSUFFICIENT_BALANCE)
        if amount <= 0:
            return self._reject(call, ErrorKind.INVALID_AMOUNT)
        self._balances[caller] = self.balance_of(caller) - amount
        self._supply -= amount
        return self._commit(call)

    def approve(self, caller: Principal, spender: Principal, amount: Amount) -> Result:
        """Set (not add to) the allowance of spender over caller's balance."""
        call = Call.of(OP_APPROVE, caller, spender=spender, amount=amount)
        if self._paused:
            return self._reject(call, ErrorKind.CONTRACT_PAUSED)
        if self._any_blacklisted(caller, spender):
            return self._reject(call, ErrorKind.ADDRESS_BLACKLISTED)
        self._allowances[AllowanceKey(caller, spender)] = amount
        return self._commit(call)

    # ========================================================================
    # ADMINISTRATIVE OPERATIONS (Mutating, owner only)
    # ========================================================================
    #
    # Each checks the caller against the live owner, then writes one field.
    # Toggles are idempotent: repeating one is a success, not an error.

    def set_owner(self, caller: Principal, new_owner: Principal) -> Result:
        call = Call.of(OP_SET_OWNER, caller, new_owner=new_owner)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._owner = new_owner
        return self._commit(call)

    def pause(self, caller: Principal) -> Result:
        call = Call.of(OP_PAUSE, caller)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._paused = True
        return self._commit(call)

    def unpause(self, caller: Principal) -> Result:
        call = Call.of(OP_UNPAUSE, caller)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._paused = False
        return self._commit(call)

    def blacklist(self, caller: Principal, principal: Principal) -> Result:
        call = Call.of(OP_BLACKLIST, caller, principal=principal)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._blacklist.add(principal)
        return self._commit(call)

    def unblacklist(self, caller: Principal, principal: Principal) -> Result:
        call = Call.of(OP_UNBLACKLIST, caller, principal=principal)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._blacklist.discard(principal)
        return self._commit(call)

    def set_token_uri(self, caller: Principal, uri: Optional[str]) -> Result:
        """Set or clear (uri=None) the token URI."""
        call = Call.of(OP_SET_TOKEN_URI, caller, uri=uri)
        if caller != self._owner:
            return self._reject(call, ErrorKind.NOT_AUTHORIZED)
        self._token_uri = uri
        return self._commit(call)

    # ========================================================================
    # GENERIC SUBMISSION
    # ========================================================================

    def submit(self, call: Call) -> Result:
        """
        Execute a Call by dispatching it to the named operation.

        Args:
            call: Call built with Call.of()

        Returns:
            The operation's Result
        """
        operation = getattr(self, call.operation)
        return operation(call.caller, **call.kwargs)

    # ========================================================================
    # INTERNAL HELPERS
    # ========================================================================

    def _check_transfer(
        self,
        caller: Principal,
        recipient: Principal,
        amount: Amount,
    ) -> Optional[ErrorKind]:
        if self._paused:
            return ErrorKind.CONTRACT_PAUSED
        if self._any_blacklisted(caller, recipient):
            return ErrorKind.ADDRESS_BLACKLISTED
        if self.balance_of(caller) < amount:
            return ErrorKind.INSUFFICIENT_BALANCE
        return None

    def _any_blacklisted(self, *principals: Principal) -> bool:
        return any(p in self._blacklist for p in principals)

    def _move(self, source: Principal, dest: Principal, amount: Amount) -> None:
        """Debit source then credit dest; source == dest leaves the balance unchanged."""
        self._balances[source] = self.balance_of(source) - amount
        self._balances[dest] = self.balance_of(dest) + amount

    def _commit(self, call: Call) -> Ok:
        record = OperationRecord(sequence_number=len(self.operation_log), call=call)
        self.operation_log.append(record)
        if self.verbose:
            memo = f" memo={record.memo.hex()}" if record.memo is not None else ""
            print(f"✓ APPLIED #{record.sequence_number}: {call!r}{memo}")
        return OK

    def _reject(self, call: Call, kind: ErrorKind) -> Err:
        if self.verbose:
            print(f"✗ REJECTED {kind.value}: {call!r}")
        return Err(kind)

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def verify_supply(self) -> Dict[str, Any]:
        """
        Verify that supply equals the sum of balances and nothing is negative.

        Returns:
            Dict with keys:
            - 'valid': bool - True if every invariant holds
            - 'supply': int - Recorded total supply
            - 'sum_of_balances': int - Sum over all balances
            - 'violations': List[str] - Description of each broken invariant

        Example:
            result = ledger.verify_supply()
            assert result['valid'], result['violations']
        """
        violations = check_invariants(self)
        return {
            'valid': not violations,
            'supply': self._supply,
            'sum_of_balances': sum(self._balances.values()),
            'violations': violations,
        }

    def snapshot(self) -> Dict[str, Any]:
        """
        Return the full observable state as plain data.

        Zero balances and allowances are omitted, since absence and zero
        mean the same thing.
        """
        return {
            'name': self.metadata.name,
            'symbol': self.metadata.symbol,
            'decimals': self.metadata.decimals,
            'token_uri': self._token_uri,
            'owner': self._owner,
            'paused': self._paused,
            'supply': self._supply,
            'balances': self.holders(),
            'allowances': self.allowances(),
            'blacklist': frozenset(self._blacklist),
        }

    def state_digest(self) -> str:
        """Content hash of snapshot(); equal state gives equal digests."""
        return compute_digest(self.snapshot())

    def clone(self) -> TokenLedger:
        """
        Create an independent copy of this ledger.

        Modifications to the clone will not affect the original ledger, and
        vice versa. Containers are copied; principals are shared, since they
        are opaque and may compare by identity. The operation log is copied
        too (records are immutable).

        Returns:
            A new TokenLedger instance with identical state
        """
        cloned = TokenLedger.__new__(TokenLedger)
        cloned.metadata = self.metadata
        cloned.verbose = self.verbose
        cloned._initial_owner = self._initial_owner
        cloned._owner = self._owner
        cloned._paused = self._paused
        cloned._token_uri = self._token_uri
        cloned._supply = self._supply
        cloned._balances = dict(self._balances)
        cloned._allowances = dict(self._allowances)
        cloned._blacklist = set(self._blacklist)
        cloned.operation_log = list(self.operation_log)
        return cloned

    def replay(self, upto: Optional[int] = None) -> TokenLedger:
        """
        Create a new ledger by resubmitting the operation log.

        The new ledger starts from this ledger's construction parameters
        (metadata and initial owner) and re-executes each logged call in order.

        Args:
            upto: Replay only records with sequence_number < upto (default: all)

        Returns:
            New TokenLedger instance with replayed state

        Raises:
            LedgerError: If a logged call is rejected during replay
        """
        new_ledger = TokenLedger(self.metadata, self._initial_owner, verbose=self.verbose)
        records = self.operation_log if upto is None else self.operation_log[:upto]
        for record in records:
            result = new_ledger.submit(record.call)
            if not result.is_ok:
                raise LedgerError(
                    f"Replay failed at #{record.sequence_number} {record.call!r}: {result.kind.value}"
                )
        return new_ledger

    def __repr__(self) -> str:
        return (
            f"TokenLedger({self.metadata.symbol}, supply={self._supply}, "
            f"holders={len(self.holders())}, owner={self._owner!r}, paused={self._paused})"
        )
