"""
Core types and pure functions for the token ledger.

This module provides the foundational data structures and protocols for the ledger:
1. Protocols: TokenView for read-only ledger access
2. Immutable data structures: AllowanceKey, TokenMetadata, Call, OperationRecord
3. Results: ErrorKind and the Ok/Err tagged result
4. Exceptions: LedgerError and one OperationFailed subclass per ErrorKind
5. Pure checks: argument-domain validation and the supply invariant checker
6. Canonicalization: deterministic hashing of ledger snapshots

Nothing in this module mutates ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import hashlib
from typing import (
    Dict, List, Optional, Any, Hashable, Protocol,
    Tuple, Union, runtime_checkable,
)


# ============================================================================
# CONSTANTS
# ============================================================================

# Metadata bounds.
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_DECIMALS = 18
MAX_TOKEN_URI_LENGTH = 256

# Largest memo payload a memo transfer may carry.
MAX_MEMO_BYTES = 34

# Operation names (strings, not enum, matching how calls are dispatched).
OP_TRANSFER = "transfer"
OP_TRANSFER_WITH_MEMO = "transfer_with_memo"
OP_TRANSFER_FROM = "transfer_from"
OP_MINT = "mint"
OP_BURN = "burn"
OP_APPROVE = "approve"
OP_SET_OWNER = "set_owner"
OP_PAUSE = "pause"
OP_UNPAUSE = "unpause"
OP_BLACKLIST = "blacklist"
OP_UNBLACKLIST = "unblacklist"
OP_SET_TOKEN_URI = "set_token_uri"

# Argument names accepted by each operation, in positional order after caller.
OPERATIONS: Dict[str, Tuple[str, ...]] = {
    OP_TRANSFER: ("recipient", "amount"),
    OP_TRANSFER_WITH_MEMO: ("recipient", "amount", "memo"),
    OP_TRANSFER_FROM: ("owner", "recipient", "amount"),
    OP_MINT: ("recipient", "amount"),
    OP_BURN: ("amount",),
    OP_APPROVE: ("spender", "amount"),
    OP_SET_OWNER: ("new_owner",),
    OP_PAUSE: (),
    OP_UNPAUSE: (),
    OP_BLACKLIST: ("principal",),
    OP_UNBLACKLIST: ("principal",),
    OP_SET_TOKEN_URI: ("uri",),
}

ADMIN_OPERATIONS = frozenset({
    OP_SET_OWNER, OP_PAUSE, OP_UNPAUSE,
    OP_BLACKLIST, OP_UNBLACKLIST, OP_SET_TOKEN_URI,
})


# ============================================================================
# TYPE ALIASES
# ============================================================================

# Opaque account identifier. Only equality and hashing are assumed.
Principal = Hashable

# Token quantity in base units.
Amount = int

# Mapping from principal to its (non-zero) balance.
BalanceMap = Dict[Principal, Amount]


# ============================================================================
# ERROR KINDS AND RESULTS
# ============================================================================

class ErrorKind(Enum):
    """
    Every way a ledger operation can fail.

    Values are the contract error codes. NOT_FOUND is part of
    the taxonomy but no current operation returns it.
    """
    NOT_AUTHORIZED = "ERR-NOT-AUTHORIZED"
    NOT_FOUND = "ERR-NOT-FOUND"
    CONTRACT_PAUSED = "ERR-CONTRACT-PAUSED"
    INSUFFICIENT_BALANCE = "ERR-INSUFFICIENT-BALANCE"
    INSUFFICIENT_ALLOWANCE = "ERR-INSUFFICIENT-ALLOWANCE"
    ADDRESS_BLACKLISTED = "ERR-ADDRESS-BLACKLISTED"
    INVALID_AMOUNT = "ERR-INVALID-AMOUNT"


@dataclass(frozen=True, slots=True)
class Ok:
    """Successful outcome of a ledger operation."""
    value: Any = None

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value

    def __repr__(self) -> str:
        return "Ok()" if self.value is None else f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err:
    """Failed outcome of a ledger operation. The ledger was not changed."""
    kind: ErrorKind

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        """Raise the OperationFailed subclass matching this error kind."""
        raise ERROR_TYPES[self.kind](self.kind)

    def __repr__(self) -> str:
        return f"Err({self.kind.name})"


Result = Union[Ok, Err]

OK = Ok()


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class OperationFailed(LedgerError):
    """Raised when a failed Result is unwrapped."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or kind.value)


class NotAuthorized(OperationFailed):
    """Caller is not the ledger owner."""
    pass


class NotFound(OperationFailed):
    """Reserved; no current operation fails this way."""
    pass


class ContractPaused(OperationFailed):
    """The ledger is paused."""
    pass


class InsufficientBalance(OperationFailed):
    """The debited account holds less than the requested amount."""
    pass


class InsufficientAllowance(OperationFailed):
    """The spender's allowance is less than the requested amount."""
    pass


class AddressBlacklisted(OperationFailed):
    """A participant of the operation is blacklisted."""
    pass


class InvalidAmount(OperationFailed):
    """Mint or burn amount is not positive."""
    pass


ERROR_TYPES = {
    ErrorKind.NOT_AUTHORIZED: NotAuthorized,
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.CONTRACT_PAUSED: ContractPaused,
    ErrorKind.INSUFFICIENT_BALANCE: InsufficientBalance,
    ErrorKind.INSUFFICIENT_ALLOWANCE: InsufficientAllowance,
    ErrorKind.ADDRESS_BLACKLISTED: AddressBlacklisted,
    ErrorKind.INVALID_AMOUNT: InvalidAmount,
}


def raise_for_result(result: Result) -> Any:
    """
    Convert a Result into exception style.

    Returns the Ok value, or raises the OperationFailed subclass for an Err.
    """
    return result.unwrap()


# ============================================================================
# ARGUMENT DOMAIN CHECKS
# ============================================================================

def check_amount(amount: Any, allow_negative: bool = False) -> int:
    """
    Validate that amount lies in the unsigned integer domain.

    Mint and burn pass allow_negative=True: their own INVALID_AMOUNT check
    rejects non-positive amounts in its place in the check order.

    Raises:
        TypeError: If amount is not an int (bool is rejected too)
        ValueError: If amount is negative and allow_negative is False
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be int, got {type(amount).__name__}")
    if amount < 0 and not allow_negative:
        raise ValueError(f"amount must be non-negative, got {amount}")
    return amount


def check_memo(memo: Any) -> bytes:
    """Validate a memo payload and return it as immutable bytes."""
    if not isinstance(memo, (bytes, bytearray)):
        raise TypeError(f"memo must be bytes, got {type(memo).__name__}")
    if len(memo) > MAX_MEMO_BYTES:
        raise ValueError(f"memo is {len(memo)} bytes, max is {MAX_MEMO_BYTES}")
    return bytes(memo)


def check_token_uri(uri: Optional[str]) -> Optional[str]:
    if uri is None:
        return None
    if not isinstance(uri, str):
        raise TypeError(f"token uri must be str or None, got {type(uri).__name__}")
    if len(uri) > MAX_TOKEN_URI_LENGTH:
        raise ValueError(f"token uri exceeds {MAX_TOKEN_URI_LENGTH} characters")
    return uri


_ARG_CHECKS = {
    "amount": check_amount,
    "memo": check_memo,
    "uri": check_token_uri,
}

# Operations whose ordered checks include `amount <= 0`.
_SIGNED_AMOUNT_OPERATIONS = frozenset({OP_MINT, OP_BURN})


def _check_argument(operation: str, name: str, value: Any) -> Any:
    if name == "amount" and operation in _SIGNED_AMOUNT_OPERATIONS:
        return check_amount(value, allow_negative=True)
    check = _ARG_CHECKS.get(name)
    return value if check is None else check(value)


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class AllowanceKey:
    """
    Composite key of the allowance map: how much `spender` may move out of
    `owner`'s balance.
    """
    owner: Principal
    spender: Principal

    def __repr__(self) -> str:
        return f"AllowanceKey({self.owner!r}→{self.spender!r})"


@dataclass(frozen=True, slots=True)
class TokenMetadata:
    """
    Immutable token description fixed at ledger construction.

    Attributes:
        name: Human-readable token name (1..MAX_NAME_LENGTH characters)
        symbol: Ticker symbol (1..MAX_SYMBOL_LENGTH characters)
        decimals: Display precision of base units (0..MAX_DECIMALS)
    """
    name: str
    symbol: str
    decimals: int

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Token name cannot be empty")
        if len(self.name) > MAX_NAME_LENGTH:
            raise ValueError(f"Token name exceeds {MAX_NAME_LENGTH} characters")
        if not isinstance(self.symbol, str) or not self.symbol.strip():
            raise ValueError("Token symbol cannot be empty")
        if len(self.symbol) > MAX_SYMBOL_LENGTH:
            raise ValueError(f"Token symbol exceeds {MAX_SYMBOL_LENGTH} characters")
        if isinstance(self.decimals, bool) or not isinstance(self.decimals, int):
            raise ValueError(f"decimals must be int, got {type(self.decimals)}")
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValueError(f"decimals must be in 0..{MAX_DECIMALS}, got {self.decimals}")


def usd_stable() -> TokenMetadata:
    """Metadata of the USDStable token: 6 decimal places."""
    return TokenMetadata(name="USDStable", symbol="USDS", decimals=6)


@dataclass(frozen=True, slots=True)
class Call:
    """
    A mutating ledger operation before execution - represents INTENT.

    Attributes:
        operation: One of the OP_* names
        caller: Authenticated principal invoking the operation
        args: Keyword arguments as a tuple of (name, value) pairs, in the
              order OPERATIONS lists them

    Use Call.of() to build one from keyword arguments.
    """
    operation: str
    caller: Principal
    args: Tuple[Tuple[str, Any], ...] = ()

    def __post_init__(self):
        expected = OPERATIONS.get(self.operation)
        if expected is None:
            raise ValueError(f"Unknown operation: {self.operation!r}")
        names = tuple(name for name, _ in self.args)
        if names != expected:
            raise ValueError(
                f"{self.operation} takes arguments {expected}, got {names}"
            )
        # Argument domains are checked here so a bad Call never reaches the ledger
        object.__setattr__(self, 'args', tuple(
            (name, _check_argument(self.operation, name, value))
            for name, value in self.args
        ))

    @classmethod
    def of(cls, operation: str, caller: Principal, **kwargs: Any) -> Call:
        order = OPERATIONS.get(operation)
        if order is None:
            raise ValueError(f"Unknown operation: {operation!r}")
        missing = set(order) - set(kwargs)
        extra = set(kwargs) - set(order)
        if missing or extra:
            raise ValueError(
                f"{operation} takes arguments {order}, got {tuple(sorted(kwargs))}"
            )
        return cls(operation, caller, tuple((name, kwargs[name]) for name in order))

    @property
    def kwargs(self) -> Dict[str, Any]:
        return dict(self.args)

    @property
    def is_admin(self) -> bool:
        return self.operation in ADMIN_OPERATIONS

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.args)
        return f"{self.operation}({self.caller!r}{', ' if args else ''}{args})"


@dataclass(frozen=True, slots=True)
class OperationRecord:
    """
    An applied, immutable entry of the operation log - represents FACT.

    Only successful calls are recorded. A record whose call is a memo
    transfer is also a memo event for off-ledger observers.

    Attributes:
        sequence_number: Monotonic position in the ledger's log (0-based)
        call: The Call that was applied
    """
    sequence_number: int
    call: Call

    @property
    def operation(self) -> str:
        return self.call.operation

    @property
    def memo(self) -> Optional[bytes]:
        if self.call.operation != OP_TRANSFER_WITH_MEMO:
            return None
        return self.call.kwargs["memo"]

    def __repr__(self) -> str:
        return f"OperationRecord(#{self.sequence_number} {self.call!r})"


# ============================================================================
# PROTOCOLS
# ============================================================================

@runtime_checkable
class TokenView(Protocol):
    """
    Read-only interface to ledger state.

    Functions accepting a TokenView declare that they only query the ledger.
    TokenLedger implements this protocol; tests use FakeView to hand the pure
    checks below arbitrary (including broken) state.
    """

    def balance_of(self, principal: Principal) -> Amount:
        """Return the balance of principal, 0 if it has none."""
        ...

    def allowance_of(self, owner: Principal, spender: Principal) -> Amount:
        """Return how much spender may move out of owner's balance."""
        ...

    def total_supply(self) -> Amount:
        ...

    def holders(self) -> BalanceMap:
        """Return all non-zero balances."""
        ...

    def allowances(self) -> Dict[AllowanceKey, Amount]:
        """Return all non-zero allowances."""
        ...


# ============================================================================
# INVARIANT CHECKS
# ============================================================================

def check_invariants(view: TokenView) -> List[str]:
    """
    Check the supply and non-negativity invariants against a view.

    Returns:
        List of human-readable violations (empty when every invariant holds)
    """
    violations = []
    balances = view.holders()
    total = sum(balances.values())
    supply = view.total_supply()
    if supply != total:
        violations.append(f"supply {supply} != sum of balances {total}")
    if supply < 0:
        violations.append(f"supply is negative: {supply}")
    for principal, amount in balances.items():
        if amount < 0:
            violations.append(f"balance of {principal!r} is negative: {amount}")
    for key, amount in view.allowances().items():
        if amount < 0:
            violations.append(f"allowance {key!r} is negative: {amount}")
    return violations


# ============================================================================
# CANONICALIZATION
# ============================================================================

def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Output is independent of dict insertion order and set iteration order,
    so equal snapshots always hash equally.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{len(value)}:{value}"
    if isinstance(value, bytes):
        return f"B:{value.hex()}"
    if isinstance(value, AllowanceKey):
        return f"K:({_canonicalize(value.owner)},{_canonicalize(value.spender)})"
    if isinstance(value, dict):
        items = sorted(
            ((_canonicalize(k), _canonicalize(v)) for k, v in value.items())
        )
        serialized = ",".join(f"{k}:{v}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    if isinstance(value, (set, frozenset)):
        serialized = ",".join(sorted(_canonicalize(item) for item in value))
        return f"<{serialized}>"
    # Opaque principals fall back to repr, length-prefixed like strings
    text = repr(value)
    return f"R:{len(text)}:{text}"


def compute_digest(snapshot: Dict[str, Any]) -> str:
    """Deterministic short content hash of a ledger snapshot."""
    return hashlib.sha256(_canonicalize(snapshot).encode()).hexdigest()[:16]
