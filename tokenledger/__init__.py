"""
tokenledger - Fungible Token Ledger

A single-asset token ledger with delegated spending and owner-controlled
administration (minting, pausing, blacklisting).

Usage:
    from tokenledger import TokenLedger, ErrorKind, Err, usd_stable

    ledger = TokenLedger(usd_stable(), owner="issuer")
    ledger.mint("issuer", "alice", 1000)

    result = ledger.transfer("alice", "bob", 300)
    if not result.is_ok:
        print(result.kind)

    # Delegated spending
    ledger.approve("alice", "carol", 100)
    ledger.transfer_from("carol", "alice", "dave", 50)

    # Several callers share one ledger through the engine
    engine = LedgerEngine(ledger)
    engine.submit(Call.of("transfer", "bob", recipient="alice", amount=10))
"""

# Core types
from .core import (
    TokenView,
    AllowanceKey,
    TokenMetadata,
    Call,
    OperationRecord,
    ErrorKind,
    Ok,
    Err,
    Result,
    OK,
    LedgerError,
    OperationFailed,
    NotAuthorized,
    NotFound,
    ContractPaused,
    InsufficientBalance,
    InsufficientAllowance,
    AddressBlacklisted,
    InvalidAmount,
    ERROR_TYPES,
    raise_for_result,
    check_invariants,
    usd_stable,
    MAX_NAME_LENGTH,
    MAX_SYMBOL_LENGTH,
    MAX_DECIMALS,
    MAX_TOKEN_URI_LENGTH,
    MAX_MEMO_BYTES,
    OPERATIONS,
    ADMIN_OPERATIONS,
    OP_TRANSFER,
    OP_TRANSFER_WITH_MEMO,
    OP_TRANSFER_FROM,
    OP_MINT,
    OP_BURN,
    OP_APPROVE,
    OP_SET_OWNER,
    OP_PAUSE,
    OP_UNPAUSE,
    OP_BLACKLIST,
    OP_UNBLACKLIST,
    OP_SET_TOKEN_URI,
)

# Ledger
from .ledger import TokenLedger

# Engine
from .engine import LedgerEngine

__all__ = [
    # Core
    'TokenView', 'AllowanceKey', 'TokenMetadata', 'Call', 'OperationRecord',
    'ErrorKind', 'Ok', 'Err', 'Result', 'OK',
    'LedgerError', 'OperationFailed', 'NotAuthorized', 'NotFound', 'ContractPaused',
    'InsufficientBalance', 'InsufficientAllowance', 'AddressBlacklisted', 'InvalidAmount',
    'ERROR_TYPES', 'raise_for_result', 'check_invariants', 'usd_stable',
    'MAX_NAME_LENGTH', 'MAX_SYMBOL_LENGTH', 'MAX_DECIMALS',
    'MAX_TOKEN_URI_LENGTH', 'MAX_MEMO_BYTES', 'OPERATIONS', 'ADMIN_OPERATIONS',
    'OP_TRANSFER', 'OP_TRANSFER_WITH_MEMO', 'OP_TRANSFER_FROM', 'OP_MINT', 'OP_BURN',
    'OP_APPROVE', 'OP_SET_OWNER', 'OP_PAUSE', 'OP_UNPAUSE', 'OP_BLACKLIST',
    'OP_UNBLACKLIST', 'OP_SET_TOKEN_URI',
    # Ledger
    'TokenLedger',
    # Engine
    'LedgerEngine',
]

__version__ = '1.0.0'
