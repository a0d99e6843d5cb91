#!/usr/bin/env python3
"""
demo.py - Interactive Tutorial: Learn the Token Ledger Step by Step

This is a pedagogical demonstration of how the USDStable token ledger works.
Each step builds on the previous one. Press Enter to advance.

WHAT YOU'LL LEARN:
  1-4:   Foundation      - The empty ledger, minting, transfers, conservation
  5-7:   Core Mechanics  - Rejections, check ordering, atomicity
  8-10:  Delegation      - Allowances, transfer_from, memo transfers
  11-13: Administration  - Pause, blacklist, ownership hand-over
  14-15: Audit           - Operation log replay, the engine

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from dataclasses import dataclass
import sys

from tokenledger import (
    TokenLedger, LedgerEngine, Call, ErrorKind,
    usd_stable, raise_for_result, OperationFailed,
    MAX_MEMO_BYTES,
)


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass
class DemoConfig:
    """Configuration for the tutorial. Modify these to experiment."""
    issuer: str = "issuer"
    alice: str = "alice"
    bob: str = "bob"
    carol: str = "carol"

    # Amounts are in base units (6 decimals: 1_000_000 == 1 USDS)
    alice_initial: int = 1_000_000_000
    bob_initial: int = 250_000_000
    transfer_amount: int = 300_000_000
    allowance: int = 100_000_000
    delegated_spend: int = 40_000_000

    engine_batch_size: int = 20


CONFIG = DemoConfig()

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def section_header(text: str):
    print(f"\n--- {text} ---\n")


def show_balances(ledger: TokenLedger):
    for who in (CONFIG.issuer, CONFIG.alice, CONFIG.bob, CONFIG.carol):
        amount = ledger.balance_of(who)
        print(f"  {who:<8} {amount:>15,}  ({amount / 10 ** ledger.decimals():,.2f} {ledger.symbol()})")
    print(f"  {'supply':<8} {ledger.total_supply():>15,}")


# ============================================================================
# PHASE 1: FOUNDATION (Steps 1-4)
# ============================================================================

def step_01_empty_ledger():
    """Create an empty ledger and inspect its initial state."""
    step_header(1, "The Empty Ledger",
        "A ledger starts with zero supply and a single owner.")

    print(">>> ledger = TokenLedger(usd_stable(), owner='issuer')")
    ledger = TokenLedger(usd_stable(), owner=CONFIG.issuer, verbose=True)

    section_header("Initial State")
    print(f"Name:         {ledger.name()}")
    print(f"Symbol:       {ledger.symbol()}")
    print(f"Decimals:     {ledger.decimals()}")
    print(f"Owner:        {ledger.owner()}")
    print(f"Total supply: {ledger.total_supply()}")
    print(f"Paused:       {ledger.is_paused()}")
    return ledger


def step_02_mint(ledger: TokenLedger):
    step_header(2, "Minting",
        "Only the owner creates tokens; minting raises total supply.")

    ledger.mint(CONFIG.issuer, CONFIG.alice, CONFIG.alice_initial)
    ledger.mint(CONFIG.issuer, CONFIG.bob, CONFIG.bob_initial)
    show_balances(ledger)
    return ledger


def step_03_transfer(ledger: TokenLedger):
    step_header(3, "Transfers",
        "A transfer moves tokens between holders without changing supply.")

    ledger.transfer(CONFIG.alice, CONFIG.carol, CONFIG.transfer_amount)
    show_balances(ledger)
    return ledger


def step_04_conservation(ledger: TokenLedger):
    step_header(4, "Conservation",
        "Supply always equals the sum of balances.")

    report = ledger.verify_supply()
    print(f"Supply:          {report['supply']:,}")
    print(f"Sum of balances: {report['sum_of_balances']:,}")
    print(f"Valid:           {report['valid']}")
    return ledger


# ============================================================================
# PHASE 2: CORE MECHANICS (Steps 5-7)
# ============================================================================

def step_05_rejections(ledger: TokenLedger):
    step_header(5, "Rejections",
        "A failed call returns Err(kind) and changes nothing.")

    result = ledger.mint(CONFIG.alice, CONFIG.alice, 1)
    print(f"alice mints:           {result!r}")
    result = ledger.transfer(CONFIG.carol, CONFIG.bob, 10 ** 12)
    print(f"carol overspends:      {result!r}")

    section_header("Prefer exceptions?")
    try:
        raise_for_result(ledger.burn(CONFIG.bob, 10 ** 12))
    except OperationFailed as exc:
        print(f"raise_for_result raised {type(exc).__name__}: {exc}")
    return ledger


def step_06_check_ordering(ledger: TokenLedger):
    step_header(6, "Check Ordering",
        "When several checks would fail, the first in the fixed order wins.")

    trial = ledger.clone()
    trial.verbose = False
    trial.blacklist(CONFIG.issuer, CONFIG.carol)
    trial.pause(CONFIG.issuer)
    result = trial.transfer(CONFIG.carol, CONFIG.bob, 10 ** 12)
    print("carol is blacklisted, under-funded, and the contract is paused:")
    print(f"  -> {result!r}")
    assert result.kind is ErrorKind.CONTRACT_PAUSED
    print("\n(This ran on a clone; the tutorial ledger is untouched.)")
    return ledger


def step_07_atomicity(ledger: TokenLedger):
    step_header(7, "Atomicity",
        "A rejected call leaves the state digest and the log unchanged.")

    digest = ledger.state_digest()
    entries = len(ledger.operation_log)
    ledger.transfer_from(CONFIG.carol, CONFIG.alice, CONFIG.carol, 1)
    print(f"Digest unchanged: {ledger.state_digest() == digest}")
    print(f"Log unchanged:    {len(ledger.operation_log) == entries}")
    return ledger


# ============================================================================
# PHASE 3: DELEGATION (Steps 8-10)
# ============================================================================

def step_08_approve(ledger: TokenLedger):
    step_header(8, "Allowances",
        "approve() sets (never adds to) what a spender may move.")

    ledger.approve(CONFIG.alice, CONFIG.bob, CONFIG.allowance * 2)
    ledger.approve(CONFIG.alice, CONFIG.bob, CONFIG.allowance)
    print(f"allowance(alice -> bob) = {ledger.allowance_of(CONFIG.alice, CONFIG.bob):,}")
    return ledger


def step_09_transfer_from(ledger: TokenLedger):
    step_header(9, "Delegated Spending",
        "transfer_from() spends the owner's balance and the spender's allowance.")

    ledger.transfer_from(CONFIG.bob, CONFIG.alice, CONFIG.carol, CONFIG.delegated_spend)
    print(f"allowance(alice -> bob) = {ledger.allowance_of(CONFIG.alice, CONFIG.bob):,}")
    show_balances(ledger)
    return ledger


def step_10_memo(ledger: TokenLedger):
    step_header(10, "Memo Transfers",
        f"Attach up to {MAX_MEMO_BYTES} opaque bytes to a transfer.")

    ledger.transfer_with_memo(CONFIG.carol, CONFIG.bob, 1_000_000, b"invoice-0001")
    for record in ledger.memo_events():
        print(f"  #{record.sequence_number} memo={record.memo!r}")
    return ledger


# ============================================================================
# PHASE 4: ADMINISTRATION (Steps 11-13)
# ============================================================================

def step_11_pause(ledger: TokenLedger):
    step_header(11, "Emergency Pause",
        "Pausing blocks every value movement; pausing twice is harmless.")

    ledger.pause(CONFIG.issuer)
    ledger.pause(CONFIG.issuer)
    ledger.transfer(CONFIG.alice, CONFIG.bob, 1)
    ledger.unpause(CONFIG.issuer)
    return ledger


def step_12_blacklist(ledger: TokenLedger):
    step_header(12, "Blacklisting",
        "A blacklisted account keeps its balance but cannot use it.")

    ledger.blacklist(CONFIG.issuer, CONFIG.bob)
    ledger.transfer(CONFIG.bob, CONFIG.alice, 1)
    ledger.transfer(CONFIG.alice, CONFIG.bob, 1)
    print(f"\nbob still holds {ledger.balance_of(CONFIG.bob):,}")
    ledger.unblacklist(CONFIG.issuer, CONFIG.bob)
    return ledger


def step_13_ownership(ledger: TokenLedger):
    step_header(13, "Ownership Hand-over",
        "The previous owner loses administrative rights immediately.")

    ledger.set_owner(CONFIG.issuer, CONFIG.carol)
    ledger.pause(CONFIG.issuer)
    ledger.set_token_uri(CONFIG.carol, "https://example.com/usds.json")
    ledger.set_owner(CONFIG.carol, CONFIG.issuer)
    print(f"\nowner={ledger.owner()!r} token_uri={ledger.token_uri()!r}")
    return ledger


# ============================================================================
# PHASE 5: AUDIT (Steps 14-15)
# ============================================================================

def step_14_replay(ledger: TokenLedger):
    step_header(14, "Replay",
        "Re-running the operation log rebuilds the exact same state.")

    quiet = ledger.clone()
    quiet.verbose = False
    replayed = quiet.replay()
    print(f"Log entries:     {len(ledger.operation_log)}")
    print(f"Original digest: {ledger.state_digest()}")
    print(f"Replay digest:   {replayed.state_digest()}")
    return ledger


def step_15_engine(ledger: TokenLedger):
    step_header(15, "The Engine",
        "LedgerEngine queues calls from many callers and applies them in order.")

    ledger.verbose = False
    engine = LedgerEngine(ledger)
    engine.verbose = True
    calls = []
    for i in range(CONFIG.engine_batch_size):
        sender, recipient = (CONFIG.alice, CONFIG.carol) if i % 2 else (CONFIG.carol, CONFIG.alice)
        calls.append(Call.of("transfer", sender, recipient=recipient, amount=1_000_000 * (i + 1)))
    calls.append(Call.of("mint", CONFIG.bob, recipient=CONFIG.bob, amount=1))
    engine.run(calls)

    events = engine.poll_events()
    print(f"Observer saw {len(events)} new records")
    show_balances(ledger)
    print(f"\nConservation holds: {ledger.verify_supply()['valid']}")
    return ledger


def main():
    """Run the complete tutorial."""
    print("=" * 70)
    print("       TOKEN LEDGER - INTERACTIVE TUTORIAL")
    print("=" * 70)

    if QUICK_MODE:
        print("Running in QUICK mode (no pauses)")
    else:
        print("Running in INTERACTIVE mode (press Enter to advance)")

    wait_for_enter()

    steps = [
        step_02_mint, step_03_transfer, step_04_conservation,
        step_05_rejections, step_06_check_ordering, step_07_atomicity,
        step_08_approve, step_09_transfer_from, step_10_memo,
        step_11_pause, step_12_blacklist, step_13_ownership,
        step_14_replay, step_15_engine,
    ]
    ledger = step_01_empty_ledger()
    wait_for_enter()
    for step in steps:
        ledger = step(ledger)
        wait_for_enter()

    print("\n" + "=" * 70)
    print("       TUTORIAL COMPLETE!")
    print("=" * 70)
    print("""
    You've learned:
      - Only the owner mints; supply always equals the sum of balances
      - Every call either applies fully or returns Err(kind) untouched
      - Checks run in a fixed order, so the reported error is predictable
      - The operation log is the source of truth for replay and observers

    Next steps:
      - Run tests: pytest tests/
    """)


if __name__ == "__main__":
    main()
