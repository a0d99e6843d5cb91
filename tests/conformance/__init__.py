"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the token ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. conservation.py - Supply equals the sum of balances; nothing goes negative
2. atomicity.py - Rejected calls leave no trace
3. idempotency.py - Admin toggles and approvals are assignments
4. determinism.py - Same calls give the same state; replay reproduces it
5. canonicalization.py - Content-addressable state digests

These tests use hypothesis for property-based testing; call generators
live in strategies.py.
"""
