"""Test suite for the zedforms form state engine.

This package contains tests for:
- Value coercion and NaN-aware comparison
- The resolver contract and the JSON Schema resolver
- The event system (emission, listener isolation)
- FormEngine operations and their state invariants
- End-to-end form scenarios
"""
