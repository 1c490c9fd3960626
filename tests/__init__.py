"""Test suite for the formstate field-state and validation engine.

This package contains tests for:
- Deep-path access and immutable updates
- Field value, touched and error state
- Validation engine (ordering, async races, stale results)
- Group aggregation, dependents and list operations
- Form root dirty tracking, reset and submit lifecycle
- Event system (subscriptions, dispatch, listener isolation)
- Integration scenarios (cross-field validation, async submit flow)
"""
