"""Pure building blocks for the fantasy football backend.

This package contains side-effect-free rules and configuration:

- ``division_config``: per-division competition ids, odds window, delays
- ``suspension``: red-card and yellow-accumulation suspension rules
- ``translator``: provider market/label names to Spanish
- ``market_selector``: playable market filtering and random family pick

Nothing in this package imports from ``backend.services`` or ``backend.models``.
All modules are unit-testable in isolation.
"""
