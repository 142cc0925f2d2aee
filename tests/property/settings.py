# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Tiers:
- DETERMINISM_SETTINGS: 500 examples - canonical hashing of snapshots
- STATE_MACHINE_SETTINGS: stateful editor exploration
- STANDARD_SETTINGS: 100 examples - regular property tests
- SLOW_SETTINGS: 50 examples - tests touching a real database
"""

from hypothesis import settings

DETERMINISM_SETTINGS = settings(max_examples=500)

STATE_MACHINE_SETTINGS = settings(max_examples=50, stateful_step_count=40, deadline=None)

STANDARD_SETTINGS = settings(max_examples=100)

SLOW_SETTINGS = settings(max_examples=50, deadline=None)
