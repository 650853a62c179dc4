"""Core building blocks for the GRACE-X Sport heuristic analytics engine.

This package contains pure, framework-free modules:

- ``odds_math``  racecard price parsing, strength and implied probability
- ``race_card``  frozen Race / Runner DTOs and wire-format parsing
- ``tiers``      subscription tiers, credential resolution, feature gating

Nothing in this package imports from ``backend.services`` or FastAPI.
All modules are side-effect-free and unit-testable in isolation.
"""
