"""Oneclick Service Package — inscription and charge orchestration for one-click payments.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
