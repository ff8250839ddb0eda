"""Infrastructure Layer — database, document store, gateway HTTP client, logging.

Invariants:
    - Implements the boundary Protocols declared in core/repository_protocols.py
"""
