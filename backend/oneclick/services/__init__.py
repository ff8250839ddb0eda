"""Services Layer — orchestrators for inscriptions and transactions.

Invariants:
    - Orchestrators receive Store and GatewayClient handles via constructor
    - Every public operation returns a tagged envelope (finish returns a redirect URL)
"""
