"""ORM Models — SQLAlchemy declarative models for both collections.

Invariants:
    - All models inherit from Base (db/base.py)
    - Table names equal the Collection enum values

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/alembic
"""

from oneclick.models.inscription import Inscription  # noqa: F401
from oneclick.models.transaction import Transaction  # noqa: F401
