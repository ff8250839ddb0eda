"""SQL Document Store — DocumentStore Protocol implemented on the async SQLAlchemy ORM.

Invariants:
    - Each call runs in its own session and commits before returning
      (no cross-call transaction; concurrent callers share only the pool)
    - Predicates are equality-only {column: value}; unknown columns raise ValueError
    - Documents are returned as plain dicts keyed by column name
    - update_one touches at most one row (first match) and returns the match count

Design Decisions:
    - Collection -> ORM model table instead of dynamic tables: schema and
      uniqueness indexes stay declarative (models/, alembic/)
    - Constraint violations surface from DatabaseSessionManager as ConflictError
"""

import logging
from enum import Enum

from sqlalchemy import func, inspect, select, update

from oneclick.core.domain_types import Collection
from oneclick.db.base import Base
from oneclick.infrastructure.database import DatabaseSessionManager
from oneclick.models.inscription import Inscription
from oneclick.models.transaction import Transaction

logger = logging.getLogger(__name__)

_MODELS: dict[Collection, type[Base]] = {
    Collection.INSCRIPTIONS: Inscription,
    Collection.TRANSACTIONS: Transaction,
}


def _plain(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def _to_document(row: Base) -> dict:
    return {
        attr.key: getattr(row, attr.key)
        for attr in inspect(type(row)).column_attrs
    }


class SqlDocumentStore:
    """Document-style access (count/find_one/insert_one/update_one) over SQL tables."""

    def __init__(self, db_manager: DatabaseSessionManager):
        self._db = db_manager

    def _model(self, collection: Collection) -> type[Base]:
        return _MODELS[Collection(collection)]

    def _where(self, model: type[Base], predicate: dict) -> list:
        columns = inspect(model).columns
        clauses = []
        for key, value in predicate.items():
            if key not in columns:
                raise ValueError(f"Unknown field '{key}' for {model.__tablename__}")
            clauses.append(columns[key] == _plain(value))
        return clauses

    async def count(self, collection: Collection, predicate: dict) -> int:
        model = self._model(collection)
        query = select(func.count()).select_from(model).where(
            *self._where(model, predicate),
        )
        async with self._db.session() as db:
            result = await db.execute(query)
            return int(result.scalar_one())

    async def find_one(
        self, collection: Collection, predicate: dict,
    ) -> dict | None:
        model = self._model(collection)
        query = select(model).where(*self._where(model, predicate)).limit(1)
        async with self._db.session() as db:
            result = await db.execute(query)
            row = result.scalar_one_or_none()
            return _to_document(row) if row is not None else None

    async def insert_one(self, collection: Collection, document: dict) -> str:
        model = self._model(collection)
        row = model(**{k: _plain(v) for k, v in document.items()})
        async with self._db.session() as db:
            db.add(row)
            await db.commit()
            logger.debug(f"Inserted {model.__tablename__} id={row.id}")
            return row.id

    async def update_one(
        self, collection: Collection, predicate: dict, patch: dict,
    ) -> int:
        model = self._model(collection)
        where = self._where(model, predicate)
        values = {k: _plain(v) for k, v in patch.items()}
        async with self._db.session() as db:
            result = await db.execute(select(model.id).where(*where).limit(1))
            row_id = result.scalar_one_or_none()
            if row_id is None:
                return 0
            # predicate re-applied: the row may have moved since the select
            updated = await db.execute(
                update(model).where(model.id == row_id, *where).values(**values),
            )
            await db.commit()
            return updated.rowcount
