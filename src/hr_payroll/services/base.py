"""Generic storage service for one entity type.

Reads of lists go through the query cache; every write commits a single
statement and then invalidates the cached queries of the entity type (and
of any entity types the write cascades to) before returning.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Generic, TypeVar

from sqlalchemy import Select, delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import EntityNotFoundError
from hr_payroll.models import Base
from hr_payroll.services.cache import ENTITY_TTL, QueryCache, cache_key

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def clamp_pagination(limit: int | None, offset: int | None) -> tuple[int, int]:
    """Clamp limit to [1, MAX_LIMIT] and offset to >= 0."""
    limit = DEFAULT_LIMIT if limit is None else limit
    offset = 0 if offset is None else offset
    return min(max(limit, 1), MAX_LIMIT), max(offset, 0)


class EntityService(Generic[ModelT]):
    """CRUD operations for one model with cached list queries.

    Subclasses set:
    - model: the ORM class
    - entity: cache namespace, also used for the stats prefix
    - label: human name used in error messages
    - search_columns: text columns matched by the free-text search
    - cascades_to: entity namespaces whose rows are removed with this one
    """

    model: ClassVar[type[Base]]
    entity: ClassVar[str]
    label: ClassVar[str]
    search_columns: ClassVar[tuple[Any, ...]] = ()
    cascades_to: ClassVar[tuple[str, ...]] = ()

    def __init__(self, session: AsyncSession, cache: QueryCache):
        self.session = session
        self.cache = cache

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def base_query(self) -> Select[Any]:
        return select(self.model)

    def order_clause(self) -> tuple[Any, ...]:
        return (self.model.created_at.desc(),)

    def search_clause(self, search: str) -> Any:
        """Case-insensitive substring match; LIKE wildcards in the text match literally."""
        escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        return or_(*(column.ilike(pattern, escape="\\") for column in self.search_columns))

    def row_to_dict(self, row: Any) -> dict[str, Any]:
        return row.to_dict()

    async def _fetch_list(self, search: str | None, limit: int, offset: int) -> list[dict[str, Any]]:
        query = self.base_query()
        if search and self.search_columns:
            query = query.where(self.search_clause(search))
        query = query.order_by(*self.order_clause()).offset(offset).limit(limit)
        result = await self.session.execute(query)
        return [self.row_to_dict(row) for row in self.scalars_or_rows(result)]

    def scalars_or_rows(self, result: Any) -> list[Any]:
        return list(result.scalars().all())

    async def list(
        self,
        search: str | None = None,
        limit: int | None = DEFAULT_LIMIT,
        offset: int | None = 0,
    ) -> list[dict[str, Any]]:
        """List entities, newest first, with optional case-insensitive search."""
        limit, offset = clamp_pagination(limit, offset)
        search = (search or "").strip() or None
        key = cache_key(self.entity, search, limit, offset)
        return await self.cache.get_or_set(
            key,
            lambda: self._fetch_list(search, limit, offset),
            ttl=ENTITY_TTL.get(self.entity),
        )

    async def get(self, entity_id: str) -> ModelT | None:
        return await self.session.get(self.model, entity_id)

    async def require(self, entity_id: str) -> ModelT:
        """Get an entity or raise EntityNotFoundError."""
        obj = await self.get(entity_id)
        if obj is None:
            raise EntityNotFoundError(self.label, entity_id)
        return obj

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def prepare_create(self, values: dict[str, Any]) -> dict[str, Any]:
        """Hook to normalize values before insertion."""
        return values

    async def prepare_update(self, obj: ModelT, changes: dict[str, Any]) -> dict[str, Any]:
        """Hook to normalize changes before they are applied to obj."""
        return changes

    async def create(self, values: dict[str, Any]) -> ModelT:
        values = await self.prepare_create(dict(values))
        obj = self.model(**values)
        self.session.add(obj)
        await self._commit()
        await self.session.refresh(obj)
        self.invalidate()
        logger.info("Created %s %s", self.label, obj.id)
        return obj

    async def update(self, entity_id: str, changes: dict[str, Any]) -> ModelT:
        obj = await self.require(entity_id)
        changes = await self.prepare_update(obj, dict(changes))
        for field, value in changes.items():
            setattr(obj, field, value)
        await self._commit()
        await self.session.refresh(obj)
        self.invalidate()
        logger.info("Updated %s %s", self.label, entity_id)
        return obj

    async def delete(self, entity_id: str) -> None:
        result = await self.session.execute(
            delete(self.model).where(self.model.id == entity_id)
        )
        if not result.rowcount:
            await self.session.rollback()
            raise EntityNotFoundError(self.label, entity_id)
        await self._commit()
        self.invalidate(*self.cascades_to)
        logger.info("Deleted %s %s", self.label, entity_id)

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise

    def invalidate(self, *extra_entities: str) -> None:
        """Drop cached queries of this entity type, cascaded types and stats."""
        self.cache.invalidate_entities(self.entity, *extra_entities, "stats")
