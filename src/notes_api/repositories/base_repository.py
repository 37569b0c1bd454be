"""
Base repository class providing common database operations.

Repositories only flush; committing (or rolling back) is the service layer's
job, so that one request is one transaction no matter how many repository
calls it makes.

Model-specific repositories inherit from `BaseRepository` and add their own
queries where the generic ones are not enough.
"""
import time
import logging
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.database.base import Base
from notes_api.exceptions.base import (
    RepositoryError,
    DuplicateError,
    NotFoundError,
    InvalidFieldError,
    UnknownSortPropertyError,
)
from notes_api.exceptions.mapper import db_error_handler
from notes_api.schemas.page import Direction, PageRequest
from .model_inspection import find_unknown_model_kwargs, find_unique_conflicts, get_column_names

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


# helper: mask sensitive keys if you ever need to log values (avoid logging raw secrets)
_SENSITIVE_KEYS = {"password", "secret", "token", "access_token", "refresh_token"}


def _mask_sensitive(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Return a shallow copy with sensitive values replaced by '***'.
    """
    return {k: ("***" if k.lower() in _SENSITIVE_KEYS else v) for k, v in payload.items()}


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD and paging operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.

    Class attributes:
        sortable_fields: attribute names a page request may sort by. None means
            every mapped column.
    """

    sortable_fields: frozenset[str] | None = None

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (User, not User())
            db: The async database session
        """
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, **kwargs) -> ModelType:
        """
        Create an entity with validation + DB write.

        Raises:
            InvalidFieldError: unknown attribute names in kwargs.
            DuplicateError: a unique rule (pre-check or DB constraint) is violated.
            RepositoryError: any other database failure.
        """
        logger.debug(
            "repo.create.start",
            extra={"model": self.model_name, "provided_keys": sorted(kwargs)},
        )

        self._check_known_fields("create", kwargs)
        await self._check_unique("create", kwargs)

        start = time.perf_counter()
        async with db_error_handler(self.db, self.model_name):
            entity = self.model(**kwargs)
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    # =================================================================================================================
    # Read (single entity)
    # =================================================================================================================

    async def get_by_id(self, entity_id: int) -> ModelType | None:
        """
        Get an entity by its primary key.

        Returns:
            The entity if found, otherwise None

        Raises:
            RepositoryError: If an error occurs during retrieval.
        """
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Error retrieving {self.model_name} by ID {entity_id}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name}") from e

    async def get_by_id_or_raise(self, entity_id: int) -> ModelType:
        """
        Raises:
            NotFoundError: If the entity is not found in the database.
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.model_name} with ID {entity_id} not found")
        return entity

    async def find_by_field(self, field: str, value: Any) -> ModelType | None:
        """
        Find a single entity by any mapped column.

        Raises:
            InvalidFieldError: If `field` is not a column of the model.
        """
        if field not in get_column_names(self.model):
            raise InvalidFieldError(f"Unknown field for {self.model_name}: {field}", fields=[field])
        try:
            result = await self.db.execute(
                select(self.model).where(getattr(self.model, field) == value).limit(1)
            )
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Error finding {self.model_name} by {field}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name}") from e

    async def exists(self, *conditions) -> bool:
        try:
            result = await self.db.execute(select(self.model.id).where(*conditions).limit(1))
            return result.scalar_one_or_none() is not None
        except Exception as e:
            logger.error(f"Error checking {self.model_name} existence: {e}")
            raise RepositoryError(f"Failed to query {self.model_name}") from e

    async def count(self, *conditions) -> int:
        try:
            result = await self.db.execute(
                select(func.count()).select_from(self.model).where(*conditions)
            )
            return int(result.scalar_one())
        except Exception as e:
            logger.error(f"Error counting {self.model_name}: {e}")
            raise RepositoryError(f"Failed to count {self.model_name}") from e

    # =================================================================================================================
    # Read (pages)
    # =================================================================================================================

    async def get_page(self, page_request: PageRequest, *conditions) -> tuple[list[ModelType], int]:
        """
        Fetch one page of entities matching `conditions`.

        Args:
            page_request: page index, size and sort orders. Results are ordered
                by id after any requested sorts so paging is stable.
            *conditions: SQLAlchemy filter expressions.

        Returns:
            (entities on the page, total number of matching rows)

        Raises:
            UnknownSortPropertyError: a sort property is not sortable on this model.
            RepositoryError: If the query fails.
        """
        order_by = self._resolve_sort(page_request)

        try:
            total = await self.count(*conditions)
            result = await self.db.execute(
                select(self.model)
                .where(*conditions)
                .order_by(*order_by)
                .offset(page_request.offset)
                .limit(page_request.size)
            )
            entities = list(result.scalars().all())
        except RepositoryError:
            raise
        except Exception as e:
            logger.error(f"Error paging {self.model_name}: {e}")
            raise RepositoryError(f"Failed to retrieve {self.model_name} page") from e

        logger.debug(
            "repo.page.success",
            extra={
                "model": self.model_name,
                "page": page_request.page,
                "size": page_request.size,
                "returned": len(entities),
                "total": total,
            },
        )
        return entities, total

    def _resolve_sort(self, page_request: PageRequest) -> list:
        allowed = self.sortable_fields or get_column_names(self.model)
        order_by = []
        for order in page_request.sort:
            if order.property not in allowed:
                logger.info(
                    "repo.page.unknown_sort_property",
                    extra={"model": self.model_name, "property": order.property},
                )
                raise UnknownSortPropertyError(order.property, self.model_name)
            column = getattr(self.model, order.property)
            order_by.append(column.desc() if order.direction is Direction.DESC else column.asc())
        order_by.append(self.model.id.asc())
        return order_by

    # =================================================================================================================
    # Update / Delete
    # =================================================================================================================

    async def update(self, entity: ModelType, **fields) -> ModelType:
        """
        Set attributes on a loaded entity and flush.

        Raises:
            InvalidFieldError: unknown attribute names.
            DuplicateError: the new values collide with another row.
            RepositoryError: any other database failure.
        """
        self._check_known_fields("update", fields)
        await self._check_unique("update", fields, exclude_id=entity.id)

        async with db_error_handler(self.db, self.model_name):
            for key, value in fields.items():
                setattr(entity, key, value)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.update.success",
            extra={"model": self.model_name, "id": entity.id, "updated_fields": sorted(fields)},
        )
        return entity

    async def delete(self, entity: ModelType) -> None:
        async with db_error_handler(self.db, self.model_name):
            await self.db.delete(entity)
            await self.db.flush()
        logger.info("repo.delete.success", extra={"model": self.model_name, "id": entity.id})

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    def _check_known_fields(self, operation: str, values: dict[str, Any]) -> None:
        unknown = find_unknown_model_kwargs(self.model, values)
        if unknown:
            logger.info(
                f"repo.{operation}.invalid_fields",
                extra={"model": self.model_name, "invalid_fields": sorted(unknown)},
            )
            raise InvalidFieldError(
                f"Unknown field(s) for {self.model_name}: {', '.join(unknown)}", fields=unknown
            )

    async def _check_unique(self, operation: str, values: dict[str, Any], exclude_id: Any = None) -> None:
        conflicts = await find_unique_conflicts(self.db, self.model, values, exclude_id=exclude_id)
        if not conflicts:
            return

        constraint, cols = conflicts[0]
        logger.info(
            f"repo.{operation}.duplicate_precheck",
            extra={
                "model": self.model_name,
                "constraint": constraint,
                "conflict_fields": cols,
                "values": _mask_sensitive({c: values[c] for c in cols}),
            },
        )
        raise DuplicateError(
            f"{self.model_name} already exists for field(s): {', '.join(cols)}",
            fields=cols,
            constraint=constraint,
        )
