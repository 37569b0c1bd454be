"""
Mapper introspection helpers used by BaseRepository before it writes.

The unique pre-check is best-effort: it gives a precise DuplicateError in the
common case, while concurrent writers are still stopped by the database
constraint (mapped by `db_error_handler`).
"""

from typing import Any

from sqlalchemy import UniqueConstraint, and_, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Return the kwarg keys that are not mapped attributes of `model`.
    """
    allowed = {attr.key for attr in sa_inspect(model).attrs}
    return [k for k in kwargs if k not in allowed]


def get_column_names(model) -> set[str]:
    return {col.key for col in sa_inspect(model).columns}


def get_unique_constraints(model) -> list[tuple[str | None, list[str]]]:
    """
    (constraint name, column names) for every single- or multi-column unique rule
    on the model's table. Column(unique=True) is included: SQLAlchemy turns it into
    a UniqueConstraint named by the metadata naming convention.
    """
    table = model.__table__
    rules: list[tuple[str | None, list[str]]] = []

    for constraint in table.constraints:
        if isinstance(constraint, UniqueConstraint):
            # unnamed constraints carry a sentinel until DDL time
            name = constraint.name if isinstance(constraint.name, str) else None
            rules.append((name, [c.name for c in constraint.columns]))

    # table.constraints is an unordered set; report conflicts in column order
    positions = {name: i for i, name in enumerate(table.columns.keys())}
    rules.sort(key=lambda rule: min(positions[c] for c in rule[1]))
    return rules


async def find_unique_conflicts(
    db: AsyncSession,
    model,
    values: dict[str, Any],
    exclude_id: Any = None,
) -> list[tuple[str | None, list[str]]]:
    """
    Query for existing rows that `values` would collide with.

    Args:
        exclude_id: primary key of the row being updated, so it does not
            conflict with itself.

    Returns:
        The (constraint name, columns) rules that would be violated, in table order.
    """
    conflicts = []
    for name, cols in get_unique_constraints(model):
        if not all(c in values for c in cols):
            continue

        conditions = [getattr(model, c) == values[c] for c in cols]
        if exclude_id is not None:
            conditions.append(model.id != exclude_id)

        result = await db.execute(select(model.id).where(and_(*conditions)).limit(1))
        if result.scalar_one_or_none() is not None:
            conflicts.append((name, cols))

    return conflicts
