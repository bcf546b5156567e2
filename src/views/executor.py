"""Run pipeline specifications against the database.

The base collection is read with a single SELECT (filters, total order,
window). Joins are resolved level by level with one batched ``IN`` query per
join, or a grouped ``COUNT`` for count-only joins, the same strategy as
SQLAlchemy's ``selectinload``. Only the columns a view needs are selected.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.base import Base
from src.views.builder import (
    AnyOf,
    Contains,
    Derivation,
    FilterOp,
    Join,
    PipelineSpec,
    Predicate,
    Size,
    Sort,
    Term,
    Total,
    columns_of,
    model_for,
)

# Keeps IN lists well below driver bind-parameter limits
IN_CHUNK_SIZE = 500


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _term_clause(model: type[Base], term: Term) -> ColumnElement[bool]:
    column = columns_of(model)[term.field]
    if term.op is FilterOp.PRESENT:
        return column.is_not(None)
    if term.op is FilterOp.ICONTAINS:
        return column.ilike(f"%{_escape_like(term.value)}%", escape="\\")
    if term.op is FilterOp.IN:
        return column.in_(term.value)
    if term.value is None:
        return column.is_(None)
    return column == term.value


def where_clauses(model: type[Base], filters: Iterable[Predicate]) -> list[ColumnElement[bool]]:
    clauses = []
    for predicate in filters:
        if isinstance(predicate, AnyOf):
            clauses.append(or_(*(_term_clause(model, t) for t in predicate.terms)))
        else:
            clauses.append(_term_clause(model, predicate))
    return clauses


def order_by(model: type[Base], sort: Sort) -> list[ColumnElement]:
    """Declared sort first, then id ascending so the order is total."""
    columns = columns_of(model)
    column = columns[sort.field]
    primary = column.desc() if sort.descending else column.asc()
    if sort.field == "id":
        return [primary]
    return [primary, columns["id"].asc()]


def _select(model: type[Base], names: Iterable[str]) -> Select:
    columns = columns_of(model)
    return select(*(columns[name].label(name) for name in sorted(set(names))))


def _local_values(row: dict[str, Any], key: str) -> list[Any]:
    value = row.get(key)
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _chunks(values: Sequence[Any], size: int = IN_CHUNK_SIZE) -> Iterable[Sequence[Any]]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


def project(row: dict[str, Any], shape: Sequence[str]) -> dict[str, Any]:
    """Keep only allow-listed fields."""
    return {name: row[name] for name in shape if name in row}


def apply_derivations(row: dict[str, Any], derive: Iterable[Derivation]) -> None:
    for d in derive:
        source = row.get(d.source)
        if isinstance(d, Size):
            # bool is an int too, but count-only joins never produce one
            row[d.output] = source if isinstance(source, int) else len(source or [])
        elif isinstance(d, Contains):
            row[d.output] = d.value is not None and any(
                isinstance(item, dict) and item.get(d.key) == d.value for item in source or []
            )
        elif isinstance(d, Total):
            row[d.output] = sum(item.get(d.field) or 0 for item in source or [])


async def _count_matches(db: AsyncSession, join: Join, keys: list[Any]) -> dict[Any, int]:
    target = model_for(join.target)
    fk = columns_of(target)[join.foreign_key]
    counts: dict[Any, int] = {}
    for chunk in _chunks(keys):
        result = await db.execute(
            select(fk, func.count())
            .where(fk.in_(chunk), *where_clauses(target, join.filters))
            .group_by(fk)
        )
        counts.update({key: count for key, count in result.all()})
    return counts


async def _fetch_matches(db: AsyncSession, join: Join, keys: list[Any]) -> list[dict[str, Any]]:
    target = model_for(join.target)
    columns = columns_of(target)
    fk = columns[join.foreign_key]
    needed = {"id", join.foreign_key}
    needed |= {name for name in join.shape or () if name in columns}
    needed |= {nested.local_key for nested in join.joins}

    children: list[dict[str, Any]] = []
    for chunk in _chunks(keys):
        stmt = (
            _select(target, needed)
            .where(fk.in_(chunk), *where_clauses(target, join.filters))
            .order_by(*order_by(target, join.sort or Sort()))
        )
        result = await db.execute(stmt)
        children.extend(dict(row._mapping) for row in result.all())
    return children


async def resolve_joins(db: AsyncSession, rows: list[dict[str, Any]], joins: Iterable[Join]) -> None:
    """Attach every join's output to ``rows`` in place."""
    for join in joins:
        keys = list(dict.fromkeys(
            value for row in rows for value in _local_values(row, join.local_key)
        ))

        if join.count_only:
            counts = await _count_matches(db, join, keys) if keys else {}
            for row in rows:
                row[join.output_field] = sum(
                    counts.get(value, 0) for value in _local_values(row, join.local_key)
                )
            continue

        children = await _fetch_matches(db, join, keys) if keys else []
        await resolve_joins(db, children, join.joins)

        grouped: dict[Any, list[dict[str, Any]]] = defaultdict(list)
        for child in children:
            grouped[child[join.foreign_key]].append(project(child, join.shape or ()))

        for row in rows:
            matched = [
                dict(child)
                for value in _local_values(row, join.local_key)
                for child in grouped.get(value, [])
            ]
            if join.singular:
                row[join.output_field] = matched[0] if matched else {}
            else:
                row[join.output_field] = matched


async def fetch_rows(
    db: AsyncSession,
    spec: PipelineSpec,
    offset: int | None = None,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Run a pipeline and return shaped records in the pipeline's total order."""
    model = model_for(spec.collection)
    columns = columns_of(model)

    needed = {"id"}
    needed |= {name for name in spec.shape if name in columns}
    needed |= {join.local_key for join in spec.joins}
    needed |= {d.source for d in spec.derive if d.source in columns}

    stmt = (
        _select(model, needed)
        .where(*where_clauses(model, spec.filters))
        .order_by(*order_by(model, spec.sort))
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)

    result = await db.execute(stmt)
    rows = [dict(row._mapping) for row in result.all()]

    await resolve_joins(db, rows, spec.joins)
    for row in rows:
        apply_derivations(row, spec.derive)
    return [project(row, spec.shape) for row in rows]


async def fetch_one(db: AsyncSession, spec: PipelineSpec) -> dict[str, Any] | None:
    rows = await fetch_rows(db, spec, limit=1)
    return rows[0] if rows else None


async def count_rows(db: AsyncSession, spec: PipelineSpec) -> int:
    """Count every row matching the pipeline's filters (no window)."""
    model = model_for(spec.collection)
    stmt = select(func.count()).select_from(model).where(*where_clauses(model, spec.filters))
    result = await db.execute(stmt)
    return result.scalar_one()
