"""Declarative view pipelines.

A view is described as data: the collection to read, the predicates to AND
together, the joins to resolve, the fields to derive from joined data, the
sort order and the allow-list of output fields. ``build_view`` checks such a
description against the models and returns a ``PipelineSpec``; running it is
the job of ``src.views.executor``.

Example::

    spec = build_view(
        "videos",
        filters=(Term("owner_id", owner_id),),
        joins=(Join("users", "owner_id", "id", "owner", shape=("id", "username"), singular=True),),
        shape=("id", "title", "owner"),
        sort=Sort("view_count", descending=True),
    )
"""

import enum
from dataclasses import dataclass, replace
from typing import Any

from sqlalchemy import JSON, Column
from sqlalchemy import inspect as sa_inspect

from src.models import Comment, Like, Playlist, Subscription, Tweet, User, Video
from src.models.base import Base, parse_id
from src.utils.errors import ValidationError

COLLECTIONS: dict[str, type[Base]] = {
    "users": User,
    "videos": Video,
    "comments": Comment,
    "likes": Like,
    "playlists": Playlist,
    "subscriptions": Subscription,
    "tweets": Tweet,
}

# Never shaped into any view, whatever the caller asks for
FORBIDDEN_FIELDS = frozenset({"password_hash", "refresh_token"})


class FilterOp(str, enum.Enum):
    """How a predicate term compares a field with its value."""

    EQ = "eq"
    IN = "in"
    ICONTAINS = "icontains"
    PRESENT = "present"


@dataclass(frozen=True)
class Term:
    field: str
    value: Any = None
    op: FilterOp = FilterOp.EQ


@dataclass(frozen=True)
class AnyOf:
    """Terms ORed together; the group itself is ANDed with the other filters."""

    terms: tuple[Term, ...]


Predicate = Term | AnyOf


@dataclass(frozen=True)
class Sort:
    field: str = "created_at"
    descending: bool = False


@dataclass(frozen=True)
class Join:
    """Left-outer join emitting the matched rows under ``output_field``.

    ``singular`` keeps only the first match (``{}`` when nothing matched).
    ``count_only`` emits the number of matches instead of the rows. When the
    local key holds a list of ids the output follows the list order.
    ``filters`` restrict which target rows can match.
    """

    target: str
    local_key: str
    foreign_key: str
    output_field: str
    shape: tuple[str, ...] | None = None
    singular: bool = False
    count_only: bool = False
    joins: tuple["Join", ...] = ()
    sort: Sort | None = None
    filters: tuple[Predicate, ...] = ()


@dataclass(frozen=True)
class Size:
    """Number of elements of a joined list (or of a list column)."""

    source: str
    output: str


@dataclass(frozen=True)
class Contains:
    """Whether any element of a joined list has ``key == value``."""

    source: str
    key: str
    value: Any
    output: str


@dataclass(frozen=True)
class Total:
    """Sum of ``field`` over the elements of a joined list."""

    source: str
    field: str
    output: str


Derivation = Size | Contains | Total


@dataclass(frozen=True)
class PipelineSpec:
    collection: str
    filters: tuple[Predicate, ...]
    joins: tuple[Join, ...]
    derive: tuple[Derivation, ...]
    shape: tuple[str, ...]
    sort: Sort


def model_for(collection: str) -> type[Base]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValidationError(f"Unknown collection: {collection}", details=[collection]) from None


def columns_of(model: type[Base]) -> dict[str, Column]:
    """Map attribute names to table columns."""
    return {attr.key: attr.columns[0] for attr in sa_inspect(model).column_attrs}


def is_id_field(name: str) -> bool:
    return name == "id" or name.endswith("_id")


def _is_list_column(column: Column) -> bool:
    return isinstance(column.type, JSON)


def _check_term(collection: str, columns: dict[str, Column], term: Term, problems: list[str]) -> Term:
    label = f"{collection}.{term.field}"
    column = columns.get(term.field)
    if column is None:
        problems.append(f"{label}: unknown field")
        return term
    if term.field in FORBIDDEN_FIELDS:
        problems.append(f"{label}: field cannot be filtered")
        return term
    if term.op is FilterOp.PRESENT:
        return term
    if _is_list_column(column):
        problems.append(f"{label}: list fields only support presence filters")
        return term

    if term.op is FilterOp.ICONTAINS:
        if is_id_field(term.field) or not isinstance(term.value, str):
            problems.append(f"{label}: substring match needs a text field and a string value")
        return term

    if is_id_field(term.field):
        if term.op is FilterOp.IN:
            return replace(term, value=tuple(parse_id(v, term.field) for v in term.value))
        return replace(term, value=parse_id(term.value, term.field))
    if term.op is FilterOp.IN:
        return replace(term, value=tuple(term.value))
    return term


def _check_predicate(
    collection: str, columns: dict[str, Column], predicate: Predicate, problems: list[str]
) -> Predicate:
    if isinstance(predicate, AnyOf):
        if not predicate.terms:
            problems.append(f"{collection}: empty AnyOf group")
        return AnyOf(tuple(_check_term(collection, columns, t, problems) for t in predicate.terms))
    return _check_term(collection, columns, predicate, problems)


def _check_sort(collection: str, columns: dict[str, Column], sort: Sort, problems: list[str]) -> None:
    column = columns.get(sort.field)
    if column is None or sort.field in FORBIDDEN_FIELDS or _is_list_column(column):
        problems.append(f"{collection}.{sort.field}: not a sortable field")


def _check_join(parent: str, join: Join, problems: list[str]) -> Join:
    parent_columns = columns_of(model_for(parent))
    target_columns = columns_of(model_for(join.target))
    label = f"{parent}->{join.target} as {join.output_field}"

    if join.local_key not in parent_columns:
        problems.append(f"{label}: unknown local key {join.local_key}")
    if join.foreign_key not in target_columns:
        problems.append(f"{label}: unknown foreign key {join.foreign_key}")

    filters = tuple(_check_predicate(join.target, target_columns, p, problems) for p in join.filters)
    join = replace(join, filters=filters)

    if join.count_only:
        if join.shape is not None or join.joins or join.singular:
            problems.append(f"{label}: count-only joins take no shape, nested joins or singular flag")
        return join

    nested = tuple(_check_join(join.target, j, problems) for j in join.joins)
    nested_outputs = {j.output_field for j in nested}

    if join.shape is None:
        shape = tuple(
            name for name in target_columns if name not in FORBIDDEN_FIELDS
        ) + tuple(sorted(nested_outputs - set(target_columns)))
    else:
        shape = join.shape
        for name in shape:
            if name in FORBIDDEN_FIELDS:
                problems.append(f"{label}: field {name} can never be shaped")
            elif name not in target_columns and name not in nested_outputs:
                problems.append(f"{label}: unknown field {name}")

    sort = join.sort
    if sort is not None:
        _check_sort(join.target, target_columns, sort, problems)

    return replace(join, shape=shape, joins=nested)


def build_view(
    entity_kind: str,
    filters: tuple[Predicate, ...] | list[Predicate] = (),
    joins: tuple[Join, ...] | list[Join] = (),
    shape: tuple[str, ...] | list[str] = (),
    sort: Sort | None = None,
    derive: tuple[Derivation, ...] | list[Derivation] = (),
) -> PipelineSpec:
    """Validate a view description and return its pipeline specification.

    Raises:
        InvalidReferenceError: an id filter value is not a well-formed id
        ValidationError: unknown collections or fields, forbidden fields in
            the shape, unsortable sort field; ``details`` lists every problem
    """
    model = model_for(entity_kind)
    columns = columns_of(model)
    problems: list[str] = []

    checked_filters = tuple(_check_predicate(entity_kind, columns, p, problems) for p in filters)
    checked_joins = tuple(_check_join(entity_kind, j, problems) for j in joins)

    sort = sort or Sort()
    _check_sort(entity_kind, columns, sort, problems)

    available = set(columns) | {j.output_field for j in checked_joins}
    join_outputs = {j.output_field for j in checked_joins}
    checked_derive: list[Derivation] = []
    for d in derive:
        if d.source not in available:
            problems.append(f"{entity_kind}.{d.output}: unknown source {d.source}")
        elif isinstance(d, Total) and d.source not in join_outputs:
            problems.append(f"{entity_kind}.{d.output}: totals need a joined list")
        if isinstance(d, Contains) and d.value is not None and is_id_field(d.key):
            d = replace(d, value=parse_id(d.value, d.key))
        available.add(d.output)
        checked_derive.append(d)

    if not shape:
        problems.append(f"{entity_kind}: empty shape")
    for name in shape:
        if name in FORBIDDEN_FIELDS:
            problems.append(f"{entity_kind}.{name}: field can never be shaped")
        elif name not in available:
            problems.append(f"{entity_kind}.{name}: unknown field")

    if problems:
        raise ValidationError("Invalid view: " + "; ".join(problems), details=problems)

    return PipelineSpec(
        collection=entity_kind,
        filters=checked_filters,
        joins=checked_joins,
        derive=tuple(checked_derive),
        shape=tuple(shape),
        sort=sort,
    )
