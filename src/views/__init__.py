"""Declarative joined views and their execution."""

from src.views.builder import (
    COLLECTIONS,
    FORBIDDEN_FIELDS,
    AnyOf,
    Contains,
    FilterOp,
    Join,
    PipelineSpec,
    Size,
    Sort,
    Term,
    Total,
    build_view,
)
from src.views.executor import count_rows, fetch_one, fetch_rows

__all__ = [
    "COLLECTIONS",
    "FORBIDDEN_FIELDS",
    "AnyOf",
    "Contains",
    "FilterOp",
    "Join",
    "PipelineSpec",
    "Size",
    "Sort",
    "Term",
    "Total",
    "build_view",
    "count_rows",
    "fetch_one",
    "fetch_rows",
]
