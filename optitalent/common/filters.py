"""Query-string driven WHERE / ORDER BY helpers for list endpoints."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from sqlalchemy import Select, String, and_, cast, or_
from sqlalchemy.orm import ColumnProperty, InstrumentedAttribute

# Filter-key suffix -> predicate builder. A key without a known suffix is
# an equality test on the column of the same name.
_OPERATORS: dict[str, Callable[[InstrumentedAttribute, Any], Any]] = {
    "__ilike": lambda col, value: col.ilike(_contains(value), escape="\\"),
    "__from": lambda col, value: col >= value,
    "__to": lambda col, value: col <= value,
    "__in": lambda col, value: col.in_(value),
}


def _contains(value: Any) -> str:
    # LIKE wildcards in user input match literally
    text = str(value).replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{text}%"


def _split_key(key: str) -> tuple[str, Callable[[InstrumentedAttribute, Any], Any]]:
    for suffix, op in _OPERATORS.items():
        if key.endswith(suffix):
            return key.removesuffix(suffix), op
    return key, lambda col, value: col == value


def apply_filters(query: Select, model: Any, filters: dict[str, Any]) -> Select:
    """AND together one predicate per non-``None`` entry of *filters*.

    ``{"department_id": d, "date_of_joining__from": day, "first_name__ilike": "pri"}``
    becomes ``department_id = d AND date_of_joining >= day AND first_name ILIKE '%pri%'``.
    Keys naming no mapped column of *model* are dropped.
    """
    conditions = []
    for key, value in filters.items():
        if value is None:
            continue
        name, op = _split_key(key)
        col = _get_column(model, name)
        if col is not None:
            conditions.append(op(col, value))
    return query.where(and_(*conditions)) if conditions else query


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Free-text box: substring match on any of *columns*."""
    term = (search or "").strip()
    if not term:
        return query
    matches = [
        cast(col, String).ilike(_contains(term), escape="\\")
        for col in map(lambda name: _get_column(model, name), columns)
        if col is not None
    ]
    return query.where(or_(*matches)) if matches else query


def apply_sorting(query: Select, model: Any, sort: Optional[str]) -> Select:
    """``"first_name"`` sorts ascending, ``"-created_at"`` descending.

    A valid *sort* replaces any ordering already on *query*.
    """
    if not sort:
        return query
    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(None).order_by(col.desc() if sort.startswith("-") else col.asc())


def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    # Mapped columns only; relationships are skipped
    attr = getattr(model, name, None)
    if isinstance(attr, InstrumentedAttribute) and isinstance(attr.property, ColumnProperty):
        return attr
    return None
