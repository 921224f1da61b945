"""
Statement builders shared by the resource services.

partial_update(): sparse UPDATE ... SET ... RETURNING from a loaded payload.
    - keys absent from the payload are left alone; present keys are written,
      including False, "" and None
    - an empty payload returns the current row without issuing an UPDATE
    - keys outside Model.UPDATABLE_COLUMNS are refused
    - owner-scoped rows add "AND <owner> = :owner"; zero rows after the
      existence check means the row belongs to someone else (Forbidden)

clear_flag(): unset a single-row flag (default address, primary author) on
    every sibling before the new holder is written.

FilterSet: optional predicates rendered as "(:p IS NULL OR <condition>)" so
    the parameter list never depends on which filters were supplied.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy import and_, bindparam, cast, or_, true, update
from werkzeug.exceptions import BadRequest, Forbidden, NotFound


def partial_update(
    session,
    model,
    entity_id: str,
    changes: Dict[str, Any],
    owner_column=None,
    owner_id: Optional[str] = None,
    not_found: str | None = None,
    forbidden: str | None = None,
):
    current = session.get(model, entity_id)
    if current is None:
        raise NotFound(not_found or f"{model.__name__} not found")

    illegal = set(changes) - model.UPDATABLE_COLUMNS
    if illegal:
        raise BadRequest(f"Fields not updatable: {', '.join(sorted(illegal))}")

    if not changes:
        if owner_column is not None and getattr(current, owner_column.key) != owner_id:
            raise Forbidden(forbidden or "You can only modify your own resources")
        return current

    stmt = update(model).where(model.id == entity_id)
    if owner_column is not None:
        stmt = stmt.where(owner_column == owner_id)
    stmt = stmt.values(**changes).returning(model)

    updated = session.execute(stmt).scalars().one_or_none()
    if updated is None:
        raise Forbidden(forbidden or "You can only modify your own resources")
    session.refresh(updated)
    return updated


def clear_flag(session, flag_column, scope_column, scope_value, keep_id: Optional[str] = None) -> None:
    """UPDATE <table> SET <flag> = false WHERE <scope> = :scope AND <flag> [AND id != :keep]."""
    model = flag_column.class_
    stmt = update(model).where(scope_column == scope_value, flag_column.is_(True))
    if keep_id is not None:
        stmt = stmt.where(model.id != keep_id)
    session.execute(stmt.values({flag_column.key: False}))


class FilterSet:
    """
    Accumulates optional filters. Every filter is always part of the
    statement; a missing value turns it into a tautology.

        filters = FilterSet()
        filters.add("min_price", q.get("min_price"), Numeric(10, 2), lambda p: Book.price >= p)
        stmt = filters.apply(select(Book))
    """

    def __init__(self):
        self._clauses = []
        self._params = {}

    def add(self, name: str, value, type_, condition: Callable):
        param = bindparam(name, value, type_=type_)
        self._params[name] = value
        self._clauses.append(or_(cast(param, type_).is_(None), condition(param)))
        return self

    def require(self, clause):
        """Unconditional predicate (e.g. is_active for customer listings)."""
        self._clauses.append(clause)
        return self

    @property
    def params(self) -> Dict[str, Any]:
        return dict(self._params)

    def clause(self):
        return and_(true(), *self._clauses)

    def apply(self, stmt):
        return stmt.where(self.clause())


def day_bounds(start: Optional[date], end: Optional[date]):
    """Inclusive calendar-day range as [start 00:00 UTC, end + 1 day 00:00 UTC)."""
    lower = datetime.combine(start, time.min, tzinfo=timezone.utc) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc) if end else None
    return lower, upper
