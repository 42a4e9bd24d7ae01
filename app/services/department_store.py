"""
Department store — persistence port for the hierarchy engine.

Plain CRUD over the ``department`` table plus the two accessors the
materialized-path design depends on: a prefix scan on ``dep_path``
(subtree / descendants) and an equality lookup on ``parent_id``
(children).  Nothing here commits; transaction boundaries belong to
``hierarchy_service``.

``lock_hierarchy`` takes the transaction-scoped exclusive lock that
serializes structural writes.
"""

import logging

from flask import current_app
from sqlalchemy import func

from app.extensions import db
from app.models.organization import Department
from app.services import path_codec

logger = logging.getLogger(__name__)

# Used when no application config provides HIERARCHY_LOCK_KEY.
_DEFAULT_LOCK_KEY = 7301

# Sibling ordering used by every list accessor.
_SIBLING_ORDER = (Department.sort_order, Department.id)


# =========================================================================
# Locking
# =========================================================================


def lock_hierarchy() -> None:
    """
    Take the exclusive hierarchy lock for the current transaction.

    PostgreSQL and SQL Server get a transaction-owned advisory lock that
    is released on commit or rollback.  SQLite has no advisory locks;
    its database-level write lock already serializes writers.
    """
    key = current_app.config.get("HIERARCHY_LOCK_KEY", _DEFAULT_LOCK_KEY)
    dialect = db.engine.dialect.name

    if dialect == "postgresql":
        db.session.execute(db.text("SELECT pg_advisory_xact_lock(:key)"), {"key": key})
    elif dialect == "mssql":
        resource = f"department-hierarchy-{key}"
        status = db.session.execute(
            db.text(
                "DECLARE @result int; "
                "EXEC @result = sp_getapplock @Resource = :resource, "
                "@LockMode = 'Exclusive', @LockOwner = 'Transaction'; "
                "SELECT @result"
            ),
            {"resource": resource},
        ).scalar()
        # 0 = granted, 1 = granted after waiting; negative = timeout,
        # cancelled, deadlock victim or error.
        if status is None or status < 0:
            raise RuntimeError(
                f"Could not acquire hierarchy lock {resource!r} (status {status})."
            )
    else:
        logger.debug("No advisory lock available on %s; relying on row locks", dialect)


def _locked(statement):
    """Add FOR UPDATE and refresh any instances already in the session."""
    return statement.with_for_update().execution_options(populate_existing=True)


# =========================================================================
# Single-row accessors
# =========================================================================


def get(department_id: int, for_update: bool = False) -> Department | None:
    """Return a department by primary key, or None if not found."""
    if department_id is None:
        return None
    if not for_update:
        return db.session.get(Department, department_id)
    statement = db.select(Department).where(Department.id == department_id)
    return db.session.execute(_locked(statement)).scalar_one_or_none()


def get_by_code(code: str) -> Department | None:
    """Return the department with this exact code, if any."""
    return Department.query.filter(Department.code == code).first()


def name_taken(name: str, exclude_id: int | None = None) -> bool:
    """True if another department already uses ``name``."""
    query = db.session.query(Department.id).filter(Department.name == name)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def code_taken(code: str, exclude_id: int | None = None) -> bool:
    """True if another department already uses ``code``."""
    query = db.session.query(Department.id).filter(Department.code == code)
    if exclude_id is not None:
        query = query.filter(Department.id != exclude_id)
    return db.session.query(query.exists()).scalar()


# =========================================================================
# Multi-row accessors
# =========================================================================


def get_many(department_ids: list[int]) -> list[Department]:
    """Batch-fetch departments by id, ordered by level."""
    if not department_ids:
        return []
    return (
        Department.query.filter(Department.id.in_(department_ids))
        .order_by(Department.level, *_SIBLING_ORDER)
        .all()
    )


def list_all(for_update: bool = False) -> list[Department]:
    """Return every department, shallowest first, siblings by sort order."""
    statement = db.select(Department).order_by(Department.level, *_SIBLING_ORDER)
    if for_update:
        statement = _locked(statement)
    return list(db.session.execute(statement).scalars())


def list_by_path() -> list[Department]:
    """Return every department ordered by materialized path."""
    return Department.query.order_by(Department.dep_path).all()


def find_by_parent_id(parent_id: int | None) -> list[Department]:
    """
    Return the direct children of ``parent_id`` ordered by sort order.

    ``parent_id=None`` returns the root departments.
    """
    query = Department.query
    if parent_id is None:
        query = query.filter(Department.parent_id.is_(None))
    else:
        query = query.filter(Department.parent_id == parent_id)
    return query.order_by(*_SIBLING_ORDER).all()


def count_by_parent_id(parent_id: int) -> int:
    """Return the number of direct children of a department."""
    return (
        db.session.query(func.count(Department.id))
        .filter(Department.parent_id == parent_id)
        .scalar()
    )


def find_by_path_prefix(
    path: str,
    include_self: bool = True,
    for_update: bool = False,
) -> list[Department]:
    """
    Return the subtree rooted at ``path`` via an indexed prefix scan.

    Args:
        path:         Materialized path of the subtree root.
        include_self: If False, return strict descendants only.
        for_update:   Lock the returned rows for the current transaction.

    Returns:
        Departments ordered shallowest first, siblings by sort order.
    """
    condition = Department.dep_path.startswith(
        path_codec.descendant_prefix(path), autoescape=True
    )
    if include_self:
        condition = db.or_(Department.dep_path == path, condition)

    statement = (
        db.select(Department)
        .where(condition)
        .order_by(Department.level, *_SIBLING_ORDER)
    )
    if for_update:
        statement = _locked(statement)
    return list(db.session.execute(statement).scalars())


def find_by_level(level: int) -> list[Department]:
    """Return every department at ``level`` (direct filter on the column)."""
    return (
        Department.query.filter(Department.level == level)
        .order_by(*_SIBLING_ORDER)
        .all()
    )


def search_by_name(term: str, limit: int | None = None) -> list[Department]:
    """
    Case-insensitive substring match on ``name``, ordered by name.

    SQLite folds with the ``casefold()`` function registered in
    ``app.extensions``; other backends use their Unicode-aware ``lower()``.
    """
    if db.engine.dialect.name == "sqlite":
        folded_name = func.casefold(Department.name, type_=db.String)
        folded_term = term.casefold()
    else:
        folded_name = func.lower(Department.name)
        folded_term = term.lower()

    query = Department.query.filter(
        folded_name.contains(folded_term, autoescape=True)
    ).order_by(Department.name)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


# =========================================================================
# Writes (flush only)
# =========================================================================


def add(department: Department) -> Department:
    """Stage a new department and flush so it receives its id."""
    db.session.add(department)
    db.session.flush()
    return department


def delete(department: Department) -> None:
    """Stage the removal of a department row."""
    db.session.delete(department)
    db.session.flush()
