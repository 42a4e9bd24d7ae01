"""
Directory service — dependency counts from the HR directory.

Employees and positions are owned by the HR directory, not by this
application.  The hierarchy engine only needs to know how many active
records still point at a department before it may be deleted.
"""

import logging

from sqlalchemy import func

from app.extensions import db
from app.models.organization import Employee, Position

logger = logging.getLogger(__name__)


def count_employees_in_department(department_id: int, active_only: bool = True) -> int:
    """
    Return the number of employees assigned to a department.

    Inactive employees still hold a foreign key to the department, so the
    delete guard counts them with ``active_only=False``.
    """
    query = db.session.query(func.count(Employee.id)).filter(
        Employee.department_id == department_id
    )
    if active_only:
        query = query.filter(Employee.is_active == True)  # noqa: E712
    return query.scalar()


def count_positions_in_department(department_id: int, active_only: bool = True) -> int:
    """Return the number of positions budgeted in a department."""
    query = db.session.query(func.count(Position.id)).filter(
        Position.department_id == department_id
    )
    if active_only:
        query = query.filter(Position.is_active == True)  # noqa: E712
    return query.scalar()


def count_employees_in_departments(department_ids: list[int]) -> int:
    """
    Return the number of active employees across several departments.

    Used for subtree head counts, where ``department_ids`` is a node
    plus all of its descendants.
    """
    if not department_ids:
        return 0
    return (
        db.session.query(func.count(Employee.id))
        .filter(
            Employee.department_id.in_(department_ids),
            Employee.is_active == True,  # noqa: E712
        )
        .scalar()
    )


def count_employees_by_department(department_ids: list[int]) -> dict[int, int]:
    """
    Return active employee counts keyed by department id.

    One grouped query; departments with no employees are absent from
    the result.
    """
    if not department_ids:
        return {}
    rows = (
        db.session.query(Employee.department_id, func.count(Employee.id))
        .filter(
            Employee.department_id.in_(department_ids),
            Employee.is_active == True,  # noqa: E712
        )
        .group_by(Employee.department_id)
        .all()
    )
    return {department_id: count for department_id, count in rows}
