"""
Domain errors raised by the department hierarchy engine.

Four kinds exist: the department (or its parent) was not found, a
name/code is already taken, the requested change would break the tree
shape, or external records still depend on the department.  Each
carries a stable ``error_code`` and an optional ``details`` dict so a
transport adapter can map it without parsing the message.

None of these are transient; callers should not retry them.
"""

from typing import Any, Dict, Optional


class DepartmentError(Exception):
    """Base class for every hierarchy-engine business error."""

    def __init__(
        self,
        message: str,
        error_code: str = "DEPARTMENT_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class DepartmentNotFoundError(DepartmentError):
    """No department matches the given id (or code)."""

    def __init__(self, department_id: int | None, message: str | None = None):
        super().__init__(
            message=message or f"Department ID {department_id} not found.",
            error_code="NOT_FOUND",
            details={"department_id": department_id},
        )

    @classmethod
    def by_code(cls, code: str) -> "DepartmentNotFoundError":
        error = cls(None, message=f"Department with code '{code}' not found.")
        error.details = {"code": code}
        return error


class DepartmentAlreadyExistsError(DepartmentError):
    """A department with the same name or code already exists."""

    def __init__(self, field: str, value: str):
        super().__init__(
            message=f"Department with {field} '{value}' already exists.",
            error_code="ALREADY_EXISTS",
            details={"field": field, "value": value},
        )
        self.field = field
        self.value = value

    @classmethod
    def by_name(cls, name: str) -> "DepartmentAlreadyExistsError":
        return cls("name", name)

    @classmethod
    def by_code(cls, code: str) -> "DepartmentAlreadyExistsError":
        return cls("code", code)


class DepartmentHierarchyError(DepartmentError):
    """The requested structural change would violate the tree shape."""

    def __init__(self, message: str, reason: str, **details: Any):
        super().__init__(
            message=message,
            error_code="HIERARCHY_ERROR",
            details={"reason": reason, **details},
        )
        self.reason = reason

    @classmethod
    def circular_reference(
        cls, department_id: int, parent_id: int
    ) -> "DepartmentHierarchyError":
        return cls(
            f"Moving department {department_id} to parent {parent_id} "
            "would create a circular reference.",
            reason="circular",
            department_id=department_id,
            parent_id=parent_id,
        )

    @classmethod
    def has_children(
        cls, department_id: int, child_count: int
    ) -> "DepartmentHierarchyError":
        return cls(
            f"Cannot delete department {department_id} because it has "
            f"{child_count} child department(s).",
            reason="has_children",
            department_id=department_id,
            child_count=child_count,
        )

    @classmethod
    def invalid_parent(cls, parent_id: int, dep_path: str) -> "DepartmentHierarchyError":
        return cls(
            f"Department {parent_id} has an invalid path {dep_path!r} and cannot "
            "be used as a parent; run `flask dept-rebuild-paths`.",
            reason="invalid_parent",
            parent_id=parent_id,
            dep_path=dep_path,
        )


class DepartmentInUseError(DepartmentError):
    """External records (employees, positions) still reference the department."""

    def __init__(self, department_id: int, dependent: str, count: int):
        super().__init__(
            message=(
                f"Cannot delete department {department_id} because it has "
                f"{count} {dependent}."
            ),
            error_code="IN_USE",
            details={
                "department_id": department_id,
                "dependent": dependent,
                "count": count,
            },
        )
        self.dependent = dependent
        self.count = count

    @classmethod
    def has_employees(
        cls, department_id: int, employee_count: int
    ) -> "DepartmentInUseError":
        return cls(department_id, "employees", employee_count)

    @classmethod
    def has_positions(
        cls, department_id: int, position_count: int
    ) -> "DepartmentInUseError":
        return cls(department_id, "positions", position_count)
