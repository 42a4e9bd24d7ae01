"""
Validation guard — checks run before any hierarchy mutation.

Each ``check_*`` function either returns quietly or raises the matching
``app.exceptions`` error.  The guard never writes; it only reads through
``department_store`` and the HR directory.
"""

import logging

from app.exceptions import (
    DepartmentAlreadyExistsError,
    DepartmentHierarchyError,
    DepartmentInUseError,
    DepartmentNotFoundError,
)
from app.models.organization import Department
from app.services import department_store, directory_service, path_codec

logger = logging.getLogger(__name__)


# -- Uniqueness ------------------------------------------------------------


def check_unique_name(name: str, exclude_id: int | None = None) -> None:
    """
    Ensure no other department uses ``name``.

    Raises:
        DepartmentAlreadyExistsError: If the name is taken.
    """
    if department_store.name_taken(name, exclude_id=exclude_id):
        logger.warning("Rejected duplicate department name '%s'", name)
        raise DepartmentAlreadyExistsError.by_name(name)


def check_unique_code(code: str, exclude_id: int | None = None) -> None:
    """
    Ensure no other department uses ``code``.

    Raises:
        DepartmentAlreadyExistsError: If the code is taken.
    """
    if department_store.code_taken(code, exclude_id=exclude_id):
        logger.warning("Rejected duplicate department code '%s'", code)
        raise DepartmentAlreadyExistsError.by_code(code)


# -- Existence -------------------------------------------------------------


def require_department(department_id: int, for_update: bool = False) -> Department:
    """
    Return the department or raise.

    Raises:
        DepartmentNotFoundError: If no department has this id.
    """
    department = department_store.get(department_id, for_update=for_update)
    if department is None:
        raise DepartmentNotFoundError(department_id)
    return department


# -- Structure -------------------------------------------------------------


def check_valid_parent(parent: Department) -> None:
    """
    Ensure ``parent`` has a well-formed path ending in its own id.

    A child path is derived from the parent path, so a drifted parent
    would spread the damage to every new or moved child.

    Raises:
        DepartmentHierarchyError: If the parent path is unusable.
    """
    try:
        ids = path_codec.decode_ancestor_ids(parent.dep_path)
    except ValueError:
        ids = []
    if not ids or ids[-1] != parent.id or len(ids) - 1 != parent.level:
        logger.warning(
            "Rejected department %d as parent: invalid path %r", parent.id, parent.dep_path
        )
        raise DepartmentHierarchyError.invalid_parent(parent.id, parent.dep_path)


def check_no_cycle(
    node_id: int,
    target_parent_id: int | None,
    target_parent: Department | None = None,
) -> None:
    """
    Ensure making ``target_parent_id`` the parent of ``node_id`` keeps a forest.

    The target's ancestor chain is decoded from its materialized path;
    the move is circular if ``node_id`` appears in it or is the target
    itself.  Moving to the root (``None``) is always acyclic.

    Args:
        node_id:          Department being moved.
        target_parent_id: Proposed new parent.
        target_parent:    The already-loaded parent row, if the caller
                          has it.

    Raises:
        DepartmentHierarchyError: If the move would create a cycle.
        DepartmentNotFoundError:  If the target parent does not exist.
    """
    if target_parent_id is None:
        return

    if target_parent_id == node_id:
        logger.warning("Rejected move of department %d under itself", node_id)
        raise DepartmentHierarchyError.circular_reference(node_id, target_parent_id)

    if target_parent is None:
        target_parent = require_department(target_parent_id)

    if node_id in path_codec.decode_ancestor_ids(target_parent.dep_path):
        logger.warning(
            "Rejected move of department %d under its descendant %d",
            node_id,
            target_parent_id,
        )
        raise DepartmentHierarchyError.circular_reference(node_id, target_parent_id)


# -- Deletion --------------------------------------------------------------


def count_delete_blockers(node_id: int) -> dict[str, int]:
    """
    Count everything that prevents deleting a department.

    Returns:
        Dict with keys ``children``, ``employees`` and ``positions``.
    """
    return {
        "children": department_store.count_by_parent_id(node_id),
        "employees": directory_service.count_employees_in_department(
            node_id, active_only=False
        ),
        "positions": directory_service.count_positions_in_department(
            node_id, active_only=False
        ),
    }


def check_can_delete(node_id: int) -> None:
    """
    Ensure the department is a leaf with no external dependents.

    Raises:
        DepartmentHierarchyError: If it still has child departments.
        DepartmentInUseError:     If employees or positions reference it.
    """
    blockers = count_delete_blockers(node_id)

    if blockers["children"] > 0:
        logger.warning(
            "Rejected delete of department %d: %d child department(s)",
            node_id,
            blockers["children"],
        )
        raise DepartmentHierarchyError.has_children(node_id, blockers["children"])

    if blockers["employees"] > 0:
        logger.warning(
            "Rejected delete of department %d: %d employee(s)",
            node_id,
            blockers["employees"],
        )
        raise DepartmentInUseError.has_employees(node_id, blockers["employees"])

    if blockers["positions"] > 0:
        logger.warning(
            "Rejected delete of department %d: %d position(s)",
            node_id,
            blockers["positions"],
        )
        raise DepartmentInUseError.has_positions(node_id, blockers["positions"])
