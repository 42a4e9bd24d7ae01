"""
Hierarchy service — the department tree engine.

Owns every structural change to the ``department`` table and every
read that depends on the tree shape.  The tree is stored flat:
``parent_id`` is the only structural pointer, and each row also carries
two derived columns that this module alone maintains:

  - ``dep_path``: ids from the root down to the row itself (``/1/4/9``).
  - ``level``:    depth from the root (root = 0).

Invariants that hold after every commit:

  1. A root has ``level == 0`` and ``dep_path == "/<id>"``.
  2. A child has ``dep_path == parent.dep_path + "/<id>"`` and
     ``level == parent.level + 1``.
  3. ``parent_id`` links never form a cycle.
  4. ``name`` and ``code`` are unique across all departments.
  5. A department with children, employees or positions is not deleted.

Structural writes (create, move, delete, rebuild) run in a single
transaction under the exclusive hierarchy lock; any failure rolls the
whole transaction back.  Attribute writes lock only the target row.
Reads take no locks.
"""

import logging
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any

from flask import current_app

from app.exceptions import DepartmentError, DepartmentNotFoundError
from app.extensions import db
from app.models.organization import Department
from app.services import (
    audit_service,
    department_store,
    directory_service,
    path_codec,
    validation_guard,
)

logger = logging.getLogger(__name__)

# Level assigned to the (virtual) parent of a root department.
_ROOT_PARENT_LEVEL = -1

# Default for optional attributes that may be cleared with an explicit None.
_UNSET: Any = object()


# =========================================================================
# Data classes for structured results
# =========================================================================


@dataclass
class DepartmentDTO:
    """Flat, detached view of a department row."""

    id: int
    name: str
    code: str
    description: str | None
    location: str | None
    parent_id: int | None
    dep_path: str
    level: int
    sort_order: int
    enabled: bool
    manager_id: int | None
    created_at: datetime | None
    updated_at: datetime | None
    created_by: int | None
    updated_by: int | None

    @classmethod
    def from_model(cls, department: Department):
        """Copy the mapped columns of ``department`` into a new instance."""
        names = [f.name for f in fields(DepartmentDTO)]
        return cls(**{name: getattr(department, name) for name in names})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DepartmentTreeNode(DepartmentDTO):
    """A department plus its nested children, built on demand."""

    has_children: bool = False
    employee_count: int = 0  # Active employees directly in this department.
    children: list["DepartmentTreeNode"] = field(default_factory=list)


@dataclass
class DepartmentStatistics:
    """Size and head-count figures for a department and its subtree."""

    department_id: int
    department_name: str
    direct_child_count: int
    total_child_count: int
    max_depth: int  # Deepest descendant level minus the node's own level.
    direct_employee_count: int
    total_employee_count: int
    has_manager: bool


@dataclass
class RebuildResult:
    """Outcome of ``rebuild_department_paths``."""

    scanned: int
    updated: int
    root_count: int
    unreachable_ids: list[int] = field(default_factory=list)


@dataclass
class HierarchyIssue:
    """One invariant violation found by ``verify_hierarchy``."""

    department_id: int
    kind: str
    message: str


# =========================================================================
# Transaction and input helpers
# =========================================================================


@contextmanager
def _transaction(action: str):
    """
    Commit on success, roll back and re-raise on any failure.

    Business and input errors are reported by their callers, so only
    unexpected failures are logged here.
    """
    try:
        yield
        db.session.commit()
    except (DepartmentError, ValueError):
        db.session.rollback()
        raise
    except Exception:
        db.session.rollback()
        logger.error("Department %s failed; transaction rolled back", action, exc_info=True)
        raise


def _require_text(value: str | None, field_name: str) -> str:
    """Strip ``value`` and reject blanks."""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError(f"Department {field_name} is required.")
    return cleaned


def _check_sort_order(sort_order: int) -> int:
    if sort_order is None or int(sort_order) < 0:
        raise ValueError("Sort order must be a non-negative integer.")
    return int(sort_order)


def _child_level(parent: Department | None) -> int:
    return (parent.level if parent is not None else _ROOT_PARENT_LEVEL) + 1


def _child_path(parent: Department | None, department_id: int) -> str:
    return path_codec.encode(parent.dep_path if parent is not None else "", department_id)


def _snapshot(department: Department) -> dict[str, Any]:
    """Audit representation of a department row."""
    return {
        "name": department.name,
        "code": department.code,
        "parent_id": department.parent_id,
        "dep_path": department.dep_path,
        "level": department.level,
        "sort_order": department.sort_order,
        "enabled": department.enabled,
        "manager_id": department.manager_id,
        "description": department.description,
        "location": department.location,
    }


def _touch(department: Department, user_id: int | None, now: datetime | None = None) -> None:
    department.updated_at = now or datetime.now(timezone.utc)
    if user_id is not None:
        department.updated_by = user_id


# =========================================================================
# Mutations: structural
# =========================================================================


def create_department(
    name: str,
    code: str,
    parent_id: int | None = None,
    sort_order: int = 0,
    description: str | None = None,
    location: str | None = None,
    manager_id: int | None = None,
    enabled: bool = True,
    user_id: int | None = None,
) -> Department:
    """
    Create a department and assign its path and level.

    The path embeds the row's own id, so the insert is flushed first to
    obtain the id, then path and level are written and the whole thing
    commits once.  No reader ever sees the row without its final path.

    Args:
        name:        Display name, unique across all departments.
        code:        Short code, unique across all departments.
        parent_id:   Parent department, or None for a new root.
        sort_order:  Position among siblings (non-negative).
        description: Optional free text.
        location:    Optional free text.
        manager_id:  Optional employee reference (not validated).
        enabled:     Initial lifecycle flag.
        user_id:     ID of the actor, recorded in audit fields.

    Returns:
        The committed Department.

    Raises:
        ValueError:                   If name/code is blank or sort_order < 0.
        DepartmentAlreadyExistsError: If the name or code is taken.
        DepartmentNotFoundError:      If ``parent_id`` does not exist.
    """
    name = _require_text(name, "name")
    code = _require_text(code, "code")
    sort_order = _check_sort_order(sort_order)

    with _transaction("create"):
        department_store.lock_hierarchy()
        validation_guard.check_unique_name(name)
        validation_guard.check_unique_code(code)

        parent = None
        if parent_id is not None:
            parent = validation_guard.require_department(parent_id, for_update=True)
            validation_guard.check_valid_parent(parent)

        department = Department(
            name=name,
            code=code,
            parent_id=parent_id,
            dep_path="",
            level=_child_level(parent),
            sort_order=sort_order,
            enabled=enabled,
            manager_id=manager_id,
            description=description,
            location=location,
            created_by=user_id,
            updated_by=user_id,
        )
        # Phase 1: insert to obtain the id.
        department_store.add(department)

        # Phase 2: the path can now include the id.
        department.dep_path = _child_path(parent, department.id)
        db.session.flush()

        audit_service.log_change(
            user_id=user_id,
            action_type="CREATE",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department.id,
            new_value=_snapshot(department),
        )

    logger.info(
        "Created department %d '%s' at %s", department.id, name, department.dep_path
    )
    return department


def move_department(
    department_id: int,
    new_parent_id: int | None = None,
    user_id: int | None = None,
) -> Department:
    """
    Re-parent a department and rewrite the paths of its whole subtree.

    The node and every descendant found by prefix scan on the old path
    get ``dep_path = new_path + tail`` and ``level += level_delta``, all
    in one transaction.

    Args:
        department_id: Department to move.
        new_parent_id: New parent, or None to make it a root.
        user_id:       ID of the actor.

    Returns:
        The moved Department.

    Raises:
        DepartmentNotFoundError:  If either department does not exist.
        DepartmentHierarchyError: If the new parent is the node itself
                                  or one of its descendants.
    """
    with _transaction("move"):
        department_store.lock_hierarchy()
        department = validation_guard.require_department(department_id, for_update=True)

        new_parent = None
        if new_parent_id is not None:
            new_parent = validation_guard.require_department(new_parent_id, for_update=True)
            validation_guard.check_valid_parent(new_parent)
        validation_guard.check_no_cycle(department_id, new_parent_id, new_parent)

        old_parent_id = department.parent_id
        old_path = department.dep_path
        old_level = department.level
        new_path = _child_path(new_parent, department.id)
        level_delta = _child_level(new_parent) - old_level

        if old_parent_id == new_parent_id and old_path == new_path and level_delta == 0:
            logger.info("Department %d already under parent %s", department_id, new_parent_id)
            return department

        subtree = department_store.find_by_path_prefix(
            old_path, include_self=True, for_update=True
        )
        now = datetime.now(timezone.utc)
        for node in subtree:
            node.dep_path = path_codec.rebase(node.dep_path, old_path, new_path)
            node.level += level_delta
            node.updated_at = now

        department.parent_id = new_parent_id
        _touch(department, user_id, now)
        db.session.flush()

        audit_service.log_change(
            user_id=user_id,
            action_type="MOVE",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department.id,
            previous_value={
                "parent_id": old_parent_id,
                "dep_path": old_path,
                "level": old_level,
            },
            new_value={
                "parent_id": new_parent_id,
                "dep_path": new_path,
                "level": department.level,
                "rows_rewritten": len(subtree),
            },
        )

    logger.info(
        "Moved department %d to parent %s (%d rows rewritten)",
        department_id,
        new_parent_id,
        len(subtree),
    )
    return department


def delete_department(department_id: int, user_id: int | None = None) -> None:
    """
    Permanently delete a leaf department with no dependents.

    Raises:
        DepartmentNotFoundError:  If the department does not exist.
        DepartmentHierarchyError: If it has child departments.
        DepartmentInUseError:     If employees or positions reference it.
    """
    with _transaction("delete"):
        department_store.lock_hierarchy()
        department = validation_guard.require_department(department_id, for_update=True)
        validation_guard.check_can_delete(department_id)

        previous = _snapshot(department)
        department_store.delete(department)

        audit_service.log_change(
            user_id=user_id,
            action_type="DELETE",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department_id,
            previous_value=previous,
        )

    logger.info("Deleted department %d '%s'", department_id, previous["name"])


# =========================================================================
# Mutations: attributes only
# =========================================================================


def update_department(
    department_id: int,
    name: str | None = None,
    code: str | None = None,
    description: str | None = _UNSET,
    location: str | None = _UNSET,
    manager_id: int | None = _UNSET,
    enabled: bool | None = None,
    sort_order: int | None = None,
    user_id: int | None = None,
) -> Department:
    """
    Update non-structural attributes.

    ``name``, ``code``, ``enabled`` and ``sort_order`` are unchanged when
    left as None.  ``description``, ``location`` and ``manager_id`` are
    unchanged when omitted; passing None clears them.

    ``parent_id``, ``dep_path`` and ``level`` cannot be changed here; use
    ``move_department``.

    Raises:
        DepartmentNotFoundError:      If the department does not exist.
        DepartmentAlreadyExistsError: If the new name or code is taken.
        ValueError:                   If name/code is blank or sort_order < 0.
    """
    with _transaction("update"):
        department = validation_guard.require_department(department_id, for_update=True)

        requested: dict[str, Any] = {}
        if name is not None:
            requested["name"] = _require_text(name, "name")
        if code is not None:
            requested["code"] = _require_text(code, "code")
        if description is not _UNSET:
            requested["description"] = description
        if location is not _UNSET:
            requested["location"] = location
        if manager_id is not _UNSET:
            requested["manager_id"] = manager_id
        if enabled is not None:
            requested["enabled"] = bool(enabled)
        if sort_order is not None:
            requested["sort_order"] = _check_sort_order(sort_order)

        changes = {
            key: value
            for key, value in requested.items()
            if getattr(department, key) != value
        }
        if not changes:
            return department

        if "name" in changes:
            validation_guard.check_unique_name(changes["name"], exclude_id=department_id)
        if "code" in changes:
            validation_guard.check_unique_code(changes["code"], exclude_id=department_id)

        previous = {key: getattr(department, key) for key in changes}
        for key, value in changes.items():
            setattr(department, key, value)
        _touch(department, user_id)

        audit_service.log_change(
            user_id=user_id,
            action_type="UPDATE",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department.id,
            previous_value=previous,
            new_value=changes,
        )

    logger.info("Updated department %d: %s", department_id, ", ".join(sorted(changes)))
    return department


def set_department_enabled(
    department_id: int,
    enabled: bool,
    user_id: int | None = None,
) -> Department:
    """Toggle the soft-lifecycle flag.  Has no effect on the tree shape."""
    with _transaction("enable"):
        department = validation_guard.require_department(department_id, for_update=True)
        previous = department.enabled
        department.enabled = bool(enabled)
        _touch(department, user_id)

        audit_service.log_change(
            user_id=user_id,
            action_type="ENABLE" if enabled else "DISABLE",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department.id,
            previous_value={"enabled": previous},
            new_value={"enabled": department.enabled},
        )

    logger.info("Department %d enabled status set to %s", department_id, bool(enabled))
    return department


def update_sort_order(
    department_id: int,
    sort_order: int,
    user_id: int | None = None,
) -> Department:
    """Change a department's position among its siblings."""
    sort_order = _check_sort_order(sort_order)

    with _transaction("reorder"):
        department = validation_guard.require_department(department_id, for_update=True)
        previous = department.sort_order
        department.sort_order = sort_order
        _touch(department, user_id)

        audit_service.log_change(
            user_id=user_id,
            action_type="REORDER",
            entity_type=audit_service.DEPARTMENT_ENTITY,
            entity_id=department.id,
            previous_value={"sort_order": previous},
            new_value={"sort_order": sort_order},
        )

    logger.info("Department %d sort order updated to %d", department_id, sort_order)
    return department


# =========================================================================
# Maintenance
# =========================================================================


def rebuild_department_paths(user_id: int | None = None) -> RebuildResult:
    """
    Recompute ``dep_path`` and ``level`` for the whole forest from ``parent_id``.

    Loads every department, indexes children by parent, and walks the
    forest breadth-first from all roots.  Only rows whose stored values
    differ are written, so a second run in a row changes nothing.

    Rows that cannot be reached from a root (a parent-id cycle, or a
    dangling parent) have no well-defined path; they are left untouched
    and reported in ``unreachable_ids``.

    Runs in one transaction under the exclusive hierarchy lock.
    """
    with _transaction("rebuild"):
        department_store.lock_hierarchy()
        departments = department_store.list_all(for_update=True)

        children: dict[int, list[Department]] = defaultdict(list)
        roots: list[Department] = []
        for department in departments:
            if department.is_root:
                roots.append(department)
            else:
                children[department.parent_id].append(department)

        sibling_key = lambda d: (d.sort_order, d.id)  # noqa: E731
        roots.sort(key=sibling_key)

        computed: dict[int, tuple[str, int]] = {}
        queue: deque[Department] = deque()
        for root in roots:
            computed[root.id] = (path_codec.encode("", root.id), 0)
            queue.append(root)

        while queue:
            node = queue.popleft()
            node_path, node_level = computed[node.id]
            for child in sorted(children.get(node.id, []), key=sibling_key):
                computed[child.id] = (path_codec.encode(node_path, child.id), node_level + 1)
                queue.append(child)

        now = datetime.now(timezone.utc)
        updated = 0
        unreachable: list[int] = []
        for department in departments:
            if department.id not in computed:
                unreachable.append(department.id)
                continue
            new_path, new_level = computed[department.id]
            if department.dep_path != new_path or department.level != new_level:
                logger.debug(
                    "Rebuild: department %d %s/%s -> %s/%s",
                    department.id,
                    department.dep_path,
                    department.level,
                    new_path,
                    new_level,
                )
                department.dep_path = new_path
                department.level = new_level
                department.updated_at = now
                updated += 1
        db.session.flush()

        result = RebuildResult(
            scanned=len(departments),
            updated=updated,
            root_count=len(roots),
            unreachable_ids=sorted(unreachable),
        )

        if updated:
            audit_service.log_change(
                user_id=user_id,
                action_type="REBUILD",
                entity_type=audit_service.DEPARTMENT_ENTITY,
                entity_id=None,
                new_value=asdict(result),
            )

    if result.unreachable_ids:
        logger.warning(
            "Rebuild skipped %d department(s) not reachable from a root: %s",
            len(result.unreachable_ids),
            result.unreachable_ids,
        )
    logger.info(
        "Rebuilt department paths: %d scanned, %d updated", result.scanned, result.updated
    )
    return result


def verify_hierarchy() -> list[HierarchyIssue]:
    """
    Scan the table and report every invariant violation without fixing it.

    ``kind`` is one of ``root_path``, ``root_level``, ``path``, ``level``,
    ``orphan``, ``cycle``, ``duplicate_name``, ``duplicate_code``.
    """
    departments = department_store.list_all()
    by_id = {d.id: d for d in departments}
    issues: list[HierarchyIssue] = []

    for department in departments:
        if department.is_root:
            expected_path = path_codec.encode("", department.id)
            if department.dep_path != expected_path:
                issues.append(HierarchyIssue(
                    department.id,
                    "root_path",
                    f"Root path is {department.dep_path!r}, expected {expected_path!r}.",
                ))
            if department.level != 0:
                issues.append(HierarchyIssue(
                    department.id,
                    "root_level",
                    f"Root level is {department.level}, expected 0.",
                ))
            continue

        parent = by_id.get(department.parent_id)
        if parent is None:
            issues.append(HierarchyIssue(
                department.id,
                "orphan",
                f"Parent {department.parent_id} does not exist.",
            ))
            continue

        expected_path = path_codec.encode(parent.dep_path, department.id)
        if department.dep_path != expected_path:
            issues.append(HierarchyIssue(
                department.id,
                "path",
                f"Path is {department.dep_path!r}, expected {expected_path!r}.",
            ))
        if department.level != parent.level + 1:
            issues.append(HierarchyIssue(
                department.id,
                "level",
                f"Level is {department.level}, expected {parent.level + 1}.",
            ))

    issues.extend(_find_cycles(by_id))
    issues.extend(_find_duplicates(departments, "name"))
    issues.extend(_find_duplicates(departments, "code"))

    issues.sort(key=lambda issue: (issue.department_id, issue.kind))
    if issues:
        logger.warning("Hierarchy verification found %d issue(s)", len(issues))
    return issues


def _find_cycles(by_id: dict[int, Department]) -> list[HierarchyIssue]:
    """Report every department that lies on a parent-id cycle."""
    acyclic: set[int] = set()
    on_cycle: set[int] = set()

    for start_id in by_id:
        trail: list[int] = []
        seen: set[int] = set()
        current = start_id
        while current is not None and current in by_id:
            if current in acyclic or current in on_cycle:
                break
            if current in seen:
                on_cycle.update(trail[trail.index(current):])
                break
            seen.add(current)
            trail.append(current)
            current = by_id[current].parent_id
        acyclic.update(node for node in trail if node not in on_cycle)

    return [
        HierarchyIssue(node_id, "cycle", "Department is its own ancestor.")
        for node_id in sorted(on_cycle)
    ]


def _find_duplicates(departments: list[Department], attribute: str) -> list[HierarchyIssue]:
    owners: dict[str, list[int]] = defaultdict(list)
    for department in departments:
        owners[getattr(department, attribute)].append(department.id)
    return [
        HierarchyIssue(
            department_id,
            f"duplicate_{attribute}",
            f"{attribute.capitalize()} {value!r} is shared by departments {ids}.",
        )
        for value, ids in owners.items()
        if len(ids) > 1
        for department_id in ids
    ]


# =========================================================================
# Queries: single department
# =========================================================================


def get_department_by_id(department_id: int) -> Department | None:
    """Return a department by primary key, or None if not found."""
    return department_store.get(department_id)


def get_department(department_id: int) -> Department:
    """Return a department by primary key or raise ``DepartmentNotFoundError``."""
    return validation_guard.require_department(department_id)


def get_department_by_code(code: str) -> Department:
    """Return the department with ``code`` or raise ``DepartmentNotFoundError``."""
    department = department_store.get_by_code(code)
    if department is None:
        raise DepartmentNotFoundError.by_code(code)
    return department


def to_dto(department: Department) -> DepartmentDTO:
    """Flat DTO for the transport layer."""
    return DepartmentDTO.from_model(department)


# =========================================================================
# Queries: lists
# =========================================================================


def get_all_departments(include_disabled: bool = True) -> list[Department]:
    """Return every department in path order, optionally enabled only."""
    departments = department_store.list_by_path()
    if include_disabled:
        return departments
    return [d for d in departments if d.enabled]


def get_children(parent_id: int | None = None) -> list[Department]:
    """
    Return the direct children of ``parent_id`` ordered by sort order.

    ``parent_id=None`` returns the root departments.
    """
    return department_store.find_by_parent_id(parent_id)


def get_ancestors(department_id: int) -> list[Department]:
    """
    Return the ancestors of a department, root first, parent last.

    The ancestor ids are decoded from the materialized path and fetched
    in one query.

    Raises:
        DepartmentNotFoundError: If the department does not exist.
    """
    department = validation_guard.require_department(department_id)
    ancestor_ids = path_codec.decode_ancestor_ids(department.dep_path, include_self=False)
    return department_store.get_many(ancestor_ids)


def get_department_path(department_id: int) -> list[Department]:
    """Return the ancestors of a department followed by the department itself."""
    department = validation_guard.require_department(department_id)
    return get_ancestors(department_id) + [department]


def get_descendants(department_id: int) -> list[Department]:
    """
    Return every department below ``department_id`` (not including it).

    Raises:
        DepartmentNotFoundError: If the department does not exist.
    """
    department = validation_guard.require_department(department_id)
    return department_store.find_by_path_prefix(department.dep_path, include_self=False)


def get_by_level(level: int) -> list[Department]:
    """Return every department at depth ``level`` (roots are level 0)."""
    if level is None or level < 0:
        raise ValueError("Level must be a non-negative integer.")
    return department_store.find_by_level(level)


def search(term: str) -> list[Department]:
    """
    Case-insensitive substring search on department name.

    The result is flat and ignores the hierarchy.  A blank term returns
    an empty list.
    """
    term = (term or "").strip()
    if not term:
        return []
    limit = current_app.config.get("SEARCH_RESULT_LIMIT")
    return department_store.search_by_name(term, limit=limit)


# =========================================================================
# Queries: trees
# =========================================================================


def _assemble_forest(departments: list[Department]) -> list[DepartmentTreeNode]:
    """
    Build nested tree nodes from a flat list of rows.

    A row becomes a root of the result when its parent is not in the
    list, so the same routine serves the whole forest and a subtree.
    Siblings are ordered by ``sort_order`` then ``id``.  Each node carries
    its active employee count from one grouped query.
    """
    nodes = {d.id: DepartmentTreeNode.from_model(d) for d in departments}
    head_counts = directory_service.count_employees_by_department(list(nodes))
    roots: list[DepartmentTreeNode] = []

    for department in departments:
        node = nodes[department.id]
        parent = nodes.get(department.parent_id)
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent.children.append(node)

    sibling_key = lambda n: (n.sort_order, n.id)  # noqa: E731
    for node in nodes.values():
        node.has_children = bool(node.children)
        node.employee_count = head_counts.get(node.id, 0)
        node.children.sort(key=sibling_key)
    roots.sort(key=sibling_key)
    return roots


def get_tree() -> list[DepartmentTreeNode]:
    """Return the whole forest as nested nodes, roots ordered by sort order."""
    return _assemble_forest(department_store.list_all())


def get_subtree(department_id: int) -> DepartmentTreeNode:
    """
    Return the tree rooted at ``department_id``.

    Raises:
        DepartmentNotFoundError: If the department does not exist.
    """
    department = validation_guard.require_department(department_id)
    rows = department_store.find_by_path_prefix(department.dep_path, include_self=True)
    for root in _assemble_forest(rows):
        if root.id == department_id:
            return root
    # Unreachable while paths are consistent.
    raise DepartmentNotFoundError(department_id)


# =========================================================================
# Queries: delete check and statistics
# =========================================================================


def can_delete_department(department_id: int) -> bool:
    """
    Return True if ``delete_department`` would succeed right now.

    Raises:
        DepartmentNotFoundError: If the department does not exist.
    """
    validation_guard.require_department(department_id)
    blockers = validation_guard.count_delete_blockers(department_id)
    return not any(blockers.values())


def get_department_statistics(department_id: int) -> DepartmentStatistics:
    """
    Return child counts, subtree depth and head counts for a department.

    Raises:
        DepartmentNotFoundError: If the department does not exist.
    """
    department = validation_guard.require_department(department_id)
    descendants = department_store.find_by_path_prefix(
        department.dep_path, include_self=False
    )

    max_depth = max((d.level - department.level for d in descendants), default=0)
    subtree_ids = [department.id] + [d.id for d in descendants]

    return DepartmentStatistics(
        department_id=department.id,
        department_name=department.name,
        direct_child_count=department_store.count_by_parent_id(department.id),
        total_child_count=len(descendants),
        max_depth=max_depth,
        direct_employee_count=directory_service.count_employees_in_department(
            department.id
        ),
        total_employee_count=directory_service.count_employees_in_departments(
            subtree_ids
        ),
        has_manager=department.manager_id is not None,
    )
