"""
Tests for the structural and attribute mutations in hierarchy_service.

Every test starts from the ``org`` fixture forest::

    Engineering ── Backend ── API Team
               └── Frontend
    R&D
"""

import json

import pytest

from app.exceptions import (
    DepartmentAlreadyExistsError,
    DepartmentHierarchyError,
    DepartmentInUseError,
    DepartmentNotFoundError,
)
from app.extensions import db
from app.models.audit import AuditLog
from app.models.organization import Department, Employee
from app.services import audit_service, hierarchy_service


def _paths() -> dict[int, tuple[str, int, int | None]]:
    """Snapshot (dep_path, level, parent_id) for every department."""
    db.session.expire_all()
    return {
        d.id: (d.dep_path, d.level, d.parent_id)
        for d in Department.query.all()
    }


class TestCreateDepartment:
    """Two-phase create: insert for the id, then path and level."""

    def test_root_gets_own_id_path(self, db_session):
        dept = hierarchy_service.create_department("Finance", "FIN", user_id=7)

        assert dept.parent_id is None
        assert dept.dep_path == f"/{dept.id}"
        assert dept.level == 0
        assert dept.created_by == 7
        assert dept.enabled is True

    def test_child_extends_parent_path(self, org):
        api = org["api"]
        backend = org["backend"]
        eng = org["eng"]

        assert backend.dep_path == f"/{eng.id}/{backend.id}"
        assert api.dep_path == f"/{eng.id}/{backend.id}/{api.id}"
        assert api.level == 2

    def test_optional_attributes_stored(self, db_session):
        dept = hierarchy_service.create_department(
            "Legal",
            "LEG",
            description="Contracts and compliance",
            location="Building D",
            manager_id=42,
            enabled=False,
            sort_order=5,
        )

        assert dept.description == "Contracts and compliance"
        assert dept.location == "Building D"
        assert dept.manager_id == 42
        assert dept.enabled is False
        assert dept.sort_order == 5

    def test_names_are_stripped(self, db_session):
        dept = hierarchy_service.create_department("  Finance ", " FIN ")
        assert dept.name == "Finance"
        assert dept.code == "FIN"

    def test_duplicate_name_rejected(self, org):
        before = Department.query.count()
        with pytest.raises(DepartmentAlreadyExistsError):
            hierarchy_service.create_department("Backend", "NEW")
        assert Department.query.count() == before

    def test_duplicate_code_rejected(self, org):
        with pytest.raises(DepartmentAlreadyExistsError) as exc_info:
            hierarchy_service.create_department("New Dept", "ENG-FE")
        assert exc_info.value.field == "code"

    def test_missing_parent_rejected(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.create_department("Orphan", "ORP", parent_id=999)
        assert Department.query.count() == 0

    @pytest.mark.parametrize(
        "name, code, sort_order",
        [("", "X", 0), ("   ", "X", 0), ("X", "", 0), ("X", "X", -1)],
    )
    def test_invalid_input_rejected(self, db_session, name, code, sort_order):
        with pytest.raises(ValueError):
            hierarchy_service.create_department(name, code, sort_order=sort_order)

    def test_parent_with_drifted_path_rejected(self, org):
        backend = org["backend"]
        backend.dep_path = "/broken"
        db.session.commit()

        with pytest.raises(DepartmentHierarchyError) as exc_info:
            hierarchy_service.create_department("Child", "CHILD", parent_id=backend.id)
        assert exc_info.value.reason == "invalid_parent"

    def test_create_is_audited(self, db_session):
        dept = hierarchy_service.create_department("Finance", "FIN", user_id=3)

        entries = audit_service.get_audit_logs(entity_id=dept.id, action_type="CREATE")
        assert len(entries) == 1
        assert entries[0].user_id == 3
        assert json.loads(entries[0].new_value)["dep_path"] == dept.dep_path


class TestMoveDepartment:
    """Re-parenting rewrites the whole subtree in one transaction."""

    def test_move_under_other_root(self, org):
        rnd, backend, api = org["rnd"], org["backend"], org["api"]

        hierarchy_service.move_department(backend.id, rnd.id)

        assert backend.parent_id == rnd.id
        assert backend.dep_path == f"/{rnd.id}/{backend.id}"
        assert backend.level == 1
        assert api.dep_path == f"/{rnd.id}/{backend.id}/{api.id}"
        assert api.level == 2

    def test_move_leaves_siblings_alone(self, org):
        before = _paths()
        hierarchy_service.move_department(org["backend"].id, org["rnd"].id)
        after = _paths()

        for key in ("eng", "rnd", "frontend"):
            dept_id = org[key].id
            assert after[dept_id] == before[dept_id]

    def test_move_to_root(self, org):
        backend, api = org["backend"], org["api"]

        hierarchy_service.move_department(backend.id, None)

        assert backend.parent_id is None
        assert backend.dep_path == f"/{backend.id}"
        assert backend.level == 0
        assert api.dep_path == f"/{backend.id}/{api.id}"
        assert api.level == 1

    def test_move_deeper_increases_levels(self, org):
        frontend, api = org["frontend"], org["api"]

        hierarchy_service.move_department(frontend.id, api.id)

        assert frontend.level == 3
        assert frontend.dep_path == f"{api.dep_path}/{frontend.id}"

    def test_move_under_descendant_rejected_without_changes(self, org):
        before = _paths()

        with pytest.raises(DepartmentHierarchyError) as exc_info:
            hierarchy_service.move_department(org["eng"].id, org["api"].id)

        assert exc_info.value.reason == "circular"
        assert _paths() == before

    def test_move_under_self_rejected(self, org):
        with pytest.raises(DepartmentHierarchyError):
            hierarchy_service.move_department(org["rnd"].id, org["rnd"].id)

    def test_missing_department_or_parent(self, org):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.move_department(999, org["rnd"].id)
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.move_department(org["api"].id, 999)

    def test_move_to_current_parent_is_noop(self, org):
        hierarchy_service.move_department(org["api"].id, org["backend"].id)
        assert audit_service.get_audit_logs(action_type="MOVE") == []

    def test_move_is_audited(self, org):
        backend = org["backend"]
        hierarchy_service.move_department(backend.id, org["rnd"].id, user_id=11)

        entries = audit_service.get_audit_logs(entity_id=backend.id, action_type="MOVE")
        assert len(entries) == 1
        previous = json.loads(entries[0].previous_value)
        new = json.loads(entries[0].new_value)
        assert previous["parent_id"] == org["eng"].id
        assert new["parent_id"] == org["rnd"].id
        assert new["rows_rewritten"] == 2

    def test_failure_mid_move_rolls_back_everything(self, org, monkeypatch):
        before = _paths()

        def _fail(*args, **kwargs):
            raise RuntimeError("audit store unavailable")

        monkeypatch.setattr(audit_service, "log_change", _fail)

        with pytest.raises(RuntimeError):
            hierarchy_service.move_department(org["backend"].id, org["rnd"].id)

        assert _paths() == before

    def test_prefix_scan_is_segment_aware(self, db_session):
        """Moving ``/1`` must not touch ``/10``, ``/11`` or ``/12``."""
        roots = [
            hierarchy_service.create_department(f"Root {n}", f"R{n}", sort_order=n)
            for n in range(1, 13)
        ]
        first, target = roots[0], roots[1]
        child = hierarchy_service.create_department("Child", "C1", parent_id=first.id)
        before = _paths()

        hierarchy_service.move_department(first.id, target.id)
        after = _paths()

        assert after[child.id][0] == f"/{target.id}/{first.id}/{child.id}"
        for root in roots[2:]:
            assert after[root.id] == before[root.id]


class TestDeleteDepartment:
    """Deletion is allowed only for leaves with no dependents."""

    def test_leaf_deleted(self, org):
        api_id = org["api"].id
        backend_id = org["backend"].id

        hierarchy_service.delete_department(api_id, user_id=5)

        assert hierarchy_service.get_children(backend_id) == []
        assert hierarchy_service.get_department_by_id(api_id) is None
        entries = audit_service.get_audit_logs(entity_id=api_id, action_type="DELETE")
        assert len(entries) == 1
        assert json.loads(entries[0].previous_value)["code"] == "ENG-BE-API"

    def test_parent_not_deleted(self, org):
        with pytest.raises(DepartmentHierarchyError) as exc_info:
            hierarchy_service.delete_department(org["backend"].id)

        assert exc_info.value.reason == "has_children"
        assert hierarchy_service.get_department_by_id(org["backend"].id) is not None

    def test_department_with_employees_not_deleted(self, org):
        db.session.add(
            Employee(
                department_id=org["frontend"].id,
                employee_number="E100",
                first_name="Test",
                last_name="Employee",
            )
        )
        db.session.commit()

        with pytest.raises(DepartmentInUseError) as exc_info:
            hierarchy_service.delete_department(org["frontend"].id)
        assert exc_info.value.dependent == "employees"

    def test_missing_department(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.delete_department(999)


class TestAttributeUpdates:
    """Non-structural updates never touch path, level or parent."""

    def test_rename_and_recode(self, org):
        backend = org["backend"]
        path_before = backend.dep_path

        hierarchy_service.update_department(
            backend.id, name="Platform", code="ENG-PLT", location="Remote"
        )

        assert backend.name == "Platform"
        assert backend.code == "ENG-PLT"
        assert backend.location == "Remote"
        assert backend.dep_path == path_before

    def test_rename_to_taken_name_rejected(self, org):
        with pytest.raises(DepartmentAlreadyExistsError):
            hierarchy_service.update_department(org["backend"].id, name="Frontend")

    def test_keeping_own_name_is_allowed(self, org):
        hierarchy_service.update_department(org["backend"].id, name="Backend")

    def test_explicit_none_clears_optional_attributes(self, db_session):
        dept = hierarchy_service.create_department(
            "Ops", "OPS", manager_id=42, description="Run the place", location="HQ"
        )

        hierarchy_service.update_department(dept.id, manager_id=None, description=None)

        assert dept.manager_id is None
        assert dept.description is None
        assert dept.location == "HQ"
        entry = audit_service.get_audit_logs(entity_id=dept.id, action_type="UPDATE")[0]
        assert json.loads(entry.previous_value) == {
            "manager_id": 42,
            "description": "Run the place",
        }

    def test_omitted_optional_attributes_are_kept(self, db_session):
        dept = hierarchy_service.create_department("Ops", "OPS", manager_id=42)

        hierarchy_service.update_department(dept.id, name="Operations")

        assert dept.name == "Operations"
        assert dept.manager_id == 42

    def test_update_audits_changed_fields_only(self, org):
        backend = org["backend"]
        hierarchy_service.update_department(
            backend.id, name="Backend", description="Services"
        )

        entries = audit_service.get_audit_logs(entity_id=backend.id, action_type="UPDATE")
        assert len(entries) == 1
        assert json.loads(entries[0].new_value) == {"description": "Services"}

    def test_noop_update_not_audited(self, org):
        hierarchy_service.update_department(org["backend"].id, name="Backend")
        assert audit_service.get_audit_logs(action_type="UPDATE") == []

    def test_set_enabled(self, org):
        rnd = org["rnd"]

        hierarchy_service.set_department_enabled(rnd.id, False)
        assert rnd.enabled is False
        assert AuditLog.query.filter_by(action_type="DISABLE").count() == 1

        hierarchy_service.set_department_enabled(rnd.id, True)
        assert rnd.enabled is True

    def test_sort_order_reorders_children(self, org):
        eng = org["eng"]
        hierarchy_service.update_sort_order(org["frontend"].id, 0)
        hierarchy_service.update_sort_order(org["backend"].id, 3)

        children = hierarchy_service.get_children(eng.id)
        assert [c.code for c in children] == ["ENG-FE", "ENG-BE"]

    def test_negative_sort_order_rejected(self, org):
        with pytest.raises(ValueError):
            hierarchy_service.update_sort_order(org["frontend"].id, -1)
