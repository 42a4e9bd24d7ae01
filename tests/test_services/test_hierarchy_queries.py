"""
Tests for the read side of hierarchy_service: trees, ancestor and
descendant lookups, level filter, search, and the supplementary
lookups (path, delete check, statistics).
"""

import pytest

from app.exceptions import DepartmentNotFoundError
from app.extensions import db
from app.models.organization import Employee
from app.services import hierarchy_service


class TestTree:
    """Nested forest and subtree assembly."""

    def test_full_forest(self, org):
        roots = hierarchy_service.get_tree()

        assert [r.code for r in roots] == ["ENG", "RND"]
        eng = roots[0]
        assert eng.has_children is True
        assert [c.code for c in eng.children] == ["ENG-BE", "ENG-FE"]
        assert [c.code for c in eng.children[0].children] == ["ENG-BE-API"]
        assert roots[1].has_children is False
        assert roots[1].children == []

    def test_empty_forest(self, db_session):
        assert hierarchy_service.get_tree() == []

    def test_subtree(self, org):
        node = hierarchy_service.get_subtree(org["backend"].id)

        assert node.code == "ENG-BE"
        assert [c.code for c in node.children] == ["ENG-BE-API"]
        assert node.children[0].has_children is False

    def test_subtree_of_leaf(self, org):
        node = hierarchy_service.get_subtree(org["api"].id)
        assert node.children == []
        assert node.has_children is False

    def test_subtree_missing(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.get_subtree(999)

    def test_tree_node_serializes(self, org):
        data = hierarchy_service.get_subtree(org["eng"].id).to_dict()

        assert data["code"] == "ENG"
        assert data["has_children"] is True
        assert data["children"][0]["children"][0]["code"] == "ENG-BE-API"

    def test_nodes_carry_employee_counts(self, org):
        db.session.add_all(
            [
                Employee(
                    department_id=org["api"].id,
                    employee_number=f"E{n}",
                    first_name="Test",
                    last_name=str(n),
                    is_active=n != 3,
                )
                for n in range(1, 4)
            ]
        )
        db.session.commit()

        eng = hierarchy_service.get_subtree(org["eng"].id)
        backend = eng.children[0]

        assert eng.employee_count == 0
        assert backend.employee_count == 0
        assert backend.children[0].employee_count == 2
        assert eng.to_dict()["children"][0]["children"][0]["employee_count"] == 2

    def test_siblings_follow_sort_order(self, org):
        hierarchy_service.update_sort_order(org["backend"].id, 9)
        eng = hierarchy_service.get_subtree(org["eng"].id)
        assert [c.code for c in eng.children] == ["ENG-FE", "ENG-BE"]


class TestAncestorsAndDescendants:
    """Path-based lookups."""

    def test_ancestors_root_first(self, org):
        ancestors = hierarchy_service.get_ancestors(org["api"].id)
        assert [a.code for a in ancestors] == ["ENG", "ENG-BE"]

    def test_root_has_no_ancestors(self, org):
        assert hierarchy_service.get_ancestors(org["eng"].id) == []

    def test_department_path_includes_self(self, org):
        chain = hierarchy_service.get_department_path(org["api"].id)
        assert [d.code for d in chain] == ["ENG", "ENG-BE", "ENG-BE-API"]

    def test_descendants_exclude_self(self, org):
        descendants = hierarchy_service.get_descendants(org["eng"].id)
        assert {d.code for d in descendants} == {"ENG-BE", "ENG-FE", "ENG-BE-API"}

    def test_leaf_has_no_descendants(self, org):
        assert hierarchy_service.get_descendants(org["api"].id) == []

    def test_missing_department(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.get_ancestors(999)
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.get_descendants(999)

    def test_descendants_follow_move(self, org):
        hierarchy_service.move_department(org["backend"].id, org["rnd"].id)

        assert {d.code for d in hierarchy_service.get_descendants(org["rnd"].id)} == {
            "ENG-BE",
            "ENG-BE-API",
        }
        assert {d.code for d in hierarchy_service.get_descendants(org["eng"].id)} == {
            "ENG-FE"
        }


class TestFlatQueries:
    """Children, level filter, search and full listing."""

    def test_roots_via_children_of_none(self, org):
        assert [d.code for d in hierarchy_service.get_children(None)] == ["ENG", "RND"]

    def test_children(self, org):
        children = hierarchy_service.get_children(org["eng"].id)
        assert [c.code for c in children] == ["ENG-BE", "ENG-FE"]

    def test_by_level(self, org):
        assert [d.code for d in hierarchy_service.get_by_level(0)] == ["ENG", "RND"]
        assert [d.code for d in hierarchy_service.get_by_level(2)] == ["ENG-BE-API"]
        assert hierarchy_service.get_by_level(5) == []

    def test_negative_level_rejected(self, org):
        with pytest.raises(ValueError):
            hierarchy_service.get_by_level(-1)

    def test_search_is_case_insensitive_substring(self, org):
        results = hierarchy_service.search("eng")
        assert [d.code for d in results] == ["ENG"]

    def test_search_matches_anywhere(self, org):
        results = hierarchy_service.search("END")
        assert [d.code for d in results] == ["ENG-BE", "ENG-FE"]

    def test_search_treats_wildcards_literally(self, org):
        assert hierarchy_service.search("%") == []
        assert hierarchy_service.search("&") != []

    def test_search_folds_accented_names(self, db_session):
        hierarchy_service.create_department("Ärztlicher Dienst", "MED")
        hierarchy_service.create_department("Straße und Verkehr", "STR")

        assert [d.code for d in hierarchy_service.search("ä")] == ["MED"]
        assert [d.code for d in hierarchy_service.search("ÄRZT")] == ["MED"]
        assert [d.code for d in hierarchy_service.search("STRASSE")] == ["STR"]

    def test_blank_search_returns_nothing(self, org):
        assert hierarchy_service.search("  ") == []

    def test_search_respects_limit(self, org, app, monkeypatch):
        monkeypatch.setitem(app.config, "SEARCH_RESULT_LIMIT", 1)
        assert len(hierarchy_service.search("e")) == 1

    def test_all_departments_in_path_order(self, org):
        hierarchy_service.set_department_enabled(org["frontend"].id, False)

        everything = hierarchy_service.get_all_departments()
        enabled = hierarchy_service.get_all_departments(include_disabled=False)

        assert [d.dep_path for d in everything] == sorted(d.dep_path for d in everything)
        assert len(everything) == 5
        assert "ENG-FE" not in {d.code for d in enabled}


class TestLookups:
    """Single-department lookups and DTO conversion."""

    def test_by_id(self, org):
        assert hierarchy_service.get_department_by_id(org["rnd"].id).code == "RND"
        assert hierarchy_service.get_department_by_id(999) is None

    def test_get_department_raises(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.get_department(999)

    def test_by_code(self, org):
        assert hierarchy_service.get_department_by_code("ENG-FE").id == org["frontend"].id
        with pytest.raises(DepartmentNotFoundError) as exc_info:
            hierarchy_service.get_department_by_code("NOPE")
        assert exc_info.value.details == {"code": "NOPE"}

    def test_to_dto(self, org):
        dto = hierarchy_service.to_dto(org["api"])
        assert dto.level == 2
        assert dto.to_dict()["dep_path"] == org["api"].dep_path


class TestDeleteCheckAndStatistics:
    """can_delete_department and get_department_statistics."""

    def test_can_delete(self, org):
        assert hierarchy_service.can_delete_department(org["api"].id) is True
        assert hierarchy_service.can_delete_department(org["backend"].id) is False

    def test_can_delete_missing(self, db_session):
        with pytest.raises(DepartmentNotFoundError):
            hierarchy_service.can_delete_department(999)

    def test_statistics(self, org):
        db.session.add_all(
            [
                Employee(
                    department_id=org["eng"].id,
                    employee_number="E1",
                    first_name="A",
                    last_name="One",
                ),
                Employee(
                    department_id=org["api"].id,
                    employee_number="E2",
                    first_name="B",
                    last_name="Two",
                ),
                Employee(
                    department_id=org["api"].id,
                    employee_number="E3",
                    first_name="C",
                    last_name="Three",
                    is_active=False,
                ),
            ]
        )
        db.session.commit()

        stats = hierarchy_service.get_department_statistics(org["eng"].id)

        assert stats.department_name == "Engineering"
        assert stats.direct_child_count == 2
        assert stats.total_child_count == 3
        assert stats.max_depth == 2
        assert stats.direct_employee_count == 1
        assert stats.total_employee_count == 2
        assert stats.has_manager is False

    def test_statistics_of_leaf(self, org):
        stats = hierarchy_service.get_department_statistics(org["rnd"].id)
        assert stats.total_child_count == 0
        assert stats.max_depth == 0
