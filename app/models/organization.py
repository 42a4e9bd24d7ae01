"""
Organization structure models.

``Department`` is the only entity whose structure this application
owns.  ``Position`` and ``Employee`` belong to the HR directory; they
are mapped here only so the hierarchy engine can count the records
that still point at a department before it is deleted.
"""

from app.extensions import db


class Department(db.Model):
    """
    A node in the organizational forest.

    The tree shape is stored flat: ``parent_id`` is the only structural
    pointer, and ``dep_path`` / ``level`` are derived columns maintained
    exclusively by ``hierarchy_service``.  ``dep_path`` lists every
    ancestor id from the root down to the node itself (``/1/4/9``), so
    subtree queries are a prefix scan on an indexed string column.

    The model has no ORM ``parent`` / ``children`` relationship;
    in-memory trees are assembled on demand from query results.
    """

    __tablename__ = "department"
    __table_args__ = (
        db.CheckConstraint("level >= 0", name="ck_department_level"),
        db.CheckConstraint("sort_order >= 0", name="ck_department_sort_order"),
        # text_pattern_ops lets PostgreSQL use the index for LIKE 'prefix%'
        # under any collation.  Other dialects ignore the option.
        db.Index(
            "ix_department_dep_path",
            "dep_path",
            postgresql_ops={"dep_path": "text_pattern_ops"},
        ),
        db.Index("ix_department_parent_sort", "parent_id", "sort_order"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    code = db.Column(db.String(20), unique=True, nullable=False)
    description = db.Column(db.String(500), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("department.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    dep_path = db.Column(db.String(500), nullable=False, default="")
    level = db.Column(db.Integer, nullable=False, default=0, index=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    enabled = db.Column(db.Boolean, nullable=False, default=True)
    manager_id = db.Column(db.Integer, nullable=True, index=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )
    created_by = db.Column(db.Integer, nullable=True)
    updated_by = db.Column(db.Integer, nullable=True)

    @property
    def is_root(self) -> bool:
        """True when the department has no parent."""
        return self.parent_id is None

    def __repr__(self) -> str:
        return f"<Department {self.id} {self.code}: {self.name} ({self.dep_path})>"


class Position(db.Model):
    """
    Budgeted position within a department (HR directory record).

    Only ``department_id`` and ``is_active`` matter to the hierarchy
    engine; positions are managed elsewhere.
    """

    __tablename__ = "position"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    department_id = db.Column(
        db.Integer,
        db.ForeignKey("department.id"),
        nullable=False,
        index=True,
    )
    position_code = db.Column(db.String(20), unique=True, nullable=False)
    position_title = db.Column(db.String(200), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )

    def __repr__(self) -> str:
        return f"<Position {self.position_code}: {self.position_title}>"


class Employee(db.Model):
    """Employee record from the HR directory, counted as a department dependent."""

    __tablename__ = "employee"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    department_id = db.Column(
        db.Integer,
        db.ForeignKey("department.id"),
        nullable=False,
        index=True,
    )
    position_id = db.Column(
        db.Integer,
        db.ForeignKey("position.id"),
        nullable=True,
        index=True,
    )
    employee_number = db.Column(db.String(50), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )

    @property
    def full_name(self) -> str:
        """Return the employee's full display name."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Employee {self.employee_number}: {self.full_name}>"
