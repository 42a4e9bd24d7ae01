"""
Seed script — create a sample department forest for local testing.

Registers a ``flask seed-dev-departments`` CLI command that builds a
small two-root organization through the hierarchy service, so every
row gets a correct path and level and every insert is audited.
Departments whose code already exists are skipped, which makes the
command safe to run repeatedly.

Usage::

    flask seed-dev-departments               # Departments only
    flask seed-dev-departments --with-staff  # Also add sample positions/employees

Prerequisites:
    - The database must exist and ``flask db upgrade`` must have been run.
"""

import click
from flask.cli import with_appcontext

from app.extensions import db
from app.models.organization import Employee, Position
from app.services import department_store, hierarchy_service


# -- Sample forest: (code, name, parent code, sort order, location) --------
_SAMPLE_DEPARTMENTS = [
    ("ENG", "Engineering", None, 0, "Building A"),
    ("ENG-BE", "Backend", "ENG", 0, "Building A"),
    ("ENG-BE-API", "API Team", "ENG-BE", 0, "Building A"),
    ("ENG-BE-DATA", "Data Platform", "ENG-BE", 1, "Building A"),
    ("ENG-FE", "Frontend", "ENG", 1, "Building A"),
    ("ENG-QA", "Quality Engineering", "ENG", 2, "Building B"),
    ("RND", "Research & Development", None, 1, "Building C"),
    ("RND-LAB", "Applied Research Lab", "RND", 0, "Building C"),
    ("OPS", "Operations", None, 2, "Building B"),
    ("OPS-FAC", "Facilities", "OPS", 0, "Building B"),
]

# -- Sample staff: (position code, title, department code, employees) -----
_SAMPLE_STAFF = [
    ("POS-API-DEV", "API Developer", "ENG-BE-API", [("E1001", "Ada", "Lovelace")]),
    ("POS-QA-ENG", "QA Engineer", "ENG-QA", [("E1002", "Grace", "Hopper")]),
    ("POS-FAC-TECH", "Facilities Technician", "OPS-FAC", []),
]


@click.command("seed-dev-departments")
@click.option(
    "--with-staff",
    is_flag=True,
    default=False,
    help="Also create sample positions and employees.",
)
@with_appcontext
def seed_dev_departments_command(with_staff: bool):
    """
    Create the sample department forest for local development.

    Parents are always created before their children, so the list
    above can be extended by appending rows in top-down order.
    """
    click.echo("=" * 60)
    click.echo("  Department Hierarchy — Seed Dev Departments")
    click.echo("=" * 60)

    # -- Step 1: Departments -----------------------------------------------
    click.echo("\n[1/2] Creating departments...")
    created = 0
    for code, name, parent_code, sort_order, location in _SAMPLE_DEPARTMENTS:
        if department_store.get_by_code(code) is not None:
            click.echo(f"      {code:<12} already exists, skipped.")
            continue

        parent_id = None
        if parent_code is not None:
            parent_id = hierarchy_service.get_department_by_code(parent_code).id

        department = hierarchy_service.create_department(
            name=name,
            code=code,
            parent_id=parent_id,
            sort_order=sort_order,
            location=location,
        )
        created += 1
        click.secho(
            f"      ✓ {code:<12} {name} (id={department.id}, path={department.dep_path})",
            fg="green",
        )

    # -- Step 2: Optional staff --------------------------------------------
    click.echo("\n[2/2] Sample staff...")
    if not with_staff:
        click.echo("      Skipped (pass --with-staff to create).")
    else:
        _seed_staff()

    # -- Summary -----------------------------------------------------------
    click.echo("\n" + "=" * 60)
    click.secho(f"  Created {created} department(s).", fg="green", bold=True)
    click.echo("  View the result with:  flask dept-tree")
    click.echo("=" * 60)


def _seed_staff() -> None:
    """Create sample positions and employees; existing codes are skipped."""
    for position_code, title, department_code, employees in _SAMPLE_STAFF:
        department = hierarchy_service.get_department_by_code(department_code)

        position = Position.query.filter_by(position_code=position_code).first()
        if position is None:
            position = Position(
                department_id=department.id,
                position_code=position_code,
                position_title=title,
                is_active=True,
            )
            db.session.add(position)
            # Flush to get the id before attaching employees.
            db.session.flush()
            click.secho(f"      ✓ Position {position_code} in {department_code}", fg="green")

        for employee_number, first_name, last_name in employees:
            if Employee.query.filter_by(employee_number=employee_number).first():
                continue
            db.session.add(
                Employee(
                    department_id=department.id,
                    position_id=position.id,
                    employee_number=employee_number,
                    first_name=first_name,
                    last_name=last_name,
                    is_active=True,
                )
            )
            click.secho(
                f"      ✓ Employee {first_name} {last_name} in {department_code}",
                fg="green",
            )

    db.session.commit()


def register_seed_commands(app):
    """Register seed-related CLI commands with the Flask application."""
    app.cli.add_command(seed_dev_departments_command)
