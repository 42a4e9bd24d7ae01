"""
Custom Flask CLI commands for department hierarchy maintenance.

These commands are registered with the app via ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask dept-check            # Report hierarchy invariant violations
    flask dept-rebuild-paths    # Recompute every dep_path and level
    flask dept-tree             # Print the whole department forest
    flask dept-tree --root 4    # Print one subtree
"""

import click
from flask.cli import with_appcontext

from app.exceptions import DepartmentNotFoundError
from app.services import hierarchy_service


@click.command("dept-check")
@with_appcontext
def dept_check_command():
    """
    Verify the department hierarchy without changing anything.

    Exits with status 1 when any issue is found, so the command can
    gate a deployment or a scheduled job.
    """
    click.echo("=" * 60)
    click.echo("  Department Hierarchy — Consistency Check")
    click.echo("=" * 60)

    issues = hierarchy_service.verify_hierarchy()
    if not issues:
        click.secho("\n  ✓ No issues found.", fg="green", bold=True)
        return

    click.secho(f"\n  ✗ Found {len(issues)} issue(s):\n", fg="red")
    for issue in issues:
        click.echo(f"    [{issue.kind:>14}]  department {issue.department_id}: {issue.message}")

    click.echo("\n  Run `flask dept-rebuild-paths` to repair path and level drift.")
    raise SystemExit(1)


@click.command("dept-rebuild-paths")
@with_appcontext
def dept_rebuild_paths_command():
    """Recompute dep_path and level for every department from parent_id."""
    click.echo("Rebuilding department paths...")
    result = hierarchy_service.rebuild_department_paths()

    click.echo(
        f"Scanned: {result.scanned}  "
        f"Updated: {result.updated}  "
        f"Roots: {result.root_count}"
    )
    if result.unreachable_ids:
        click.secho(
            f"Unreachable from any root (left unchanged): {result.unreachable_ids}",
            fg="yellow",
        )
    else:
        click.secho("✓ All departments reachable.", fg="green")


@click.command("dept-tree")
@click.option(
    "--root",
    "root_id",
    type=int,
    default=None,
    help="Print only the subtree rooted at this department ID.",
)
@with_appcontext
def dept_tree_command(root_id: int | None):
    """Print the department forest (or one subtree) as an indented outline."""
    if root_id is None:
        roots = hierarchy_service.get_tree()
    else:
        try:
            roots = [hierarchy_service.get_subtree(root_id)]
        except DepartmentNotFoundError as exc:
            click.secho(f"✗ {exc.message}", fg="red")
            raise SystemExit(1) from exc

    if not roots:
        click.echo("No departments found.")
        return

    for root in roots:
        _echo_node(root, depth=0)


def _echo_node(node, depth: int) -> None:
    marker = "" if node.enabled else "  (disabled)"
    click.echo(f"{'  ' * depth}{node.name} [{node.code}] id={node.id}{marker}")
    for child in node.children:
        _echo_node(child, depth + 1)


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(dept_check_command)
    app.cli.add_command(dept_rebuild_paths_command)
    app.cli.add_command(dept_tree_command)
