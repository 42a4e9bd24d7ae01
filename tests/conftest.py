"""
Pytest configuration and shared fixtures.

Provides a test application, database session, CLI runner and a small
department forest that all test modules can use.  The ``testing``
configuration points at an in-memory SQLite database unless
``TEST_DATABASE_URL`` is set.
"""

import pytest

from app import create_app
from app.extensions import db as _db
from app.services import hierarchy_service


@pytest.fixture(scope="session")
def app():
    """
    Create a Flask application configured for testing.

    The app is created once per test session with an application
    context that stays open for the whole session.
    """
    app = create_app("testing")

    # Establish an application context for the entire test session.
    with app.app_context():
        yield app


@pytest.fixture(scope="session")
def database(app):  # pylint: disable=redefined-outer-name
    """Provide the SQLAlchemy database instance."""
    yield _db


@pytest.fixture(scope="function")
def db_session(database):  # pylint: disable=redefined-outer-name
    """
    Provide a clean database for each test function.

    The schema is created from the model metadata before the test and
    dropped afterwards, so service code can commit freely.
    """
    database.create_all()

    yield database.session

    database.session.remove()
    database.drop_all()


@pytest.fixture(scope="function")
def cli_runner(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask CLI runner for invoking custom commands.

    Usage in tests::

        def test_check(cli_runner, db_session):
            result = cli_runner.invoke(args=["dept-check"])
            assert result.exit_code == 0
    """
    return app.test_cli_runner()


@pytest.fixture(scope="function")
def org(db_session):  # pylint: disable=redefined-outer-name,unused-argument
    """
    Build a small forest and return the departments by short name.

    Layout::

        Engineering (ENG)
        ├── Backend (ENG-BE)
        │   └── API Team (ENG-BE-API)
        └── Frontend (ENG-FE)
        R&D (RND)
    """
    eng = hierarchy_service.create_department("Engineering", "ENG", sort_order=0)
    rnd = hierarchy_service.create_department("R&D", "RND", sort_order=1)
    backend = hierarchy_service.create_department(
        "Backend", "ENG-BE", parent_id=eng.id, sort_order=0
    )
    frontend = hierarchy_service.create_department(
        "Frontend", "ENG-FE", parent_id=eng.id, sort_order=1
    )
    api = hierarchy_service.create_department(
        "API Team", "ENG-BE-API", parent_id=backend.id
    )
    return {
        "eng": eng,
        "rnd": rnd,
        "backend": backend,
        "frontend": frontend,
        "api": api,
    }
