"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``app/__init__.py`` selects the appropriate config
based on the FLASK_ENV environment variable.

The hierarchy engine runs against any SQLAlchemy backend.  PostgreSQL
and SQL Server get a real advisory lock for structural writes; SQLite
(the development and test default) relies on its database-level write
lock instead.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# =========================================================================
# Sentinel for detecting unset SECRET_KEY in production.
# =========================================================================
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///orgtree-dev.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Echo SQL statements to the log for debugging (override per env).
    SQLALCHEMY_ECHO: bool = False

    # -- Department hierarchy ----------------------------------------------
    # Key for the transaction-scoped advisory lock that serializes
    # structural writes (create, move, delete, rebuild).
    HIERARCHY_LOCK_KEY: int = int(os.environ.get("HIERARCHY_LOCK_KEY", "7301"))

    # Upper bound on rows returned by the name search.
    SEARCH_RESULT_LIMIT: int = int(os.environ.get("SEARCH_RESULT_LIMIT", "100"))

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # =====================================================================
    # Production validation helpers
    # =====================================================================

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that required settings are sane for production.

        Called by ``create_app()`` when ``config_name == 'production'``.
        Raises ``RuntimeError`` for hard requirements and logs warnings
        for soft requirements.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical secret is missing or still
                          set to its insecure default value.
        """
        errors: list[str] = []

        # -- SECRET_KEY (hard fail) ----------------------------------------
        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        # -- DATABASE_URL (hard fail) --------------------------------------
        if not app_config.get("SQLALCHEMY_DATABASE_URI"):
            errors.append("DATABASE_URL must be set in production.")

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        # -- SQLite in production (soft warning) ---------------------------
        # SQLite has no advisory lock; concurrent structural writes are
        # serialized only by its file-level write lock.
        if app_config.get("SQLALCHEMY_DATABASE_URI", "").startswith("sqlite"):
            _logger.warning(
                "DATABASE_URL points at SQLite in production. Structural "
                "writes will not take an advisory lock."
            )

        # -- LOG_LEVEL sanity check (soft warning) -------------------------
        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production. "
                "Consider INFO or WARNING."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite unless TEST_DATABASE_URL is set.

    The schema is created from the models by the test fixtures, so no
    migration run is needed before ``pytest``.
    """

    TESTING: bool = True

    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    All secrets must be set via environment variables. The application
    factory calls ``validate_production_secrets()`` at startup and will
    refuse to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")

    SQLALCHEMY_DATABASE_URI: str = os.environ.get("DATABASE_URL", "")


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
