"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from jptax.backend.app import create_app  # noqa: E402
from jptax.backend.config.schema import DeductionTables  # noqa: E402
from jptax.backend.config.tables import clear_table_cache, load_deduction_tables  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_table_cache():
    """Tables are cached per path; start every test from a clean cache."""

    clear_table_cache()
    yield
    clear_table_cache()


@pytest.fixture()
def tables() -> DeductionTables:
    """Return the bundled statutory deduction tables."""

    return load_deduction_tables()


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
