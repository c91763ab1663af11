"""Shared fixtures for the back-office tests."""

import os
import tempfile

# Keep the module-level database out of the user's data directory
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="backoffice-tests-")

import pytest  # noqa: E402

from backoffice.db.sqlite import Database  # noqa: E402

SIMPLE_STATEMENT = (
    "RBC Royal Bank Account Number: 01234567 Jun 1, 2025 to Jun 30, 2025 "
    "Account Activity Details 02 Jun e-Transfer sent TO JOHN DOE 150.00 2,340.55 "
    "05 Jun Monthly fee 4.95 2,335.60"
)


@pytest.fixture
def database(tmp_path, monkeypatch):
    """A fresh database swapped in for the module-level instance."""
    fresh = Database(tmp_path / "test.db")
    monkeypatch.setattr("backoffice.db.sqlite.db", fresh)
    monkeypatch.setattr("backoffice.services.importer.db", fresh)
    monkeypatch.setattr("backoffice.services.ledger.db", fresh)
    monkeypatch.setattr("backoffice.main.db", fresh)
    return fresh


@pytest.fixture
def simple_statement_text() -> str:
    return SIMPLE_STATEMENT
