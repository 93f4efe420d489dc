"""
tests/integration/conftest.py — Fixtures and helpers for all integration tests.

Design:
  - The app is created once per session using create_app("testing"), which
    points SQLAlchemy at an in-memory SQLite database unless
    TEST_DATABASE_URL says otherwise.
  - The kv_entries table is created once via db.create_all() at session start.
  - Between tests every row is deleted so tests are isolated.

Helper functions (not fixtures) are provided for common operations:
  - split_payload(...)     → a valid SplitData request body
  - commit_split(...)      → history entry dict from POST /history
  - list_history(client)   → the full GET /history envelope

These are plain functions (not pytest fixtures) so they can be called with
arbitrary arguments in any test.
"""

from __future__ import annotations

import pytest
from sqlalchemy import text

from backend.app import create_app
from backend.app.extensions import db as _db


HISTORY_URL = "/api/v1/history"
SPLITS_URL = "/api/v1/splits"


# ═══════════════════════════════════════════════════════════════════════════
# Session-scoped app fixture
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(scope="session")
def app():
    """Creates the Flask application in 'testing' mode once for the session."""
    flask_app = create_app("testing")

    with flask_app.app_context():
        _db.create_all()

    yield flask_app

    with flask_app.app_context():
        _db.drop_all()


# ═══════════════════════════════════════════════════════════════════════════
# Function-scoped test isolation
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture(autouse=True)
def clean_tables(app):
    """Deletes every stored key after each test."""
    yield

    with app.app_context():
        _db.session.rollback()  # discard any uncommitted state from a failed test
        _db.session.execute(text("DELETE FROM kv_entries"))
        _db.session.commit()


@pytest.fixture
def client(app):
    """Flask test client. Each test gets a fresh client (function-scoped)."""
    return app.test_client()


# ═══════════════════════════════════════════════════════════════════════════
# Shared helper functions (not fixtures)
# ═══════════════════════════════════════════════════════════════════════════

def split_payload(store_name: str = "Luigi's", **overrides) -> dict:
    """
    Dinner for two: Alice has a $12 burger, a $20 pizza is shared.
    Tax $4 and a $6 tip split equally → Alice $27.00, Bob $15.00, total $42.00.
    """
    body = {
        "storeName": store_name,
        "dateTime": "2026-10-18 19:30",
        "currency": "USD",
        "people": [
            {"id": "a", "name": "Alice", "color": "#e11d48"},
            {"id": "b", "name": "Bob", "color": "#2563eb"},
        ],
        "items": [
            {"id": "i1", "name": "Burger", "price": "12.00", "quantity": 1, "assignedTo": ["a"]},
            {"id": "i2", "name": "Pizza", "price": "20.00", "quantity": 1, "assignedTo": ["a", "b"]},
        ],
        "tax": "4.00",
        "tipType": "amount",
        "tipValue": "6.00",
        "taxTipSplitMode": "equal",
    }
    body.update(overrides)
    return body


def commit_split(client, store_name: str = "Luigi's", **overrides) -> dict:
    """POSTs a split to the history log and returns the created entry."""
    resp = client.post(HISTORY_URL, json=split_payload(store_name, **overrides))
    assert resp.status_code == 201, f"commit failed: {resp.get_json()}"
    return resp.get_json()["data"]


def list_history(client) -> dict:
    resp = client.get(HISTORY_URL)
    assert resp.status_code == 200
    return resp.get_json()
