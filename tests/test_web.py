"""Tests for the browser-based web UI.

Tests use ``pytest.importorskip`` so they are skipped gracefully when
Flask is not installed.
"""

from __future__ import annotations

from typing import Any

import pytest

flask = pytest.importorskip("flask")

from memsim.config import SimulatorConfig  # noqa: E402
from memsim.web.app import create_app  # noqa: E402

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
FRAMES = 3


def _create_client() -> Any:
    """Create a test client from a fresh app."""
    app = create_app(SimulatorConfig(frames=FRAMES))
    app.config["TESTING"] = True
    return app.test_client()


class TestAppCreation:
    """Verify the app factory and landing page."""

    def test_create_app_returns_flask(self) -> None:
        """create_app should return a Flask application."""
        assert isinstance(create_app(), flask.Flask)

    def test_index_returns_html(self) -> None:
        """GET / should return the terminal page."""
        response = _create_client().get("/")
        assert response.status_code == HTTP_OK
        assert "text/html" in response.content_type
        assert b"memsim" in response.data


class TestExecuteEndpoint:
    """Verify POST /api/execute."""

    def test_request_output(self) -> None:
        """A page request returns the outcome text."""
        response = _create_client().post("/api/execute", json={"command": "request 5"})
        assert response.status_code == HTTP_OK
        assert response.get_json()["output"] == "Fault - Loaded page 5 into empty frame 0"

    def test_missing_command(self) -> None:
        """A body without ``command`` is a bad request."""
        response = _create_client().post("/api/execute", json={})
        assert response.status_code == HTTP_BAD_REQUEST

    def test_non_string_command(self) -> None:
        """A command that is not a string is a bad request."""
        response = _create_client().post("/api/execute", json={"command": 5})
        assert response.status_code == HTTP_BAD_REQUEST

    def test_non_object_body(self) -> None:
        """A JSON list body is a bad request."""
        response = _create_client().post("/api/execute", json=["request", "1"])
        assert response.status_code == HTTP_BAD_REQUEST

    def test_exit_does_not_leak_sentinel(self) -> None:
        """exit is answered with a message, not the REPL sentinel."""
        response = _create_client().post("/api/execute", json={"command": "exit"})
        assert "__EXIT__" not in response.get_json()["output"]


class TestStateEndpoint:
    """Verify GET /api/state."""

    def test_initial_state(self) -> None:
        """A fresh app reports empty frames and one free block."""
        data = _create_client().get("/api/state").get_json()
        assert data["frames"] == [{"page": None, "referenced": False}] * FRAMES
        assert data["hand"] == 0
        assert data["hit_ratio"] == 0.0
        assert data["segments"] == []
        assert data["free_blocks"] == [{"base": 0, "size": data["memory_size"]}]

    def test_state_follows_commands(self) -> None:
        """State reflects commands run through the execute endpoint."""
        client = _create_client()
        client.post("/api/execute", json={"command": "request 1 1"})
        client.post("/api/execute", json={"command": "alloc A 100 first"})
        data = client.get("/api/state").get_json()
        assert data["hits"] == 1
        assert data["faults"] == 1
        assert data["segments"] == [{"name": "A", "base": 0, "size": 100}]
