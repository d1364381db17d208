"""Flask application factory for the memsim web UI.

The ``create_app`` function creates a shell and returns a Flask app
with three endpoints:

- ``GET /`` — render the terminal HTML page.
- ``POST /api/execute`` — execute a command and return JSON.
- ``GET /api/state`` — return the frames and the memory layout.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, render_template, request

from memsim.config import SimulatorConfig
from memsim.shell import Shell

_HTTP_BAD_REQUEST = 400


def engine_state(shell: Shell) -> dict[str, Any]:
    """Return both engines' observable state as a JSON-ready dict."""
    clock = shell.clock
    allocator = shell.allocator
    return {
        "frames": [{"page": f.page, "referenced": f.referenced} for f in clock.frames],
        "hand": clock.hand,
        "hits": clock.hits,
        "faults": clock.faults,
        "hit_ratio": clock.hit_ratio,
        "segments": [{"name": s.name, "base": s.base, "size": s.size} for s in allocator.segments],
        "free_blocks": [{"base": b.base, "size": b.size} for b in allocator.free_blocks],
        "memory_size": allocator.memory_size,
    }


def create_app(config: SimulatorConfig | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config: Engine settings; defaults if omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    shell = Shell(config=config)

    app = Flask(__name__)

    @app.route("/")
    def index() -> str:  # pyright: ignore[reportUnusedFunction]
        """Render the terminal HTML page."""
        return render_template("index.html", commands=shell.command_names)

    @app.route("/api/execute", methods=["POST"])
    def execute() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Execute a shell command and return JSON output.

        Expects JSON body: ``{"command": "..."}``

        Returns:
            JSON with an ``output`` field.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or "command" not in data:
            return jsonify({"error": "Missing 'command' field"}), _HTTP_BAD_REQUEST

        command = data["command"]
        if not isinstance(command, str):
            return jsonify({"error": "'command' must be a string"}), _HTTP_BAD_REQUEST
        result = shell.execute(command)
        if result == Shell.EXIT_SENTINEL:
            # A browser session has nothing to quit
            result = "Close the browser tab to leave."
        return jsonify({"output": result})

    @app.route("/api/state")
    def state() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the engines' state for redrawing."""
        return jsonify(engine_state(shell))

    return app


def main() -> None:
    """Run the web UI development server.

    This is the ``memsim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
