"""Browser-based web UI for memsim.

This package provides a Flask application that exposes the memsim shell
through a web browser.  It is an **optional** extra — install with::

    pip install memsim[web]

The ``create_app`` factory in ``app.py`` creates a shell and serves
three endpoints:

- ``GET /`` — HTML terminal page.
- ``POST /api/execute`` — execute a shell command and return JSON.
- ``GET /api/state`` — both engines' state for redrawing the views.
"""
