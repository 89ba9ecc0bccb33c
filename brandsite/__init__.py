"""Generate branded casino marketing sites as React/Vite/Tailwind projects.

This package turns a brand name, domain, page list and optional content
template into a deployable project ZIP, either offline through the
``brandsite`` console script or through the FastAPI service started by
``brandsite serve``.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from brandsite import main
>>> main()  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
