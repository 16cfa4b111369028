"""Expose the application factory at package level.

Provide convenient access to :func:`idserver.factory.create_app` so callers
can ``from idserver import create_app`` without traversing the package
structure.
"""

from __future__ import annotations

from .factory import create_app

__version__ = "0.1.0"

__all__ = ["create_app", "__version__"]
