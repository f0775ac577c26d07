"""Flask web API for Concentration."""

from .app import create_app

__all__ = ["create_app"]
