"""Route blueprints for the webapp."""

from . import api

__all__ = ["api"]
