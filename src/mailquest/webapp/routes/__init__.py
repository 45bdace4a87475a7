"""Route blueprints for the webapp."""

from . import incidents, investigations, purchases, sessions

__all__ = ["incidents", "investigations", "purchases", "sessions"]
