"""Services for the webapp."""

from .engine_service import build_engine, engine_response, get_engine, json_body

__all__ = ["build_engine", "engine_response", "get_engine", "json_body"]
