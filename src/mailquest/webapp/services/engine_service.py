"""Engine service - one GameEngine per Flask app."""

import random
from typing import Any

from flask import current_app, jsonify, request

from mailquest.engine import SESSION_NOT_FOUND, EngineResult, GameEngine
from mailquest.game_logger import LoggingGameLogger
from mailquest.storage import FileSessionRepository, InMemorySessionRepository, StorageBackend

EXTENSION_KEY = "mailquest_engine"


def build_engine(config: dict[str, Any]) -> GameEngine:
    """Create the engine described by the app config."""
    if config.get("STORAGE_BACKEND") == StorageBackend.FILE:
        store = FileSessionRepository(config["SESSIONS_PATH"])
    else:
        store = InMemorySessionRepository()
    return GameEngine(store=store, logger=LoggingGameLogger(), rng=random.Random(config.get("RANDOM_SEED")))


def get_engine() -> GameEngine:
    """Get the engine bound to the current app."""
    return current_app.extensions[EXTENSION_KEY]


def json_body() -> dict[str, Any]:
    """Request JSON as a dict; empty when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def engine_response(result: EngineResult, success_status: int = 200):
    """Map an engine result to a JSON response.

    Missing sessions are 404, any other failure is 400.
    """
    if result.success:
        return jsonify(result.to_dict()), success_status
    if result.reason == SESSION_NOT_FOUND:
        return jsonify(result.to_dict()), 404
    return jsonify(result.to_dict()), 400
