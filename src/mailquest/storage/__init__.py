"""Storage module for Mailquest.

This module provides the session repository interface and its in-memory and
JSON file implementations.

Usage:
    from mailquest.storage import get_session_repository

    # Get repository using configured backend (from environment)
    store = get_session_repository()

    # Or specify backend explicitly
    from mailquest.storage import StorageBackend
    store = get_session_repository(StorageBackend.FILE)

Configuration via environment variables:
    MAILQUEST_STORAGE_BACKEND: "memory" or "file" (default: "memory")
    MAILQUEST_SESSIONS_PATH: Path to sessions directory (default: "sessions")
    MAILQUEST_RANDOM_SEED: Integer seed for the engine RNG (default: unseeded)
"""

from .config import (
    StorageBackend,
    get_random_seed,
    get_rng,
    get_session_repository,
    get_sessions_path,
    get_storage_backend,
)
from .file_repo import FileSessionRepository
from .memory_repo import InMemorySessionRepository
from .repository import SessionRepository

__all__ = [
    # Abstract interface
    "SessionRepository",
    # Implementations
    "InMemorySessionRepository",
    "FileSessionRepository",
    # Configuration
    "StorageBackend",
    "get_storage_backend",
    "get_sessions_path",
    "get_random_seed",
    "get_rng",
    # Factory functions
    "get_session_repository",
]
