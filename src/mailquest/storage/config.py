"""Storage and runtime configuration for Mailquest.

This module reads settings from the environment and provides a factory
that creates the configured session repository.
"""

import os
import random
from enum import Enum
from typing import Optional

from .file_repo import FileSessionRepository
from .memory_repo import InMemorySessionRepository
from .repository import SessionRepository


class StorageBackend(Enum):
    """Available storage backends."""

    MEMORY = "memory"
    FILE = "file"


# Default configuration (can be overridden via environment variables)
DEFAULT_STORAGE_BACKEND = StorageBackend.MEMORY
DEFAULT_SESSIONS_PATH = "sessions"


def get_storage_backend() -> StorageBackend:
    """Get configured storage backend from environment.

    Returns:
        StorageBackend enum value
    """
    backend_str = os.environ.get("MAILQUEST_STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND.value).lower()
    if backend_str == "file":
        return StorageBackend.FILE
    return StorageBackend.MEMORY


def get_sessions_path() -> str:
    """Get configured sessions directory from environment."""
    return os.environ.get("MAILQUEST_SESSIONS_PATH", DEFAULT_SESSIONS_PATH)


def get_random_seed() -> Optional[int]:
    """Get the RNG seed from environment, or None for an unseeded RNG."""
    seed = os.environ.get("MAILQUEST_RANDOM_SEED")
    if seed is None or seed == "":
        return None
    return int(seed)


def get_rng() -> random.Random:
    """Create the engine's random source, seeded when configured."""
    return random.Random(get_random_seed())


def get_session_repository(
    backend: StorageBackend | None = None,
) -> SessionRepository:
    """Factory function to create a session repository.

    Args:
        backend: Storage backend to use. If None, uses environment config.

    Returns:
        SessionRepository instance
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.FILE:
        return FileSessionRepository(get_sessions_path())
    return InMemorySessionRepository()
