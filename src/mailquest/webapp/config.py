"""Flask configuration."""

import os

from mailquest.storage import StorageBackend, get_random_seed, get_sessions_path, get_storage_backend


class Config:
    """Base configuration."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-in-prod")

    # Session storage
    STORAGE_BACKEND = get_storage_backend()
    SESSIONS_PATH = get_sessions_path()

    # Engine randomness (None means unseeded)
    RANDOM_SEED = get_random_seed()

    JSON_SORT_KEYS = False


class TestConfig(Config):
    """Testing configuration."""

    TESTING = True
    STORAGE_BACKEND = StorageBackend.MEMORY
    RANDOM_SEED = 42
