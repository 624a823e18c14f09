import os

from dotenv import load_dotenv

load_dotenv()

STORAGE_CHOICES = ("auto", "sql", "kv")


class Settings:
    # Relational store
    DATABASE_URL = os.getenv("WORKOUT_LOGGER_DATABASE_URL", "sqlite:///workout_logger.db")

    # Backend selection: "auto" falls back to the key-value store when the
    # relational one cannot be opened
    STORAGE = os.getenv("WORKOUT_LOGGER_STORAGE", "auto").lower()

    # Optional JSON file behind the key-value store (in-memory when unset)
    KV_PATH = os.getenv("WORKOUT_LOGGER_KV_PATH") or None

    LOG_LEVEL = os.getenv("WORKOUT_LOGGER_LOG_LEVEL", "INFO").upper()

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)
        if self.STORAGE not in STORAGE_CHOICES:
            raise ValueError(
                f"WORKOUT_LOGGER_STORAGE must be one of {', '.join(STORAGE_CHOICES)}, "
                f"got {self.STORAGE!r}"
            )


settings = Settings()
