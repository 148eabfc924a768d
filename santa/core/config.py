import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DEFAULT_LOG_FORMAT = "{time} | {level} | {module}:{function}:{line} | {message} | {extra}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_level: str
    log_path: str
    max_attempts: int
    log_format: str = DEFAULT_LOG_FORMAT
    log_rotation: str = "100 KB"


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}.") from None
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}.")
    return value


def load_settings() -> Settings:
    database_url = os.getenv("DATABASE_URL", "sqlite+pysqlite:///santa.db")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    # An empty LOG_PATH keeps logging on stderr only.
    log_path = os.getenv("LOG_PATH", "logs/santa.log")
    log_format = os.getenv("LOG_FORMAT", DEFAULT_LOG_FORMAT)
    log_rotation = os.getenv("LOG_ROTATION", "100 KB")
    max_attempts = _positive_int("SANTA_MAX_ATTEMPTS", 1000)

    if not database_url:
        raise ValueError("DATABASE_URL is empty. Set it in the environment or .env file.")

    return Settings(
        database_url=database_url,
        log_level=log_level,
        log_path=log_path,
        max_attempts=max_attempts,
        log_format=log_format,
        log_rotation=log_rotation,
    )
