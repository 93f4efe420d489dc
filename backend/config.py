
import os
from pathlib import Path

from dotenv import load_dotenv


_BACKEND_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _BACKEND_DIR.parent

# Root .env is canonical; backend/.env remains a backward-compatible fallback.
load_dotenv(_PROJECT_ROOT / ".env")
load_dotenv(_BACKEND_DIR / ".env")


def _first_non_empty_env(*names: str, default: str) -> str:
    """Returns the first non-empty env var value from `names`, else `default`."""
    for name in names:
        value = os.getenv(name)
        if value is not None and value != "":
            return value
    return default


def _parse_int_env(*names: str, default: int) -> int:
    """Parses the first non-empty env var in `names` as int, else returns `default`."""
    raw = _first_non_empty_env(*names, default=str(default))
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


class BaseConfig:

    SECRET_KEY: str = _first_non_empty_env(
        "SECRET_KEY",
        default="change-me-in-production",
    )

    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    JSON_SORT_KEYS: bool = False

    # Number of completed splits kept in history. Oldest is evicted first.
    HISTORY_CAPACITY: int = _parse_int_env(
        "SPLITRIGHT_HISTORY_CAPACITY",
        default=5,
    )

    # Prefix for every key written to the key-value medium:
    #   <namespace>_history        → the bounded history log
    #   <namespace>_current_split  → the live, in-progress split
    STORAGE_NAMESPACE: str = _first_non_empty_env(
        "SPLITRIGHT_STORAGE_NAMESPACE",
        default="splitright",
    )


class DevelopmentConfig(BaseConfig):
    DEBUG:   bool = True
    TESTING: bool = False

    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "DATABASE_URL",
        f"sqlite:///{_PROJECT_ROOT / 'splitright.db'}",
    )
    SQLALCHEMY_ECHO: bool = True


class TestingConfig(BaseConfig):

    DEBUG:   bool = True
    TESTING: bool = True

    SQLALCHEMY_DATABASE_URI: str = os.getenv(
        "TEST_DATABASE_URL",
        "sqlite:///:memory:",
    )
    SQLALCHEMY_ECHO: bool = False

    HISTORY_CAPACITY: int = 5
    STORAGE_NAMESPACE: str = "splitright_test"


class ProductionConfig(BaseConfig):

    DEBUG:   bool = False
    TESTING: bool = False
    SQLALCHEMY_ECHO: bool = False

    # Resolve at class definition time (import time).
    # Heroku / Render return 'postgres://' which SQLAlchemy 1.4+ rejects;
    # normalise to 'postgresql://'.
    _raw_db_url: str = os.getenv("DATABASE_URL", "")
    SQLALCHEMY_DATABASE_URI: str = (
        _raw_db_url.replace("postgres://", "postgresql://", 1)
        if _raw_db_url.startswith("postgres://")
        else _raw_db_url
    )


def validate_production_config(app) -> None:
    """
    Fail-fast guard for production configuration.

    Must be called in the app factory immediately after
    app.config.from_object(ProductionConfig):

        app.config.from_object(ProductionConfig)
        validate_production_config(app)   # raises ValueError if misconfigured

    Raises ValueError if any required production value is missing or insecure.
    """
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise ValueError(
            "DATABASE_URL environment variable is required in production. "
            "Set it to a valid database connection string."
        )
    if app.config.get("SECRET_KEY") == "change-me-in-production":
        raise ValueError(
            "SECRET_KEY must be set to a strong random value in production. "
            "Do not use the default placeholder."
        )
    validate_history_config(app)


def validate_history_config(app) -> None:
    """Raises ValueError if the history settings cannot satisfy the retention rule."""
    capacity = app.config.get("HISTORY_CAPACITY")
    if not isinstance(capacity, int) or capacity < 1:
        raise ValueError(
            f"HISTORY_CAPACITY must be a positive integer, got {capacity!r}."
        )
    if not app.config.get("STORAGE_NAMESPACE"):
        raise ValueError("STORAGE_NAMESPACE must not be empty.")


# ── Config selector ────────────────────────────────────────────────────────
#
# Used by the app factory:
#   from backend.config import config_by_name
#   app.config.from_object(config_by_name[flask_env])
# ──────────────────────────────────────────────────────────────────────────

config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing":     TestingConfig,
    "production":  ProductionConfig,
}

# Convenience alias: resolves the active config class from FLASK_ENV.
# Defaults to development if the variable is not set.
ActiveConfig: type[BaseConfig] = config_by_name.get(
    os.getenv("FLASK_ENV", "development"),
    DevelopmentConfig,
)
