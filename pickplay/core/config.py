"""Application configuration."""

from os import getenv

from pydantic import BaseModel


def _split_csv(raw: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "Pick&Play API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./pickplay.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    root_username: str = getenv("ROOT_USERNAME", "root")
    root_password: str = getenv("ROOT_PASSWORD", "")
    audit_default_limit: int = int(getenv("AUDIT_DEFAULT_LIMIT", "100"))
    audit_window_size: int = int(getenv("AUDIT_WINDOW_SIZE", "1000"))
    audit_recent_count: int = int(getenv("AUDIT_RECENT_COUNT", "10"))
    audit_summary_days: int = int(getenv("AUDIT_SUMMARY_DAYS", "7"))
    audited_path_prefixes: tuple[str, ...] = _split_csv(getenv("AUDITED_PATH_PREFIXES", "/api/v1/products"))


settings: Settings = Settings()
