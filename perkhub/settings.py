import os

from dotenv import load_dotenv

# Values already in the environment win over the .env file.
load_dotenv(override=False)


class ConfigError(RuntimeError):
    pass


def _getenv(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def _getenv_bool(name: str, default: bool = False) -> bool:
    raw = _getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "y", "on"}


def _require(name: str, *fallbacks: str) -> str:
    for key in (name, *fallbacks):
        value = _getenv(key)
        if value:
            return value
    raise ConfigError(f"{name} is not set")


def _normalize_database_url(url: str) -> str:
    # Render/Heroku style URLs need an explicit driver for SQLAlchemy
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


class Settings:
    def __init__(self) -> None:
        self.database_url = _normalize_database_url(_require("DATABASE_URL"))
        self.jwt_secret = _require("JWT_SECRET", "SECRET_KEY")
        self.jwt_algorithm = _getenv("JWT_ALGORITHM", "HS256") or "HS256"
        self.access_token_expire_minutes = int(_getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "10080") or "10080")
        self.bcrypt_rounds = int(_getenv("BCRYPT_ROUNDS", "12") or "12")
        self.allowed_origins = _getenv("ALLOWED_ORIGINS")
        self.log_level = _getenv("LOG_LEVEL", "INFO") or "INFO"
        self.db_auto_create = _getenv_bool("DB_AUTO_CREATE", default=True)
        self.host = _getenv("HOST", "0.0.0.0") or "0.0.0.0"
        self.port = int(_getenv("PORT", "4000") or "4000")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def resolved_cors_origins(self) -> list[str]:
        raw = self.allowed_origins
        if raw is None or raw.strip() == "*":
            return ["*"]
        return [o.strip() for o in raw.split(",") if o.strip()]


settings = Settings()
