import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger("familyhub.config")

DEV_JWT_SECRET = "insecure-dev-secret"
DEV_REFRESH_SECRET = "insecure-dev-refresh-secret"


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def ReadIntEnv(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


@dataclass(frozen=True)
class Settings:
    Environment: str = "development"
    JwtSecret: str = DEV_JWT_SECRET
    RefreshSecret: str = DEV_REFRESH_SECRET
    AccessTtlMinutes: int = 60
    RefreshTtlDays: int = 7
    PinHashRounds: int = 2
    PinMinLength: int = 4
    ChatHistoryLimit: int = 50
    AllowedOrigins: tuple[str, ...] = ()
    RunMigrationsOnStartup: bool = False

    @property
    def IsProduction(self) -> bool:
        return self.Environment == "production"


def LoadSettings() -> Settings:
    environment = os.getenv("APP_ENV", "development").strip().lower() or "development"
    jwt_secret = os.getenv("JWT_SECRET_KEY", "").strip()
    refresh_secret = os.getenv("JWT_REFRESH_SECRET_KEY", "").strip()

    missing = [
        key
        for key, value in {
            "JWT_SECRET_KEY": jwt_secret,
            "JWT_REFRESH_SECRET_KEY": refresh_secret,
        }.items()
        if not value
    ]
    if missing:
        if environment == "production":
            raise RuntimeError(f"Missing required env var: {', '.join(missing)}")
        logger.warning(
            "%s not set, using insecure development defaults", ", ".join(missing)
        )

    origins = os.getenv("ALLOWED_ORIGINS", "")
    return Settings(
        Environment=environment,
        JwtSecret=jwt_secret or DEV_JWT_SECRET,
        RefreshSecret=refresh_secret or DEV_REFRESH_SECRET,
        AccessTtlMinutes=ReadIntEnv("JWT_ACCESS_TTL_MINUTES", 60),
        RefreshTtlDays=ReadIntEnv("JWT_REFRESH_TTL_DAYS", 7),
        PinHashRounds=ReadIntEnv("PIN_HASH_ROUNDS", 2),
        PinMinLength=ReadIntEnv("AUTH_PIN_MIN_LENGTH", 4),
        ChatHistoryLimit=ReadIntEnv("CHAT_HISTORY_LIMIT", 50),
        AllowedOrigins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
        RunMigrationsOnStartup=_get_bool(os.getenv("RUN_MIGRATIONS_ON_STARTUP"), False),
    )


@lru_cache
def GetSettings() -> Settings:
    return LoadSettings()
