import os
from datetime import datetime, timezone
from urllib.parse import quote_plus

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from familyhub.core.config import ReadIntEnv

Base = declarative_base()
engine = None
SessionLocal = None


def NowUtc() -> datetime:
    return datetime.now(tz=timezone.utc)


def _build_sqlserver_url() -> str:
    driver = os.getenv("SQLSERVER_DRIVER", "")
    host = os.getenv("SQLSERVER_HOST", "")
    port = os.getenv("SQLSERVER_PORT", "")
    database = os.getenv("SQLSERVER_DB", "")
    user = os.getenv("SQLSERVER_USER_LOGIN", "")
    password = os.getenv("SQLSERVER_USER_PASSWORD", "")

    missing = [key for key, value in {
        "SQLSERVER_HOST": host,
        "SQLSERVER_PORT": port,
        "SQLSERVER_DB": database,
        "SQLSERVER_DRIVER": driver,
        "SQLSERVER_USER_LOGIN": user,
        "SQLSERVER_USER_PASSWORD": password,
    }.items() if not value]
    if missing:
        raise RuntimeError(f"Missing database configuration: {', '.join(missing)}")

    driver_encoded = quote_plus(driver)
    password_encoded = quote_plus(password)
    return (
        f"mssql+pyodbc://{user}:{password_encoded}@{host}:{port}/{database}"
        f"?driver={driver_encoded}&Encrypt=yes&TrustServerCertificate=yes"
    )


def BuildConnectionUrl() -> str:
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url
    return _build_sqlserver_url()


def CreateDbEngine(url: str):
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in {"sqlite://", "sqlite:///"}:
            options["poolclass"] = StaticPool
        return create_engine(url, **options)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=ReadIntEnv("SQLALCHEMY_POOL_SIZE", 10),
        max_overflow=ReadIntEnv("SQLALCHEMY_MAX_OVERFLOW", 20),
        pool_timeout=ReadIntEnv("SQLALCHEMY_POOL_TIMEOUT", 60),
    )


def _ensure_engine():
    global engine, SessionLocal
    if engine is None:
        engine = CreateDbEngine(BuildConnectionUrl())
        SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def GetEngine():
    _ensure_engine()
    return engine


def GetDb():
    if SessionLocal is None:
        _ensure_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
