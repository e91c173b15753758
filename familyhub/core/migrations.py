from pathlib import Path
import logging
import threading
import time
import traceback

from alembic import command
from alembic.config import Config

from familyhub.core.config import ReadIntEnv
from familyhub.db import BuildConnectionUrl

logger = logging.getLogger("familyhub.migrations")

ROOT_DIR = Path(__file__).resolve().parents[2]


def BuildAlembicConfig() -> Config:
    config_path = ROOT_DIR / "alembic.ini"
    if not config_path.exists():
        raise RuntimeError("Missing alembic.ini for migrations")

    alembic_cfg = Config(str(config_path))
    # configparser interpolation: percent-encoded passwords need escaping.
    alembic_cfg.set_main_option("sqlalchemy.url", BuildConnectionUrl().replace("%", "%%"))
    alembic_cfg.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    return alembic_cfg


def RunMigrations() -> None:
    alembic_cfg = BuildAlembicConfig()
    timeout_seconds = ReadIntEnv("MIGRATIONS_TIMEOUT_SECONDS", 600)
    progress_seconds = ReadIntEnv("MIGRATIONS_PROGRESS_LOG_SECONDS", 20)

    logger.info(
        "running migrations (timeout=%ss, progress_log=%ss)",
        timeout_seconds,
        progress_seconds,
    )

    error: dict[str, str] = {}
    done = threading.Event()

    def _run() -> None:
        try:
            command.upgrade(alembic_cfg, "head")
        except Exception:  # noqa: BLE001
            error["trace"] = traceback.format_exc()
        finally:
            done.set()

    thread = threading.Thread(target=_run, name="alembic-upgrade", daemon=True)
    thread.start()
    start = time.monotonic()

    while not done.wait(timeout=progress_seconds):
        elapsed = int(time.monotonic() - start)
        logger.info("migrations still running (%ss elapsed)", elapsed)
        if timeout_seconds > 0 and elapsed >= timeout_seconds:
            logger.error("migrations timed out after %ss", elapsed)
            raise TimeoutError(f"migrations timed out after {elapsed}s")

    if "trace" in error:
        logger.error("migrations failed:\n%s", error["trace"])
        raise RuntimeError("migrations failed")

    logger.info("migrations complete")
