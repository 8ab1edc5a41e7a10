import asyncio
import logging
import subprocess
import sys
from pathlib import Path

from nestly.core.config import settings

logger = logging.getLogger(__name__)

# alembic.ini lives at the project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def _ensure_sqlite_directory(database_url: str) -> None:
    if "sqlite" not in database_url or ":memory:" in database_url:
        return
    db_path = database_url.split(":///", 1)[-1]
    db_dir = Path(db_path).parent
    if not db_dir.exists():
        logger.info(f"Creating database directory: {db_dir}")
        db_dir.mkdir(parents=True, exist_ok=True)


def _run_alembic_upgrade() -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", "alembic", "upgrade", "head"],
        check=True,
        capture_output=True,
        text=True,
        cwd=str(PROJECT_ROOT),
    )


async def run_migrations():
    """Run database migrations using alembic in a subprocess."""
    try:
        logger.info("Running database migrations...")
        _ensure_sqlite_directory(settings.DATABASE_URL)

        result = await asyncio.to_thread(_run_alembic_upgrade)
        logger.info("Migrations completed successfully")
        if result.stdout:
            logger.info(f"Alembic output: {result.stdout}")

    except subprocess.CalledProcessError as e:
        logger.error(f"Migration failed with exit code {e.returncode}")
        if e.stdout:
            logger.error(f"Stdout: {e.stdout}")
        if e.stderr:
            logger.error(f"Stderr: {e.stderr}")
        raise RuntimeError("Database migration failed") from e
    except Exception as e:
        logger.error(f"Unexpected error during migration: {e}")
        raise RuntimeError("Database migration failed") from e
