from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from src.settings import Settings

from .url import get_sqlalchemy_url

logger = logging.getLogger(__name__)


def apply_migrations_safely(settings: Settings) -> None:
    """Apply Alembic migrations to the latest head.

    This is safe to run on every startup; Alembic will be a no-op when up-to-date.
    Any errors are logged but do not prevent the app from starting.
    """
    try:
        project_root = Path(__file__).resolve().parents[2]
        alembic_dir = project_root / "alembic"

        cfg = Config()
        cfg.set_main_option("script_location", str(alembic_dir))
        # Same DB URL as the app; "%" is escaped for configparser interpolation
        db_url = get_sqlalchemy_url(settings.DATABASE_URL).replace("%", "%%")
        cfg.set_main_option("sqlalchemy.url", db_url)

        command.upgrade(cfg, "head")
        logger.info("Alembic migrations applied (or already up-to-date)")
    except Exception as exc:
        logger.warning("Skipping Alembic auto-migration: %s", exc)
