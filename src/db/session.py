# src/db/session.py
from __future__ import annotations

import logging
import ssl
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import certifi
from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import Session, sessionmaker

from src.settings import Settings

from .url import get_sqlalchemy_async_url, get_sqlalchemy_url

logger = logging.getLogger(__name__)


def _ssl_context(settings: Settings) -> ssl.SSLContext:
    ca_bundle_path = Path(settings.DB_CA_BUNDLE or certifi.where())
    if not ca_bundle_path.exists():
        raise RuntimeError(
            f"Database CA bundle not found at {ca_bundle_path}. Set DB_CA_BUNDLE to a readable PEM file."
        )
    # Verify the server certificate and hostname
    ssl_context = ssl.create_default_context(cafile=str(ca_bundle_path))
    ssl_context.check_hostname = True
    ssl_context.verify_mode = ssl.CERT_REQUIRED
    return ssl_context


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the pooled async engine shared by every read query."""
    url = get_sqlalchemy_async_url(settings.DATABASE_URL)
    kwargs = {"echo": False, "pool_pre_ping": True}
    if make_url(url).get_backend_name() == "postgresql":
        kwargs["pool_size"] = settings.DB_POOL_SIZE
        if settings.DB_SSL:
            kwargs["connect_args"] = {"ssl": _ssl_context(settings)}
    engine = create_async_engine(url, **kwargs)
    logger.info("Database engine created for %s", make_url(url).render_as_string())
    return engine


def create_session_factory(settings: Settings) -> sessionmaker:
    engine = create_engine(get_sqlalchemy_url(settings.DATABASE_URL), echo=False)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@contextmanager
def get_db(settings: Settings) -> Generator[Session, None, None]:
    db = create_session_factory(settings)()
    try:
        yield db
    finally:
        db.close()
