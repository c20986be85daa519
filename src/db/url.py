# src/db/url.py
from __future__ import annotations

from sqlalchemy.engine.url import make_url


def _strip_driver(url: str) -> str:
    if url.startswith("postgresql+"):
        return "postgresql://" + url.split("://", 1)[1]
    return url


def get_sqlalchemy_url(db_url: str) -> str:
    """Return a sync SQLAlchemy URL, used by Alembic and the seeders."""
    if db_url.startswith("sqlite+"):
        return "sqlite://" + db_url.split("://", 1)[1]
    return _strip_driver(db_url)


def get_sqlalchemy_async_url(db_url: str, driver: str = "asyncpg") -> str:
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        return url.set(drivername="sqlite+aiosqlite").render_as_string(
            hide_password=False
        )
    url = url.set(drivername=f"postgresql+{driver}")
    if "sslmode" in url.query:
        query = dict(url.query)
        del query["sslmode"]
        url = url.set(query=query)
    return url.render_as_string(hide_password=False)
