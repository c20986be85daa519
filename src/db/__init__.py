# src/db/__init__.py
from .session import create_db_engine, create_session_factory, get_db  # noqa: F401
from .url import get_sqlalchemy_url, get_sqlalchemy_async_url  # noqa: F401
