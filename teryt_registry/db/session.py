# teryt_registry/db/session.py
from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from teryt_registry.app.config import Settings, get_settings


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite domyślnie ignoruje FK (provider_id RESTRICT musi działać też w testach)."""

    @event.listens_for(engine, "connect")
    def _fk_on(dbapi_conn, _record):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


def build_engine(settings: Settings) -> Engine:
    kwargs: dict = {"pool_pre_ping": True, "future": True}
    if settings.is_postgres:
        # Każde zapytanie ograniczone czasem: nic w rdzeniu nie czeka bez końca.
        kwargs["pool_timeout"] = settings.db_pool_timeout_s
        kwargs["connect_args"] = {
            "connect_timeout": settings.db_pool_timeout_s,
            "options": f"-c statement_timeout={settings.db_statement_timeout_ms}",
        }
    engine = create_engine(settings.db_dsn, **kwargs)
    if engine.dialect.name == "sqlite":
        enable_sqlite_foreign_keys(engine)
    return engine


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    engine = build_engine(get_settings())
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    db: Session = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
