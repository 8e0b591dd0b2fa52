"""SQLModel engine ve oturum yardımcıları (users, profiles, analysis_history)."""
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from .config import settings

DEFAULT_DATABASE_URL = "sqlite:///./copilot.db"


def normalize_database_url(raw_url: str | None) -> str:
    """Heroku tarzı postgres:// adresleri psycopg3 dialektine çevrilir; SQLite olduğu gibi kalır."""
    url = (raw_url or "").strip() or DEFAULT_DATABASE_URL
    scheme, sep, rest = url.partition("://")
    if scheme in ("postgres", "postgresql"):
        return f"postgresql+psycopg{sep}{rest}"
    return url


def make_engine(url: str) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    # In-memory SQLite: tek bağlantı, yoksa her oturum boş bir veritabanı görür
    if ":memory:" in url:
        kwargs["poolclass"] = StaticPool
    sqlite_engine = create_engine(url, **kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


DATABASE_URL = normalize_database_url(settings.database_url)
engine = make_engine(DATABASE_URL)


@contextmanager
def session_scope() -> Iterator[Session]:
    """İstek dışı işler (sohbet geçmişi yazımı, profil okuma) için kendi oturumu."""
    with Session(engine) as session:
        yield session


def get_db():
    with session_scope() as session:
        yield session


def init_db() -> None:
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
