"""DB utilities for SQLAlchemy sessions/engine.

The database URL is resolved once into a `DatabaseConfig` (`DATABASE_URL` setting, or a local
sqlite file) and the resulting engine is passed explicitly to whoever needs it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from wedding_backend.core.settings import Settings

DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./wedding.db"


@dataclass(frozen=True)
class DatabaseConfig:
    """Configuration de connexion figée au démarrage."""

    url: str = DEFAULT_DATABASE_URL
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseConfig:
        """Résout l'URL depuis les settings, sinon sqlite local."""
        return cls(url=settings.DATABASE_URL or DEFAULT_DATABASE_URL, echo=settings.DATABASE_ECHO)


def get_engine(config: DatabaseConfig) -> Engine:
    """Crée un moteur SQLAlchemy à partir de la configuration."""
    connect_args = {}
    if config.is_sqlite:
        connect_args = {"check_same_thread": False}
    return create_engine(config.url, future=True, echo=config.echo, connect_args=connect_args)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Contexte de session SQLAlchemy avec gestion automatique des transactions.

    Commit en sortie normale, rollback puis propagation en cas d'exception.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
