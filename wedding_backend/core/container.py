"""
Conteneur d'injection de dépendances et configuration application.

La configuration (settings, base de données) est résolue une seule fois à la construction du
conteneur, puis passée explicitement aux dépôts et services. Aucun état global n'est exposé: le
point d'entrée construit son conteneur via `build_container()`.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from sqlalchemy.orm import Session

from wedding_backend.core.logging import setup_logging
from wedding_backend.core.settings import Settings, get_settings
from wedding_backend.domain.services import AccessService, CountdownService
from wedding_backend.infra.repo.access_repo import AccessRepo
from wedding_backend.infra.repo.db import (
    DatabaseConfig,
    get_engine,
    get_session_factory,
    session_scope,
)
from wedding_backend.infra.repo.models import Base
from wedding_backend.infra.repo.wedding_repo import UserRepo, WeddingRepo


class Container:
    def __init__(self, settings: Settings | None = None, db: DatabaseConfig | None = None):
        self.settings = settings or get_settings()
        self.db = db or DatabaseConfig.from_settings(self.settings)
        self.engine = get_engine(self.db)
        self.session_factory = get_session_factory(self.engine)
        self.storage_backend = "sqlite" if self.db.is_sqlite else "sql"

    def create_schema(self) -> None:
        """Crée les tables manquantes (dev/tests; Alembic en production)."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session transactionnelle: commit en sortie, rollback sur exception."""
        with session_scope(self.session_factory) as session:
            yield session

    def countdown_service(self, session: Session) -> CountdownService:
        return CountdownService(WeddingRepo(session), settings=self.settings)

    def access_service(self, session: Session) -> AccessService:
        return AccessService(AccessRepo(session), WeddingRepo(session), UserRepo(session))


def build_container(settings: Settings | None = None) -> Container:
    """Configure le logging puis construit le conteneur applicatif."""
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)
    container = Container(settings)
    structlog.get_logger(__name__).info(
        "container_ready",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        storage_backend=container.storage_backend,
    )
    return container
