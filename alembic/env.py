"""
Environnement Alembic pour les migrations du schéma mariage.

L'URL de base est résolue comme pour l'application (`DATABASE_URL` via les settings, sinon sqlite
local), afin que migrations et runtime visent la même base.
"""

from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import create_engine, pool

from alembic import context  # type: ignore[attr-defined]

# Allow importing project modules when running via Alembic CLI
_root = Path(__file__).resolve().parent.parent
for p in (_root, Path.cwd()):
    s = str(p)
    if s not in sys.path:
        sys.path.append(s)

from wedding_backend.core.settings import get_settings  # noqa: E402
from wedding_backend.infra.repo.db import DatabaseConfig  # noqa: E402
from wedding_backend.infra.repo.models import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return DatabaseConfig.from_settings(get_settings()).url


def run_migrations_offline() -> None:
    """Génère le SQL des migrations sans connexion (bindings littéraux)."""
    context.configure(url=_database_url(), target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Applique les migrations sur une connexion SQLAlchemy active."""
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
