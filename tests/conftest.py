"""Configuration de test pour pytest avec gestion des chemins.

Ce module configure pytest pour résoudre les imports `wedding_backend` en ajoutant la racine du
projet au sys.path, et fournit une base SQLite en mémoire peuplée d'un mariage de référence.
"""

import os
import sys
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

# Ensure project root is on sys.path so that
# imports like `from wedding_backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from wedding_backend.domain.entities import User, Wedding  # noqa: E402
from wedding_backend.infra.repo.models import Base  # noqa: E402
from wedding_backend.infra.repo.wedding_repo import UserRepo, WeddingRepo  # noqa: E402


@pytest.fixture()
def session() -> Session:
    """Session SQLAlchemy sur une base SQLite en mémoire, schéma créé."""
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    s = Session(bind=engine)
    try:
        yield s
    finally:
        s.close()
        engine.dispose()


@pytest.fixture()
def people(session: Session) -> dict[str, User]:
    """Utilisateurs de référence: couple, gestionnaire, invité, admin, inconnu."""
    repo = UserRepo(session)
    return {
        "owner": repo.create(User(email="couple@wed.uz", name="Aziza & Timur")),
        "manager": repo.create(
            User(email="sister@wed.uz", name="Dilnoza", role="guest_manager")
        ),
        "viewer": repo.create(User(email="friend@wed.uz", name="Olim")),
        "admin": repo.create(
            User(email="ops@wed.uz", name="Ops", is_admin=True, role="admin")
        ),
        "stranger": repo.create(User(email="nobody@wed.uz", name="Nobody")),
    }


@pytest.fixture()
def wedding(session: Session, people: dict[str, User]) -> Wedding:
    """Mariage de référence à Tachkent, le 15 juin 2025 à 16:00."""
    return WeddingRepo(session).create(
        Wedding(
            user_id=people["owner"].id,
            unique_url="aziza-timur",
            bride="Aziza",
            groom="Timur",
            wedding_date=date(2025, 6, 15),
            wedding_time="4:00 PM",
            timezone="Asia/Tashkent",
            venue="Navruz Hall",
        )
    )
