# ============================================================
# Module : wedding_backend/infra/repo/wedding_repo.py
# Objet  : Accès SQL pour les mariages et les utilisateurs.
# ============================================================

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...domain.entities import User, Wedding
from .models import UserORM, WeddingORM


def _to_wedding(row: WeddingORM) -> Wedding:
    return Wedding(
        id=row.id,
        user_id=row.user_id,
        unique_url=row.unique_url,
        bride=row.bride,
        groom=row.groom,
        wedding_date=row.wedding_date,
        wedding_time=row.wedding_time,
        timezone=row.timezone,
        venue=row.venue,
        venue_address=row.venue_address or "",
        is_public=row.is_public,
        available_languages=list(row.available_languages or ["en"]),
        default_language=row.default_language,
    )


def _to_user(row: UserORM) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        is_admin=row.is_admin,
        role=row.role,
    )


class WeddingRepo:
    """CRUD minimal pour les mariages."""

    def __init__(self, session: Session) -> None:
        """Construit le repo avec une session (SQLAlchemy)."""
        self._session = session

    def create(self, wedding: Wedding) -> Wedding:
        """Crée une ligne en base. Lève IntegrityError si `unique_url` existe déjà."""
        row = WeddingORM(
            user_id=wedding.user_id,
            unique_url=wedding.unique_url,
            bride=wedding.bride,
            groom=wedding.groom,
            wedding_date=wedding.wedding_date,
            wedding_time=wedding.wedding_time,
            timezone=wedding.timezone,
            venue=wedding.venue,
            venue_address=wedding.venue_address,
            is_public=wedding.is_public,
            available_languages=wedding.available_languages,
            default_language=wedding.default_language,
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError:
            self._session.rollback()
            raise
        return _to_wedding(row)

    def get(self, wedding_id: int) -> Wedding | None:
        row = self._session.get(WeddingORM, wedding_id)
        return _to_wedding(row) if row else None

    def get_by_url(self, unique_url: str) -> Wedding | None:
        """Retourne le mariage publié sous `unique_url`, ou None."""
        stmt = select(WeddingORM).where(WeddingORM.unique_url == unique_url).limit(1)
        row = self._session.execute(stmt).scalars().first()
        return _to_wedding(row) if row else None


class UserRepo:
    """CRUD minimal pour les utilisateurs."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, user: User) -> User:
        """Crée un utilisateur. Lève IntegrityError sur email déjà utilisé."""
        row = UserORM(email=user.email, name=user.name, is_admin=user.is_admin, role=user.role)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError:
            self._session.rollback()
            raise
        return _to_user(row)

    def get(self, user_id: int) -> User | None:
        row = self._session.get(UserORM, user_id)
        return _to_user(row) if row else None
