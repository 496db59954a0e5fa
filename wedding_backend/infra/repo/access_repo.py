# ============================================================
# Module : wedding_backend/infra/repo/access_repo.py
# Objet  : Accès SQL pour la table wedding_access.
# Notes  : une ligne par (user_id, wedding_id), contrainte unique.
# ============================================================

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...domain.access import AccessGrant, CapabilitySet
from .models import WeddingAccessORM


def _to_grant(row: WeddingAccessORM) -> AccessGrant:
    return AccessGrant.from_row(row.user_id, row.wedding_id, row.access_level, row.permissions)


class AccessRepo:
    """Lecture/écriture des accès partagés, convertis en `AccessGrant`."""

    def __init__(self, session: Session) -> None:
        """Construit le repo avec une session (SQLAlchemy)."""
        self._session = session

    def _row(self, user_id: int, wedding_id: int) -> WeddingAccessORM | None:
        stmt = select(WeddingAccessORM).where(
            WeddingAccessORM.user_id == user_id,
            WeddingAccessORM.wedding_id == wedding_id,
        )
        return self._session.execute(stmt).scalars().first()

    def list_for_wedding(self, wedding_id: int) -> list[AccessGrant]:
        """Retourne tous les accès d'un mariage, dans l'ordre d'insertion."""
        stmt = (
            select(WeddingAccessORM)
            .where(WeddingAccessORM.wedding_id == wedding_id)
            .order_by(WeddingAccessORM.id)
        )
        return [_to_grant(r) for r in self._session.execute(stmt).scalars().all()]

    def list_for_user(self, user_id: int) -> list[AccessGrant]:
        stmt = (
            select(WeddingAccessORM)
            .where(WeddingAccessORM.user_id == user_id)
            .order_by(WeddingAccessORM.id)
        )
        return [_to_grant(r) for r in self._session.execute(stmt).scalars().all()]

    def get(self, user_id: int, wedding_id: int) -> AccessGrant | None:
        row = self._row(user_id, wedding_id)
        return _to_grant(row) if row else None

    def create(self, grant: AccessGrant) -> AccessGrant:
        """Crée un accès. Lève IntegrityError si la paire existe déjà."""
        stored = grant.to_row()
        row = WeddingAccessORM(
            user_id=grant.subject_id,
            wedding_id=grant.resource_id,
            access_level=stored["access_level"],
            permissions=stored["permissions"],
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError:
            self._session.rollback()
            raise
        return _to_grant(row)

    def update_permissions(
        self, user_id: int, wedding_id: int, capabilities: CapabilitySet
    ) -> AccessGrant | None:
        """Remplace le blob `permissions`; None si l'accès n'existe pas."""
        row = self._row(user_id, wedding_id)
        if row is None:
            return None
        row.permissions = capabilities.to_permissions()
        self._session.flush()
        return _to_grant(row)

    def delete(self, user_id: int, wedding_id: int) -> bool:
        """Supprime l'accès; retourne False s'il était absent."""
        row = self._row(user_id, wedding_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
