"""SQLAlchemy models for persistence layer (users, weddings, wedding_access)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _no_permissions() -> dict[str, bool]:
    return {
        "canEditDetails": False,
        "canManageGuests": False,
        "canViewAnalytics": False,
        "canManagePhotos": False,
        "canEditGuestBook": False,
    }


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class UserORM(Base):
    """Modèle ORM pour les comptes utilisateurs."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    role = Column(String(32), nullable=False, default="user")
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class WeddingORM(Base):
    """Modèle ORM pour les pages de mariage."""

    __tablename__ = "weddings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    unique_url = Column(String(255), nullable=False, unique=True)
    bride = Column(String(255), nullable=False)
    groom = Column(String(255), nullable=False)
    wedding_date = Column(Date, nullable=False)
    wedding_time = Column(String(32), nullable=False, default="4:00 PM")
    timezone = Column(String(64), nullable=False, default="Asia/Tashkent")
    venue = Column(String(255), nullable=False)
    venue_address = Column(String(512), nullable=False, default="")
    is_public = Column(Boolean, nullable=False, default=True)
    available_languages = Column(JSON, nullable=False, default=lambda: ["en"])
    default_language = Column(String(8), nullable=False, default="en")
    created_at = Column(DateTime, nullable=False, default=_utcnow)


class WeddingAccessORM(Base):
    """Modèle ORM pour les accès partagés à un mariage."""

    __tablename__ = "wedding_access"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    wedding_id = Column(Integer, ForeignKey("weddings.id"), nullable=False)
    access_level = Column(String(32), nullable=False, default="viewer")
    permissions = Column(JSON, nullable=False, default=_no_permissions)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "wedding_id", name="uq_wedding_access_user_wedding"),
    )
