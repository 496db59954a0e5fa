"""
Entités du domaine métier.

Ce module définit les modèles de données principaux consommés par le compte à rebours et le
contrôle d'accès: utilisateurs et mariages.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from wedding_backend.domain.countdown import (
    DEFAULT_TIMEZONE,
    DEFAULT_WEDDING_TIME,
    WeddingSchedule,
)

UserRole = Literal["user", "admin", "guest_manager"]


class User(BaseModel):
    """Modèle utilisateur (compte du couple ou collaborateur)."""

    id: int | None = None
    email: str
    name: str
    is_admin: bool = False
    role: UserRole = "user"

    @property
    def can_administer(self) -> bool:
        """Vrai pour un administrateur de la plateforme."""
        return self.is_admin or self.role == "admin"


class Wedding(BaseModel):
    """Page d'invitation d'un couple."""

    id: int | None = None
    user_id: int
    unique_url: str
    bride: str
    groom: str
    wedding_date: date
    wedding_time: str = DEFAULT_WEDDING_TIME
    timezone: str = DEFAULT_TIMEZONE
    venue: str
    venue_address: str = ""
    is_public: bool = True
    available_languages: list[str] = Field(default_factory=lambda: ["en"])
    default_language: str = "en"

    def schedule(self) -> WeddingSchedule:
        """Extrait la planification utilisée par le compte à rebours."""
        return WeddingSchedule(
            wedding_date=self.wedding_date,
            time_of_day=self.wedding_time,
            timezone=self.timezone,
        )
