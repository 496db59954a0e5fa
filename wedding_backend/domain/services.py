"""Services métier: compte à rebours d'un mariage et cycle de vie des accès partagés."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from wedding_backend.core.settings import Settings, get_settings
from wedding_backend.domain.access import (
    AccessGrant,
    Capability,
    CapabilitySet,
    Owner,
    RoleKind,
    can_perform,
    inconsistent_grant,
    make_role,
)
from wedding_backend.domain.countdown import (
    FALLBACK_TIME,
    CountdownResult,
    compute_countdown,
    parse_time_of_day,
)
from wedding_backend.domain.entities import Wedding
from wedding_backend.domain.errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CountdownService:
    """Calcule le compte à rebours d'un mariage stocké.

    Responsabilités:
    - Charger le mariage via `wedding_repo`.
    - Appliquer les valeurs par défaut configurées (fuseau, heure de cérémonie).
    - Évaluer à l'instant fourni par `clock` (UTC courant par défaut).
    """

    def __init__(
        self,
        wedding_repo,
        settings: Settings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.weddings = wedding_repo
        self.settings = settings or get_settings()
        self.clock = clock
        self._default_time = parse_time_of_day(
            self.settings.DEFAULT_WEDDING_TIME, default=FALLBACK_TIME
        )

    @property
    def refresh_interval_ms(self) -> int:
        """Intervalle de rafraîchissement conseillé aux surfaces d'affichage."""
        return self.settings.COUNTDOWN_REFRESH_MS

    def countdown_for_wedding(
        self, wedding: Wedding, now: datetime | None = None
    ) -> CountdownResult:
        return compute_countdown(
            wedding.wedding_date,
            wedding.wedding_time,
            wedding.timezone,
            now or self.clock(),
            default_timezone=self.settings.DEFAULT_TIMEZONE,
            default_time=self._default_time,
        )

    def countdown(self, wedding_id: int, now: datetime | None = None) -> CountdownResult:
        """Compte à rebours du mariage `wedding_id`.

        Raises:
            NotFoundError: si le mariage n'existe pas.
        """
        wedding = self.weddings.get(wedding_id)
        if wedding is None:
            raise NotFoundError("wedding_not_found")
        return self.countdown_for_wedding(wedding, now)

    def countdown_by_url(self, unique_url: str, now: datetime | None = None) -> CountdownResult:
        wedding = self.weddings.get_by_url(unique_url)
        if wedding is None:
            raise NotFoundError("wedding_not_found")
        return self.countdown_for_wedding(wedding, now)


class AccessService:
    """Vérifie et fait évoluer les accès partagés à un mariage.

    Le propriétaire d'un mariage (`wedding.user_id`) reçoit implicitement un accès `Owner`.
    Seuls le propriétaire et un administrateur peuvent créer, modifier ou révoquer un accès.
    """

    def __init__(self, access_repo, wedding_repo, user_repo):
        self.access = access_repo
        self.weddings = wedding_repo
        self.users = user_repo
        self._log = structlog.get_logger(__name__).bind(component="access_service")

    def _wedding(self, wedding_id: int) -> Wedding:
        wedding = self.weddings.get(wedding_id)
        if wedding is None:
            raise NotFoundError("wedding_not_found")
        return wedding

    def grants_for(self, wedding: Wedding) -> list[AccessGrant]:
        """Accès stockés, précédés de l'accès propriétaire implicite."""
        owner = AccessGrant(subject_id=wedding.user_id, resource_id=wedding.id, role=Owner())
        return [owner, *self.access.list_for_wedding(wedding.id)]

    def check(self, subject_id: int, wedding_id: int, capability: Capability | str) -> bool:
        """Retourne True si `subject_id` peut exercer `capability` sur le mariage."""
        wedding = self._wedding(wedding_id)
        return can_perform(self.grants_for(wedding), subject_id, wedding_id, capability)

    def require(self, subject_id: int, wedding_id: int, capability: Capability | str) -> None:
        """Comme `check`, mais lève `PermissionDeniedError` en cas de refus."""
        if not self.check(subject_id, wedding_id, capability):
            cap = Capability.parse(capability)
            raise PermissionDeniedError(f"missing_capability:{cap.value}")

    def _require_manager(self, actor_id: int, wedding: Wedding) -> None:
        if actor_id == wedding.user_id:
            return
        stored = self.access.get(actor_id, wedding.id)
        if stored is not None and stored.is_owner:
            return
        actor = self.users.get(actor_id)
        if actor is not None and actor.can_administer:
            return
        raise PermissionDeniedError("owner_or_admin_required")

    def _warn_if_inconsistent(self, grant: AccessGrant) -> None:
        if inconsistent_grant(grant):
            self._log.warning(
                "access_inconsistent_role",
                subject_id=grant.subject_id,
                wedding_id=grant.resource_id,
                role=grant.role.kind,
            )

    def share(
        self,
        actor_id: int,
        wedding_id: int,
        subject_id: int,
        role: RoleKind,
        capabilities: CapabilitySet | None = None,
    ) -> AccessGrant:
        """Crée un accès `role` pour `subject_id`.

        Sans `capabilities`, le jeu par défaut du rôle est appliqué. La propriété ne se partage pas.
        """
        wedding = self._wedding(wedding_id)
        self._require_manager(actor_id, wedding)
        if role == "owner":
            raise InvalidInputError("owner_not_shareable")
        if self.users.get(subject_id) is None:
            raise NotFoundError("user_not_found")
        grant = AccessGrant(
            subject_id=subject_id,
            resource_id=wedding_id,
            role=make_role(role, capabilities),
        )
        self._warn_if_inconsistent(grant)
        created = self.access.create(grant)
        self._log.info(
            "access_granted",
            actor_id=actor_id,
            subject_id=subject_id,
            wedding_id=wedding_id,
            role=role,
        )
        return created

    def update_capabilities(
        self,
        actor_id: int,
        wedding_id: int,
        subject_id: int,
        capabilities: CapabilitySet,
    ) -> AccessGrant:
        """Remplace les capacités d'un accès existant (propriétaire ou administrateur)."""
        wedding = self._wedding(wedding_id)
        self._require_manager(actor_id, wedding)
        existing = self.access.get(subject_id, wedding_id)
        if existing is None:
            raise NotFoundError("access_not_found")
        if existing.is_owner:
            raise InvalidInputError("owner_capabilities_implicit")
        updated = self.access.update_permissions(subject_id, wedding_id, capabilities)
        self._warn_if_inconsistent(updated)
        self._log.info(
            "access_updated",
            actor_id=actor_id,
            subject_id=subject_id,
            wedding_id=wedding_id,
            granted=sorted(c.value for c in capabilities.granted()),
        )
        return updated

    def revoke(self, actor_id: int, wedding_id: int, subject_id: int) -> None:
        """Supprime l'accès de `subject_id` au mariage."""
        wedding = self._wedding(wedding_id)
        self._require_manager(actor_id, wedding)
        if not self.access.delete(subject_id, wedding_id):
            raise NotFoundError("access_not_found")
        self._log.info(
            "access_revoked", actor_id=actor_id, subject_id=subject_id, wedding_id=wedding_id
        )
