"""
Contrôle d'accès multi-tenant aux mariages.

Chaque accès (grant) associe un utilisateur à un mariage avec un rôle:
- `Owner`: tous les droits, aucun jeu de capacités stocké;
- `GuestManager` / `Viewer`: un jeu explicite de cinq capacités booléennes.

L'évaluation est pure: elle ne lit que ses arguments, ne journalise rien et distingue un refus
(`False`) d'une requête mal formée (`UnknownCapabilityError`).
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from wedding_backend.domain.errors import InvalidInputError, UnknownCapabilityError

RoleKind = Literal["owner", "guest_manager", "viewer"]


class Capability(str, Enum):
    """Capacités contrôlées sur un mariage."""

    EDIT_DETAILS = "edit_details"
    MANAGE_GUESTS = "manage_guests"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_PHOTOS = "manage_photos"
    EDIT_GUEST_BOOK = "edit_guest_book"

    @property
    def permission_key(self) -> str:
        """Clé utilisée dans le blob JSON `permissions` (ex. `canEditDetails`)."""
        return "can" + "".join(part.capitalize() for part in self.value.split("_"))

    @property
    def camel_name(self) -> str:
        """Nom camelCase utilisé par le client (ex. `editDetails`)."""
        head, *rest = self.value.split("_")
        return head + "".join(part.capitalize() for part in rest)

    @classmethod
    def parse(cls, name: Capability | str) -> Capability:
        """Résout un nom de capacité (snake_case, camelCase ou clé `canX`).

        Raises:
            UnknownCapabilityError: si le nom n'est pas reconnu.
        """
        if isinstance(name, Capability):
            return name
        if isinstance(name, str):
            found = _CAPABILITY_ALIASES.get(name.strip())
            if found is not None:
                return found
        raise UnknownCapabilityError(name)


_CAPABILITY_ALIASES: dict[str, Capability] = {
    alias: cap
    for cap in Capability
    for alias in (cap.value, cap.camel_name, cap.permission_key)
}


class CapabilitySet(BaseModel):
    """Jeu de capacités explicite d'un accès non propriétaire."""

    model_config = ConfigDict(frozen=True)

    edit_details: bool = False
    manage_guests: bool = False
    view_analytics: bool = False
    manage_photos: bool = False
    edit_guest_book: bool = False

    def allows(self, capability: Capability | str) -> bool:
        return bool(getattr(self, Capability.parse(capability).value))

    def granted(self) -> frozenset[Capability]:
        return frozenset(cap for cap in Capability if getattr(self, cap.value))

    @classmethod
    def of(cls, *capabilities: Capability | str) -> CapabilitySet:
        return cls(**{Capability.parse(c).value: True for c in capabilities})

    @classmethod
    def all(cls) -> CapabilitySet:
        return cls.of(*Capability)

    @classmethod
    def none(cls) -> CapabilitySet:
        return cls()

    @classmethod
    def from_permissions(cls, permissions: Mapping[str, Any] | None) -> CapabilitySet:
        """Construit le jeu depuis le blob stocké; une clé absente vaut `False`.

        Les clés inconnues du blob sont ignorées; seule la valeur booléenne `true` accorde la
        capacité (`"false"`, `1` ou `"yes"` stockés par erreur valent `False`).
        """
        permissions = permissions or {}
        values = {}
        for cap in Capability:
            raw = permissions.get(cap.permission_key, permissions.get(cap.value, False))
            values[cap.value] = raw is True
        return cls(**values)

    def to_permissions(self) -> dict[str, bool]:
        """Sérialise vers le format du blob JSON `permissions`."""
        return {cap.permission_key: bool(getattr(self, cap.value)) for cap in Capability}


class Owner(BaseModel):
    """Propriétaire: toutes les capacités, implicitement."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["owner"] = "owner"


class GuestManager(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["guest_manager"] = "guest_manager"
    capabilities: CapabilitySet = Field(default_factory=CapabilitySet)


class Viewer(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["viewer"] = "viewer"
    capabilities: CapabilitySet = Field(default_factory=CapabilitySet)


Role = Annotated[Owner | GuestManager | Viewer, Field(discriminator="kind")]

_ROLE_DEFAULTS: dict[str, CapabilitySet] = {
    "owner": CapabilitySet.all(),
    "guest_manager": CapabilitySet.of(
        Capability.MANAGE_GUESTS, Capability.EDIT_GUEST_BOOK, Capability.VIEW_ANALYTICS
    ),
    "viewer": CapabilitySet.of(Capability.VIEW_ANALYTICS),
}


def default_capabilities(kind: str) -> CapabilitySet:
    """Jeu de capacités dérivé du rôle, utilisé quand un accès est créé sans drapeaux."""
    try:
        return _ROLE_DEFAULTS[kind]
    except KeyError as err:
        raise InvalidInputError(f"unknown_role:{kind}") from err


def make_role(
    kind: str, capabilities: CapabilitySet | None = None
) -> Owner | GuestManager | Viewer:
    """Construit la variante de rôle; sans `capabilities`, applique les valeurs par défaut."""
    if kind == "owner":
        return Owner()
    caps = capabilities if capabilities is not None else default_capabilities(kind)
    if kind == "guest_manager":
        return GuestManager(capabilities=caps)
    if kind == "viewer":
        return Viewer(capabilities=caps)
    raise InvalidInputError(f"unknown_role:{kind}")


class AccessGrant(BaseModel):
    """Accès d'un utilisateur (`subject_id`) à un mariage (`resource_id`)."""

    model_config = ConfigDict(frozen=True)

    subject_id: int
    resource_id: int
    role: Role

    @property
    def is_owner(self) -> bool:
        return isinstance(self.role, Owner)

    @classmethod
    def from_row(
        cls,
        user_id: int,
        wedding_id: int,
        access_level: str,
        permissions: Mapping[str, Any] | None,
    ) -> AccessGrant:
        """Construit un accès depuis une ligne `wedding_access`.

        Les drapeaux stockés sur une ligne `owner` sont ignorés.
        """
        caps = CapabilitySet.from_permissions(permissions)
        return cls(subject_id=user_id, resource_id=wedding_id, role=make_role(access_level, caps))

    def to_row(self) -> dict[str, Any]:
        """Retourne `access_level` et `permissions` au format stocké."""
        caps = CapabilitySet.none() if self.is_owner else self.role.capabilities
        return {"access_level": self.role.kind, "permissions": caps.to_permissions()}


@dataclass(frozen=True)
class CapabilityRequest:
    """Demande ponctuelle: `subject_id` peut-il exercer `capability` sur `resource_id` ?

    Le nom de capacité est validé à la construction (`UnknownCapabilityError`).
    """

    subject_id: int
    resource_id: int
    capability: Capability

    def __post_init__(self) -> None:
        object.__setattr__(self, "capability", Capability.parse(self.capability))


def find_grant(
    grants: Iterable[AccessGrant], subject_id: int, resource_id: int
) -> AccessGrant | None:
    """Premier accès correspondant à (subject_id, resource_id), sans fusion des doublons."""
    return next(
        (g for g in grants if g.subject_id == subject_id and g.resource_id == resource_id),
        None,
    )


def can_perform(
    grants: Iterable[AccessGrant],
    subject_id: int,
    resource_id: int,
    capability: Capability | str,
) -> bool:
    """Indique si `subject_id` peut exercer `capability` sur `resource_id`.

    Règles:
    - capacité inconnue: `UnknownCapabilityError` (requête mal formée, pas un refus);
    - propriétaire: toujours autorisé, quels que soient les drapeaux stockés;
    - aucun accès pour la paire: refus par défaut;
    - sinon: valeur du drapeau sur le premier accès trouvé. Des accès en double pour une même
      paire sont une donnée amont non définie; ils ne sont ni fusionnés ni dédoublonnés.
    """
    cap = Capability.parse(capability)
    first: AccessGrant | None = None
    for grant in grants:
        if grant.subject_id != subject_id or grant.resource_id != resource_id:
            continue
        if grant.is_owner:
            return True
        if first is None:
            first = grant
    if first is None:
        return False
    return first.role.capabilities.allows(cap)


def evaluate(grants: Iterable[AccessGrant], request: CapabilityRequest) -> bool:
    return can_perform(grants, request.subject_id, request.resource_id, request.capability)


def inconsistent_grant(grant: AccessGrant) -> bool:
    """Vrai pour un `Viewer` dont les drapeaux dépassent les droits de lecture de son rôle.

    L'évaluateur fait malgré tout confiance aux drapeaux stockés.
    """
    if not isinstance(grant.role, Viewer):
        return False
    return bool(grant.role.capabilities.granted() - _ROLE_DEFAULTS["viewer"].granted())
