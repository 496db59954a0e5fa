"""Tests pour le service de gestion des accès partagés.

Ce module teste le cycle de vie des accès (partage, mise à jour, révocation) et la vérification
des capacités via SQLAlchemy avec une base SQLite en mémoire.
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from wedding_backend.domain.access import Capability, CapabilitySet, GuestManager, Viewer
from wedding_backend.domain.entities import User, Wedding
from wedding_backend.domain.errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
    UnknownCapabilityError,
)
from wedding_backend.domain.services import AccessService
from wedding_backend.infra.repo.access_repo import AccessRepo
from wedding_backend.infra.repo.wedding_repo import UserRepo, WeddingRepo

MISSING_ID = 9999


@pytest.fixture()
def service(session: Session) -> AccessService:
    return AccessService(AccessRepo(session), WeddingRepo(session), UserRepo(session))


def test_owner_is_implicit(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste que le couple a tous les droits sans ligne `wedding_access`."""
    for cap in Capability:
        assert service.check(people["owner"].id, wedding.id, cap) is True


def test_stranger_is_denied(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste le refus par défaut pour un utilisateur sans accès."""
    assert service.check(people["stranger"].id, wedding.id, "manageGuests") is False
    with pytest.raises(PermissionDeniedError) as exc:
        service.require(people["stranger"].id, wedding.id, "manageGuests")
    assert "manage_guests" in exc.value.message


def test_share_with_role_defaults(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste le partage d'un accès gestionnaire avec les drapeaux par défaut du rôle."""
    grant = service.share(people["owner"].id, wedding.id, people["manager"].id, "guest_manager")
    assert isinstance(grant.role, GuestManager)
    assert service.check(people["manager"].id, wedding.id, "manage_guests") is True
    assert service.check(people["manager"].id, wedding.id, "edit_details") is False
    service.require(people["manager"].id, wedding.id, Capability.EDIT_GUEST_BOOK)


def test_share_with_explicit_flags(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste le partage avec un jeu de capacités explicite."""
    service.share(
        people["owner"].id,
        wedding.id,
        people["viewer"].id,
        "viewer",
        CapabilitySet.none(),
    )
    for cap in Capability:
        assert service.check(people["viewer"].id, wedding.id, cap) is False


def test_only_owner_or_admin_can_share(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste que ni un gestionnaire ni un inconnu ne peuvent partager."""
    service.share(people["owner"].id, wedding.id, people["manager"].id, "guest_manager")
    with pytest.raises(PermissionDeniedError):
        service.share(people["manager"].id, wedding.id, people["viewer"].id, "viewer")
    with pytest.raises(PermissionDeniedError):
        service.share(people["stranger"].id, wedding.id, people["viewer"].id, "viewer")
    grant = service.share(people["admin"].id, wedding.id, people["viewer"].id, "viewer")
    assert isinstance(grant.role, Viewer)


def test_owner_role_is_not_shareable(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste que la propriété ne se délègue pas via `share`."""
    with pytest.raises(InvalidInputError):
        service.share(people["owner"].id, wedding.id, people["viewer"].id, "owner")


def test_share_to_unknown_user_or_wedding(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste les cas introuvables."""
    with pytest.raises(NotFoundError):
        service.share(people["owner"].id, wedding.id, MISSING_ID, "viewer")
    with pytest.raises(NotFoundError):
        service.share(people["owner"].id, MISSING_ID, people["viewer"].id, "viewer")
    with pytest.raises(NotFoundError):
        service.check(people["owner"].id, MISSING_ID, "edit_details")


def test_update_capabilities(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste la mise à jour explicite des drapeaux par le propriétaire."""
    service.share(people["owner"].id, wedding.id, people["manager"].id, "guest_manager")
    updated = service.update_capabilities(
        people["owner"].id,
        wedding.id,
        people["manager"].id,
        CapabilitySet.of("manage_photos"),
    )
    assert updated.role.capabilities.granted() == frozenset({Capability.MANAGE_PHOTOS})
    assert service.check(people["manager"].id, wedding.id, "manage_guests") is False
    assert service.check(people["manager"].id, wedding.id, "manage_photos") is True


def test_update_requires_owner_and_existing_grant(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste les refus et absences lors d'une mise à jour."""
    with pytest.raises(NotFoundError):
        service.update_capabilities(
            people["owner"].id, wedding.id, people["viewer"].id, CapabilitySet.all()
        )
    service.share(people["owner"].id, wedding.id, people["viewer"].id, "viewer")
    with pytest.raises(PermissionDeniedError):
        service.update_capabilities(
            people["viewer"].id, wedding.id, people["viewer"].id, CapabilitySet.all()
        )


def test_inconsistent_viewer_is_trusted(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste qu'un `viewer` aux drapeaux étendus reste autorisé (drapeaux stockés prioritaires)."""
    service.share(people["owner"].id, wedding.id, people["viewer"].id, "viewer")
    service.update_capabilities(
        people["owner"].id, wedding.id, people["viewer"].id, CapabilitySet.all()
    )
    assert service.check(people["viewer"].id, wedding.id, "edit_details") is True


def test_revoke(service: AccessService, people: dict[str, User], wedding: Wedding) -> None:
    """Teste la révocation puis le refus par défaut."""
    service.share(people["owner"].id, wedding.id, people["viewer"].id, "viewer")
    assert service.check(people["viewer"].id, wedding.id, "view_analytics") is True
    service.revoke(people["owner"].id, wedding.id, people["viewer"].id)
    assert service.check(people["viewer"].id, wedding.id, "view_analytics") is False
    with pytest.raises(NotFoundError):
        service.revoke(people["owner"].id, wedding.id, people["viewer"].id)


def test_unknown_capability_propagates(
    service: AccessService, people: dict[str, User], wedding: Wedding
) -> None:
    """Teste que le service ne transforme pas une capacité inconnue en refus."""
    with pytest.raises(UnknownCapabilityError):
        service.check(people["owner"].id, wedding.id, "canFly")
    with pytest.raises(UnknownCapabilityError):
        service.require(people["stranger"].id, wedding.id, "canFly")
