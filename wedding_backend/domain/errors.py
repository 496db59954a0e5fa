"""
Taxonomie d'erreurs du domaine mariage.

Trois classes de résultats sont distinguées:
- dégradation silencieuse (fuseau ou heure mal formés): aucune exception, valeur par défaut;
- entrée invalide (date mal formée, capacité inconnue): `InvalidInputError` et dérivées;
- refus d'accès: simple `False` côté évaluateur, `PermissionDeniedError` côté service.
"""

from __future__ import annotations


class WeddingError(Exception):
    """Erreur de base du domaine, porteuse d'un code stable."""

    code = "wedding_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidInputError(WeddingError, ValueError):
    """Entrée mal formée signalée à l'appelant (jamais journalisée ici)."""

    code = "invalid_input"


class InvalidWeddingDateError(InvalidInputError):
    """La date du mariage n'est pas une date calendaire valide."""

    code = "invalid_wedding_date"


class UnknownCapabilityError(InvalidInputError):
    """Nom de capacité non reconnu: requête mal formée, pas un refus."""

    code = "unknown_capability"

    def __init__(self, name: object):
        super().__init__(f"unknown_capability:{name}")
        self.name = name


class NotFoundError(WeddingError, LookupError):
    """Mariage, utilisateur ou accès introuvable."""

    code = "not_found"


class PermissionDeniedError(WeddingError):
    """L'acteur n'a pas le droit d'effectuer l'opération demandée."""

    code = "permission_denied"
