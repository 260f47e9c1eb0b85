"""
Exceptions de KDRapid.
Toutes les erreurs sont des violations de contrat côté appelant, détectées avant tout parcours.
"""


class KDRapidError(Exception):
    """Classe de base pour les erreurs KDRapid."""


class InvalidConfigurationError(KDRapidError, ValueError):
    """
    Paramètres de construction ou de recherche invalides.

    Levée quand aucune borne (rayon ou nombre) n'est finie, quand une borne sur le nombre
    est donnée sans fonction de pire distance, ou quand dim_count < 1.
    """


class DimensionMismatchError(KDRapidError, ValueError):
    """Le point de requête a moins de coordonnées que d'axes adressés par l'arbre."""


class StructuralCorruptionError(KDRapidError, RuntimeError):
    """
    L'invariant de partition de l'arbre implicite n'est pas respecté.

    Indique un bug dans la construction, ou un appelant qui a réordonné le buffer
    en dehors de l'API.
    """

    def __init__(self, message: str, lo: int = -1, hi: int = -1, axis: int = -1, position: int = -1):
        super().__init__(message)
        self.lo = lo
        self.hi = hi
        self.axis = axis
        self.position = position
