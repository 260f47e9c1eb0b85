"""
Module des éléments indexables par KDRapid.
Définit la capacité attendue d'un élément et une implémentation prête à l'emploi.
"""

from typing import Any, Optional, Protocol, Sequence, Union, runtime_checkable

import numpy as np

Number = Union[int, float, np.integer, np.floating]


@runtime_checkable
class KDTreeElement(Protocol):
    """
    Capacité minimale d'un élément de l'arbre.

    L'attribut index n'est jamais lu par les algorithmes : il permet à l'appelant
    de retrouver la position d'origine après la construction, qui réordonne le buffer.
    """

    index: int

    def coordinate(self, dim: int) -> Number:
        ...


class Point:
    """
    Point k-dimensionnel utilisable directement comme élément de l'arbre.
    """

    __slots__ = ("coords", "index", "payload")

    def __init__(self, coords: Union[Sequence[Number], np.ndarray], index: int = -1, payload: Optional[Any] = None):
        """
        Initialise un point.

        Args:
            coords: Coordonnées du point (entiers ou flottants)
            index: Position d'origine dans le buffer (identité pour l'appelant)
            payload: Donnée libre associée au point, modifiable par l'appelant
        """
        self.coords = np.asarray(coords)
        if self.coords.ndim != 1:
            raise ValueError(f"Les coordonnées doivent être un vecteur 1D, reçu {self.coords.ndim}D")
        self.index = index
        self.payload = payload

    @property
    def dims(self) -> int:
        """Nombre de coordonnées du point."""
        return int(self.coords.shape[0])

    def coordinate(self, dim: int) -> Number:
        return self.coords[dim]

    def __len__(self) -> int:
        return self.dims

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.index == other.index and np.array_equal(self.coords, other.coords)

    def __hash__(self) -> int:
        return hash((self.index, self.coords.tobytes()))

    def __repr__(self) -> str:
        return f"Point(index={self.index}, coords={self.coords.tolist()})"


def make_points(coordinates: Union[Sequence[Sequence[Number]], np.ndarray]) -> list:
    """
    Construit un buffer de points à partir d'un tableau (n, d).

    Args:
        coordinates: Tableau ou liste de listes de coordonnées

    Returns:
        list: Liste de Point dont l'index est le numéro de ligne
    """
    array = np.asarray(coordinates)
    if array.ndim != 2:
        raise ValueError(f"Les coordonnées doivent former un tableau 2D (n, d), reçu {array.ndim}D")
    return [Point(row, index=i) for i, row in enumerate(array)]
