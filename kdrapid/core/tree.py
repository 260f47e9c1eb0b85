"""
Module de structures d'arbre pour KDRapid.
L'arbre est implicite : un buffer d'éléments ordonné de façon à ce que chaque plage
[lo, hi) ait sa médiane en lo + (hi - lo) // 2, le sous-arbre gauche à gauche et le droit à droite.
"""

import math
from typing import Any, Callable, Dict, List, MutableSequence, Optional, Sequence, Tuple

from kdrapid.core.errors import InvalidConfigurationError, StructuralCorruptionError


def median_index(lo: int, hi: int) -> int:
    """Position du nœud de la plage [lo, hi)."""
    return lo + (hi - lo) // 2


def left_range(lo: int, hi: int) -> Tuple[int, int]:
    """Plage du sous-arbre gauche."""
    return lo, median_index(lo, hi)


def right_range(lo: int, hi: int) -> Tuple[int, int]:
    """Plage du sous-arbre droit."""
    return median_index(lo, hi) + 1, hi


def validate_dim_count(dim_count: int) -> None:
    if dim_count < 1:
        raise InvalidConfigurationError(f"dim_count doit être >= 1, reçu {dim_count}")


def check_tree(elements: Sequence, dim_count: int) -> None:
    """
    Vérifie récursivement l'invariant de partition de l'arbre implicite.

    Outil de diagnostic destiné aux tests, pas aux chemins de production.

    Args:
        elements: Buffer construit par build_in_place
        dim_count: Nombre de dimensions utilisé à la construction

    Raises:
        StructuralCorruptionError: si une plage viole l'invariant
    """
    validate_dim_count(dim_count)

    def check_recursive(lo: int, hi: int, depth: int) -> None:
        if hi - lo <= 1:
            return
        axis = depth % dim_count
        mid = median_index(lo, hi)
        node_value = elements[mid].coordinate(axis)
        for i in range(lo, mid):
            if elements[i].coordinate(axis) > node_value:
                raise StructuralCorruptionError(
                    f"Arbre invalide: position {i} > médiane {mid} sur l'axe {axis} (plage [{lo}, {hi}))",
                    lo, hi, axis, i)
        for i in range(mid + 1, hi):
            if elements[i].coordinate(axis) < node_value:
                raise StructuralCorruptionError(
                    f"Arbre invalide: position {i} < médiane {mid} sur l'axe {axis} (plage [{lo}, {hi}))",
                    lo, hi, axis, i)
        check_recursive(lo, mid, depth + 1)
        check_recursive(mid + 1, hi, depth + 1)

    check_recursive(0, len(elements), 0)


class KDTree:
    """
    Poignée sur un arbre k-d implicite.
    Ne possède pas le buffer : garde une référence vers la liste de l'appelant et
    le nombre de dimensions utilisé pour la construction.
    """

    def __init__(self, elements: MutableSequence, dim_count: int):
        """
        Initialise la poignée (sans construire).

        Args:
            elements: Buffer mutable d'éléments exposant index et coordinate(dim)
            dim_count: Nombre d'axes cyclés par profondeur
        """
        validate_dim_count(dim_count)
        self.elements = elements
        self.dim_count = dim_count
        self.built = False
        self.stats = {}  # Statistiques sur l'arbre

    def build(self, verbose: bool = False) -> "KDTree":
        """
        Réordonne le buffer en arbre implicite.

        Args:
            verbose: Afficher les messages de progression

        Returns:
            KDTree: self, pour chaîner les appels
        """
        # Importation locale pour éviter les dépendances circulaires
        from kdrapid.builder.builder import build_in_place

        build_in_place(self.elements, self.dim_count, verbose=verbose)
        self.built = True
        self.stats = {}
        return self

    def check(self) -> None:
        """Vérifie l'invariant de partition (lève StructuralCorruptionError)."""
        check_tree(self.elements, self.dim_count)

    def search(
        self,
        point: Sequence,
        visit: Callable[[Any, float], bool],
        worst_distance: Optional[Callable[[], float]] = None,
        radius2: float = math.inf,
        max_count: Optional[int] = None,
    ) -> bool:
        """
        Parcours borné avec callbacks, voir kdrapid.search.searcher.search.

        Returns:
            bool: False si visit a demandé l'arrêt du parcours
        """
        from kdrapid.search.searcher import SearchContext, search

        ctx = SearchContext(
            point=point,
            visit=visit,
            worst_distance=worst_distance,
            radius2=radius2,
            max_count=max_count,
            dim_count=self.dim_count,
        )
        return search(self.elements, ctx)

    def search_sorted(
        self,
        point: Sequence,
        radius: float = math.inf,
        max_count: Optional[int] = 10,
        result: Optional[List[Tuple[Any, float]]] = None,
    ) -> List[Tuple[Any, float]]:
        """
        Plus proches voisins triés par distance croissante.

        Args:
            point: Point de requête
            radius: Rayon (linéaire) de recherche
            max_count: Nombre maximal de résultats
            result: Liste réutilisable pour éviter une allocation

        Returns:
            List[Tuple[element, float]]: Couples (élément, distance au carré)
        """
        from kdrapid.search.ranker import search_sorted

        return search_sorted(self.elements, point, radius=radius, max_count=max_count,
                             result=result, dim_count=self.dim_count)

    def get_height(self) -> int:
        """
        Calcule la hauteur de l'arbre (nombre de niveaux).

        Returns:
            int: Hauteur de l'arbre, 0 pour un buffer vide
        """
        n = len(self.elements)
        height = 0
        while n > 0:
            # La plus grande plage d'un niveau est toujours la gauche ou la droite de taille n // 2
            n //= 2
            height += 1
        return height

    def get_leaf_count(self) -> int:
        """
        Compte les nœuds sans enfant.

        Returns:
            int: Nombre de feuilles
        """
        def count_leaves(lo: int, hi: int) -> int:
            if hi - lo <= 0:
                return 0
            if hi - lo == 1:
                return 1
            mid = median_index(lo, hi)
            return count_leaves(lo, mid) + count_leaves(mid + 1, hi)

        return count_leaves(0, len(self.elements))

    def get_node_count(self) -> int:
        return len(self.elements)

    def get_statistics(self) -> Dict[str, Any]:
        """
        Calcule diverses statistiques sur l'arbre.

        Returns:
            Dict: Dictionnaire de statistiques
        """
        if not self.elements:
            return {"error": "Arbre vide"}

        stats = {
            "node_count": self.get_node_count(),
            "leaf_count": self.get_leaf_count(),
            "height": self.get_height(),
            "dim_count": self.dim_count,
            "built": self.built,
            "nodes_per_axis": {axis: 0 for axis in range(self.dim_count)},
        }

        def traverse(lo: int, hi: int, depth: int) -> None:
            if hi - lo <= 0:
                return
            stats["nodes_per_axis"][depth % self.dim_count] += 1
            mid = median_index(lo, hi)
            traverse(lo, mid, depth + 1)
            traverse(mid + 1, hi, depth + 1)

        traverse(0, len(self.elements), 0)

        # Conserver les statistiques dans l'instance
        self.stats = stats

        return stats

    def __len__(self) -> int:
        return len(self.elements)

    def __str__(self) -> str:
        """Représentation sous forme de chaîne pour le débogage."""
        if not self.elements:
            return "Empty Tree"
        return (f"KDTree(nodes={self.get_node_count()}, "
                f"leaves={self.get_leaf_count()}, "
                f"height={self.get_height()}, "
                f"dims={self.dim_count}, "
                f"built={self.built})")
