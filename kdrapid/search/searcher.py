"""
Module de recherche pour KDRapid.
Parcours en profondeur de l'arbre implicite avec élagage par branch-and-bound.
"""

import math
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from tqdm.auto import tqdm

from kdrapid.core.errors import DimensionMismatchError, InvalidConfigurationError
from kdrapid.core.tree import KDTree, median_index


class SearchContext:
    """
    Paramètres d'une recherche.

    visit(element, dist2) est appelé pour chaque candidat dans le rayon et renvoie False
    pour arrêter tout le parcours. worst_distance() renvoie la distance au carré du pire
    candidat retenu : c'est le seuil d'élagage quand le nombre de résultats est borné.
    """

    def __init__(
        self,
        point: Sequence,
        visit: Optional[Callable[[Any, float], bool]] = None,
        worst_distance: Optional[Callable[[], float]] = None,
        radius2: float = math.inf,
        max_count: Optional[int] = None,
        dim_count: Optional[int] = None,
    ):
        self.point = point
        self.visit = visit
        self.worst_distance = worst_distance
        self.radius2 = radius2
        self.max_count = max_count
        self.dim_count = dim_count

    def validate(self, elements: Optional[Sequence] = None) -> int:
        """
        Vérifie le contrat avant tout parcours.

        Args:
            elements: Buffer interrogé ; son premier élément sert à vérifier la dimension du point

        Returns:
            int: Nombre d'axes effectif
        """
        if self.visit is None:
            raise InvalidConfigurationError("visit doit être spécifié")
        if math.isinf(self.radius2) and self.max_count is None:
            raise InvalidConfigurationError("radius2 ou max_count doit être spécifié")
        if self.max_count is not None and self.worst_distance is None:
            raise InvalidConfigurationError("worst_distance doit être spécifié quand max_count est borné")
        if math.isnan(self.radius2) or self.radius2 < 0:
            raise InvalidConfigurationError(f"radius2 doit être >= 0, reçu {self.radius2}")

        dim_count = self.dim_count if self.dim_count is not None else len(self.point)
        if dim_count < 1:
            raise InvalidConfigurationError(f"dim_count doit être >= 1, reçu {dim_count}")
        if len(self.point) < dim_count:
            raise DimensionMismatchError(
                f"Le point de requête a {len(self.point)} coordonnées, l'arbre en adresse {dim_count}")
        if elements:
            try:
                elements[0].coordinate(len(self.point) - 1)
            except IndexError:
                raise DimensionMismatchError(
                    f"Le point de requête a {len(self.point)} coordonnées, plus que les éléments du buffer") from None
        return dim_count


def distance_l2(point: Sequence, element) -> float:
    """Distance euclidienne au carré, sur toutes les coordonnées du point."""
    total = 0.0
    for i in range(len(point)):
        diff = float(point[i]) - float(element.coordinate(i))
        total += diff * diff
    return total


def search(elements: Sequence, ctx: SearchContext) -> bool:
    """
    Parcourt l'arbre implicite et appelle ctx.visit pour chaque élément dans le rayon.

    Le sous-arbre contenant la projection de la requête est visité en premier ; l'autre
    n'est visité que si la distance au carré à l'hyperplan de coupe ne dépasse ni le rayon
    ni la pire distance retenue.

    Args:
        elements: Buffer construit par build_in_place (lecture seule)
        ctx: Paramètres de la recherche

    Returns:
        bool: True si le parcours est allé au bout, False si visit l'a interrompu
    """
    dim_count = ctx.validate(elements)
    point = ctx.point
    visit = ctx.visit
    worst_distance = ctx.worst_distance
    radius2 = ctx.radius2

    def search_recursive(lo: int, hi: int, depth: int) -> bool:
        if hi <= lo:
            return True
        mid = median_index(lo, hi)
        node = elements[mid]
        dist2 = distance_l2(point, node)
        if dist2 <= radius2:
            if not visit(node, dist2):
                return False
        if hi - lo == 1:
            return True

        axis = depth % dim_count
        node_value = float(node.coordinate(axis))
        query_value = float(point[axis])
        to_left = query_value < node_value
        plane2 = query_value - node_value
        plane2 *= plane2

        if to_left:
            if not search_recursive(lo, mid, depth + 1):
                return False
        elif not search_recursive(mid + 1, hi, depth + 1):
            return False

        # L'autre côté ne peut rien améliorer si l'hyperplan est déjà plus loin que le pire retenu
        if plane2 <= radius2 and (worst_distance is None or plane2 <= worst_distance()):
            if to_left:
                return search_recursive(mid + 1, hi, depth + 1)
            return search_recursive(lo, mid, depth + 1)
        return True

    return search_recursive(0, len(elements), 0)


class Searcher:
    """
    Classe de recherche liée à un arbre construit.
    Évite de répéter le buffer et le nombre de dimensions à chaque requête.
    """

    def __init__(self, tree: KDTree):
        """
        Initialise le chercheur.

        Args:
            tree: Instance de KDTree déjà construite
        """
        if not tree.built:
            raise ValueError("L'arbre doit être construit avant la recherche")
        self.tree = tree
        self.last_search_time = 0.0

    def search(self, point: Sequence, visit: Callable[[Any, float], bool],
               worst_distance: Optional[Callable[[], float]] = None,
               radius2: float = math.inf, max_count: Optional[int] = None) -> bool:
        start_time = time.time()
        completed = self.tree.search(point, visit, worst_distance=worst_distance,
                                     radius2=radius2, max_count=max_count)
        self.last_search_time = time.time() - start_time
        return completed

    def search_sorted(self, point: Sequence, radius: float = math.inf, max_count: Optional[int] = 10,
                      result: Optional[List[Tuple[Any, float]]] = None) -> List[Tuple[Any, float]]:
        start_time = time.time()
        found = self.tree.search_sorted(point, radius=radius, max_count=max_count, result=result)
        self.last_search_time = time.time() - start_time
        return found

    def search_many(self, queries: Iterable[Sequence], radius: float = math.inf, max_count: Optional[int] = 10,
                    progress: bool = False) -> Tuple[List[List[Tuple[Any, float]]], Dict[str, float]]:
        """
        Effectue une recherche triée pour chaque requête.

        Args:
            queries: Points de requête
            radius: Rayon (linéaire) de recherche
            max_count: Nombre maximal de résultats par requête
            progress: Afficher une barre de progression

        Returns:
            Tuple[List, Dict]: Résultats par requête et timings
        """
        queries = list(queries)
        results = []
        start_time = time.time()
        for query in tqdm(queries, desc="Requêtes", disable=not progress):
            results.append(self.tree.search_sorted(query, radius=radius, max_count=max_count))
        total_time = time.time() - start_time
        self.last_search_time = total_time

        timings = {
            "total": total_time,
            "avg": total_time / len(queries) if queries else 0.0,
        }
        return results, timings
