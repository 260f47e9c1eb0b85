"""
Classement borné des K meilleurs candidats.
Branché sur les callbacks du chercheur : offer() sert de visit, cutoff() de worst_distance.
"""

import math
from typing import Any, List, Optional, Sequence, Tuple

from kdrapid.core.errors import InvalidConfigurationError
from kdrapid.search.searcher import SearchContext, search


class BoundedRanker:
    """
    Garde au plus max_count couples (élément, distance au carré) triés par distance croissante.
    À distance égale, l'ordre d'arrivée est conservé.
    """

    def __init__(self, max_count: Optional[int], result: Optional[List[Tuple[Any, float]]] = None):
        """
        Args:
            max_count: Capacité, None pour illimitée
            result: Liste réutilisable, vidée à l'initialisation
        """
        if max_count is not None and max_count < 0:
            raise InvalidConfigurationError(f"max_count doit être >= 0, reçu {max_count}")
        self.max_count = max_count
        self.result = result if result is not None else []
        self.result.clear()

    def offer(self, element: Any, dist2: float) -> bool:
        result = self.result
        capacity = self.max_count if self.max_count is not None else math.inf
        count = len(result)
        if count < capacity:
            result.append(None)
        i = count
        # Décaler vers la fin les entrées strictement plus éloignées
        while i > 0 and result[i - 1][1] > dist2:
            if i < capacity:
                result[i] = result[i - 1]
            i -= 1
        if i < capacity:
            result[i] = (element, dist2)
        return True

    def cutoff(self) -> float:
        if self.max_count is None or len(self.result) < self.max_count or not self.result:
            return math.inf
        return self.result[-1][1]


def search_sorted(
    elements: Sequence,
    point: Sequence,
    radius: float = math.inf,
    max_count: Optional[int] = 10,
    result: Optional[List[Tuple[Any, float]]] = None,
    dim_count: Optional[int] = None,
) -> List[Tuple[Any, float]]:
    """
    Retourne les plus proches voisins du point, triés par distance croissante.

    Args:
        elements: Buffer construit par build_in_place
        point: Point de requête
        radius: Rayon linéaire, élevé au carré une seule fois
        max_count: Nombre maximal de résultats, None pour illimité
        result: Liste réutilisable pour éviter une allocation
        dim_count: Nombre d'axes utilisé à la construction, len(point) si None

    Returns:
        List[Tuple[element, float]]: Couples (élément, distance au carré), au plus max_count
    """
    if math.isinf(radius) and max_count is None:
        raise InvalidConfigurationError("radius ou max_count doit être spécifié")
    if math.isnan(radius) or radius < 0:
        raise InvalidConfigurationError(f"radius doit être >= 0, reçu {radius}")

    ranker = BoundedRanker(max_count, result)
    ctx = SearchContext(
        point=point,
        visit=ranker.offer,
        worst_distance=ranker.cutoff if max_count is not None else None,
        radius2=radius * radius,
        max_count=max_count,
        dim_count=dim_count,
    )
    if max_count == 0:
        ctx.validate(elements)
        return ranker.result

    search(elements, ctx)
    return ranker.result
