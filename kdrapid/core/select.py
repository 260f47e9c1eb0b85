"""
Sélection du k-ième élément (quickselect) en place.
Brique de base de la construction : place la médiane d'une plage sans trier toute la plage.
"""

from typing import MutableSequence, Optional


def select_inplace(elements: MutableSequence, rank: int, axis: int, lo: int = 0, hi: Optional[int] = None) -> None:
    """
    Réordonne elements[lo:hi] pour que la position rank contienne l'élément qu'un tri
    complet selon l'axe y placerait.

    Après l'appel, tout élément de [lo, rank) a une coordonnée <= à celle de rank sur l'axe,
    et tout élément de (rank, hi) une coordonnée >=. Les égalités peuvent tomber des deux côtés.

    Variante itérative de "select" (Numerical Recipes) : pivot au milieu de la fenêtre,
    médiane de trois, puis partition à deux pointeurs.

    Args:
        elements: Buffer mutable d'éléments exposant coordinate(dim)
        rank: Position absolue visée dans le buffer
        axis: Axe de comparaison
        lo: Début de la plage (inclus)
        hi: Fin de la plage (exclue), len(elements) si None
    """
    if hi is None:
        hi = len(elements)
    if hi <= lo:
        return
    if not lo <= rank < hi:
        raise ValueError(f"rank={rank} hors de la plage [{lo}, {hi})")

    a = elements
    low = lo
    high = hi - 1

    while True:
        if high <= low + 1:
            # Fenêtre de 1 ou 2 éléments
            if high == low + 1 and a[high].coordinate(axis) < a[low].coordinate(axis):
                a[low], a[high] = a[high], a[low]
            return

        middle = (low + high) >> 1
        a[middle], a[low + 1] = a[low + 1], a[middle]

        # Médiane de trois : a[low] <= a[low + 1] <= a[high]
        if a[low].coordinate(axis) > a[high].coordinate(axis):
            a[low], a[high] = a[high], a[low]
        if a[low + 1].coordinate(axis) > a[high].coordinate(axis):
            a[low + 1], a[high] = a[high], a[low + 1]
        if a[low].coordinate(axis) > a[low + 1].coordinate(axis):
            a[low], a[low + 1] = a[low + 1], a[low]

        begin = low + 1
        end = high
        pivot_el = a[begin]
        pivot = pivot_el.coordinate(axis)

        # a[low] et a[high] servent de sentinelles aux deux balayages
        while True:
            begin += 1
            while a[begin].coordinate(axis) < pivot:
                begin += 1
            end -= 1
            while a[end].coordinate(axis) > pivot:
                end -= 1
            if end < begin:
                break
            a[begin], a[end] = a[end], a[begin]

        a[low + 1] = a[end]
        a[end] = pivot_el

        if end >= rank:
            high = end - 1
        if end <= rank:
            low = begin
