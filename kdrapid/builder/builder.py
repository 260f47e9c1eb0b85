"""
Constructeur d'arbres k-d implicites.
Partitionne récursivement le buffer autour de sa médiane, en alternant l'axe avec la profondeur.
"""

import time
from typing import Any, Dict, MutableSequence, Optional

from kdrapid.core.select import select_inplace
from kdrapid.core.tree import KDTree, check_tree, median_index, validate_dim_count
from kdrapid.utils.config import ConfigManager


def build_in_place(elements: MutableSequence, dim_count: int, verbose: bool = False) -> None:
    """
    Réordonne tout le buffer en arbre k-d implicite équilibré.

    Pour chaque plage [lo, hi) de profondeur depth, la médiane selon l'axe depth % dim_count
    est placée en lo + (hi - lo) // 2, puis les deux moitiés sont traitées à depth + 1.
    Coût O(n log n), aucune allocation hors pile d'appels.

    Args:
        elements: Buffer mutable d'éléments exposant coordinate(dim)
        dim_count: Nombre d'axes à cycler (>= 1)
        verbose: Afficher les messages de progression

    Raises:
        InvalidConfigurationError: si dim_count < 1
    """
    validate_dim_count(dim_count)

    if verbose:
        print(f"⏳ Construction de l'arbre k-d sur {len(elements):,} éléments (dims={dim_count})...")
    start_time = time.time()

    def build_recursive(lo: int, hi: int, depth: int) -> None:
        if hi - lo <= 1:
            return
        mid = median_index(lo, hi)
        select_inplace(elements, mid, depth % dim_count, lo, hi)
        build_recursive(lo, mid, depth + 1)
        build_recursive(mid + 1, hi, depth + 1)

    build_recursive(0, len(elements), 0)

    if verbose:
        elapsed = time.time() - start_time
        print(f"✓ Arbre construit en {elapsed:.2f}s")


def build_tree(
    elements: MutableSequence,
    dim_count: Optional[int] = None,
    check: Optional[bool] = None,
    verbose: Optional[bool] = None,
    config: Optional[Dict[str, Any]] = None,
) -> KDTree:
    """
    Construit un arbre k-d en une seule fonction.

    Les paramètres absents sont lus dans la section build_tree de la configuration.

    Args:
        elements: Buffer mutable d'éléments, réordonné en place
        dim_count: Nombre d'axes (facultatif)
        check: Vérifier l'invariant de partition après construction (facultatif)
        verbose: Afficher les messages de progression (facultatif)
        config: Configuration personnalisée (facultatif, sinon utilise config.yaml)

    Returns:
        KDTree: Poignée sur l'arbre construit
    """
    if config is None:
        build_config = ConfigManager().get_section("build_tree")
    else:
        build_config = config.get("build_tree", {})

    dim_count = dim_count if dim_count is not None else build_config.get("dim_count", 2)
    check = check if check is not None else build_config.get("check", False)
    verbose = verbose if verbose is not None else build_config.get("verbose", False)

    tree = KDTree(elements, dim_count)
    tree.build(verbose=verbose)

    if check:
        if verbose:
            print("⏳ Vérification de l'invariant de partition...")
        check_tree(elements, dim_count)
        if verbose:
            print("✓ Arbre valide")

    return tree
