"""
Module pour la recherche en ligne de commande.
Construit l'arbre sur un fichier de points et affiche les voisins de chaque requête.
"""

import argparse
import math
import time
from typing import Any, List, Tuple

import numpy as np

from kdrapid.builder.builder import build_tree
from kdrapid.io.reader import load_coordinates, read_points
from kdrapid.search.searcher import Searcher
from kdrapid.utils.config import ConfigManager


def format_results(query, results: List[Tuple[Any, float]]) -> str:
    """
    Formate les résultats d'une requête pour l'affichage en terminal.

    Args:
        query: Point de requête
        results: Couples (élément, distance au carré)

    Returns:
        str: Résultats formatés
    """
    output = [f"\n📋 Requête {np.asarray(query).tolist()}: {len(results)} résultat(s)"]
    for i, (element, dist2) in enumerate(results, 1):
        output.append(f"  {i}. #{element.index} {element.coords.tolist()} → d²={dist2:.6g} (d={math.sqrt(dist2):.6g})")
    return "\n".join(output)


def search_command(args: argparse.Namespace) -> int:
    """
    Commande pour rechercher les plus proches voisins.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    config_manager = ConfigManager(args.config)
    build_config = config_manager.get_section("build_tree")
    search_config = config_manager.get_section("search")

    try:
        radius = args.radius if args.radius is not None else search_config.get("radius")
        radius = math.inf if radius is None else float(radius)
        k = args.k if args.k is not None else search_config.get("k", 10)
        dims = args.dims if args.dims is not None else build_config.get("dim_count", 2)
        points_file = args.points_file or config_manager.get_file_path("default_points", "points.txt")

        if args.queries_file:
            queries = load_coordinates(args.queries_file)
        elif args.query:
            queries = [args.query]
        else:
            raise ValueError("Spécifiez --query ou --queries_file")

        print(f"🔍 Recherche des plus proches voisins...")
        print(f"  - Points: {points_file}")
        print(f"  - Dimensions: {dims}")
        print(f"  - K (nombre de voisins): {k}")
        print(f"  - Rayon: {radius}")
        print(f"  - Requêtes: {len(queries)}")

        points = read_points(points_file, verbose=True)

        build_start = time.time()
        tree = build_tree(points, dim_count=dims, verbose=False, config=config_manager.config)
        build_time = time.time() - build_start
        print(f"✓ Arbre construit en {build_time*1000:.2f} ms")

        searcher = Searcher(tree)
        results, timings = searcher.search_many(queries, radius=radius, max_count=k,
                                                progress=len(queries) > 1)

        for query, found in zip(queries, results):
            print(format_results(query, found))

        print("\n⏱️ Temps d'exécution:")
        print(f"  → Construction: {build_time*1000:.2f} ms")
        print(f"  → Recherche totale: {timings['total']*1000:.2f} ms")
        print(f"  → Recherche moyenne: {timings['avg']*1000:.3f} ms")

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
