"""
Module de vérification d'arbres en ligne de commande.
Construit l'arbre, contrôle l'invariant de partition et affiche les statistiques.
"""

import argparse
import time

from kdrapid.builder.builder import build_tree
from kdrapid.io.reader import read_points
from kdrapid.utils.config import ConfigManager


def check_command(args: argparse.Namespace) -> int:
    """
    Commande pour construire puis vérifier un arbre.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    config_manager = ConfigManager(args.config)
    build_config = config_manager.get_section("build_tree")

    try:
        dims = args.dims if args.dims is not None else build_config.get("dim_count", 2)
        points_file = args.points_file or config_manager.get_file_path("default_points", "points.txt")

        print(f"🚀 Vérification d'un arbre k-d...")
        print(f"  - Points: {points_file}")
        print(f"  - Dimensions: {dims}")

        points = read_points(points_file, verbose=True)

        start_time = time.time()
        tree = build_tree(points, dim_count=dims, check=True, verbose=True,
                          config=config_manager.config)
        elapsed = time.time() - start_time

        stats = tree.get_statistics()
        print(f"\n✓ Arbre valide ({elapsed*1000:.2f} ms)")
        print(f"  → Nœuds: {stats.get('node_count', 0):,}")
        print(f"  → Feuilles: {stats.get('leaf_count', 0):,}")
        print(f"  → Hauteur: {stats.get('height', 0)}")
        for axis, count in stats.get("nodes_per_axis", {}).items():
            print(f"  → Axe {axis}: {count:,} nœuds")

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
