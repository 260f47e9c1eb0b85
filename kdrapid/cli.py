"""
Interface en ligne de commande pour KDRapid.
Fournit des commandes pour rechercher des plus proches voisins et vérifier un arbre.
"""

import sys
import argparse

from kdrapid import __version__
from kdrapid.utils.config import ConfigManager
from kdrapid.utils.cli_check import check_command
from kdrapid.utils.cli_search import search_command

def main(argv=None) -> int:
    """
    Point d'entrée principal pour l'interface en ligne de commande.

    Args:
        argv: Arguments (sys.argv[1:] si None)

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    # Les valeurs absentes de la ligne de commande sont lues dans le fichier passé à --config
    config_manager = ConfigManager()

    # Parseur principal
    parser = argparse.ArgumentParser(
        description="KDRapid - Arbre k-d implicite pour la recherche de plus proches voisins",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--config", default=config_manager.config_path,
                        help="Chemin vers le fichier de configuration")
    parser.add_argument("--version", action="version", version=f"KDRapid v{__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commandes disponibles")

    # Commande search
    search_parser = subparsers.add_parser("search", help="Rechercher les plus proches voisins")
    search_parser.add_argument("points_file", nargs="?", default=None,
                               help="Fichier de points (.npy, .csv ou texte, files.default_points si absent)")
    search_parser.add_argument("--query", type=float, nargs="+", default=None,
                               help="Coordonnées du point de requête")
    search_parser.add_argument("--queries_file", default=None,
                               help="Fichier de points de requête (une requête par ligne)")
    search_parser.add_argument("--dims", type=int, default=None,
                               help="Nombre de dimensions de l'arbre (build_tree.dim_count si absent)")
    search_parser.add_argument("--k", type=int, default=None,
                               help="Nombre de voisins à retourner (search.k si absent)")
    search_parser.add_argument("--radius", type=float, default=None,
                               help="Rayon de recherche (search.radius si absent, illimité si null)")
    search_parser.set_defaults(func=search_command)

    # Commande check
    check_parser = subparsers.add_parser("check", help="Construire et vérifier un arbre")
    check_parser.add_argument("points_file", nargs="?", default=None,
                              help="Fichier de points (.npy, .csv ou texte, files.default_points si absent)")
    check_parser.add_argument("--dims", type=int, default=None,
                              help="Nombre de dimensions de l'arbre (build_tree.dim_count si absent)")
    check_parser.set_defaults(func=check_command)

    # Traitement des arguments
    args = parser.parse_args(argv)

    # Exécution de la commande spécifiée
    if hasattr(args, "func"):
        return args.func(args)
    else:
        parser.print_help()
        return 0

if __name__ == "__main__":
    sys.exit(main())
