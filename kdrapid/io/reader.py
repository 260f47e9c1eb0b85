"""
Module de lecture de points pour KDRapid.
Charge des coordonnées depuis un fichier .npy ou texte et les convertit en buffer de Point.
"""

import os
import time
from typing import List, Optional, Union

import numpy as np

from kdrapid.core.element import Point, make_points


def load_coordinates(file_path: str, dtype: Optional[Union[str, np.dtype]] = None) -> np.ndarray:
    """
    Charge un tableau de coordonnées (n, d).

    Args:
        file_path: Fichier .npy, ou fichier texte (séparateurs espaces ou virgules)
        dtype: Type numérique des coordonnées (float64 par défaut pour le texte)

    Returns:
        np.ndarray: Tableau 2D de coordonnées
    """
    if file_path.endswith(".npy"):
        array = np.load(file_path)
    else:
        delimiter = "," if os.path.splitext(file_path)[1].lower() == ".csv" else None
        array = np.loadtxt(file_path, delimiter=delimiter, ndmin=2)

    if dtype is not None:
        array = array.astype(dtype)
    if array.ndim != 2:
        raise ValueError(f"Le fichier {file_path} doit contenir un tableau 2D (n, d), reçu {array.ndim}D")
    return array


def read_points(file_path: Optional[str] = None, coordinates: Optional[np.ndarray] = None,
                dtype: Optional[Union[str, np.dtype]] = None, verbose: bool = False) -> List[Point]:
    """
    Fonction utilitaire pour obtenir un buffer de points.

    Args:
        file_path: Chemin vers le fichier de coordonnées
        coordinates: Tableau de coordonnées déjà en mémoire
        dtype: Type numérique des coordonnées (facultatif)
        verbose: Afficher les messages de progression

    Returns:
        List[Point]: Un Point par ligne, index = numéro de ligne
    """
    if coordinates is not None:
        array = np.asarray(coordinates, dtype=dtype)
    elif file_path is not None:
        start_time = time.time()
        if verbose:
            print(f"⏳ Chargement des points depuis {file_path}...")
        array = load_coordinates(file_path, dtype)
        if verbose:
            elapsed = time.time() - start_time
            print(f"✓ {array.shape[0]:,} points (dim {array.shape[1]}) chargés en {elapsed:.2f}s")
    else:
        raise ValueError("Soit file_path soit coordinates doit être fourni")

    return make_points(array)
