# KDRapid - Arbre k-d implicite construit en place

__version__ = "1.0.0"

# Import main components for direct API access
from kdrapid.core.errors import (
    KDRapidError,
    InvalidConfigurationError,
    DimensionMismatchError,
    StructuralCorruptionError,
)
from kdrapid.core.element import KDTreeElement, Point, make_points
from kdrapid.core.select import select_inplace
from kdrapid.core.tree import KDTree, check_tree
from kdrapid.builder.builder import build_in_place, build_tree
from kdrapid.search.searcher import SearchContext, Searcher, search
from kdrapid.search.ranker import BoundedRanker, search_sorted
from kdrapid.io.reader import read_points
