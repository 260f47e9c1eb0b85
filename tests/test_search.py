#!/usr/bin/env python3
"""
Tests de la recherche des plus proches voisins.
Compare l'arbre à une recherche naïve sur l'ensemble du buffer.
"""

import math
import sys

import numpy as np
import pytest

from kdrapid.builder.builder import build_in_place, build_tree
from kdrapid.core.element import Point, make_points
from kdrapid.core.errors import DimensionMismatchError, InvalidConfigurationError
from kdrapid.search.ranker import BoundedRanker, search_sorted
from kdrapid.search.searcher import SearchContext, Searcher, distance_l2, search


def naive_search(elements, point, radius, max_count):
    """Recherche naïve : filtre par rayon, tri par distance, troncature. Distances calculées en numpy."""
    dims = len(point)
    coords = np.array([[e.coordinate(i) for i in range(dims)] for e in elements], dtype=float).reshape(-1, dims)
    distances = np.sum((coords - np.asarray(point, dtype=float)) ** 2, axis=1)
    order = [i for i in np.argsort(distances, kind="stable") if distances[i] <= radius * radius]
    if max_count is not None:
        order = order[:max_count]
    return [(elements[i], float(distances[i])) for i in order]


def assert_same_distances(found, expected):
    np.testing.assert_allclose([d for _, d in found], [d for _, d in expected], rtol=1e-12, atol=0.0)


def diagonal_points():
    return make_points([[0, 0], [1, 1], [2, 2], [3, 3], [4, 4]])


def test_scenario_two_nearest():
    """Deux plus proches voisins de (2, 2) sur la diagonale."""
    print("\n--- Test du scénario de la diagonale ---")
    points = diagonal_points()
    build_in_place(points, 2)
    result = search_sorted(points, [2, 2], radius=math.inf, max_count=2)

    assert len(result) == 2
    assert result[0][0].coords.tolist() == [2, 2]
    assert result[0][1] == 0.0
    assert result[1][0].coords.tolist() in ([1, 1], [3, 3])
    assert result[1][1] == 2.0
    print("✓ Test du scénario OK")


def test_scenario_out_of_radius():
    points = diagonal_points()
    build_in_place(points, 2)
    assert search_sorted(points, [10, 10], radius=1.0, max_count=10) == []


def test_completeness_against_naive():
    """Teste que l'arbre retourne exactement les voisins de la recherche naïve, pour tout k."""
    print("\n--- Test de complétude ---")
    rng = np.random.default_rng(42)
    for dims in [1, 2, 3, 5]:
        points = make_points(rng.random((60, dims)) * 10)
        build_in_place(points, dims)
        for _ in range(5):
            query = rng.random(dims) * 10
            radius = rng.random() * 10
            for k in range(0, len(points) + 1):
                expected = naive_search(points, query, radius, k)
                found = search_sorted(points, query, radius=radius, max_count=k)
                assert_same_distances(found, expected)
                assert {e.index for e, _ in found} == {e.index for e, _ in expected}
    print("✓ Test de complétude OK")


def test_radius_only_and_count_only():
    rng = np.random.default_rng(7)
    points = make_points(rng.random((300, 3)))
    build_in_place(points, 3)
    query = [0.5, 0.5, 0.5]

    found = search_sorted(points, query, radius=0.25, max_count=None)
    expected = naive_search(points, query, 0.25, None)
    assert [e.index for e, _ in found] == [e.index for e, _ in expected]

    found = search_sorted(points, query, max_count=15)
    expected = naive_search(points, query, math.inf, 15)
    assert [e.index for e, _ in found] == [e.index for e, _ in expected]


def test_integer_coordinates():
    """Domaine entier : les distances sont calculées sans débordement ni perte."""
    rng = np.random.default_rng(3)
    points = make_points(rng.integers(-50, 50, size=(200, 2)))
    build_in_place(points, 2)
    for query in [(0, 0), (-50, 49), (13, -7)]:
        for k in [1, 5, 40]:
            found = search_sorted(points, query, radius=30, max_count=k)
            expected = naive_search(points, query, 30, k)
            assert [d for _, d in found] == [d for _, d in expected]
            assert all(isinstance(d, float) for _, d in found)


def test_small_integer_dtypes_do_not_wrap():
    """uint8 et int16 : les différences sont calculées en flottant, sans retour modulo."""
    print("\n--- Test des petits types entiers ---")
    points = make_points(np.array([[5, 5], [200, 200]], dtype=np.uint8))
    query = np.array([0, 0], dtype=np.uint8)
    assert distance_l2(query, points[1]) == 80000.0
    build_in_place(points, 2)
    found = search_sorted(points, query, max_count=2)
    assert [d for _, d in found] == [50.0, 80000.0]
    assert [e.coords.tolist() for e, _ in found] == [[5, 5], [200, 200]]

    points = make_points(np.array([[30000], [-30000]], dtype=np.int16))
    build_in_place(points, 1)
    found = search_sorted(points, np.array([-30000], dtype=np.int16), max_count=2)
    assert [d for _, d in found] == [0.0, 3.6e9]

    # Coordonnées extrêmes : l'élagage sur l'hyperplan doit aussi rester exact
    rng = np.random.default_rng(13)
    points = make_points(rng.integers(0, 256, size=(300, 3)).astype(np.uint8))
    build_in_place(points, 3)
    for query in [np.array([0, 0, 0], dtype=np.uint8), np.array([255, 0, 255], dtype=np.uint8)]:
        for k in [1, 7, 50]:
            found = search_sorted(points, query, max_count=k)
            expected = naive_search(points, query, math.inf, k)
            assert [d for _, d in found] == [d for _, d in expected]

    points = make_points(rng.integers(-32768, 32768, size=(300, 2)).astype(np.int16))
    build_in_place(points, 2)
    query = np.array([32767, -32768], dtype=np.int16)
    found = search_sorted(points, query, radius=40000.0, max_count=20)
    expected = naive_search(points, query, 40000.0, 20)
    assert [d for _, d in found] == [d for _, d in expected]
    print("✓ Test des petits types entiers OK")


def test_query_uses_more_coordinates_than_axes():
    """Les distances portent sur tout le point, l'arbre ne coupe que sur dim_count axes."""
    rng = np.random.default_rng(5)
    points = make_points(rng.random((150, 4)))
    build_in_place(points, 2)
    query = rng.random(4)
    for k in [1, 3, 10]:
        found = search_sorted(points, query, max_count=k, dim_count=2)
        expected = naive_search(points, query, math.inf, k)
        assert [e.index for e, _ in found] == [e.index for e, _ in expected]


def test_ordering_and_idempotence():
    rng = np.random.default_rng(11)
    points = make_points(rng.random((500, 2)))
    build_in_place(points, 2)
    order = [p.index for p in points]

    first = search_sorted(points, [0.3, 0.6], radius=0.2, max_count=25)
    second = search_sorted(points, [0.3, 0.6], radius=0.2, max_count=25)
    distances = [d for _, d in first]
    assert distances == sorted(distances)
    assert [(e.index, d) for e, d in first] == [(e.index, d) for e, d in second]
    assert [p.index for p in points] == order


def test_boundaries():
    points = diagonal_points()
    build_in_place(points, 2)
    assert search_sorted(points, [2, 2], max_count=0) == []
    assert search_sorted(points, [2.5, 2.5], radius=0.0, max_count=10) == []
    exact = search_sorted(points, [3, 3], radius=0.0, max_count=10)
    assert [(e.index, d) for e, d in exact] == [(3, 0.0)]

    single = [Point([1.5, -2.0], index=0)]
    build_in_place(single, 2)
    found = search_sorted(single, [100.0, 100.0], max_count=1)
    assert found[0][0] is single[0]
    assert search_sorted(single, [100.0, 100.0], radius=1.0, max_count=1) == []

    assert search_sorted([], [0.0, 0.0], max_count=3) == []


def test_reusable_result_buffer():
    points = diagonal_points()
    build_in_place(points, 2)
    result = [("stale", 99.0)]
    returned = search_sorted(points, [0, 0], max_count=3, result=result)
    assert returned is result
    assert [d for _, d in result] == [0.0, 2.0, 8.0]


def test_early_stop():
    """Un visit qui renvoie False arrête tout le parcours."""
    points = make_points(np.random.default_rng(8).random((100, 2)))
    build_in_place(points, 2)
    visited = []

    def visit(element, dist2):
        visited.append(element)
        return len(visited) < 3

    completed = search(points, SearchContext(point=[0.5, 0.5], visit=visit, radius2=10.0))
    assert completed is False
    assert len(visited) == 3

    visited.clear()
    completed = search(points, SearchContext(point=[0.5, 0.5], visit=lambda e, d: visited.append(e) or True,
                                             radius2=10.0))
    assert completed is True
    assert len(visited) == 100


def test_pruning_limits_visited_nodes():
    """Avec k = 1, seule une petite partie du buffer est examinée."""
    print("\n--- Test de l'élagage ---")
    rng = np.random.default_rng(21)
    points = make_points(rng.random((4000, 2)))
    build_in_place(points, 2)
    query = [0.5, 0.5]
    ranker = BoundedRanker(1)
    visited = []

    def visit(element, dist2):
        visited.append(element)
        return ranker.offer(element, dist2)

    search(points, SearchContext(point=query, visit=visit, worst_distance=ranker.cutoff, max_count=1))
    assert ranker.result[0][0].index == naive_search(points, query, math.inf, 1)[0][0].index
    assert len(visited) < len(points) // 10
    print(f"✓ Test de l'élagage OK ({len(visited)} nœuds examinés sur {len(points)})")


def test_far_side_visited_when_plane_equals_worst():
    """Le côté opposé est parcouru quand l'hyperplan est exactement à la pire distance retenue."""
    points = make_points([[0.0], [1.0], [2.0]])
    build_in_place(points, 1)
    assert [p.coordinate(0) for p in points] == [0.0, 1.0, 2.0]

    def run(query, k):
        ranker = BoundedRanker(k)
        visited = []

        def visit(element, dist2):
            visited.append(element.coordinate(0))
            return ranker.offer(element, dist2)

        search(points, SearchContext(point=query, visit=visit, worst_distance=ranker.cutoff, max_count=k))
        return visited

    # Racine 1.0 puis 2.0, toutes deux à 0.25 : l'hyperplan x = 1.0 est aussi à 0.25
    assert run([1.5], 2) == [1.0, 2.0, 0.0]
    # Pire distance 0.25 < 0.64 : le sous-arbre gauche est élagué
    assert run([1.8], 1) == [1.0, 2.0]


def test_validation_happens_before_traversal():
    points = diagonal_points()
    build_in_place(points, 2)
    calls = []

    def visit(element, dist2):
        calls.append(element)
        return True

    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], visit=visit))
    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], visit=visit, max_count=3))
    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], radius2=1.0))
    with pytest.raises(DimensionMismatchError):
        search(points, SearchContext(point=[0], visit=visit, radius2=1.0, dim_count=2))
    with pytest.raises(InvalidConfigurationError):
        search_sorted(points, [0, 0], radius=math.inf, max_count=None)
    with pytest.raises(InvalidConfigurationError):
        search_sorted(points, [0, 0], max_count=-1)
    with pytest.raises(InvalidConfigurationError):
        search_sorted(points, [0, 0], radius=-1.0, max_count=1)
    with pytest.raises(DimensionMismatchError):
        search_sorted(points, [0], max_count=0, dim_count=2)
    with pytest.raises(DimensionMismatchError):
        search(points, SearchContext(point=[0.0, 0.0, 0.0], visit=visit, radius2=1.0, dim_count=2))
    with pytest.raises(DimensionMismatchError):
        search_sorted(points, [0.0, 0.0, 0.0], max_count=2)
    with pytest.raises(DimensionMismatchError):
        search_sorted(points, [0.0, 0.0, 0.0], max_count=0, dim_count=2)
    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], visit=visit, radius2=1.0, dim_count=0))
    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], visit=visit, radius2=math.nan))
    with pytest.raises(InvalidConfigurationError):
        search(points, SearchContext(point=[0, 0], visit=visit, radius2=-1.0))
    with pytest.raises(InvalidConfigurationError):
        search_sorted(points, [0, 0], radius=math.nan, max_count=1)
    assert calls == []


def test_bounded_ranker():
    ranker = BoundedRanker(3)
    assert ranker.cutoff() == math.inf
    for name, dist in [("a", 5.0), ("b", 1.0), ("c", 3.0), ("d", 3.0), ("e", 0.5), ("f", 9.0)]:
        assert ranker.offer(name, dist) is True
    assert ranker.result == [("e", 0.5), ("b", 1.0), ("c", 3.0)]
    assert ranker.cutoff() == 3.0

    unbounded = BoundedRanker(None)
    for name, dist in [("a", 2.0), ("b", 1.0), ("c", 2.0)]:
        unbounded.offer(name, dist)
    assert unbounded.result == [("b", 1.0), ("a", 2.0), ("c", 2.0)]
    assert unbounded.cutoff() == math.inf


def test_searcher_and_tree_handle():
    rng = np.random.default_rng(9)
    points = make_points(rng.random((80, 3)))
    tree = build_tree(points, dim_count=3, config={})
    searcher = Searcher(tree)

    found = searcher.search_sorted([0.1, 0.2, 0.3], max_count=4)
    expected = naive_search(points, [0.1, 0.2, 0.3], math.inf, 4)
    assert [e.index for e, _ in found] == [e.index for e, _ in expected]
    assert searcher.last_search_time >= 0.0

    queries = rng.random((6, 3))
    results, timings = searcher.search_many(queries, radius=0.3, max_count=5)
    assert len(results) == 6
    for query, found in zip(queries, results):
        assert_same_distances(found, naive_search(points, query, 0.3, 5))
    assert timings["total"] >= 0.0

    seen = []
    assert searcher.search([0.5, 0.5, 0.5], lambda e, d: seen.append(e) or True, radius2=0.1 * 0.1) is True
    assert {e.index for e in seen} == {e.index for e, _ in naive_search(points, [0.5, 0.5, 0.5], 0.1, None)}

    with pytest.raises(ValueError):
        from kdrapid.core.tree import KDTree
        Searcher(KDTree(make_points([[0.0, 0.0]]), 2))


def main():
    """Fonction principale pour exécuter les tests."""
    print("=== Tests de la recherche KDRapid ===")

    try:
        test_scenario_two_nearest()
        test_scenario_out_of_radius()
        test_completeness_against_naive()
        test_radius_only_and_count_only()
        test_integer_coordinates()
        test_small_integer_dtypes_do_not_wrap()
        test_query_uses_more_coordinates_than_axes()
        test_ordering_and_idempotence()
        test_boundaries()
        test_reusable_result_buffer()
        test_early_stop()
        test_pruning_limits_visited_nodes()
        test_far_side_visited_when_plane_equals_worst()
        test_validation_happens_before_traversal()
        test_bounded_ranker()
        test_searcher_and_tree_handle()

        print("\n✅ TOUS LES TESTS ONT RÉUSSI")
        return 0
    except Exception as e:
        print(f"\n❌ ERREUR: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

if __name__ == "__main__":
    sys.exit(main())
