import random

import networkx as nx

from euler import EulerResult, classify, find_euler_tour, infer_start_vertex, vertex_sequence
from conftest import assert_walk, make_graph


def test_triangle_is_a_cycle(triangle):
    res = find_euler_tour(triangle)
    assert res is not None
    assert res.is_cycle
    assert sorted(res.edge_order) == [0, 1, 2]
    seq = res.vertex_sequence(triangle)
    assert len(seq) == 4
    assert seq[0] == seq[-1]
    assert sorted(seq[:-1]) == [0, 1, 2]
    assert_walk(triangle, res.edge_order, res.start_vertex, closed=True)


def test_path_starts_at_last_odd_vertex(path3):
    res = find_euler_tour(path3)
    assert res == EulerResult(edge_order=[1, 0], is_cycle=False, start_vertex=2)
    assert res.vertex_sequence(path3) == [2, 1, 0]


def test_star_has_no_tour(star):
    assert find_euler_tour(star) is None


def test_disconnected_graph_has_no_tour(two_triangles):
    assert find_euler_tour(two_triangles) is None


def test_empty_graph():
    res = find_euler_tour(make_graph(0, []))
    assert res.edge_order == [] and res.is_cycle
    assert res.start_vertex is None
    res = find_euler_tour(make_graph(3, []))
    assert res.edge_order == [] and res.is_cycle
    assert res.start_vertex == 0
    assert res.vertex_sequence(make_graph(3, [])) == []


def test_classify_start_selection():
    # vertex 0 isolated: circuit starts at the first vertex with edges
    g = make_graph(4, [(1, 2), (2, 3), (3, 1)])
    assert classify(g) == (True, True, 1)
    # odd vertices 1 and 3
    g = make_graph(4, [(1, 2), (2, 3)])
    assert classify(g) == (True, False, 3)
    assert classify(make_graph(4, [(0, 1), (0, 2), (0, 3)])) == (False, False, None)


def test_self_loops_and_parallel_edges():
    g = make_graph(2, [(0, 1), (0, 1), (1, 1), (0, 0)])
    res = find_euler_tour(g)
    assert res is not None and res.is_cycle
    assert sorted(res.edge_order) == [0, 1, 2, 3]
    assert_walk(g, res.edge_order, res.start_vertex, closed=True)


def test_graph_is_not_modified(square_with_diagonal):
    before = (square_with_diagonal.edges, square_with_diagonal.adjacency(), square_with_diagonal.revision)
    find_euler_tour(square_with_diagonal)
    assert before == (square_with_diagonal.edges, square_with_diagonal.adjacency(), square_with_diagonal.revision)


def test_deterministic(square_with_diagonal):
    assert find_euler_tour(square_with_diagonal) == find_euler_tour(square_with_diagonal)


def test_long_path_does_not_recurse():
    n = 5000
    g = make_graph(n, [(i, i + 1) for i in range(n - 1)])
    res = find_euler_tour(g)
    assert res is not None and not res.is_cycle
    assert len(res.edge_order) == n - 1


def test_random_graphs_against_networkx():
    rng = random.Random(5)
    checked = 0
    for _ in range(200):
        n = rng.randint(2, 7)
        g = make_graph(n, [(rng.randrange(n), rng.randrange(n), 1.0) for _ in range(rng.randint(1, 10))])
        res = find_euler_tour(g)
        G = g.to_networkx()
        G.remove_nodes_from([v for v in list(G.nodes) if G.degree(v) == 0])
        assert (res is not None) == nx.has_eulerian_path(G)
        if res is None:
            continue
        checked += 1
        assert sorted(res.edge_order) == list(range(g.number_of_edges()))
        assert res.is_cycle == nx.is_eulerian(G)
        assert_walk(g, res.edge_order, res.start_vertex, closed=res.is_cycle)
    assert checked > 10


def test_infer_start_vertex(path3, triangle):
    assert infer_start_vertex(path3, [1, 0]) == 2
    assert infer_start_vertex(path3, [0, 1]) == 0
    assert infer_start_vertex(path3, [1]) == 1
    assert infer_start_vertex(path3, [42]) is None
    assert vertex_sequence(path3, [1, 0]) == [2, 1, 0]


def test_vertex_sequence_skips_unknown_ids(triangle):
    assert vertex_sequence(triangle, [0, 99, 1, -3, 2], start=0) == [0, 1, 2, 0]
    # edge 1 (B-C) does not leave A
    assert vertex_sequence(triangle, [1, 0], start=0) == [0]
    assert vertex_sequence(triangle, []) == []
