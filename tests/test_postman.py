from collections import Counter

import networkx as nx
import pytest

from postman import (
    STATUS_ERROR,
    STATUS_INFEASIBLE,
    STATUS_OK,
    SolverConfig,
    rotate_to_start,
    solve_postman,
)
from conftest import assert_walk, make_graph


def assert_covering_circuit(graph, res):
    assert res.ok and res.is_cycle
    counts = res.traversal_counts()
    assert set(counts) == set(range(graph.number_of_edges()))
    assert_walk(graph, res.original_edge_order(), res.start_vertex, closed=True)
    # the original edges plus the repeats form an Eulerian multigraph
    G = graph.to_networkx()
    for eid, c in counts.items():
        e = graph.edge(eid)
        for _ in range(c - 1):
            G.add_edge(e.u, e.v)
    G.remove_nodes_from([v for v in list(G.nodes) if G.degree(v) == 0])
    assert nx.is_eulerian(G)


def test_eulerian_graph_is_its_own_route(triangle):
    res = solve_postman(triangle)
    assert res.status == STATUS_OK
    assert sorted(res.edge_order) == [0, 1, 2]
    assert res.duplicate_of == {}
    assert res.added_cost == 0.0
    assert res.total_cost == 3.0
    assert res.meta["mode"] == "closed_direct"
    assert_covering_circuit(triangle, res)


def test_star_repeats_every_spoke(star):
    res = solve_postman(star)
    assert res.status == STATUS_OK
    assert res.pairs == [(0, 1), (2, 3)]
    assert len(res.edge_order) == 6
    assert res.traversal_counts() == {0: 2, 1: 2, 2: 2}
    assert res.added_cost == 3.0
    assert res.total_cost == 6.0
    assert sorted(res.duplicate_of.values()) == [0, 1, 2]
    assert all(res.is_duplicate(r) == (r >= 3) for r in res.edge_order)
    assert_covering_circuit(star, res)


def test_duplicates_follow_the_shortest_path(square_with_diagonal):
    res = solve_postman(square_with_diagonal)
    assert res.ok
    assert res.pairs == [(0, 2)]
    assert res.repeated_edges() == [0, 1]
    assert res.traversal_counts()[4] == 1
    assert res.added_cost == pytest.approx(2.0)
    assert res.total_cost == pytest.approx(11.0)
    assert res.meta["dup_edges"] == 2
    assert res.meta["mode"] == "closed_exact"
    assert_covering_circuit(square_with_diagonal, res)


def test_semi_eulerian_graph_is_closed(path3):
    res = solve_postman(path3)
    assert res.ok
    assert res.traversal_counts() == {0: 2, 1: 2}
    assert_covering_circuit(path3, res)


def test_disconnected_is_infeasible(two_triangles):
    res = solve_postman(two_triangles)
    assert res.status == STATUS_INFEASIBLE
    assert res.edge_order == []
    assert not res.ok

    g = make_graph(5, [(0, 1), (1, 2), (3, 4)])
    res = solve_postman(g)
    assert res.status == STATUS_INFEASIBLE
    assert res.error == "not_connected"


def test_empty_graph_has_empty_route():
    res = solve_postman(make_graph(0, []))
    assert res.status == STATUS_OK
    assert res.edge_order == []
    res = solve_postman(make_graph(2, []))
    assert res.status == STATUS_OK
    assert res.vertex_sequence(make_graph(2, [])) == []


def test_exact_refused_above_limit(star):
    res = solve_postman(star, SolverConfig(matching="exact", max_exact_k=2))
    assert res.status == STATUS_ERROR
    assert "4 odd vertices" in res.error
    assert res.edge_order == []


def test_auto_falls_back_to_greedy(star):
    res = solve_postman(star, SolverConfig(matching="auto", max_exact_k=2))
    assert res.ok
    assert res.meta["mode"] == "closed_greedy"
    assert res.pairs == [(3, 0), (2, 1)]
    assert_covering_circuit(star, res)


def test_unknown_strategy_is_an_error(star):
    res = solve_postman(star, SolverConfig(matching="blossom"))
    assert res.status == STATUS_ERROR


def test_greedy_and_exact_on_grid():
    # 3x3 grid: 4 odd vertices on the edge midpoints
    g = make_graph(9, [])
    for r in range(3):
        for c in range(3):
            v = 3 * r + c
            if c < 2:
                g.add_edge(v, v + 1, 1.0)
            if r < 2:
                g.add_edge(v, v + 3, 1.0)
    exact = solve_postman(g, SolverConfig(matching="exact"))
    greedy = solve_postman(g, SolverConfig(matching="greedy"))
    assert exact.added_cost == pytest.approx(4.0)
    assert greedy.added_cost >= exact.added_cost
    assert_covering_circuit(g, exact)
    assert_covering_circuit(g, greedy)


def test_start_vertex_rotation(star, triangle):
    res = solve_postman(star, SolverConfig(start_vertex=2))
    assert res.start_vertex == 2
    seq = res.vertex_sequence(star)
    assert seq[0] == seq[-1] == 2
    assert_covering_circuit(star, res)

    res = solve_postman(triangle, SolverConfig(start_vertex=1))
    assert res.vertex_sequence(triangle)[0] == 1
    assert_covering_circuit(triangle, res)


def test_rotate_to_start_unknown_target(triangle):
    assert rotate_to_start([0, 1, 2], triangle, 0, 7) == ([0, 1, 2], 0)
    assert rotate_to_start([0, 1, 2], triangle, 0, 2) == ([2, 0, 1], 2)


def test_input_graph_untouched_and_deterministic(star):
    before = (star.edges, star.adjacency(), star.revision)
    a = solve_postman(star)
    b = solve_postman(star)
    assert before == (star.edges, star.adjacency(), star.revision)
    assert (a.edge_order, a.duplicate_of, a.pairs) == (b.edge_order, b.duplicate_of, b.pairs)


def test_weighted_street_network():
    # two blocks sharing a street, one long cul-de-sac
    g = make_graph(7, [
        (0, 1, 2.0), (1, 2, 2.0), (2, 3, 1.0), (3, 0, 1.0),
        (1, 4, 3.0), (4, 5, 1.0), (5, 2, 3.0), (5, 6, 7.0),
    ])
    res = solve_postman(g, SolverConfig(progress=True))
    assert_covering_circuit(g, res)
    odd = g.odd_degree_vertices()
    assert odd == [1, 2, 5, 6]
    # 1-2 (2.0) + 5-6 (7.0) is the cheapest pairing
    assert res.added_cost == pytest.approx(9.0)
    counts = Counter(res.original_edge_order())
    assert counts[7] == 2 and counts[1] == 2
