import pytest

from graph import Graph


def make_graph(n, edges):
    g = Graph()
    for _ in range(n):
        g.add_vertex()
    for e in edges:
        g.add_edge(*e)
    return g


def assert_walk(graph, edge_ids, start, closed):
    '''Consecutive edges share an endpoint; the walk ends where it began iff closed.'''
    cur = start
    for eid in edge_ids:
        e = graph.edge(eid)
        assert cur in (e.u, e.v), f"edge {eid} does not leave vertex {cur}"
        cur = e.other(cur)
    assert (cur == start) == closed


@pytest.fixture
def triangle():
    return make_graph(3, [(0, 1), (1, 2), (2, 0)])


@pytest.fixture
def path3():
    return make_graph(3, [(0, 1), (1, 2)])


@pytest.fixture
def star():
    # center 0, leaves 1..3
    return make_graph(4, [(0, 1), (0, 2), (0, 3)])


@pytest.fixture
def two_triangles():
    return make_graph(6, [(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3)])


@pytest.fixture
def square_with_diagonal():
    # 0-1-2-3-0 of weight 1, heavy diagonal 0-2
    return make_graph(4, [(0, 1, 1.0), (1, 2, 1.0), (2, 3, 1.0), (3, 0, 1.0), (0, 2, 5.0)])
