# postman.py
import time
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from graph import Graph
from euler import find_euler_tour, vertex_sequence
from matching import DEFAULT_MAX_EXACT_K, MatchingTooLargeError, match_odd_vertices
from paths import odd_pair_distances, reconstruct_path

STATUS_OK = "ok"
STATUS_INFEASIBLE = "infeasible"
STATUS_ERROR = "error"


@dataclass
class SolverConfig:
    ''' Options of the postman solver.

    matching : "auto" | "exact" | "greedy"
        auto uses exact matching up to max_exact_k odd vertices and greedy beyond;
        exact refuses (error status) above max_exact_k.
    max_exact_k : int
        Size guard for the exponential exact matcher.
    start_vertex : Optional[int]
        Rotate the closed route so that it begins at this vertex (a depot).
    progress : bool
        Show a tqdm bar over the per-odd-vertex shortest path runs.
    '''
    matching: str = "auto"
    max_exact_k: int = DEFAULT_MAX_EXACT_K
    start_vertex: Optional[int] = None
    progress: bool = False


@dataclass
class PostmanResult:
    ''' Closed covering walk.

    edge_order holds edge references into the augmented multigraph: ids below
    n_original are original edges, larger ids are repeated passes whose original
    edge is given by duplicate_of. An empty edge_order with status "ok" is the
    route of a graph without edges.
    '''
    status: str
    edge_order: List[int] = field(default_factory=list)
    duplicate_of: Dict[int, int] = field(default_factory=dict)
    n_original: int = 0
    start_vertex: Optional[int] = None
    pairs: List[Tuple[int, int]] = field(default_factory=list)
    total_cost: float = 0.0
    added_cost: float = 0.0
    error: Optional[str] = None
    meta: Dict = field(default_factory=dict)
    is_cycle: bool = True

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def is_duplicate(self, ref: int) -> bool:
        return ref >= self.n_original

    def original_edge(self, ref: int) -> Optional[int]:
        if ref < self.n_original:
            return ref
        return self.duplicate_of.get(ref)

    def original_edge_order(self) -> List[int]:
        '''
        Route expressed in original edge ids (repeated edges appear several times).
        '''
        out = []
        for ref in self.edge_order:
            eid = self.original_edge(ref)
            if eid is not None:
                out.append(eid)
        return out

    def traversal_counts(self) -> Dict[int, int]:
        return dict(Counter(self.original_edge_order()))

    def repeated_edges(self) -> List[int]:
        return sorted({eid for eid, c in self.traversal_counts().items() if c > 1})

    def vertex_sequence(self, graph: Graph) -> List[int]:
        return vertex_sequence(graph, self.original_edge_order(), start=self.start_vertex)


# ============================================================
# Augmentation
# ============================================================

def augment_graph(graph: Graph, pairs: List[Tuple], parents: Dict) -> Tuple[Graph, float, int]:
    '''
    Copy graph and, for each matched pair, add one duplicate of every edge on the
    stored shortest path between them. Pairs without a path are skipped.
    Returns (augmented graph, added weight, number of duplicated edges).
    '''
    aug = graph.copy()
    added_length, dup_edges = 0.0, 0
    for (u, v) in pairs:
        path = reconstruct_path(parents[u], u, v) if u in parents else None
        if path is None:
            logging.warning(f"Skipping pair {u}-{v}: no path between them")
            continue
        for eid in path[1]:
            e = graph.edge(eid)
            aug.add_edge(e.u, e.v, e.weight, duplicate_of=eid)
            added_length += e.weight
            dup_edges += 1
    return aug, added_length, dup_edges


def rotate_to_start(edge_order: List[int], graph: Graph, start: Optional[int], target: int) -> Tuple[List[int], int]:
    '''
    Rotate a closed walk so it leaves from target. Returns the walk unchanged
    if target is not on it.
    E.g. walk A-B-C-A rotated to B gives B-C-A-B.
    '''
    seq = vertex_sequence(graph, edge_order, start=start)
    try:
        idx = seq.index(target)
    except ValueError:
        return edge_order, start
    if idx == 0:
        return edge_order, start
    return edge_order[idx:] + edge_order[:idx], target


# ============================================================
# Solver
# ============================================================

def solve_postman(graph: Graph, config: Optional[SolverConfig] = None) -> PostmanResult:
    '''
    Cheapest closed walk covering every edge at least once (Chinese Postman).

    Odd-degree vertices are paired by matching on their shortest path distances,
    edges along the matched paths are duplicated on a private copy of the graph,
    and an Euler circuit of that copy is the route. The input graph is not modified.
    Never raises for ordinary input: failures come back as status "infeasible"
    (disconnected network) or "error" (matching refused).
    '''
    config = config or SolverConfig()
    timings = {}
    n_edges = graph.number_of_edges()
    base_cost = graph.total_weight()

    if not graph.is_connected_undirected():
        logging.warning("Graph is not connected on its non-isolated vertices; no covering route exists.")
        return PostmanResult(status=STATUS_INFEASIBLE, n_original=n_edges,
                             error="not_connected", meta={"timings_sec": timings})

    odds = graph.odd_degree_vertices()
    k = len(odds)
    logging.info(f"Odd-degree vertices: k={k}")

    if k == 0:
        t0 = time.time()
        tour = find_euler_tour(graph)
        timings["hierholzer_sec"] = round(time.time() - t0, 3)
        if tour is None:
            return PostmanResult(status=STATUS_INFEASIBLE, n_original=n_edges,
                                 error="no_euler_circuit", meta={"timings_sec": timings})
        order, start = tour.edge_order, tour.start_vertex
        if config.start_vertex is not None:
            order, start = rotate_to_start(order, graph, start, config.start_vertex)
        return PostmanResult(status=STATUS_OK, edge_order=order, n_original=n_edges,
                             start_vertex=start, total_cost=base_cost,
                             meta={"mode": "closed_direct", "k": 0, "timings_sec": timings})

    if config.matching == "exact" and k > config.max_exact_k:
        err = MatchingTooLargeError(k, config.max_exact_k)
        logging.error(str(err))
        return PostmanResult(status=STATUS_ERROR, n_original=n_edges, error=str(err),
                             meta={"k": k, "timings_sec": timings})

    t0 = time.time()
    parents, dist_matrix = odd_pair_distances(graph, odds, progress=config.progress)
    timings["apsp_odds_sec"] = round(time.time() - t0, 3)

    t1 = time.time()
    try:
        _, pairs, used = match_odd_vertices(odds, dist_matrix, strategy=config.matching,
                                            max_exact_k=config.max_exact_k)
    except ValueError as exc:
        logging.error(f"Matching failed: {exc}")
        return PostmanResult(status=STATUS_ERROR, n_original=n_edges, error=str(exc),
                             meta={"k": k, "timings_sec": timings})
    timings["matching_sec"] = round(time.time() - t1, 3)

    t2 = time.time()
    aug, added_length, dup_edges = augment_graph(graph, pairs, parents)
    timings["duplication_sec"] = round(time.time() - t2, 3)

    t3 = time.time()
    tour = find_euler_tour(aug)
    timings["hierholzer_sec"] = round(time.time() - t3, 3)

    meta = {
        "mode": f"closed_{used}",
        "k": k,
        "pairs": len(pairs),
        "dup_edges": dup_edges,
        "added_length": round(added_length, 3),
        "timings_sec": timings,
    }
    if tour is None or not tour.is_cycle:
        logging.warning("Augmented graph has no Euler circuit; no covering route exists.")
        return PostmanResult(status=STATUS_INFEASIBLE, n_original=n_edges, pairs=pairs,
                             error="no_euler_circuit", meta=meta)

    duplicate_of = {e.eid: e.duplicate_of for e in aug.edges if e.duplicate_of is not None}
    order, start = tour.edge_order, tour.start_vertex
    if config.start_vertex is not None:
        order, start = rotate_to_start(order, aug, start, config.start_vertex)

    return PostmanResult(
        status=STATUS_OK,
        edge_order=order,
        duplicate_of=duplicate_of,
        n_original=n_edges,
        start_vertex=start,
        pairs=pairs,
        total_cost=base_cost + added_length,
        added_cost=added_length,
        meta=meta,
    )
