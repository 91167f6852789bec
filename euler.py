# euler.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from graph import Graph


@dataclass
class EulerResult:
    ''' Edge ids in traversal order, and whether the walk is closed.

    start_vertex is the vertex the walk leaves from (None for a graph with no vertices).
    '''
    edge_order: List[int] = field(default_factory=list)
    is_cycle: bool = True
    start_vertex: Optional[int] = None

    def vertex_sequence(self, graph: Graph) -> List[int]:
        return vertex_sequence(graph, self.edge_order, start=self.start_vertex)


def classify(graph: Graph) -> Tuple[bool, bool, Optional[int]]:
    '''
    Eligibility check for an Euler tour.

    Returns (eligible, is_cycle, start_vertex):
        disconnected or more than 2 odd vertices -> (False, False, None)
        0 odd vertices -> circuit from the first vertex of non-zero degree (vertex 0 if no edges)
        2 odd vertices -> path from the odd vertex with the larger id
    '''
    if not graph.is_connected_undirected():
        return False, False, None
    odd_count, last_odd, first_active = 0, None, None
    for vx in graph.vertices:
        d = graph.degree(vx.vid)
        if d % 2 == 1:
            odd_count += 1
            last_odd = vx.vid
        elif first_active is None and d > 0:
            first_active = vx.vid
    if odd_count == 0:
        if first_active is None:
            first_active = 0 if len(graph) else None
        return True, True, first_active
    if odd_count == 2:
        return True, False, last_odd
    return False, False, None


def _walk(graph: Graph, start: int) -> Tuple[List[int], List[bool]]:
    '''
    Hierholzer construction with an explicit stack.

    On entering a vertex, each unused incident edge is marked used and the walk
    descends into its far endpoint; the edge id is appended once that descent
    is finished. The appended sequence is the tour in reverse.
    '''
    adj = graph.adjacency()
    edges = graph.edges
    used = [False] * len(edges)
    out = []
    # frame: [vertex, edge we arrived by, next position in adj[vertex]]
    stack = [[start, None, 0]]
    while stack:
        frame = stack[-1]
        u, incident = frame[0], adj.get(frame[0], [])
        while frame[2] < len(incident) and used[incident[frame[2]]]:
            frame[2] += 1
        if frame[2] < len(incident):
            eid = incident[frame[2]]
            frame[2] += 1
            used[eid] = True
            stack.append([edges[eid].other(u), eid, 0])
        else:
            stack.pop()
            if frame[1] is not None:
                out.append(frame[1])
    out.reverse()
    return out, used


def find_euler_tour(graph: Graph) -> Optional[EulerResult]:
    '''
    Euler circuit or path through every edge exactly once.

    Returns None when the graph has no such tour (disconnected, or an odd-degree
    count other than 0 or 2). The graph is not modified.
    '''
    eligible, is_cycle, start = classify(graph)
    if not eligible:
        logging.debug("No Euler tour: graph is disconnected or has too many odd-degree vertices")
        return None
    if start is None:
        return EulerResult(edge_order=[], is_cycle=True, start_vertex=None)

    order, used = _walk(graph, start)

    if not all(used):
        logging.debug(f"Euler walk from {start} missed {used.count(False)} edges")
        return None
    seen = [0] * len(used)
    for eid in order:
        seen[eid] += 1
        if seen[eid] > 1:
            return None

    return EulerResult(edge_order=order, is_cycle=is_cycle, start_vertex=start)


def infer_start_vertex(graph: Graph, edge_order: Sequence[int]) -> Optional[int]:
    '''
    Deduce the vertex a walk leaves from: the endpoint of the first edge that is
    not shared with the second edge. Falls back to the first edge's u.
    '''
    valid = [eid for eid in edge_order if graph.has_edge_id(eid)]
    if not valid:
        return None
    e0 = graph.edge(valid[0])
    if len(valid) == 1:
        return e0.u
    e1 = graph.edge(valid[1])
    shared = (e1.u, e1.v)
    if e0.u in shared and e0.v not in shared:
        return e0.v
    return e0.u


def vertex_sequence(graph: Graph, edge_order: Sequence[int], start: Optional[int] = None) -> List[int]:
    '''
    Vertices visited by walking edge_order from start.
    Unknown edge ids are skipped; the walk stops at an edge not incident to the current vertex.
    '''
    if not edge_order:
        return []
    if start is None:
        start = infer_start_vertex(graph, edge_order)
    if start is None or not graph.has_vertex(start):
        return []
    seq, cur = [start], start
    for eid in edge_order:
        if not graph.has_edge_id(eid):
            continue
        e = graph.edge(eid)
        if cur not in (e.u, e.v):
            logging.debug(f"Edge {eid} is not incident to vertex {cur}; stopping walk")
            break
        cur = e.other(cur)
        seq.append(cur)
    return seq
