# paths.py
import heapq
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from tqdm import tqdm

from graph import Graph

INF = float('inf')


def build_weighted_adj(graph: Graph) -> Dict[int, List[Tuple[int, float, int]]]:
    '''
    Weighted adjacency list u -> [(v, weight, edge id)].
    Between parallel edges only the lightest is kept; self-loops are dropped.
    '''
    best = {}
    for e in graph.edges:
        if e.u == e.v:
            continue
        a, b = (e.u, e.v) if e.u <= e.v else (e.v, e.u)
        if (a, b) not in best or e.weight < best[(a, b)][0]:
            best[(a, b)] = (e.weight, e.eid)
    adj = {vx.vid: [] for vx in graph.vertices}
    for (a, b), (w, eid) in best.items():
        adj[a].append((b, w, eid))
        adj[b].append((a, w, eid))
    return adj


def dijkstra(adj_w: Dict, source: int, target: Optional[int] = None) -> Tuple[Dict, Dict]:
    '''
    Dijkstra from source on a weighted adjacency list.
    Returns parent map (vertex -> (previous vertex, edge id) or None for the source)
    and distance map. Stops early once target is settled.
    '''
    dist, parent = {source: 0.0}, {source: None}
    pq, visited = [(0.0, source)], set()
    while pq:
        d, u = heapq.heappop(pq)
        if u in visited:
            continue
        visited.add(u)
        if u == target:
            break
        for v, w, eid in adj_w.get(u, []):
            nd = d + w
            if v not in dist or nd < dist[v]:
                dist[v], parent[v] = nd, (u, eid)
                heapq.heappush(pq, (nd, v))
    return parent, dist


def reconstruct_path(parent: Dict, s: int, t: int) -> Optional[Tuple[List[int], List[int]]]:
    '''
    Vertex and edge sequences of the s -> t path stored in parent, or None if t was not reached.
    '''
    if t not in parent:
        return None
    vertices, edges, cur = [t], [], t
    while parent[cur] is not None:
        prev, eid = parent[cur]
        vertices.append(prev)
        edges.append(eid)
        cur = prev
    if cur != s:
        return None
    vertices.reverse()
    edges.reverse()
    return vertices, edges


def shortest_path_vertices(graph: Graph, source: int, target: int) -> List[int]:
    '''
    Minimum-weight path from source to target as a vertex list, [] if unreachable
    or either id is out of range.
    '''
    if not graph.has_vertex(source) or not graph.has_vertex(target):
        return []
    parent, _ = dijkstra(build_weighted_adj(graph), source, target)
    path = reconstruct_path(parent, source, target)
    return path[0] if path else []


def path_cost(graph: Graph, edge_ids: Sequence[int]) -> float:
    return sum(graph.edge(eid).weight for eid in edge_ids)


def odd_pair_distances(graph: Graph, odds: List[int], progress: bool = False) -> Tuple[Dict, Dict]:
    '''
    Dijkstra from each odd vertex.
    Returns parents map (odd vertex -> parent map) and distance matrix between odd vertices
    (INF where unreachable).
    '''
    adj_w = build_weighted_adj(graph)
    parents, dist_matrix = {}, {}
    for u in tqdm(odds, desc="Shortest paths (odd vertices)", disable=not progress):
        pu, du = dijkstra(adj_w, u)
        parents[u] = pu
        dist_matrix[u] = {v: (0.0 if u == v else du.get(v, INF)) for v in odds}
    unreachable = sum(1 for u in odds for v in odds if dist_matrix[u][v] == INF)
    if unreachable:
        logging.warning(f"{unreachable // 2} odd-vertex pairs have no connecting path")
    return parents, dist_matrix
