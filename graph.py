# graph.py
import math
import logging
from collections import deque
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx


def index_to_letters(index: int) -> str:
    '''
    Spreadsheet-style label for a vertex id: 0 -> A, 25 -> Z, 26 -> AA.
    '''
    s = ""
    i = index
    while True:
        s = chr(ord('A') + i % 26) + s
        i = i // 26 - 1
        if i < 0:
            return s


def circle_layout(n: int, radius: float = 1.0, center: Tuple[float, float] = (0.0, 0.0)) -> List[Tuple[float, float]]:
    '''
    Positions of n vertices evenly spaced on a circle, starting from the top.
    '''
    cx, cy = center
    out = []
    for i in range(n):
        ang = (2 * math.pi * i) / n - math.pi / 2
        out.append((cx + radius * math.cos(ang), cy + radius * math.sin(ang)))
    return out


@dataclass(frozen=True)
class Vertex:
    vid: int
    label: str
    position: Tuple[float, float] = (0.0, 0.0)


@dataclass(frozen=True)
class Edge:
    eid: int
    u: int
    v: int
    weight: float = 1.0
    directed: bool = False  # stored, never used by the algorithms
    duplicate_of: Optional[int] = None  # set on augmented copies only

    def other(self, x: int) -> int:
        '''
        Far endpoint of the edge relative to x.
        '''
        return self.v if self.u == x else self.u


class Graph:
    ''' Undirected street network with dense integer ids.

    Vertices and edges live in lists indexed by their id; an adjacency index
    maps every vertex id to the ids of its incident edges (a self-loop is
    listed twice). Removing a vertex or an edge renumbers everything that
    survives back into [0, n), so ids are not stable across removals.

    Attributes
    ----------
    vertices : List[Vertex]
    edges : List[Edge]
    revision : int
        Bumped by every mutation. Results computed at an older revision are stale.
    '''
    def __init__(self):
        self._vertices: List[Vertex] = []
        self._edges: List[Edge] = []
        self._adj: Dict[int, List[int]] = {}
        self.revision = 0

    @property
    def vertices(self) -> List[Vertex]:
        return list(self._vertices)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def __len__(self) -> int:
        return len(self._vertices)

    def number_of_edges(self) -> int:
        return len(self._edges)

    def vertex(self, vid: int) -> Vertex:
        return self._vertices[vid]

    def edge(self, eid: int) -> Edge:
        return self._edges[eid]

    def has_vertex(self, vid: int) -> bool:
        return 0 <= vid < len(self._vertices)

    def has_edge_id(self, eid: int) -> bool:
        return 0 <= eid < len(self._edges)

    # ------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------
    def add_vertex(self, position: Tuple[float, float] = (0.0, 0.0), label: Optional[str] = None) -> int:
        vid = len(self._vertices)
        if not label:
            label = index_to_letters(vid)
        self._vertices.append(Vertex(vid=vid, label=label, position=tuple(position)))
        self._adj[vid] = []
        self.revision += 1
        return vid

    def add_edge(self, u: int, v: int, weight: float = 1.0, directed: bool = False,
                 duplicate_of: Optional[int] = None) -> int:
        '''
        Append an edge and return its id. Parallel edges and self-loops are accepted.
        '''
        if not self.has_vertex(u) or not self.has_vertex(v):
            raise ValueError(f"Edge endpoint out of range: ({u}, {v}) with {len(self._vertices)} vertices")
        if weight < 0:
            raise ValueError(f"Edge weight must be non-negative, got {weight}")
        eid = len(self._edges)
        self._edges.append(Edge(eid=eid, u=u, v=v, weight=float(weight),
                                directed=directed, duplicate_of=duplicate_of))
        self._adj[u].append(eid)
        self._adj[v].append(eid)
        self.revision += 1
        return eid

    def remove_edge(self, eid: int) -> bool:
        if not self.has_edge_id(eid):
            return False
        self._edges = [replace(e, eid=i) for i, e in enumerate(x for x in self._edges if x.eid != eid)]
        self._rebuild_adjacency()
        self.revision += 1
        return True

    def remove_vertex(self, vid: int) -> bool:
        '''
        Remove a vertex with its incident edges, then renumber vertices and edges.
        '''
        if not self.has_vertex(vid):
            return False
        old_to_new = {}
        kept = []
        for vx in self._vertices:
            if vx.vid == vid:
                continue
            old_to_new[vx.vid] = len(kept)
            kept.append(replace(vx, vid=len(kept)))
        edges = [e for e in self._edges if e.u != vid and e.v != vid]
        self._vertices = kept
        self._edges = [replace(e, eid=i, u=old_to_new[e.u], v=old_to_new[e.v]) for i, e in enumerate(edges)]
        self._rebuild_adjacency()
        self.revision += 1
        return True

    def clear(self):
        self._vertices.clear()
        self._edges.clear()
        self._adj.clear()
        self.revision += 1

    def _rebuild_adjacency(self):
        self._adj = {vx.vid: [] for vx in self._vertices}
        for e in self._edges:
            self._adj[e.u].append(e.eid)
            self._adj[e.v].append(e.eid)

    def copy(self) -> "Graph":
        g = Graph()
        g._vertices = list(self._vertices)
        g._edges = list(self._edges)
        g._adj = {k: list(ids) for k, ids in self._adj.items()}
        g.revision = self.revision
        return g

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------
    def neighbors(self, u: int) -> List[int]:
        return [self._edges[eid].other(u) for eid in self._adj.get(u, [])]

    def degree(self, u: int) -> int:
        return len(self._adj.get(u, []))

    def adjacency(self) -> Dict[int, List[int]]:
        '''
        Vertex id -> incident edge ids. Returns a copy.
        '''
        return {k: list(ids) for k, ids in self._adj.items()}

    def incident_edges(self, u: int) -> List[int]:
        return list(self._adj.get(u, []))

    def odd_degree_vertices(self) -> List[int]:
        return [vx.vid for vx in self._vertices if self.degree(vx.vid) % 2 == 1]

    def edge_between(self, u: int, v: int) -> Optional[Edge]:
        '''
        Lightest edge joining u and v, or None.
        '''
        best = None
        for eid in self._adj.get(u, []):
            e = self._edges[eid]
            if e.other(u) == v and (best is None or e.weight < best.weight):
                best = e
        return best

    def total_weight(self) -> float:
        return sum(e.weight for e in self._edges)

    def is_connected_undirected(self) -> bool:
        '''
        Breadth-first check that every vertex of non-zero degree is reachable
        from the first one. Isolated vertices are ignored.
        '''
        start = next((vx.vid for vx in self._vertices if self.degree(vx.vid) > 0), None)
        if start is None:
            return True
        visited = {start}
        queue = deque([start])
        while queue:
            u = queue.popleft()
            for w in self.neighbors(u):
                if w not in visited:
                    visited.add(w)
                    queue.append(w)
        return all(vx.vid in visited for vx in self._vertices if self.degree(vx.vid) > 0)

    def is_connected_directed(self) -> bool:
        '''
        Depth-first reachability of every vertex from vertex 0.
        Edges are followed in both directions regardless of their directed flag,
        and isolated vertices count as unreached.
        '''
        if not self._vertices:
            return True
        visited = set()
        stack = [0]
        while stack:
            u = stack.pop()
            if u in visited:
                continue
            visited.add(u)
            for w in self.neighbors(u):
                if w not in visited:
                    stack.append(w)
        return len(visited) == len(self._vertices)

    # ------------------------------------------------------------
    # Adjacency matrix
    # ------------------------------------------------------------
    @classmethod
    def from_adjacency_matrix(cls, matrix: Sequence[Sequence[int]],
                              positions: Optional[Sequence[Tuple[float, float]]] = None) -> "Graph":
        '''
        Build a graph from a square 0/1 matrix. Row/column index is the vertex id;
        an edge of weight 1 is added for every non-zero entry above the diagonal.
        '''
        n = len(matrix)
        if any(len(row) != n for row in matrix):
            raise ValueError("Adjacency matrix must be square")
        if positions is None:
            positions = circle_layout(n)
        g = cls()
        for i in range(n):
            g.add_vertex(positions[i])
        for i in range(n):
            for j in range(i + 1, n):
                if matrix[i][j] != 0:
                    g.add_edge(i, j)
        logging.debug(f"Built graph from {n}x{n} matrix with {g.number_of_edges()} edges")
        return g

    def to_adjacency_matrix(self) -> List[List[int]]:
        n = len(self._vertices)
        mat = [[0] * n for _ in range(n)]
        for e in self._edges:
            mat[e.u][e.v] = 1
            mat[e.v][e.u] = 1
        return mat

    # ------------------------------------------------------------
    # networkx view & plotting
    # ------------------------------------------------------------
    def to_networkx(self) -> nx.MultiGraph:
        '''
        MultiGraph with one node per vertex and one edge per edge, keyed by edge id.
        '''
        G = nx.MultiGraph()
        for vx in self._vertices:
            G.add_node(vx.vid, label=vx.label, pos=vx.position)
        for e in self._edges:
            G.add_edge(e.u, e.v, key=e.eid, weight=e.weight, duplicate_of=e.duplicate_of)
        return G

    def plot(self, repeated_edges: Sequence[int] = (), title: Optional[str] = None, path: Optional[str] = None):
        '''
        Draw the network. Edges listed in repeated_edges are highlighted.
        Saves to path if given, otherwise opens a window.
        '''
        import matplotlib.pyplot as plt

        G = self.to_networkx()
        pos = {vx.vid: vx.position for vx in self._vertices}
        labels = {vx.vid: vx.label for vx in self._vertices}
        repeated = set(repeated_edges)
        plain = [(e.u, e.v) for e in self._edges if e.eid not in repeated]
        marked = [(e.u, e.v) for e in self._edges if e.eid in repeated]

        fig, ax = plt.subplots(figsize=(8, 8))
        nx.draw_networkx_nodes(G, pos, ax=ax, node_color="#cfe2f3", node_size=400)
        nx.draw_networkx_labels(G, pos, labels=labels, ax=ax)
        nx.draw_networkx_edges(G, pos, edgelist=plain, ax=ax, edge_color="#555555")
        if marked:
            nx.draw_networkx_edges(G, pos, edgelist=marked, ax=ax, edge_color="#d62728", width=3.0)
        if title:
            ax.set_title(title)
        ax.set_axis_off()
        if path:
            fig.savefig(path, bbox_inches="tight")
            plt.close(fig)
        else:
            plt.show()
