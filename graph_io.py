# graph_io.py
import re
import csv
import json
import logging
from typing import Dict, List, Optional

from graph import Graph, circle_layout

INPUT_FORMATS = ("auto", "matrix", "edges")

_SPLIT = re.compile(r"[\s,]+")


def _read_rows(path: str) -> List[List[str]]:
    '''
    Non-empty lines split on whitespace or commas. Text after '#' is ignored.
    '''
    rows = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            rows.append([tok for tok in _SPLIT.split(line) if tok])
    return rows


def _looks_like_matrix(rows: List[List[str]]) -> bool:
    n = len(rows)
    return n > 0 and all(len(r) == n and all(tok in ("0", "1") for tok in r) for r in rows)


def matrix_from_rows(rows: List[List[str]]) -> List[List[int]]:
    try:
        mat = [[int(tok) for tok in r] for r in rows]
    except ValueError as exc:
        raise ValueError(f"Adjacency matrix entries must be integers: {exc}") from exc
    if not mat or any(len(r) != len(mat) for r in mat):
        raise ValueError("Adjacency matrix must be square")
    return mat


def graph_from_edge_rows(rows: List[List[str]]) -> Graph:
    '''
    Build a graph from "u v [weight]" rows. Endpoints are labels; vertices are
    created in order of first appearance.
    '''
    label_to_vid: Dict[str, int] = {}
    edges = []
    for lineno, r in enumerate(rows, 1):
        if len(r) not in (2, 3):
            raise ValueError(f"Edge row {lineno}: expected 'u v [weight]', got {r}")
        try:
            w = float(r[2]) if len(r) == 3 else 1.0
        except ValueError as exc:
            raise ValueError(f"Edge row {lineno}: bad weight {r[2]!r}") from exc
        for lab in r[:2]:
            if lab not in label_to_vid:
                label_to_vid[lab] = len(label_to_vid)
        edges.append((label_to_vid[r[0]], label_to_vid[r[1]], w))

    g = Graph()
    positions = circle_layout(len(label_to_vid))
    for lab, vid in label_to_vid.items():
        g.add_vertex(positions[vid], label=lab)
    for u, v, w in edges:
        g.add_edge(u, v, w)
    return g


def parse_file(path: str, fmt: str = "auto") -> Graph:
    '''
    Read an instance file: a square 0/1 adjacency matrix or an edge list.
    With fmt="auto", a square 0/1 grid is read as a matrix, anything else as an edge list.
    '''
    if fmt not in INPUT_FORMATS:
        raise ValueError(f"Unknown input format {fmt!r}")
    rows = _read_rows(path)
    if fmt == "auto":
        fmt = "matrix" if _looks_like_matrix(rows) else "edges"
    logging.info(f"Reading {path} as {fmt}")
    if fmt == "matrix":
        return Graph.from_adjacency_matrix(matrix_from_rows(rows))
    return graph_from_edge_rows(rows)


def save_adjacency_matrix(graph: Graph, path: str):
    '''
    Write the symmetric 0/1 adjacency matrix, space separated.
    '''
    with open(path, "w", encoding="utf-8") as f:
        for row in graph.to_adjacency_matrix():
            f.write(" ".join(str(x) for x in row) + "\n")


def export_route(path: Optional[str], graph: Graph, edge_order: List[int],
                 meta: Dict, duplicates: Optional[List[bool]] = None, fmt: str = "json"):
    '''
    Export a route in JSON or CSV format. One record per traversed edge.
    duplicates flags the records that repeat an already covered edge.
    '''
    if not path:
        return
    if duplicates is None:
        duplicates = [False] * len(edge_order)
    records = []
    for eid, dup in zip(edge_order, duplicates):
        if not graph.has_edge_id(eid):
            continue
        e = graph.edge(eid)
        records.append({
            "edge": eid,
            "u": graph.vertex(e.u).label,
            "v": graph.vertex(e.v).label,
            "weight": e.weight,
            "repeated": dup,
        })
    if fmt == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"route": records, "meta": meta}, f, ensure_ascii=False, indent=2)
    else:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=["edge", "u", "v", "weight", "repeated"])
            writer.writeheader()
            writer.writerows(records)
    logging.info(f"Route exported to {path} ({len(records)} edges)")
