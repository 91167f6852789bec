# main.py
from graph import Graph
from graph_io import INPUT_FORMATS, export_route, parse_file, save_adjacency_matrix
from euler import find_euler_tour
from matching import DEFAULT_MAX_EXACT_K, MATCHING_STRATEGIES
from postman import SolverConfig, solve_postman

import argparse
import logging
import time
from typing import Dict, List, Optional

# ============================================================
# CLI & Logging
# ============================================================
def build_argparser():
    p = argparse.ArgumentParser(description="Street network Euler / Chinese Postman solver")
    p.add_argument("-i", "--input", required=True, help="Path to the instance file")
    p.add_argument("--format", choices=INPUT_FORMATS, default="auto",
                   help="matrix = square 0/1 adjacency matrix, edges = 'u v [weight]' lines")

    # Postman parameters
    p.add_argument("--matching", choices=MATCHING_STRATEGIES, default="auto")
    # auto = exact if k <= max-exact-k, greedy otherwise
    # exact = minimum weight matching, refused above max-exact-k
    # greedy = nearest remaining odd vertex (approximate)
    p.add_argument("--max-exact-k", type=int, default=DEFAULT_MAX_EXACT_K)
    p.add_argument("--start-at", help="Label of the vertex the postman route starts from")
    p.add_argument("--postman", action="store_true", help="Solve the postman route even if an Euler tour exists")

    # Export & logs
    p.add_argument("--export", help="Output path for the route (JSON/CSV)")
    p.add_argument("--export-format", choices=["json", "csv"], default="json")
    p.add_argument("--export-matrix", help="Write the adjacency matrix of the loaded graph")
    p.add_argument("--progress", action="store_true", help="Show progress bars")
    p.add_argument("-v", "--verbose", action="count", default=1)
    # verbosity: 0=warning, 1=info, 2=debug

    # Print route options
    p.add_argument("--print-route", action="store_true", help="Print the computed route")
    p.add_argument("--print-full-route", action="store_true", help="Print the full route (can be huge!)")
    p.add_argument("--print-limit", type=int, default=100)
    p.add_argument("--print-edges", action="store_true")

    # Plot flags
    p.add_argument("--plot_graph", action="store_true")
    p.add_argument("--plot-path", help="Save the plot to this file instead of showing it")

    return p


def configure_logging(verbosity: int):
    """Configure logging level based on verbosity.
    Parameters
    ----------
    verbosity : int
        0 = warning, 1 = info, 2 = debug
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )

# ============================================================
# Route & printing utils
# ============================================================
def vertex_by_label(graph: Graph, label: Optional[str]) -> Optional[int]:
    if label is None:
        return None
    for vx in graph.vertices:
        if vx.label == label:
            return vx.vid
    logging.warning(f"No vertex labelled {label!r}; ignoring --start-at")
    return None


def print_route_to_console(graph: Graph, edge_order: List[int], vertices: List[int],
                           print_edges: bool = False, limit: int = 100, full: bool = False):
    '''
    Print route to console, either as list of edges or list of vertices.
    If full is False and route is longer than limit, print head and tail with ellipsis.
    '''
    if not edge_order:
        print("Route: <empty>"); return
    if print_edges:
        eds = [(graph.vertex(graph.edge(e).u).label, graph.vertex(graph.edge(e).v).label) for e in edge_order]
        print(f"Route (edges) count = {len(eds)}")
        if full or len(eds) <= limit: print(eds)
        else:
            head, tail = eds[: limit//2], eds[-(limit - limit//2):]
            print(head + [("...", "...")] + tail)
    else:
        labels = [graph.vertex(v).label for v in vertices]
        print(f"Route (vertices) length = {len(labels)}")
        if full or len(labels) <= limit: print(" -> ".join(labels))
        else:
            head, tail = labels[: limit//2], labels[-(limit - limit//2):]
            print(" -> ".join(head + ["..."] + tail))


def print_summary(graph: Graph, meta: Dict):
    '''
    Print solution summary to the console.
    '''
    odd = graph.odd_degree_vertices()
    print("\n=== Solution Summary ===")
    print(f"Total vertices         : {len(graph)}")
    print(f"Total edges            : {graph.number_of_edges()}")
    print(f"Odd-degree vertices (k): {len(odd)} {[graph.vertex(v).label for v in odd]}")
    print(f"Resolution mode        : {meta.get('mode')}")
    print(f"Status                 : {meta.get('status')}")
    print(f"Matched pairs          : {meta.get('pairs', '-')}")
    print(f"Duplicated edges       : {meta.get('dup_edges', '-')}")
    print(f"Added length           : {meta.get('added_length', '-')}")
    print(f"Total length           : {meta.get('total_length', '-')}")
    print(f"Route edges            : {meta.get('route_edges', '-')}")
    print(f"Total time             : {meta.get('total_time_sec')} s")
    print("========================\n")

# ============================================================
# Orchestration
# ============================================================
def solve(graph: Graph, args) -> Dict:
    '''
    Euler tour when one exists (unless --postman), otherwise the postman route.
    Returns a dict with the route in original edge ids, its vertices, the
    repeated flags and the metadata.
    '''
    if not args.postman:
        tour = find_euler_tour(graph)
        if tour is not None:
            meta = {
                "mode": "euler_cycle" if tour.is_cycle else "euler_path",
                "status": "ok",
                "total_length": round(graph.total_weight(), 3),
                "route_edges": len(tour.edge_order),
            }
            return {"edges": tour.edge_order, "vertices": tour.vertex_sequence(graph),
                    "repeated": [False] * len(tour.edge_order), "meta": meta}
        logging.info("No Euler tour; solving the Chinese Postman route.")

    config = SolverConfig(
        matching=args.matching,
        max_exact_k=args.max_exact_k,
        start_vertex=vertex_by_label(graph, args.start_at),
        progress=args.progress,
    )
    res = solve_postman(graph, config)
    meta = {**res.meta, "status": res.status}
    if not res.ok:
        meta["error"] = res.error
        return {"edges": [], "vertices": [], "repeated": [], "meta": meta}
    meta["total_length"] = round(res.total_cost, 3)
    meta["route_edges"] = len(res.edge_order)
    return {"edges": res.original_edge_order(), "vertices": res.vertex_sequence(graph),
            "repeated": [res.is_duplicate(r) for r in res.edge_order], "meta": meta}

# ============================================================
# Main
# ============================================================
if __name__=="__main__":
    args = build_argparser().parse_args()
    configure_logging(args.verbose)

    graph = parse_file(args.input, fmt=args.format)
    logging.info(f"Loaded {len(graph)} vertices, {graph.number_of_edges()} edges")

    if args.export_matrix:
        save_adjacency_matrix(graph, args.export_matrix)

    t0 = time.time()
    out = solve(graph, args)
    out["meta"]["total_time_sec"] = round(time.time() - t0, 3)

    print_summary(graph, out["meta"])

    if args.print_route:
        print_route_to_console(graph, out["edges"], out["vertices"], print_edges=args.print_edges,
                               limit=args.print_limit, full=args.print_full_route)

    if args.export:
        export_route(args.export, graph, out["edges"], out["meta"],
                     duplicates=out["repeated"], fmt=args.export_format)

    if args.plot_graph:
        repeated = sorted({e for e, dup in zip(out["edges"], out["repeated"]) if dup})
        graph.plot(repeated_edges=repeated, title=out["meta"].get("mode"), path=args.plot_path)
