# matching.py
import logging
from functools import lru_cache
from typing import Dict, List, Tuple

DEFAULT_MAX_EXACT_K = 20  # largest odd-vertex count handed to the exact matcher
MATCHING_STRATEGIES = ("auto", "exact", "greedy")

INF = float('inf')


class MatchingTooLargeError(ValueError):
    '''Raised when exact matching is requested for more vertices than allowed.'''

    def __init__(self, k: int, limit: int):
        super().__init__(f"Exact matching refused: {k} odd vertices exceeds the limit of {limit}")
        self.k = k
        self.limit = limit


# ============================================================
# Exact matching (recursion over the first unmatched vertex)
# ============================================================

def min_perfect_matching_exact(odd_ids: List, dist_matrix: Dict, max_k: int = DEFAULT_MAX_EXACT_K) -> Tuple[float, List[Tuple]]:
    '''
    Exact minimum weight perfect matching on the complete graph of odd vertices.

    The first unmatched vertex is paired with every other unmatched vertex in turn
    and the rest is solved recursively; that enumerates all (k-1)!! perfect matchings.
    Sub-results are cached on the bitmask of unmatched vertices, which keeps the
    work at O(2^k * k), still exponential, hence max_k.

    odd_ids : list of odd vertex ids (even length)
    dist_matrix : dict of dict with distances between odd vertices
    Returns total cost and list of matched pairs. Pairs whose distance is INF
    are kept in the result; the total is then INF.
    '''
    m = len(odd_ids)
    if m % 2:
        raise ValueError(f"Perfect matching needs an even number of vertices, got {m}")
    if m > max_k:
        raise MatchingTooLargeError(m, max_k)

    @lru_cache(None)
    def dp(mask: int):
        # mask holds the vertices still unmatched
        if mask == 0:
            return 0.0, ()
        i = (mask & -mask).bit_length() - 1
        rem = mask ^ (1 << i)
        best_cost, best_pairs = INF, None
        for j in range(i + 1, m):
            if not (rem >> j) & 1:
                continue
            gi, gj = odd_ids[i], odd_ids[j]
            sub_cost, sub_pairs = dp(rem ^ (1 << j))
            tot = dist_matrix[gi].get(gj, INF) + sub_cost
            if best_pairs is None or tot < best_cost:
                best_cost = tot
                best_pairs = ((gi, gj),) + sub_pairs
        return best_cost, best_pairs

    cost, pairs = dp((1 << m) - 1)
    return cost, list(pairs)


# ============================================================
# Greedy nearest-neighbour matching (approximate)
# ============================================================

def min_perfect_matching_greedy(odd_ids: List, dist_matrix: Dict) -> Tuple[float, List[Tuple]]:
    '''
    Approximate matching: repeatedly take the last unmatched vertex and pair it
    with its nearest remaining vertex. A vertex with no reachable partner is
    left unmatched.
    '''
    remaining = list(odd_ids)
    pairs, total = [], 0.0
    while remaining:
        a = remaining.pop()
        best, best_idx = INF, -1
        for idx, b in enumerate(remaining):
            d = dist_matrix[a].get(b, INF)
            if d < best:
                best, best_idx = d, idx
        if best_idx == -1:
            logging.warning(f"Greedy matching: vertex {a} has no reachable partner")
            continue
        pairs.append((a, remaining.pop(best_idx)))
        total += best
    return total, pairs


def match_odd_vertices(odd_ids: List, dist_matrix: Dict, strategy: str = "auto",
                       max_exact_k: int = DEFAULT_MAX_EXACT_K) -> Tuple[float, List[Tuple], str]:
    '''
    Pair up odd vertices with the chosen strategy.

    strategy:
        exact  -> exhaustive minimum matching, MatchingTooLargeError above max_exact_k
        greedy -> nearest remaining vertex
        auto   -> exact up to max_exact_k, greedy beyond
    Returns (cost, pairs, strategy actually used).
    '''
    if strategy not in MATCHING_STRATEGIES:
        raise ValueError(f"Unknown matching strategy {strategy!r}, expected one of {MATCHING_STRATEGIES}")
    k = len(odd_ids)
    if strategy == "auto":
        strategy = "exact" if k <= max_exact_k else "greedy"
        if strategy == "greedy":
            logging.info(f"k={k} > {max_exact_k}: using greedy matching (approximate).")
    if strategy == "exact":
        cost, pairs = min_perfect_matching_exact(odd_ids, dist_matrix, max_k=max_exact_k)
    else:
        cost, pairs = min_perfect_matching_greedy(odd_ids, dist_matrix)
    logging.info(f"Matched {len(pairs)} pairs ({strategy}), cost={cost}")
    return cost, pairs, strategy
