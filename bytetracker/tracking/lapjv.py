"""
Linear Assignment with the Jonker-Volgenant Algorithm (LAPJV).

Exact minimum-cost bipartite matching for dense cost matrices:
1. Column reduction with reduction transfer
2. Augmenting row reduction (two passes)
3. Shortest augmenting paths (Dijkstra-like, with dual variables)

Rectangular problems and cost ceilings are handled by embedding the cost
matrix into a square (n + m) x (n + m) matrix whose virtual rows and columns
absorb unmatched entries.

Usage:
    from bytetracker.tracking.lapjv import lapjv, linear_assignment

    total, x, y = lapjv(cost, extend_cost=True, cost_limit=0.8)
    matches, unmatched_rows, unmatched_cols = linear_assignment(cost, thresh=0.8)

Reference:
- Jonker & Volgenant, "A Shortest Augmenting Path Algorithm for Dense and
  Sparse Linear Assignment Problems", Computing 38 (1987)
"""

import math
from typing import List, Tuple

import numpy as np

LARGE = math.inf


class AssignmentError(RuntimeError):
    """Solver did not produce a complete assignment."""


# =============================================================================
# Square Solver
# =============================================================================

def _column_reduction(
    n: int,
    cost: List[List[float]],
    free_rows: List[int],
    x: List[int],
    y: List[int],
    v: List[float],
) -> int:
    """Column reduction and reduction transfer. Returns number of free rows."""
    for i in range(n):
        x[i] = -1
        v[i] = LARGE
        y[i] = 0

    for i in range(n):
        row = cost[i]
        for j in range(n):
            c = row[j]
            if c < v[j]:
                v[j] = c
                y[j] = i

    unique = [True] * n
    for j in range(n - 1, -1, -1):
        i = y[j]
        if x[i] < 0:
            x[i] = j
        else:
            unique[i] = False
            y[j] = -1

    n_free_rows = 0
    for i in range(n):
        if x[i] < 0:
            free_rows[n_free_rows] = i
            n_free_rows += 1
        elif unique[i]:
            # Reduction transfer
            j = x[i]
            row = cost[i]
            min_reduced = LARGE
            for j2 in range(n):
                if j2 == j:
                    continue
                c = row[j2] - v[j2]
                if c < min_reduced:
                    min_reduced = c
            if min_reduced < LARGE:
                v[j] -= min_reduced

    return n_free_rows


def _augmenting_row_reduction(
    n: int,
    cost: List[List[float]],
    n_free_rows: int,
    free_rows: List[int],
    x: List[int],
    y: List[int],
    v: List[float],
) -> int:
    """One pass of augmenting row reduction. Returns number of free rows left."""
    current = 0
    new_free_rows = 0
    rr_cnt = 0

    while current < n_free_rows:
        rr_cnt += 1
        free_i = free_rows[current]
        current += 1
        row = cost[free_i]

        # Lowest and second lowest reduced cost in the row
        j1 = 0
        v1 = row[0] - v[0]
        j2 = -1
        v2 = LARGE
        for j in range(1, n):
            c = row[j] - v[j]
            if c < v2:
                if c >= v1:
                    v2 = c
                    j2 = j
                else:
                    v2 = v1
                    v1 = c
                    j2 = j1
                    j1 = j

        i0 = y[j1]
        v1_new = v[j1] - (v2 - v1)
        v1_lowers = v1_new < v[j1]

        if rr_cnt < current * n:
            if v1_lowers:
                v[j1] = v1_new
            elif i0 >= 0 and j2 >= 0:
                j1 = j2
                i0 = y[j2]
            if i0 >= 0:
                if v1_lowers:
                    current -= 1
                    free_rows[current] = i0
                else:
                    free_rows[new_free_rows] = i0
                    new_free_rows += 1
        elif i0 >= 0:
            free_rows[new_free_rows] = i0
            new_free_rows += 1

        x[free_i] = j1
        y[j1] = free_i

    return new_free_rows


def _find_min_columns(n: int, lo: int, d: List[float], cols: List[int]) -> int:
    """Move columns with minimal distance to cols[lo:hi]. Returns hi."""
    hi = lo + 1
    mind = d[cols[lo]]
    for k in range(hi, n):
        j = cols[k]
        if d[j] <= mind:
            if d[j] < mind:
                hi = lo
                mind = d[j]
            cols[k] = cols[hi]
            cols[hi] = j
            hi += 1
    return hi


def _scan_columns(
    n: int,
    cost: List[List[float]],
    lo: int,
    hi: int,
    d: List[float],
    cols: List[int],
    pred: List[int],
    y: List[int],
    v: List[float],
) -> Tuple[int, int, int]:
    """
    Scan the columns in cols[lo:hi], relaxing distances of unscanned columns.

    Returns:
        (lo, hi, final_j) where final_j is an unassigned column reached at
        minimal distance, or -1
    """
    scan_lo = lo
    scan_hi = hi
    while scan_lo != scan_hi:
        j = cols[scan_lo]
        scan_lo += 1
        i = y[j]
        row = cost[i]
        mind = d[j]
        h = row[j] - v[j] - mind
        for k in range(scan_hi, n):
            j = cols[k]
            cred_ij = row[j] - v[j] - h
            if cred_ij < d[j]:
                d[j] = cred_ij
                pred[j] = i
                if cred_ij == mind:
                    if y[j] < 0:
                        return lo, hi, j
                    cols[k] = cols[scan_hi]
                    cols[scan_hi] = j
                    scan_hi += 1
    return scan_lo, scan_hi, -1


def _find_path(
    n: int,
    cost: List[List[float]],
    start_i: int,
    y: List[int],
    v: List[float],
    pred: List[int],
) -> int:
    """Shortest augmenting path from a free row. Returns the free end column."""
    lo = 0
    hi = 0
    final_j = -1
    n_ready = 0
    cols = list(range(n))
    start_row = cost[start_i]
    d = [start_row[j] - v[j] for j in range(n)]
    for j in range(n):
        pred[j] = start_i

    while final_j == -1:
        if lo == hi:
            n_ready = lo
            hi = _find_min_columns(n, lo, d, cols)
            for k in range(lo, hi):
                j = cols[k]
                if y[j] < 0:
                    final_j = j
        if final_j == -1:
            lo, hi, final_j = _scan_columns(n, cost, lo, hi, d, cols, pred, y, v)

    # Update column prices of the scanned columns
    mind = d[cols[lo]]
    for k in range(n_ready):
        j = cols[k]
        v[j] += d[j] - mind

    return final_j


def _augment(
    n: int,
    cost: List[List[float]],
    n_free_rows: int,
    free_rows: List[int],
    x: List[int],
    y: List[int],
    v: List[float],
):
    """Assign every remaining free row along a shortest augmenting path."""
    pred = [0] * n
    for free_i in free_rows[:n_free_rows]:
        j = _find_path(n, cost, free_i, y, v, pred)
        i = -1
        steps = 0
        while i != free_i:
            i = pred[j]
            y[j] = i
            j, x[i] = x[i], j
            steps += 1
            if steps > n:
                raise AssignmentError(f"Augmenting path from row {free_i} did not terminate")


def solve_square(cost: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Solve a square assignment problem exactly.

    Args:
        cost: Finite cost matrix [N, N]

    Returns:
        (x, y): x[i] is the column of row i, y[j] the row of column j
    """
    n = cost.shape[0]
    rows = cost.tolist()
    free_rows = [0] * n
    x = [-1] * n
    y = [-1] * n
    v = [0.0] * n

    n_free_rows = _column_reduction(n, rows, free_rows, x, y, v)
    passes = 0
    while n_free_rows > 0 and passes < 2:
        n_free_rows = _augmenting_row_reduction(n, rows, n_free_rows, free_rows, x, y, v)
        passes += 1
    if n_free_rows > 0:
        _augment(n, rows, n_free_rows, free_rows, x, y, v)

    x_arr = np.asarray(x, dtype=np.int64)
    y_arr = np.asarray(y, dtype=np.int64)
    if np.any(x_arr < 0) or np.any(y_arr < 0) or np.any(y_arr[x_arr] != np.arange(n)):
        raise AssignmentError("LAPJV returned an incomplete assignment")

    return x_arr, y_arr


# =============================================================================
# Rectangular / Thresholded Interface
# =============================================================================

def lapjv(
    cost: np.ndarray,
    extend_cost: bool = False,
    cost_limit: float = np.inf,
) -> Tuple[float, np.ndarray, np.ndarray]:
    """
    Minimum-cost assignment with optional padding and cost ceiling.

    Args:
        cost: Cost matrix [N, M]
        extend_cost: Allow non-square matrices
        cost_limit: Pairs costing more than this are left unmatched

    Returns:
        (total_cost, x, y): x[i] is the column of row i or -1,
        y[j] the row of column j or -1; total_cost sums matched pairs
    """
    cost = np.asarray(cost, dtype=np.float64)
    if cost.ndim != 2:
        raise ValueError(f"Cost matrix must be 2-D, got shape {cost.shape}")
    if not np.all(np.isfinite(cost)):
        raise ValueError("Cost matrix must be finite")

    n_rows, n_cols = cost.shape
    if n_rows != n_cols and not extend_cost:
        raise ValueError("Square cost matrix required; set extend_cost=True for rectangular input")

    if extend_cost or cost_limit < np.inf:
        n = n_rows + n_cols
        if cost_limit < np.inf:
            fill = cost_limit / 2.0
        else:
            fill = max(-1.0, float(cost.max()) if cost.size else -1.0) + 1.0
        padded = np.full((n, n), fill, dtype=np.float64)
        padded[n_rows:, n_cols:] = 0.0
        padded[:n_rows, :n_cols] = cost
    else:
        n = n_rows
        padded = cost

    if n == 0:
        return 0.0, np.full(n_rows, -1, dtype=np.int64), np.full(n_cols, -1, dtype=np.int64)

    x, y = solve_square(padded)

    x = x[:n_rows].copy()
    y = y[:n_cols].copy()
    x[x >= n_cols] = -1
    y[y >= n_rows] = -1

    matched = np.where(x >= 0)[0]
    total_cost = float(cost[matched, x[matched]].sum())

    return total_cost, x, y


def linear_assignment(
    cost_matrix: np.ndarray,
    thresh: float,
) -> Tuple[np.ndarray, List[int], List[int]]:
    """
    Match rows to columns, rejecting pairs with cost above `thresh`.

    Args:
        cost_matrix: Cost matrix [N, M]
        thresh: Cost ceiling

    Returns:
        (matches [K, 2] of (row, col), unmatched rows, unmatched cols)
    """
    cost_matrix = np.asarray(cost_matrix, dtype=np.float64)
    n_rows, n_cols = cost_matrix.shape if cost_matrix.ndim == 2 else (0, 0)

    if cost_matrix.size == 0:
        return np.empty((0, 2), dtype=np.int64), list(range(n_rows)), list(range(n_cols))

    _, x, y = lapjv(cost_matrix, extend_cost=True, cost_limit=thresh)

    matches = np.array(
        [[i, j] for i, j in enumerate(x) if j >= 0], dtype=np.int64
    ).reshape(-1, 2)
    unmatched_rows = np.where(x < 0)[0].tolist()
    unmatched_cols = np.where(y < 0)[0].tolist()

    return matches, unmatched_rows, unmatched_cols
