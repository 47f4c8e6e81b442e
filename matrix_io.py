import sys

import numpy as np

from distributor import WEIGHT_DTYPE
from engine import INFINITY
from errors import InputFormatError


def validate_matrix(matrix):
    matrix = np.asarray(matrix)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InputFormatError(f"adjacency matrix must be square, got shape {matrix.shape}")
    if matrix.shape[0] < 1:
        raise InputFormatError("adjacency matrix is empty")
    if matrix.dtype.kind == "f":
        if not np.all(np.isfinite(matrix) | (matrix == np.inf)):
            raise InputFormatError("adjacency matrix contains NaN or -inf")
        finite = matrix[np.isfinite(matrix)]
        if not np.array_equal(finite, np.floor(finite)):
            raise InputFormatError("edge weights must be integers")
        matrix = np.where(np.isinf(matrix), INFINITY, matrix)
    elif matrix.dtype.kind not in "iu":
        raise InputFormatError(f"edge weights must be integers, got dtype {matrix.dtype}")

    negative = np.argwhere(matrix < 0)
    if len(negative):
        i, j = negative[0]
        raise InputFormatError(
            f"negative weight {matrix[i, j]} on edge {i}->{j}")

    # Anything at or above INFINITY means "no edge".
    return np.minimum(matrix, INFINITY).astype(WEIGHT_DTYPE)


def read_matrix(stream):
    tokens = stream.read().split()
    if not tokens:
        raise InputFormatError("missing number of vertices")
    try:
        values = [int(tok) for tok in tokens]
    except ValueError as e:
        raise InputFormatError(f"non-integer token in input: {e}") from e

    limit = np.iinfo(WEIGHT_DTYPE)
    for tok, value in zip(tokens, values):
        if not limit.min <= value <= limit.max:
            raise InputFormatError(f"value {tok} does not fit a 64-bit integer")

    n = values[0]
    if n < 1:
        raise InputFormatError(f"number of vertices must be positive, got {n}")
    entries = values[1:]
    if len(entries) < n * n:
        raise InputFormatError(f"expected {n * n} matrix entries, got {len(entries)}")
    if len(entries) > n * n:
        raise InputFormatError(
            f"{len(entries) - n * n} unexpected values after the {n}x{n} matrix")

    return validate_matrix(np.array(entries, dtype=WEIGHT_DTYPE).reshape(n, n))


def load_matrix(path):
    if path == "-":
        return read_matrix(sys.stdin)
    try:
        if path.endswith(".npy"):
            return validate_matrix(np.load(path))
        with open(path) as f:
            return read_matrix(f)
    except (OSError, ValueError, OverflowError) as e:
        raise InputFormatError(f"cannot read matrix from {path}: {e}") from e


def _cell(w):
    return " i " if w >= INFINITY else f"{w:2d} "


def format_matrix(matrix):
    return "\n".join("".join(_cell(w) for w in row) for row in np.asarray(matrix)) + "\n"


def format_local_matrix(loc_mat, rank):
    return f"Proc {rank} >\n" + format_matrix(loc_mat)


def format_distances(result):
    s = result.source
    lines = [f"The distance from {s} to each vertex is:",
             f"  v    dist {s}->v",
             "----   ---------"]
    for v in result.targets():
        if result.reachable(v):
            lines.append(f"{v:3d}       {result.dist[v]:4d}")
        else:
            lines.append(f"{v:3d}          i")
    return "\n".join(lines) + "\n"


def format_paths(result):
    s = result.source
    lines = [f"The shortest path from {s} to each vertex is:",
             f"  v     Path {s}->v",
             "----    ---------"]
    for v, path in result.paths().items():
        if path is None:
            lines.append(f"{v:3d}:    no path")
        else:
            lines.append(f"{v:3d}:    " + " ".join(str(w) for w in path))
    return "\n".join(lines) + "\n"
