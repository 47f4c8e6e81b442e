"""
Block-column partitioning of an n x n adjacency matrix over p workers.

Worker k owns vertices [k*loc_n, (k+1)*loc_n) and holds the matching
columns of every row, i.e. all edges that end in one of its vertices.

    0 1 2 3
    4 0 5 6        Proc 0:  0 1    Proc 1:  2 3
    7 8 0 9                 4 0             5 6
    8 7 6 0                 7 8             0 9
                            8 7             6 0
"""

from collections import namedtuple

import numpy as np

from errors import ConfigError

# Strided view over a flat row-major matrix: worker k's block starts at
# offset + k * column_stride and takes block_width items every row_stride
# items, count times.
BlockColumn = namedtuple(
    "BlockColumn", ["offset", "column_stride", "block_width", "row_stride", "count"])


class BlockColumnLayout:
    def __init__(self, n, p):
        if n < 1:
            raise ConfigError(f"number of vertices must be positive, got {n}")
        if p < 1:
            raise ConfigError(f"number of workers must be positive, got {p}")
        if n % p != 0:
            raise ConfigError(
                f"number of workers ({p}) must evenly divide number of vertices ({n})")
        self.n = n
        self.p = p
        self.loc_n = n // p

    def __repr__(self):
        return f"BlockColumnLayout(n={self.n}, p={self.p})"

    def owner(self, v):
        return v // self.loc_n

    def local_offset(self, v):
        return v % self.loc_n

    def global_vertex(self, rank, local):
        return rank * self.loc_n + local

    def vertex_range(self, rank):
        return range(rank * self.loc_n, (rank + 1) * self.loc_n)

    def block_column(self, rank):
        return BlockColumn(
            offset=rank * self.loc_n,
            column_stride=self.loc_n,
            block_width=self.loc_n,
            row_stride=self.n,
            count=self.n,
        )

    def indices(self, rank):
        """Flat indices of worker `rank`'s block, shaped (n, loc_n)."""
        bc = self.block_column(rank)
        rows = np.arange(bc.count)[:, None] * bc.row_stride
        cols = np.arange(bc.block_width)[None, :]
        return bc.offset + rows + cols

    def extract(self, matrix, rank):
        flat = np.asarray(matrix).reshape(-1)
        return flat[self.indices(rank)]

    def insert(self, matrix, rank, block):
        flat = matrix.reshape(-1)
        flat[self.indices(rank)] = np.asarray(block).reshape(self.n, self.loc_n)
        return matrix
