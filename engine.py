import numpy as np
from mpi4py import MPI

from errors import CollectiveProtocolError, ConfigError
from layout import BlockColumnLayout
from distributor import WEIGHT_DTYPE, split

# Edge weight meaning "no edge".
INFINITY = 1000000
# Distance of a vertex no path has reached yet; path sums may exceed INFINITY.
UNREACHED = int(np.iinfo(np.int64).max)
NO_PRED = -1
SENTINEL = (UNREACHED, UNREACHED)


def minloc(contributions, participants=None):
    """Global minimum of (distance, vertex) pairs; ties go to the lowest vertex."""
    contributions = list(contributions)
    if participants is not None and len(contributions) != participants:
        raise CollectiveProtocolError(
            f"expected {participants} contributions to the round, got {len(contributions)}")
    best = SENTINEL
    for dist, vertex in contributions:
        if dist < best[0] or (dist == best[0] and vertex < best[1]):
            best = (dist, vertex)
    return best


class Worker:
    """Distance, predecessor and known-set state of one block column."""

    def __init__(self, block, layout, rank, source=0):
        if not 0 <= source < layout.n:
            raise ConfigError(f"source vertex {source} out of range 0..{layout.n - 1}")
        self.block = np.asarray(block, dtype=WEIGHT_DTYPE).reshape(layout.n, layout.loc_n)
        self.layout = layout
        self.rank = rank
        self.first = layout.global_vertex(rank, 0)

        # known[v] = True once the shortest path source->v is final
        self.dist = np.where(self.block[source] < INFINITY, self.block[source], UNREACHED)
        self.pred = np.full(layout.loc_n, source, dtype=WEIGHT_DTYPE)
        self.known = np.zeros(layout.loc_n, dtype=bool)

        if layout.owner(source) == rank:
            loc_s = layout.local_offset(source)
            self.dist[loc_s] = 0
            self.pred[loc_s] = NO_PRED
            self.known[loc_s] = True

    def candidate(self):
        frontier = ~self.known & (self.dist < UNREACHED)
        if not frontier.any():
            return SENTINEL
        loc_u = np.flatnonzero(frontier)[np.argmin(self.dist[frontier])]
        return int(self.dist[loc_u]), int(loc_u) + self.first

    def finalize(self, u):
        if self.layout.owner(u) != self.rank:
            return
        loc_u = self.layout.local_offset(u)
        if self.known[loc_u]:
            raise CollectiveProtocolError(
                f"worker {self.rank} asked to finalize vertex {u} twice")
        self.known[loc_u] = True

    def relax(self, min_dist, u):
        row = self.block[u]
        new_dist = min_dist + row
        better = ~self.known & (row < INFINITY) & (new_dist < self.dist)
        self.dist[better] = new_dist[better]
        self.pred[better] = u

    def advance(self, min_dist, u):
        if (min_dist, u) == SENTINEL:
            return
        self.finalize(u)
        self.relax(min_dist, u)


def run_dijkstra(comm, loc_mat, layout, source=0):
    worker = Worker(loc_mat, layout, comm.Get_rank(), source)

    # Every worker takes part in all n-1 reductions, even once it has no
    # frontier vertex left.
    for _ in range(1, layout.n):
        min_dist, u = comm.allreduce(worker.candidate(), op=MPI.MINLOC)
        worker.advance(min_dist, u)

    return worker


def run_lockstep(matrix, p, source=0, on_round=None):
    matrix = np.asarray(matrix, dtype=WEIGHT_DTYPE)
    layout = BlockColumnLayout(matrix.shape[0], p)
    workers = [Worker(block, layout, k, source)
               for k, block in enumerate(split(matrix, layout))]

    for i in range(1, layout.n):
        min_dist, u = minloc([w.candidate() for w in workers], participants=p)
        for w in workers:
            w.advance(min_dist, u)
        if on_round is not None:
            on_round(i, workers)

    return workers
