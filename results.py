import numpy as np

from distributor import WEIGHT_DTYPE, WEIGHT_MPI
from engine import NO_PRED, UNREACHED
from errors import CollectiveProtocolError


def collect(comm, loc_vec, layout, root=0):
    # Distance and predecessor vectors are split by contiguous vertex range,
    # so a plain Gather concatenates them in rank order.
    loc_vec = np.ascontiguousarray(loc_vec, dtype=WEIGHT_DTYPE)
    if comm.Get_rank() == root:
        vec = np.empty(layout.n, dtype=WEIGHT_DTYPE)
        comm.Gather([loc_vec, WEIGHT_MPI], [vec, WEIGHT_MPI], root=root)
        return vec
    comm.Gather([loc_vec, WEIGHT_MPI], None, root=root)
    return None


def reconstruct_path(pred, source, target):
    path = []
    w = target
    while w != source:
        path.append(w)
        w = int(pred[w])
        if w == NO_PRED or len(path) > len(pred):
            raise CollectiveProtocolError(f"predecessor chain from {target} does not reach {source}")
    path.append(source)
    path.reverse()
    return path


class ShortestPaths:
    def __init__(self, source, dist, pred):
        self.source = source
        self.dist = np.asarray(dist)
        self.pred = np.asarray(pred)

    @property
    def n(self):
        return len(self.dist)

    def targets(self):
        return [v for v in range(self.n) if v != self.source]

    def reachable(self, v):
        return v == self.source or self.dist[v] < UNREACHED

    def path(self, v):
        if not self.reachable(v):
            return None
        return reconstruct_path(self.pred, self.source, v)

    def paths(self):
        return {v: self.path(v) for v in self.targets()}


def assemble(workers, source=0):
    dist = np.concatenate([w.dist for w in workers])
    pred = np.concatenate([w.pred for w in workers])
    return ShortestPaths(source, dist, pred)
