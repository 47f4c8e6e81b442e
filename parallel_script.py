# parallel_script.py
import argparse
import numpy as np
import sys
import time
from mpi4py import MPI
import os

from distributor import distribute, gather
from engine import run_dijkstra
from errors import ConfigError, DijkstraError
from layout import BlockColumnLayout
from matrix_io import format_distances, format_local_matrix, format_matrix, format_paths, load_matrix
from results import ShortestPaths, collect


def parse_options(comm):
    parser = argparse.ArgumentParser(
        description="Single-source shortest paths with block-column distributed Dijkstra.")
    parser.add_argument("input", help="matrix file (.npy, or text: n then n*n weights), '-' for stdin")
    parser.add_argument("--source", type=int, default=0, help="source vertex")
    parser.add_argument("--output-dir", default="dijkstra_output")
    parser.add_argument("--debug", action="store_true",
                        help="print every process' block column and the gathered matrix")

    args = None
    try:
        if comm.Get_rank() == 0:
            args = parser.parse_args()
    finally:
        args = comm.bcast(args, root=0)

    if args is None:
        sys.exit(1)
    return args


def read_input(comm, input_path, source):
    # Only rank 0 reads and validates; the verdict is shared so that either
    # every process starts the computation or every process aborts.
    rank = comm.Get_rank()
    size = comm.Get_size()

    mat = None
    error = None
    if rank == 0:
        try:
            mat = load_matrix(input_path)
            n = mat.shape[0]
            BlockColumnLayout(n, size)
            if not 0 <= source < n:
                raise ConfigError(f"source vertex {source} out of range 0..{n - 1}")
        except DijkstraError as e:
            error = e

    error = comm.bcast(error, root=0)
    if error is not None:
        raise error

    n = comm.bcast(mat.shape[0] if rank == 0 else None, root=0)
    return mat, BlockColumnLayout(n, size)


def dijkstra_parallel(input_path, output_dir, source=0, debug=False):
    comm = MPI.COMM_WORLD
    rank = comm.Get_rank()
    size = comm.Get_size()

    mat, layout = read_input(comm, input_path, source)

    loc_mat = distribute(comm, mat, layout)
    del mat

    if debug:
        print(format_local_matrix(loc_mat, rank), flush=True)
        full = gather(comm, loc_mat, layout)
        if rank == 0:
            print(format_matrix(full), flush=True)
            os.makedirs(output_dir, exist_ok=True)
            np.save(os.path.join(output_dir, f"gathered_matrix_{size}.npy"), full)

    comm.Barrier()
    start_time = time.time()

    worker = run_dijkstra(comm, loc_mat, layout, source)

    comm.Barrier()
    total_time = time.time() - start_time

    dist = collect(comm, worker.dist, layout)
    pred = collect(comm, worker.pred, layout)

    if rank == 0:
        result = ShortestPaths(source, dist, pred)
        print(format_distances(result))
        print(format_paths(result))
        os.makedirs(output_dir, exist_ok=True)
        np.savez(os.path.join(output_dir, f"parallel_result_{size}.npz"), dist=dist, pred=pred)
        print(f"Time with {size} processes: {total_time:.4f} seconds")
        return total_time
    return None


if __name__ == "__main__":
    comm = MPI.COMM_WORLD
    args = parse_options(comm)
    try:
        dijkstra_parallel(args.input, args.output_dir, args.source, args.debug)
    except DijkstraError as e:
        if comm.Get_rank() == 0:
            print(f"Error: {e}")
        sys.exit(1)
