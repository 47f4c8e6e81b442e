import numpy as np
from mpi4py import MPI

WEIGHT_DTYPE = np.int64
WEIGHT_MPI = MPI.INT64_T


def block_column_type(layout):
    # One block column: n rows of loc_n items, n items apart. The extent is
    # shrunk to a single row segment so consecutive workers' blocks start
    # loc_n items apart in the root buffer.
    bc = layout.block_column(0)
    vector_t = WEIGHT_MPI.Create_vector(bc.count, bc.block_width, bc.row_stride)
    blk_col_t = vector_t.Create_resized(0, bc.column_stride * WEIGHT_MPI.Get_extent()[1])
    blk_col_t.Commit()
    vector_t.Free()
    return blk_col_t


def distribute(comm, matrix, layout, root=0):
    rank = comm.Get_rank()
    loc_mat = np.empty((layout.n, layout.loc_n), dtype=WEIGHT_DTYPE)

    blk_col_t = block_column_type(layout)
    try:
        if rank == root:
            mat = np.ascontiguousarray(matrix, dtype=WEIGHT_DTYPE)
            comm.Scatter([mat, 1, blk_col_t], [loc_mat, WEIGHT_MPI], root=root)
        else:
            comm.Scatter(None, [loc_mat, WEIGHT_MPI], root=root)
    finally:
        blk_col_t.Free()

    return loc_mat


def gather(comm, loc_mat, layout, root=0):
    rank = comm.Get_rank()
    loc_mat = np.ascontiguousarray(loc_mat, dtype=WEIGHT_DTYPE)

    blk_col_t = block_column_type(layout)
    try:
        if rank == root:
            mat = np.empty((layout.n, layout.n), dtype=WEIGHT_DTYPE)
            comm.Gather([loc_mat, WEIGHT_MPI], [mat, 1, blk_col_t], root=root)
        else:
            mat = None
            comm.Gather([loc_mat, WEIGHT_MPI], None, root=root)
    finally:
        blk_col_t.Free()

    return mat


def split(matrix, layout):
    matrix = np.asarray(matrix, dtype=WEIGHT_DTYPE)
    return [layout.extract(matrix, k) for k in range(layout.p)]


def join(blocks, layout):
    mat = np.empty((layout.n, layout.n), dtype=WEIGHT_DTYPE)
    for k, block in enumerate(blocks):
        layout.insert(mat, k, block)
    return mat
