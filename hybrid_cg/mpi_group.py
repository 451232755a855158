from mpi4py import MPI
import numpy as np


class MPIGroup:
    """Коллективы поверх mpi4py (по умолчанию MPI.COMM_WORLD)."""

    def __init__(self, comm=None):
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.rank = self.comm.Get_rank()
        self.size = self.comm.Get_size()

    def broadcast(self, obj, root: int = 0):
        return self.comm.bcast(obj, root=root)

    def broadcast_array(self, buf: np.ndarray, root: int = 0) -> np.ndarray:
        # буфер должен быть уже выделен на всех процессах
        self.comm.Bcast([buf, buf.size, MPI.DOUBLE], root=root)
        return buf

    def all_gather(self, local: np.ndarray, counts, displs, out: np.ndarray) -> np.ndarray:
        local = np.ascontiguousarray(local, dtype=np.float64)
        self.comm.Allgatherv([local, local.size, MPI.DOUBLE],
                             [out, counts, displs, MPI.DOUBLE])
        return out

    def all_reduce_sum(self, value: float) -> float:
        return float(self.comm.allreduce(float(value), op=MPI.SUM))

    def all_reduce_max(self, value: float) -> float:
        return float(self.comm.allreduce(float(value), op=MPI.MAX))

    def barrier(self):
        self.comm.Barrier()

    def wtime(self) -> float:
        return MPI.Wtime()

    def __repr__(self):
        return f"MPIGroup(rank={self.rank}, size={self.size})"
