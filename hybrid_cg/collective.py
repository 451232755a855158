"""
Коллективные операции группы процессов.

Решатель общается с другими процессами только через этот интерфейс:
rank, size, broadcast, broadcast_array, all_gather, all_reduce_sum,
all_reduce_max, barrier, wtime. Все операции блокирующие.
Реализация на mpi4py лежит в mpi_group (чтобы тесты не требовали MPI).
"""
import time

import numpy as np


class SerialGroup:
    """Группа из одного процесса (W = 1): все коллективы тривиальны."""

    rank = 0
    size = 1

    def broadcast(self, obj, root: int = 0):
        return obj

    def broadcast_array(self, buf: np.ndarray, root: int = 0) -> np.ndarray:
        return buf

    def all_gather(self, local: np.ndarray, counts, displs, out: np.ndarray) -> np.ndarray:
        start = int(displs[0])
        out[start:start + int(counts[0])] = local
        return out

    def all_reduce_sum(self, value: float) -> float:
        return float(value)

    def all_reduce_max(self, value: float) -> float:
        return float(value)

    def barrier(self):
        pass

    def wtime(self) -> float:
        return time.perf_counter()

    def __repr__(self):
        return "SerialGroup()"
