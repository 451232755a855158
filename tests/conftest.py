"""
Общие фикстуры.

ThreadGroup - группа из W "процессов" внутри одного интерпретатора: каждый
rank живёт в своём потоке, коллективы синхронизируются через threading.Barrier.
Позволяет проверить W > 1 (в том числе неравное разбиение) без mpirun.
"""
import threading
import time

import numpy as np
import pytest


class _Shared:
    def __init__(self, size, timeout=60.0):
        self.size = size
        self.barrier = threading.Barrier(size, timeout=timeout)
        self.slots = [None] * size


class ThreadGroup:
    def __init__(self, shared, rank):
        self._shared = shared
        self.rank = rank
        self.size = shared.size

    def _collect(self, value, consume):
        # consume вызывается до второго барьера: пока все не прочитали, слоты не меняются
        self._shared.slots[self.rank] = value
        self._shared.barrier.wait()
        result = consume(list(self._shared.slots))
        self._shared.barrier.wait()
        return result

    def broadcast(self, obj, root=0):
        return self._collect(obj if self.rank == root else None, lambda vals: vals[root])

    def broadcast_array(self, buf, root=0):
        def consume(vals):
            if self.rank != root:
                buf[...] = vals[root]
            return buf

        return self._collect(buf if self.rank == root else None, consume)

    def all_gather(self, local, counts, displs, out):
        def consume(vals):
            for r, part in enumerate(vals):
                d, c = int(displs[r]), int(counts[r])
                out[d:d + c] = part
            return out

        return self._collect(np.array(local, dtype=np.float64), consume)

    def all_reduce_sum(self, value):
        def consume(vals):
            total = 0.0
            for v in vals:
                total += v
            return total

        return self._collect(float(value), consume)

    def all_reduce_max(self, value):
        return self._collect(float(value), max)

    def barrier(self):
        self._shared.barrier.wait()

    def wtime(self):
        return time.perf_counter()


def run_ranks(size, fn):
    """Запускает fn(group) на size рангах, возвращает список результатов по рангам."""
    shared = _Shared(size)
    results = [None] * size
    errors = [None] * size

    def target(rank):
        try:
            results[rank] = fn(ThreadGroup(shared, rank))
        except BaseException as e:
            errors[rank] = e
            # остальные не должны висеть на барьере
            shared.barrier.abort()

    threads = [threading.Thread(target=target, args=(r,)) for r in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    real = [e for e in errors if e is not None and not isinstance(e, threading.BrokenBarrierError)]
    if real:
        raise real[0]
    broken = [e for e in errors if e is not None]
    if broken:
        raise broken[0]
    return results


@pytest.fixture
def spmd():
    return run_ranks


@pytest.fixture
def spd_problem():
    """Небольшая хорошо обусловленная SPD задача с известным решением."""
    rng = np.random.default_rng(7)
    n = 11
    M = rng.random((n, n))
    A = M @ M.T + n * np.eye(n)
    x_true = rng.standard_normal(n)
    return A, A @ x_true, x_true
