"""
Потоковый уровень внутри одного MPI-процесса.

ThreadTeam - аналог "omp parallel for" со статическим расписанием:
[0, n) режется на куски через counts_displs, каждый кусок считает свой поток,
выход из региона = неявный join. Numpy отпускает GIL внутри своих ядер,
поэтому потоки реально работают параллельно.
"""
import os
from concurrent.futures import ThreadPoolExecutor

from threadpoolctl import threadpool_info, threadpool_limits

from .partition import counts_displs


def default_num_threads() -> int:
    value = os.environ.get("OMP_NUM_THREADS", "")
    try:
        n = int(value)
    except ValueError:
        return 1
    return max(n, 1)


def describe_threadpools():
    """[(api, num_threads, filepath), ...] по нативным пулам потоков (BLAS, OpenMP)."""
    out = []
    for lib in threadpool_info():
        name = lib.get("internal_api", lib.get("user_api", "lib"))
        out.append((name, lib.get("num_threads", "?"), lib.get("filepath", "")))
    return out


class ThreadTeam:
    def __init__(self, num_threads: int = None):
        if num_threads is None:
            num_threads = default_num_threads()
        if num_threads < 1:
            raise ValueError(f"num_threads must be >= 1, got {num_threads}")
        self.num_threads = int(num_threads)
        self._pool = None
        self._limits = None

    def __enter__(self):
        if self.num_threads > 1:
            # иначе каждый поток запустит ещё и свои BLAS-потоки
            self._limits = threadpool_limits(limits=1, user_api="blas")
            self._pool = ThreadPoolExecutor(max_workers=self.num_threads)
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None
        if self._limits is not None:
            self._limits.restore_original_limits()
            self._limits = None

    def chunks(self, n: int):
        """Непустые куски [lo, hi) статического расписания."""
        k = max(1, min(self.num_threads, n))
        counts, displs = counts_displs(n, k)
        return [(int(d), int(d + c)) for c, d in zip(counts, displs) if c > 0]

    def _run(self, n, body):
        parts = self.chunks(n)
        if self._pool is None or len(parts) == 1:
            return [body(lo, hi) for lo, hi in parts]
        futures = [self._pool.submit(body, lo, hi) for lo, hi in parts]
        # result() пробрасывает исключение из потока
        return [f.result() for f in futures]

    def parallel_for(self, n: int, body):
        self._run(n, body)

    def reduce_sum(self, n: int, body):
        """Сумма body(lo, hi) по кускам в порядке кусков (детерминированно при фиксированном числе потоков)."""
        if n == 0:
            return body(0, 0)
        parts = self._run(n, body)
        total = parts[0]
        for part in parts[1:]:
            total = total + part
        return total
