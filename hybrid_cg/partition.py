import numpy as np


def counts_displs(n: int, p: int):
    """Равномерное разбиение n индексов на p кусков (остаток - первым кускам)."""
    base, rem = divmod(n, p)
    counts = np.array([base + 1 if r < rem else base for r in range(p)], dtype=np.int32)
    displs = np.zeros(p, dtype=np.int32)
    displs[1:] = np.cumsum(counts[:-1])
    return counts, displs


def block_partition(n: int, p: int):
    """
    Разбиение строк между процессами: по n // p строк каждому,
    остаток целиком забирает последний процесс.
    """
    base = n // p
    counts = np.full(p, base, dtype=np.int32)
    counts[-1] = n - base * (p - 1)
    displs = np.arange(p, dtype=np.int32) * base
    return counts, displs


class RowBlock:
    """Диапазон строк [start, end) одного процесса + counts/displs всей группы."""

    def __init__(self, n: int, rank: int, counts, displs):
        self.n = n
        self.rank = rank
        self.counts = counts
        self.displs = displs
        self.start = int(displs[rank])
        self.count = int(counts[rank])
        self.end = self.start + self.count

    @classmethod
    def for_rank(cls, n: int, rank: int, size: int):
        counts, displs = block_partition(n, size)
        return cls(n, rank, counts, displs)

    def __repr__(self):
        return f"RowBlock(n={self.n}, rank={self.rank}, rows=[{self.start}, {self.end}))"
