"""
Распределённые dot и gemv.

Векторы и матрица лежат целиком на каждом процессе, процесс считает только
свои строки block.start..block.end, дальше - коллектив:
  dot_p  -> локальная сумма (потоки) + all_reduce_sum
  gemv_p -> свой кусок y (потоки по столбцам) + all_gather (Allgatherv)
"""
import numpy as np

from .kernels import dot_range_p


def dot_p(group, team, block, x, y) -> float:
    local_sum = dot_range_p(team, x, y, block.start, block.end)
    return group.all_reduce_sum(local_sum)


def gemv_p(group, team, block, alpha, A, x, beta, y):
    """
    y = alpha*A*x + beta*y. Внутренняя сумма по столбцам делится между потоками:
    каждый поток даёт частичный вектор A[rows, lo:hi] @ x[lo:hi], потом редукция.
    После возврата y одинаковый на всех процессах.
    """
    A_part = A[block.start:block.end]
    n_cols = A.shape[1]

    def body(lo, hi):
        return A_part[:, lo:hi] @ x[lo:hi]

    y_val = team.reduce_sum(n_cols, body)

    # при beta == 0 старое содержимое y не читаем
    if beta == 0.0:
        local_y = alpha * y_val
    else:
        local_y = beta * y[block.start:block.end] + alpha * y_val

    group.all_gather(np.ascontiguousarray(local_y, dtype=np.float64),
                     block.counts, block.displs, y)
    return y
