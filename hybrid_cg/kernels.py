"""Векторные ядра: последовательные и с потоками (ThreadTeam)."""
import numpy as np


def axpby(alpha, x, beta, y):
    """y = alpha*x + beta*y на месте."""
    if beta == 0.0:
        np.multiply(x, alpha, out=y)
        return y
    if beta != 1.0:
        y *= beta
    y += alpha * x
    return y


def dot_local(x, y) -> float:
    return float(np.dot(x, y))


def gemv(alpha, A, x, beta, y):
    """y = alpha*A*x + beta*y, последовательная эталонная версия."""
    Ax = A @ x
    if beta == 0.0:
        y[:] = alpha * Ax
    else:
        y[:] = beta * y + alpha * Ax
    return y


def axpby_p(team, alpha, x, beta, y):
    """axpby, индексы делятся между потоками (зависимостей между i нет)."""
    def body(lo, hi):
        axpby(alpha, x[lo:hi], beta, y[lo:hi])

    team.parallel_for(y.shape[0], body)
    return y


def dot_range_p(team, x, y, start: int, end: int) -> float:
    """Сумма x[i]*y[i] по i из [start, end), редукция по потокам."""
    def body(lo, hi):
        return dot_local(x[start + lo:start + hi], y[start + lo:start + hi])

    return float(team.reduce_sum(end - start, body))
