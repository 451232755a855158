"""
Метод сопряжённых градиентов (без предобуславливателя).

Схема итерации k = 1..max_iters:
    Ap    = A p
    alpha = rr / (p, Ap)
    x     = x + alpha p
    r     = r - alpha Ap
    rr'   = (r, r);  beta = rr' / rr;  rr = rr'
    sqrt(rr / bb) < rel_error  ->  стоп (p не обновляем)
    p     = r + beta p
"""
import math
from dataclasses import dataclass

import numpy as np

from .collective import SerialGroup
from .distributed import dot_p, gemv_p
from .errors import NumericalBreakdown
from .kernels import axpby_p
from .partition import RowBlock
from .threads import ThreadTeam


@dataclass
class CGResult:
    x: np.ndarray
    iterations: int
    rel_residual: float
    converged: bool
    max_iters: int

    @property
    def status(self) -> str:
        return "converged" if self.converged else "not converged"

    def summary(self) -> str:
        if self.converged:
            return (f"Converged in {self.iterations} iterations, "
                    f"relative error is {self.rel_residual:e}")
        return (f"Did not converge in {self.max_iters} iterations, "
                f"relative error is {self.rel_residual:e}")


def _check(iteration, name, value, nonzero):
    if not math.isfinite(value) or (nonzero and value == 0.0):
        raise NumericalBreakdown(iteration, name, value)


def conjugate_gradients(A, b, group=None, team=None, max_iters: int = 1000,
                        rel_error: float = 1e-9, threads: int = None,
                        check_breakdown: bool = True) -> CGResult:
    """
    Решает A x = b для симметричной положительно определённой A.

    A и b должны быть одинаковыми на всех процессах группы. Если team не
    передан, создаётся ThreadTeam(threads) на время решения.
    Несходимость - не ошибка: возвращается лучший x с converged=False.
    """
    if group is None:
        group = SerialGroup()
    if team is None:
        with ThreadTeam(threads) as own_team:
            return conjugate_gradients(A, b, group, own_team, max_iters, rel_error,
                                       check_breakdown=check_breakdown)

    A = np.asarray(A, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64).reshape(-1)
    size = b.shape[0]
    block = RowBlock.for_rank(size, group.rank, group.size)

    x = np.zeros(size, dtype=np.float64)
    r = b.copy()
    p = b.copy()
    Ap = np.zeros(size, dtype=np.float64)

    # скаляры как np.float64: без проверки деление на 0 даёт inf/nan, а не исключение
    bb = np.float64(dot_p(group, team, block, b, b))
    rr = bb
    if bb == 0.0:
        # b = 0 -> x = 0 точное решение
        return CGResult(x, 0, 0.0, True, max_iters)

    with np.errstate(divide="ignore", invalid="ignore"):
        num_iters = 1
        while num_iters <= max_iters:
            gemv_p(group, team, block, 1.0, A, p, 0.0, Ap)
            pAp = np.float64(dot_p(group, team, block, p, Ap))
            if check_breakdown:
                _check(num_iters, "(p, Ap)", pAp, nonzero=True)
            alpha = rr / pAp
            axpby_p(team, alpha, p, 1.0, x)
            axpby_p(team, -alpha, Ap, 1.0, r)
            rr_new = np.float64(dot_p(group, team, block, r, r))
            if check_breakdown:
                _check(num_iters, "(r, r)", rr_new, nonzero=False)
            beta = rr_new / rr
            rr = rr_new
            if np.sqrt(rr / bb) < rel_error:
                break
            axpby_p(team, 1.0, r, beta, p)
            num_iters += 1

    converged = num_iters <= max_iters
    return CGResult(
        x=x,
        iterations=num_iters if converged else max_iters,
        rel_residual=float(np.sqrt(rr / bb)),
        converged=converged,
        max_iters=max_iters,
    )
