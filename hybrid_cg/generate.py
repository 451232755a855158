import argparse
import sys

import numpy as np

from .errors import CGError
from .matrix_io import write_matrix


def make_spd(n: int, seed: int = 123) -> np.ndarray:
    """Случайная симметричная положительно определённая матрица M M^T + n I."""
    rng = np.random.default_rng(seed)
    M = rng.random((n, n), dtype=np.float64)
    return M @ M.T + n * np.eye(n, dtype=np.float64)


def make_problem(n: int, seed: int = 123):
    """A, b = A x_true, x_true - решение известно заранее."""
    A = make_spd(n, seed)
    x_true = np.random.default_rng(seed + 1).standard_normal(n)
    b = A @ x_true
    return A, b, x_true


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="hybrid-cg-generate")
    ap.add_argument("--size", type=int, default=1000, help="размер СЛАУ")
    ap.add_argument("--seed", type=int, default=123)
    ap.add_argument("--matrix", default="io/matrix.bin")
    ap.add_argument("--rhs", default="io/rhs.bin")
    ap.add_argument("--solution", default=None, help="куда записать x_true (необязательно)")
    args = ap.parse_args(argv)

    A, b, x_true = make_problem(args.size, args.seed)
    try:
        write_matrix(args.matrix, A)
        write_matrix(args.rhs, b)
        if args.solution:
            write_matrix(args.solution, x_true)
    except CGError as e:
        print(e, file=sys.stderr)
        print("Failed to write generated problem", file=sys.stderr)
        return e.exit_code

    print(f"N={args.size}, seed={args.seed}")
    print(f"wrote {args.matrix}, {args.rhs}" + (f", {args.solution}" if args.solution else ""))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
