import argparse
import cProfile
import pstats
import sys

import numpy as np

from .errors import (EXIT_MATRIX_READ, EXIT_RHS_READ, EXIT_SOLUTION_WRITE,
                     CGError, NumericalBreakdown)
from .kernels import gemv
from .matrix_io import read_matrix, write_matrix
from .problem import distribute_problem, validate_problem
from .solver import conjugate_gradients
from .threads import ThreadTeam, default_num_threads, describe_threadpools

USAGE = ("Usage: hybrid-cg input_file_matrix.bin input_file_rhs.bin "
         "output_file_sol.bin max_iters rel_error")


def positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return n


def build_parser():
    ap = argparse.ArgumentParser(prog="hybrid-cg", description="CG для плотной SPD матрицы (MPI + потоки)")
    ap.add_argument("matrix", nargs="?", default="io/matrix.bin", help="файл матрицы A")
    ap.add_argument("rhs", nargs="?", default="io/rhs.bin", help="файл правой части b")
    ap.add_argument("solution", nargs="?", default="io/sol.bin", help="куда писать x")
    ap.add_argument("max_iters", nargs="?", type=int, default=1000, help="максимум итераций")
    ap.add_argument("rel_error", nargs="?", type=float, default=1e-9, help="порог sqrt(rr/bb)")
    ap.add_argument("--threads", type=positive_int, default=None,
                    help="потоков на процесс (по умолчанию OMP_NUM_THREADS или 1)")
    ap.add_argument("--verify", action="store_true", help="root посчитает ||b - A x|| / ||b||")
    ap.add_argument("--profile", action="store_true", help="cProfile на rank0 (и только на нём)")
    ap.add_argument("--quiet", action="store_true", help="печатать только итог")
    return ap


def print_banner(args, group, threads):
    print(USAGE)
    print("All parameters are optional and have default values")
    print()
    print("Command line arguments:")
    print(f"  input_file_matrix: {args.matrix}")
    print(f"  input_file_rhs:    {args.rhs}")
    print(f"  output_file_sol:   {args.solution}")
    print(f"  max_iters:         {args.max_iters}")
    print(f"  rel_error:         {args.rel_error:e}")
    print(f"  procs:             {group.size}")
    print(f"  threads:           {threads}")
    print()

    info = describe_threadpools()
    if info:
        print("threadpools:")
        for name, nthreads, impl in info:
            print(f"  - {name}: num_threads={nthreads} ({impl})")
    else:
        print("threadpools: <no info>")
    print()


def load_on_root(args, say):
    """Чтение и проверка на root. Возвращает (status, A, b), status = 0 или код выхода."""
    say("Reading matrix from file ...")
    try:
        A = read_matrix(args.matrix)
    except CGError as e:
        print(e, file=sys.stderr)
        print("Failed to read matrix", file=sys.stderr)
        return EXIT_MATRIX_READ, None, None
    say("Done")
    say()

    say("Reading right hand side from file ...")
    try:
        b = read_matrix(args.rhs)
    except CGError as e:
        print(e, file=sys.stderr)
        print("Failed to read right hand side", file=sys.stderr)
        return EXIT_RHS_READ, None, None
    say("Done")
    say()

    try:
        validate_problem(A.shape, b.shape)
    except CGError as e:
        print(e, file=sys.stderr)
        return e.exit_code, None, None
    return 0, A, b


def run(args, group) -> int:
    root = group.rank == 0
    threads = args.threads if args.threads is not None else default_num_threads()

    def say(*a):
        if root and not args.quiet:
            print(*a)

    # проверяет только root, остальные узнают результат через bcast
    status, A, b = 0, None, None
    if root:
        if not args.quiet:
            print_banner(args, group, threads)
        status, A, b = load_on_root(args, say)
    status = group.broadcast(status, root=0)
    if status:
        return status

    A, b = distribute_problem(group, A, b)

    with ThreadTeam(threads) as team:
        group.barrier()
        t0 = group.wtime()
        try:
            result = conjugate_gradients(A, b, group, team,
                                         max_iters=args.max_iters,
                                         rel_error=args.rel_error)
        except NumericalBreakdown as e:
            # скаляры одинаковые на всех процессах -> исключение тоже у всех
            if root:
                print(e, file=sys.stderr)
            return e.exit_code
        t1 = group.wtime()

    t_max = group.all_reduce_max(t1 - t0)

    if root:
        print(result.summary())
        print(f"compute_time_max = {t_max:.6f} s")

        if args.verify:
            r = b.copy()
            gemv(-1.0, A, result.x, 1.0, r)
            b_norm = float(np.linalg.norm(b))
            res = float(np.linalg.norm(r)) / b_norm if b_norm > 0 else float(np.linalg.norm(r))
            print(f"verify: ||b - A x|| / ||b|| = {res:.3e}")

        say()
        say("Writing solution to file ...")
        try:
            write_matrix(args.solution, result.x)
        except CGError as e:
            print(e, file=sys.stderr)
            print("Failed to save solution", file=sys.stderr)
            status = EXIT_SOLUTION_WRITE
        else:
            say("Done")
            say("Finished successfully")

    return group.broadcast(status, root=0)


def main(argv=None, group=None) -> int:
    args = build_parser().parse_args(argv)
    if group is None:
        from .mpi_group import MPIGroup
        group = MPIGroup()

    if args.profile and group.rank == 0:
        prof = cProfile.Profile()
        prof.enable()
        code = run(args, group)
        prof.disable()
        out = f"profile_rank0_p{group.size}.pstats"
        prof.dump_stats(out)
        # короткий топ-15 в txt
        with open(out.replace(".pstats", ".txt"), "w", encoding="utf-8") as f:
            ps = pstats.Stats(prof, stream=f).sort_stats("cumtime")
            ps.print_stats(15)
        print(f"wrote {out} and {out.replace('.pstats', '.txt')}")
        return code
    return run(args, group)


if __name__ == "__main__":
    sys.exit(main())
