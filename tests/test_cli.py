import numpy as np
import pytest

from hybrid_cg.cli import build_parser, main
from hybrid_cg.collective import SerialGroup
from hybrid_cg.matrix_io import read_matrix, write_matrix


@pytest.fixture
def files(tmp_path):
    def make(A, b):
        m, r = tmp_path / "matrix.bin", tmp_path / "rhs.bin"
        write_matrix(m, A)
        write_matrix(r, b)
        return str(m), str(r), str(tmp_path / "sol.bin")
    return make


def run(argv):
    return main(argv, group=SerialGroup())


class TestArguments:

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.matrix == "io/matrix.bin"
        assert args.rhs == "io/rhs.bin"
        assert args.solution == "io/sol.bin"
        assert args.max_iters == 1000
        assert args.rel_error == 1e-9

    def test_positional_override(self):
        args = build_parser().parse_args(["a", "b", "c", "50", "1e-6", "--threads", "2"])
        assert (args.matrix, args.rhs, args.solution) == ("a", "b", "c")
        assert args.max_iters == 50
        assert args.rel_error == 1e-6
        assert args.threads == 2

    def test_threads_must_be_positive(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--threads", "0"])
        assert "--threads" in capsys.readouterr().err


class TestRun:

    def test_solves_and_writes(self, files, spd_problem, capsys):
        A, b, x_true = spd_problem
        m, r, s = files(A, b)
        assert run([m, r, s, "100", "1e-12", "--threads", "2"]) == 0

        out = capsys.readouterr().out
        assert "Command line arguments:" in out
        assert "Converged in" in out
        assert "compute_time_max" in out
        assert "Finished successfully" in out
        np.testing.assert_allclose(read_matrix(s).ravel(), x_true, rtol=1e-8, atol=1e-8)

    def test_not_converged_still_writes(self, files, capsys):
        m, r, s = files(np.diag([4.0, 9.0, 16.0]), np.array([4.0, 9.0, 16.0]))
        assert run([m, r, s, "0", "--quiet"]) == 0
        out = capsys.readouterr().out
        assert "Did not converge in 0 iterations, relative error is 1.000000e+00" in out
        assert "Command line arguments:" not in out
        np.testing.assert_array_equal(read_matrix(s), np.zeros((3, 1)))

    def test_verify(self, files, capsys):
        m, r, s = files(np.eye(4), np.array([1.0, 2.0, 3.0, 4.0]))
        assert run([m, r, s, "--verify", "--quiet"]) == 0
        assert "verify: ||b - A x|| / ||b|| = 0.000e+00" in capsys.readouterr().out


class TestExitCodes:

    def test_missing_matrix(self, tmp_path, capsys):
        assert run([str(tmp_path / "none.bin"), str(tmp_path / "rhs.bin")]) == 1
        assert "Failed to read matrix" in capsys.readouterr().err

    def test_garbage_matrix_header(self, files, tmp_path, capsys):
        _, r, s = files(np.eye(2), np.ones(2))
        m = tmp_path / "garbage.bin"
        m.write_bytes(np.array([2**62, 4], dtype=np.uint64).tobytes() + np.zeros(4).tobytes())
        assert run([str(m), r, s]) == 1
        assert "Failed to read matrix" in capsys.readouterr().err

    def test_missing_rhs(self, files, tmp_path, capsys):
        m, _, _ = files(np.eye(2), np.ones(2))
        assert run([m, str(tmp_path / "none.bin")]) == 2
        assert "Failed to read right hand side" in capsys.readouterr().err

    def test_not_square(self, files, capsys):
        m, r, s = files(np.ones((3, 4)), np.ones(3))
        assert run([m, r, s]) == 3
        assert "Matrix has to be square" in capsys.readouterr().err

    def test_size_mismatch(self, files, capsys):
        m, r, s = files(np.eye(3), np.ones(4))
        assert run([m, r, s]) == 4
        assert "does not match" in capsys.readouterr().err

    def test_rhs_columns(self, files, capsys):
        m, r, s = files(np.eye(3), np.ones((3, 2)))
        assert run([m, r, s]) == 5
        assert "single column" in capsys.readouterr().err

    def test_solution_write_failure(self, files, tmp_path, capsys):
        m, r, _ = files(np.eye(2), np.ones(2))
        assert run([m, r, str(tmp_path / "missing_dir" / "sol.bin")]) == 6
        assert "Failed to save solution" in capsys.readouterr().err

    def test_breakdown(self, files, capsys):
        m, r, s = files(np.zeros((2, 2)), np.ones(2))
        assert run([m, r, s, "--quiet"]) == 7
        assert "Numerical breakdown" in capsys.readouterr().err


def test_validation_failure_reaches_every_rank(spmd, files):
    m, r, s = files(np.ones((3, 4)), np.ones(3))
    codes = spmd(3, lambda group: main([m, r, s, "--quiet", "--threads", "1"], group=group))
    assert codes == [3, 3, 3]


def test_many_ranks_write_once(spmd, files, spd_problem):
    A, b, x_true = spd_problem
    m, r, s = files(A, b)
    codes = spmd(2, lambda group: main([m, r, s, "200", "1e-12", "--quiet", "--threads", "1"], group=group))
    assert codes == [0, 0]
    np.testing.assert_allclose(read_matrix(s).ravel(), x_true, rtol=1e-8, atol=1e-8)


def test_corrupt_header_reaches_every_rank(spmd, files, tmp_path):
    _, r, s = files(np.eye(2), np.ones(2))
    m = tmp_path / "garbage.bin"
    m.write_bytes(np.array([2**33, 2**33], dtype=np.uint64).tobytes() + np.zeros(4).tobytes())
    codes = spmd(3, lambda group: main([str(m), r, s, "--quiet", "--threads", "1"], group=group))
    assert codes == [1, 1, 1]
