"""
Бинарный формат матриц/векторов:
    rows (uint64), cols (uint64), затем rows*cols float64 по строкам.
Вектор пишется как матрица (n, 1).
"""
import os

import numpy as np

from .errors import ResourceUnavailable, ValidationError

HEADER_DTYPE = np.uint64
VALUE_DTYPE = np.float64


def read_matrix(path) -> np.ndarray:
    try:
        f = open(path, "rb")
    except OSError as e:
        raise ResourceUnavailable(path, e.strerror or str(e)) from e

    with f:
        header = np.fromfile(f, dtype=HEADER_DTYPE, count=2)
        if header.size != 2:
            raise ValidationError(f"{path}: truncated header")
        rows, cols = int(header[0]), int(header[1])

        # битый заголовок не должен приводить к огромному выделению памяти
        available = (os.fstat(f.fileno()).st_size - header.nbytes) // np.dtype(VALUE_DTYPE).itemsize
        if rows * cols > available:
            raise ValidationError(
                f"{path}: header says {rows}x{cols}, expected {rows * cols} values, got {available}"
            )
        data = np.fromfile(f, dtype=VALUE_DTYPE, count=rows * cols)

    if data.size != rows * cols:
        raise ValidationError(
            f"{path}: expected {rows * cols} values for {rows}x{cols}, got {data.size}"
        )
    return data.reshape(rows, cols)


def write_matrix(path, matrix) -> None:
    matrix = np.asarray(matrix, dtype=VALUE_DTYPE)
    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    if matrix.ndim != 2:
        raise ValueError(f"expected 1-D or 2-D array, got ndim={matrix.ndim}")

    rows, cols = matrix.shape
    try:
        f = open(path, "wb")
    except OSError as e:
        raise ResourceUnavailable(path, e.strerror or str(e)) from e

    with f:
        np.array([rows, cols], dtype=HEADER_DTYPE).tofile(f)
        np.ascontiguousarray(matrix).tofile(f)


def format_matrix(matrix) -> str:
    """Текстовый вид для отладки: "rows cols", затем строки по %+6.3f."""
    matrix = np.asarray(matrix, dtype=VALUE_DTYPE)
    if matrix.ndim == 1:
        matrix = matrix.reshape(-1, 1)
    rows, cols = matrix.shape
    lines = [f"{rows} {cols}"]
    for r in range(rows):
        lines.append("".join(f"{val:+6.3f} " for val in matrix[r]))
    return "\n".join(lines) + "\n"
