"""Проверка размеров задачи на root и рассылка A, b всем процессам."""
import numpy as np

from .errors import (EXIT_NOT_SQUARE, EXIT_RHS_COLUMNS, EXIT_SIZE_MISMATCH,
                     ValidationError)


def validate_problem(matrix_shape, rhs_shape) -> int:
    """Возвращает size системы или бросает ValidationError."""
    matrix_rows, matrix_cols = matrix_shape
    rhs_rows, rhs_cols = rhs_shape

    if matrix_rows != matrix_cols:
        raise ValidationError("Matrix has to be square", EXIT_NOT_SQUARE)
    if rhs_rows != matrix_rows:
        raise ValidationError("Size of right hand side does not match the matrix",
                              EXIT_SIZE_MISMATCH)
    if rhs_cols != 1:
        raise ValidationError("Right hand side has to have just a single column",
                              EXIT_RHS_COLUMNS)
    return int(matrix_rows)


def distribute_problem(group, A=None, b=None, root: int = 0):
    """
    На root A (size x size) и b уже прочитаны и проверены, на остальных - None.
    Сначала рассылаем size, потом выделяем буферы и делаем Bcast.
    """
    if group.rank == root:
        size = int(A.shape[0])
    else:
        size = None
    size = group.broadcast(size, root=root)

    if group.rank == root:
        A = np.ascontiguousarray(A, dtype=np.float64)
        b = np.ascontiguousarray(b, dtype=np.float64).reshape(-1)
    else:
        A = np.empty((size, size), dtype=np.float64)
        b = np.empty(size, dtype=np.float64)

    group.broadcast_array(A, root=root)
    group.broadcast_array(b, root=root)
    return A, b
