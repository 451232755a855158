"""Гибридный (MPI + потоки) метод сопряжённых градиентов для плотных СЛАУ."""

from .collective import SerialGroup
from .errors import CGError, NumericalBreakdown, ResourceUnavailable, ValidationError
from .matrix_io import read_matrix, write_matrix
from .solver import CGResult, conjugate_gradients
from .threads import ThreadTeam

__all__ = [
    "CGError",
    "CGResult",
    "NumericalBreakdown",
    "ResourceUnavailable",
    "SerialGroup",
    "ThreadTeam",
    "ValidationError",
    "conjugate_gradients",
    "read_matrix",
    "write_matrix",
]

__version__ = "0.1.0"
