"""Ошибки решателя. exit_code совпадает с кодом возврата командной строки."""

EXIT_MATRIX_READ = 1
EXIT_RHS_READ = 2
EXIT_NOT_SQUARE = 3
EXIT_SIZE_MISMATCH = 4
EXIT_RHS_COLUMNS = 5
EXIT_SOLUTION_WRITE = 6
EXIT_BREAKDOWN = 7


class CGError(Exception):
    exit_code = 1

    def __init__(self, message: str, exit_code: int = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ResourceUnavailable(CGError):
    """Файл не открывается на чтение/запись."""

    def __init__(self, path, reason: str = "", exit_code: int = None):
        self.path = str(path)
        msg = f"Cannot open file {self.path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg, exit_code)


class ValidationError(CGError):
    """Размеры матрицы/правой части не согласованы (или файл обрезан)."""


class NumericalBreakdown(CGError):
    """Знаменатель alpha/beta обратился в ноль или получили nan/inf."""

    exit_code = EXIT_BREAKDOWN

    def __init__(self, iteration: int, quantity: str, value: float):
        self.iteration = iteration
        self.quantity = quantity
        self.value = value
        super().__init__(
            f"Numerical breakdown at iteration {iteration}: {quantity} = {value!r}"
        )
