"""Reading the solution set off a Gauss-Jordan reduced augmented matrix"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import matrix_config as config
from matrix import Matrix, MatrixError, ShapeError

logger = logging.getLogger(__name__)


class InconsistentSystemError(MatrixError):
    """The linear system has no solution"""
    pass


@dataclass
class VariableDescription:
    """Value of one unknown: either a constant plus multiples of other unknowns, or a free parameter"""
    variable: int  # zero-based index of the unknown
    constant: float = 0.0
    terms: list[tuple[int, float]] = field(default_factory=list)  # (variable index, coefficient)
    parameter: Optional[str] = None  # label of the free parameter, None for explicit variables

    @property
    def is_free(self) -> bool:
        return self.parameter is not None

    @property
    def name(self) -> str:
        return variable_name(self.variable)

    def __str__(self):
        if self.is_free:
            return f"{self.name}={self.parameter}"
        precision = getattr(config, "PRINT_PRECISION", 6)
        text = f"{self.name}={self.constant:.{precision}f}"
        for var, coefficient in self.terms:
            sign = "+" if coefficient >= 0 else "-"
            text += f"{sign}{abs(coefficient):.{precision}f}{variable_name(var)}"
        return text


def variable_name(index: int) -> str:
    return f"{getattr(config, 'VARIABLE_PREFIX', 'x')}{index + 1}"


def describe_solutions(reduced: Matrix) -> list[VariableDescription]:
    """Describe the solutions of a system that was reduced with the GAUSS_JORDAN options.

    The last column of `reduced` is the right-hand side. The first variables are expressed in terms
    of the ones to their right, the remaining ones become free parameters.

    :raises InconsistentSystemError: if a row reads 0 = c with c != 0
    :raises ShapeError: if there is no coefficient column besides the right-hand side
    """
    if reduced.width < 2:
        raise ShapeError(f"An augmented matrix needs at least two columns, got shape {reduced.shape}")
    rows = reduced.tolist()
    unknowns = reduced.width - 1

    for i, row in enumerate(rows):
        if row[unknowns] != 0 and all(cell == 0 for cell in row[:unknowns]):
            logger.info(f"Row {i} reads 0 = {row[unknowns]}, the system has no solution")
            raise InconsistentSystemError(f"There is no solution: row {i + 1} reads 0 = {row[unknowns]}")

    # Largest number of nonzero entries right of the diagonal, but at least one parameter for every
    # row that can not pin down its variable.
    diagonal_rows = rows[:unknowns]
    free_count = max([sum(1 for cell in row[i + 1:unknowns] if cell != 0) for i, row in enumerate(diagonal_rows)] + [0])
    empty_rows = unknowns - sum(1 for row in diagonal_rows if any(cell != 0 for cell in row[:unknowns]))
    free_count = max(free_count, empty_rows)
    explicit_count = min(unknowns - free_count, len(rows))
    logger.debug(f"{unknowns} unknowns, {free_count} free parameter(s)")

    prefix = getattr(config, "PARAMETER_PREFIX", "k")
    descriptions = []
    for i in range(explicit_count):
        row = rows[i]
        terms = [(j, -row[j]) for j in range(i + 1, unknowns) if row[j] != 0]
        descriptions.append(VariableDescription(i, constant=row[unknowns], terms=terms))
    for param, i in enumerate(range(explicit_count, unknowns), start=1):
        descriptions.append(VariableDescription(i, parameter=f"{prefix}{param}"))
    return descriptions
