"""
Calculations built on top of the matrix storage and the elimination engine: determinants, rank,
inverse, echelon forms and solving linear systems.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from elimination import reduce, PLAIN, GAUSS_JORDAN, INVERSE, StepObserver
from matrix import Matrix, ShapeError, SingularMatrixError
from solutions import describe_solutions, VariableDescription

logger = logging.getLogger(__name__)


def _require_square(matrix: Matrix, what: str):
    if not matrix.is_square:
        raise ShapeError(f"Cannot compute the {what} of a non-square matrix of shape {matrix.shape}")


def determinant_by_cofactor(matrix: Matrix) -> float:
    """Calculate the determinant by Laplace expansion along the first row (exponential time)"""
    _require_square(matrix, "determinant")
    # Base case of recursion: matrix is 1x1
    if matrix.width == 1:
        return matrix[0, 0]
    determinant = 0.0
    for i in range(matrix.width):
        with matrix.sub_matrix(i, 0) as minor:
            term = matrix[0, i] * determinant_by_cofactor(minor)
        if i % 2 == 1:
            term = -term
        determinant += term
    return determinant


def determinant_by_elimination(matrix: Matrix, observer: Optional[StepObserver] = None) -> float:
    """Calculate the determinant as the product of the diagonal after forward elimination"""
    _require_square(matrix, "determinant")
    result = reduce(matrix, PLAIN, observer=observer)
    with result.reduced as reduced:
        determinant = 1.0
        for value in reduced.diagonal():
            determinant *= value
    if result.sign_flipped:
        determinant = -determinant
    logger.debug(f"Determinant of {matrix.shape} matrix: {determinant}")
    return determinant


def rank(matrix: Matrix, observer: Optional[StepObserver] = None) -> int:
    """Number of rows that are not all zero after forward elimination"""
    with reduce(matrix, PLAIN, observer=observer).reduced as reduced:
        return sum(1 for row in reduced.tolist() if any(cell != 0 for cell in row))


def row_echelon(matrix: Matrix, observer: Optional[StepObserver] = None) -> Matrix:
    """Return the row echelon form produced by plain forward elimination"""
    return reduce(matrix, PLAIN, observer=observer).reduced


def gauss_jordan(matrix: Matrix, observer: Optional[StepObserver] = None) -> Matrix:
    """Return the Gauss-Jordan form of an augmented matrix (last column is the right-hand side)"""
    if matrix.width < 2:
        raise ShapeError(f"The matrix should have at least two columns to be solved as a system, got shape {matrix.shape}")
    return reduce(matrix, GAUSS_JORDAN, observer=observer).reduced


def inverse(matrix: Matrix, observer: Optional[StepObserver] = None) -> Matrix:
    """Return the inverse of the matrix.

    :raises ShapeError: if the matrix is not square
    :raises SingularMatrixError: if the matrix has no inverse
    """
    _require_square(matrix, "inverse")
    result = reduce(matrix, INVERSE, observer=observer)
    result.reduced.release()
    if len(result.pivots) < matrix.width:
        result.inverse.release()
        missing = sorted(set(range(matrix.width)) - set(result.pivots))
        logger.info(f"Matrix of shape {matrix.shape} is singular (no pivot in columns {missing})")
        raise SingularMatrixError(f"Cannot invert a singular matrix (no pivot in column(s) {[c + 1 for c in missing]})")
    return result.inverse


def solve_system(matrix: Matrix, observer: Optional[StepObserver] = None) -> Tuple[Matrix, list[VariableDescription]]:
    """Solve the system given by an augmented matrix.
    Returns the Gauss-Jordan form and the description of every unknown.

    :raises InconsistentSystemError: if the system has no solution
    """
    reduced = gauss_jordan(matrix, observer=observer)
    try:
        return reduced, describe_solutions(reduced)
    except Exception:
        reduced.release()
        raise
