"""Gaussian elimination engine

`reduce` is the single place where row reduction happens. Its behaviour is selected with an
`EliminationOptions` instance:

- ``track_inverse``: reduce an identity matrix alongside the input and return it (square input only)
- ``full_diagonal``: also eliminate the entries above each pivot
- ``normalize_pivot``: divide each pivot row by its pivot so that the pivot becomes 1
- ``ignore_last_column``: the last column is a right-hand side and never holds a pivot

Pivots are always searched on the diagonal. A zero pivot is replaced by the first lower row with a
nonzero entry in that column, every such swap flips the sign of the determinant. All comparisons
against zero are exact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from matrix import Matrix, ShapeError

logger = logging.getLogger(__name__)

# Steps reported to observers
SWAP = "swap"
NORMALIZE = "normalize"
ELIMINATE = "eliminate"

# Legacy bit values, see EliminationOptions.from_flags
FLAG_INVERSE = 1
FLAG_FULL_DIAGONAL = 2
FLAG_NORMALIZE_PIVOT = 4
FLAG_IGNORE_LAST_COLUMN = 8

StepObserver = Callable[[str, Matrix, Optional[Matrix]], None]


@dataclass(frozen=True)
class EliminationOptions:
    track_inverse: bool = False
    full_diagonal: bool = False
    normalize_pivot: bool = False
    ignore_last_column: bool = False

    @classmethod
    def from_flags(cls, flags: int) -> EliminationOptions:
        """Build options from the bit values FLAG_INVERSE | FLAG_FULL_DIAGONAL | ..."""
        return cls(
            track_inverse=bool(flags & FLAG_INVERSE),
            full_diagonal=bool(flags & FLAG_FULL_DIAGONAL),
            normalize_pivot=bool(flags & FLAG_NORMALIZE_PIVOT),
            ignore_last_column=bool(flags & FLAG_IGNORE_LAST_COLUMN),
        )


PLAIN = EliminationOptions()
GAUSS_JORDAN = EliminationOptions(full_diagonal=True, normalize_pivot=True, ignore_last_column=True)
INVERSE = EliminationOptions(track_inverse=True, normalize_pivot=True, full_diagonal=True)


class EliminationResult(NamedTuple):
    reduced: Matrix
    inverse: Optional[Matrix]  # None unless track_inverse was requested
    sign_flipped: bool  # True if an odd number of row swaps happened
    pivots: list[int]  # columns in which a nonzero pivot was found


def reduce(matrix: Matrix, options: EliminationOptions = PLAIN, observer: Optional[StepObserver] = None) -> EliminationResult:
    """Row reduce a copy of `matrix` according to `options`.

    The input matrix is never modified. The returned matrices belong to the caller.

    :param matrix: The matrix to reduce
    :param options: Which variant of the elimination to perform
    :param observer: Optional callable invoked as ``observer(step, working, inverse)`` after every
        row swap, pivot normalization and elimination sweep
    :raises ShapeError: if an inverse is requested for a non-square matrix
    """
    if options.track_inverse and not matrix.is_square:
        raise ShapeError(f"Cannot compute the inverse of a non-square matrix of shape {matrix.shape}")

    columns = matrix.width - 1 if options.ignore_last_column else matrix.width
    columns = min(columns, matrix.height)
    sweep_all_rows = options.full_diagonal or options.track_inverse

    working = matrix.copy()
    inverse = Matrix.identity(matrix.width) if options.track_inverse else None
    sign_flipped = False
    pivots = []

    def notify(step):
        if observer is not None:
            observer(step, working, inverse)

    try:
        for i in range(columns):
            # Pivot search
            if working[i, i] == 0:
                for j in range(i + 1, working.height):
                    if working[j, i] != 0:
                        working.swap_rows(i, j)
                        if inverse is not None:
                            inverse.swap_rows(i, j)
                        sign_flipped = not sign_flipped
                        logger.debug(f"Column {i}: swapped rows {i} and {j}")
                        notify(SWAP)
                        break
            if working[i, i] == 0:
                logger.debug(f"Column {i}: no pivot")
                continue
            pivots.append(i)

            pivot = working[i, i]
            if options.normalize_pivot:
                working.divide_row(i, pivot)
                if inverse is not None:
                    inverse.divide_row(i, pivot)
                logger.debug(f"Column {i}: divided row {i} by pivot {pivot}")
                notify(NORMALIZE)
                pivot = 1

            # Elimination sweep. Left of the pivot the working matrix is already zero, but the inverse
            # accumulator is not, so with an inverse every row and every column takes part.
            start_col = 0 if inverse is not None else i
            for j in range(0 if sweep_all_rows else i + 1, working.height):
                if j == i or (working[j, i] == 0 and inverse is None):
                    continue
                multiplier = working[j, i] / pivot
                working.subtract_scaled_row(j, i, multiplier, start=start_col)
                if inverse is not None:
                    inverse.subtract_scaled_row(j, i, multiplier, start=start_col)
            logger.debug(f"Column {i}: eliminated with pivot {pivot}")
            notify(ELIMINATE)
    except BaseException:
        working.release()
        if inverse is not None:
            inverse.release()
        raise

    return EliminationResult(working, inverse, sign_flipped, pivots)
