"""Dense matrix storage with O(1) row swaps

A `Matrix` keeps all of its values in one flat buffer of ``width * height`` floats. A separate row
table maps each logical row to the offset where that row's data starts inside the buffer. Swapping
two rows only exchanges two row table entries, the buffer itself is never moved around. This is
what the elimination engine relies on when it has to replace a zero pivot.

Matrices can be used as context managers. Leaving the `with` block releases the storage, which is
how temporary matrices (minors, working copies) are cleaned up by the algorithms that create them.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union, Iterator

import matrix_config as config


# Exceptions
class MatrixError(ValueError):
    pass


class ShapeError(MatrixError):
    """The matrix does not have the shape the operation requires"""
    pass


class SingularMatrixError(ShapeError):
    """The matrix has no inverse"""
    pass


class Matrix:
    """A dense matrix backed by a flat buffer and a row indirection table"""

    def __init__(self, matrix: Optional[Union[Matrix, list[list[float]]]] = None, shape: Optional[Tuple[int, int]] = None, fill: float = 0):
        """Initialize the matrix.
        Initializing with another matrix will create a deep copy of the matrix.
        Initializing with a shape will create a matrix of the given shape filled with the given value.

        :param matrix: A list of lists (rows) or another Matrix (optional if shape is given)
        :param shape: A tuple of (height, width), i.e. (rows, columns) (optional)
        :param fill: A single value to fill the matrix with when initializing by shape
        """
        if matrix is not None and shape is not None:
            raise ShapeError(f"Cannot initialize matrix with both a shape {shape} and a matrix {matrix}")
        if matrix is None and shape is None:
            raise ShapeError("Either a matrix or a shape is required to initialize a matrix")
        if isinstance(matrix, Matrix):
            matrix = matrix.tolist()
        if matrix is not None:
            if len(matrix) == 0 or not isinstance(matrix[0], (list, tuple)) or len(matrix[0]) == 0:
                raise ShapeError(f"Cannot initialize matrix from {matrix}. Expected a non-empty list of non-empty rows.")
            width = len(matrix[0])
            if any(len(row) != width for row in matrix):
                raise ShapeError(f"All rows must have the same length. Got row lengths {[len(row) for row in matrix]}")
            height = len(matrix)
            buffer = [float(cell) for row in matrix for cell in row]
        else:
            height, width = shape
            if width <= 0 or height <= 0:
                raise ShapeError(f"Matrix dimensions must be positive. Got shape {shape}")
            buffer = [float(fill)] * (width * height)
        self._width = width
        self._height = height
        self._buffer: Optional[list[float]] = buffer
        self._rows: Optional[list[int]] = list(range(0, width * height, width))

    @classmethod
    def new(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    @classmethod
    def allocate(cls, width: int, height: int) -> Matrix:
        """Return a zero-filled matrix with the given number of columns and rows"""
        return cls(shape=(height, width))

    @classmethod
    def identity(cls, size: int) -> Matrix:
        """Return an identity matrix of a given size"""
        identity = cls.allocate(size, size)
        for i in range(size):
            identity[i, i] = 1
        return identity

    def copy(self) -> Matrix:
        """Return an independent deep copy. The copy's buffer is laid out in logical row order."""
        return self.new(self)

    def sub_matrix(self, removed_column: int, removed_row: int) -> Matrix:
        """Return a new matrix with one column and one row stripped"""
        self._check_alive()
        if self._width < 2 or self._height < 2:
            raise ShapeError(f"Cannot strip a row and a column from a matrix of shape {self.shape}. "
                             f"At least 2 rows and 2 columns are required.")
        self._check_index(removed_row, removed_column)
        return self.new([
            row[:removed_column] + row[removed_column + 1:]
            for i, row in enumerate(self._row_slices()) if i != removed_row
        ])

    def release(self):
        """Free the backing storage. The matrix can not be used afterwards."""
        self._buffer = None
        self._rows = None

    @property
    def released(self) -> bool:
        return self._buffer is None

    def __enter__(self):
        return self

    def __exit__(self, exception_type, value, traceback):
        self.release()

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def shape(self) -> Tuple[int, int]:
        """(rows, columns)"""
        return self._height, self._width

    @property
    def is_square(self) -> bool:
        return self._width == self._height

    # Row operations
    def swap_rows(self, r1: int, r2: int):
        """Swap two logical rows by exchanging their row table entries. The buffer is untouched."""
        self._check_alive()
        self._rows[r1], self._rows[r2] = self._rows[r2], self._rows[r1]

    def divide_row(self, row: int, divisor: float, start: int = 0):
        """Divide the entries of a row from column `start` on by `divisor`"""
        self._check_alive()
        offset = self._rows[row]
        for k in range(offset + start, offset + self._width):
            self._buffer[k] /= divisor

    def subtract_scaled_row(self, target: int, source: int, multiplier: float, start: int = 0):
        """Subtract `multiplier` times row `source` from row `target`, from column `start` on"""
        self._check_alive()
        target_offset = self._rows[target]
        source_offset = self._rows[source]
        for k in range(start, self._width):
            self._buffer[target_offset + k] -= self._buffer[source_offset + k] * multiplier

    def row_offsets(self) -> list[int]:
        """Return a copy of the row table (buffer offset of each logical row)"""
        self._check_alive()
        return list(self._rows)

    def buffer(self) -> list[float]:
        """Return a copy of the flat buffer in physical order"""
        self._check_alive()
        return list(self._buffer)

    def tolist(self) -> list[list[float]]:
        """Return the values as a list of rows in logical order"""
        self._check_alive()
        return self._row_slices()

    def diagonal(self) -> list[float]:
        self._check_alive()
        return [self[i, i] for i in range(min(self._width, self._height))]

    def _row_slices(self) -> list[list[float]]:
        return [self._buffer[offset:offset + self._width] for offset in self._rows]

    def _check_alive(self):
        if self._buffer is None:
            raise MatrixError("Matrix has been released and can not be used anymore")

    def _check_index(self, row: int, col: int):
        if not (0 <= row < self._height and 0 <= col < self._width):
            raise IndexError(f"Index ({row}, {col}) is out of bounds for matrix of shape {self.shape}")

    def __mul__(self, other: Union[Matrix, float, int, list]):
        """Multiply by a scalar, or multiply two matrices of compatible shapes.
        The number of columns in the first matrix must be equal to the number of rows in the second matrix.
        """
        self._check_alive()
        if isinstance(other, (int, float)):
            return self.new([[cell * other for cell in row] for row in self._row_slices()])
        if isinstance(other, list):
            other = self.new(other)
        if self._width != other.height:
            raise ShapeError(f"Cannot multiply matrices of shapes {self.shape} and {other.shape}")
        left = self._row_slices()
        right = other.tolist()
        result = [[0.0 for _ in range(other.width)] for _ in range(self._height)]
        for i in range(self._height):
            for j in range(other.width):
                for k in range(self._width):
                    result[i][j] += left[i][k] * right[k][j]
        return self.new(result)

    def __rmul__(self, other: Union[Matrix, float, int, list]):
        if isinstance(other, (int, float)):
            return self.__mul__(other)
        return self.new(other).__mul__(self)

    def __getitem__(self, idx: Union[int, Tuple[int, int]]):
        """`m[i, j]` is a single value, `m[i]` is a copy of the i-th logical row"""
        self._check_alive()
        if isinstance(idx, tuple):
            row, col = idx
            self._check_index(row, col)
            return self._buffer[self._rows[row] + col]
        offset = self._rows[idx]
        return self._buffer[offset:offset + self._width]

    def __setitem__(self, idx: Union[int, Tuple[int, int]], value: Union[float, list[float]]):
        self._check_alive()
        if isinstance(idx, tuple):
            row, col = idx
            self._check_index(row, col)
            self._buffer[self._rows[row] + col] = float(value)
            return
        if len(value) != self._width:
            raise ShapeError(f"Row of length {len(value)} does not fit matrix of shape {self.shape}")
        offset = self._rows[idx]
        self._buffer[offset:offset + self._width] = [float(cell) for cell in value]

    def __iter__(self) -> Iterator[float]:
        self._check_alive()
        return iter([cell for row in self._row_slices() for cell in row])

    def __len__(self):
        return self._width * self._height

    def __str__(self):
        if self.released:
            return "<released matrix>"
        precision = getattr(config, "PRINT_PRECISION", 6)
        return "\n".join("  ".join(f"{cell:.{precision}f}" for cell in row) for row in self._row_slices())

    def __repr__(self):
        if self.released:
            return "Matrix(<released>)"
        return f"Matrix({self._row_slices()})"

    def __eq__(self, other: Union[Matrix, list[list[float]]]):
        """Check if two matrices are equal (exact comparison of all values)"""
        if isinstance(other, Matrix):
            return self.tolist() == other.tolist()
        elif isinstance(other, list):
            try:
                return self.tolist() == self.new(other).tolist()
            except ShapeError:
                return False
        return NotImplemented

    __hash__ = None
