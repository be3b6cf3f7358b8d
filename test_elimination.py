import pytest

from elimination import reduce, EliminationOptions, PLAIN, GAUSS_JORDAN, INVERSE, SWAP, NORMALIZE, ELIMINATE, \
    FLAG_INVERSE, FLAG_FULL_DIAGONAL, FLAG_NORMALIZE_PIVOT, FLAG_IGNORE_LAST_COLUMN
from matrix import Matrix, ShapeError


def test_flags_map_to_options():
    assert EliminationOptions.from_flags(0) == PLAIN
    assert EliminationOptions.from_flags(FLAG_FULL_DIAGONAL | FLAG_NORMALIZE_PIVOT | FLAG_IGNORE_LAST_COLUMN) == GAUSS_JORDAN
    assert EliminationOptions.from_flags(FLAG_INVERSE | FLAG_NORMALIZE_PIVOT | FLAG_FULL_DIAGONAL) == INVERSE


def test_plain_reduction_is_forward_only():
    result = reduce(Matrix([[2, 1], [1, 1]]))
    assert result.reduced == [[2, 1], [0, 0.5]]
    assert result.inverse is None
    assert not result.sign_flipped
    assert result.pivots == [0, 1]


def test_input_is_not_mutated():
    m = Matrix([[0, 1, 2], [1, 0, 3], [4, -3, 8]])
    buffer_before = m.buffer()
    for options in (PLAIN, GAUSS_JORDAN, INVERSE):
        reduce(m, options)
    assert m.buffer() == buffer_before
    assert m.row_offsets() == [0, 3, 6]


def test_zero_pivot_is_swapped_and_flips_sign():
    result = reduce(Matrix([[0, 1, 2], [1, 0, 3], [4, -3, 8]]))
    assert result.sign_flipped
    assert result.reduced == [[1, 0, 3], [0, 1, 2], [0, 0, 2]]


def test_swap_brings_in_first_nonzero_row_below():
    result = reduce(Matrix([[0, 1, 0], [1, 0, 0], [0, 0, 0], [0, 0, 1]]))
    assert result.pivots == [0, 1, 2]
    assert result.reduced == [[1, 0, 0], [0, 1, 0], [0, 0, 1], [0, 0, 0]]
    assert not result.sign_flipped


def test_two_swaps_cancel_sign():
    single = reduce(Matrix([[0, 0, 1], [0, 1, 0], [1, 0, 0]]))
    assert single.sign_flipped
    double = reduce(Matrix([[0, 1, 0], [0, 0, 1], [1, 0, 0]]))
    assert double.reduced == [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    assert not double.sign_flipped


def test_column_without_pivot_is_skipped():
    result = reduce(Matrix([[0, 1], [0, 2]]))
    assert result.pivots == [1]
    assert result.reduced == [[0, 1], [0, 2]]
    assert not result.sign_flipped


def test_pivot_columns_are_capped_at_row_count():
    result = reduce(Matrix([[1, 2, 3, 4], [2, 5, 6, 7]]))
    assert result.pivots == [0, 1]
    assert result.reduced == [[1, 2, 3, 4], [0, 1, 0, -1]]


def test_ignore_last_column_never_pivots_there():
    result = reduce(Matrix([[1, 2], [0, 3]]), EliminationOptions(ignore_last_column=True, normalize_pivot=True))
    assert result.pivots == [0]
    assert result.reduced == [[1, 2], [0, 3]]


def test_normalize_without_full_diagonal():
    result = reduce(Matrix([[2, 4], [1, 3]]), EliminationOptions(normalize_pivot=True))
    assert result.reduced == [[1, 2], [0, 1]]


def test_full_diagonal_without_normalize_keeps_pivot_values():
    result = reduce(Matrix([[2, 4], [1, 3]]), EliminationOptions(full_diagonal=True))
    assert result.reduced == [[2, 0], [0, 1]]


@pytest.mark.parametrize("rows", [
    [[2, 1, -1], [-3, -1, 2], [-2, 1, 2]],
    [[0, 2, 1], [1, 1, 1], [2, 0, 3]],
    [[1, 2, 3], [2, 4, 6], [1, 0, 1]],
    [[4, 1], [2, 3], [1, 1]],
])
def test_full_reduction_leaves_single_one_in_pivot_columns(rows):
    result = reduce(Matrix(rows), EliminationOptions(full_diagonal=True, normalize_pivot=True))
    reduced = result.reduced
    for i in result.pivots:
        assert reduced[i, i] == 1
        for j in result.pivots:
            if j != i:
                assert reduced[i, j] == 0
                assert reduced[j, i] == 0


def test_inverse_tracking():
    result = reduce(Matrix([[2, 1], [1, 1]]), INVERSE)
    assert result.inverse == [[1, -1], [-1, 2]]
    assert result.reduced == [[1, 0], [0, 1]]


def test_inverse_tracking_follows_row_swaps():
    result = reduce(Matrix([[0, 1], [1, 0]]), INVERSE)
    assert result.sign_flipped
    assert result.inverse == [[0, 1], [1, 0]]


def test_inverse_requires_square_matrix():
    with pytest.raises(ShapeError):
        reduce(Matrix([[1, 2, 3], [4, 5, 6]]), INVERSE)


def test_observer_sees_every_step():
    seen = []

    def observer(step, working, inverse):
        seen.append((step, working.tolist(), inverse))

    reduce(Matrix([[0, 1], [1, 0]]), observer=observer)
    assert [step for step, _, _ in seen] == [SWAP, ELIMINATE, ELIMINATE]
    assert seen[0][1] == [[1, 0], [0, 1]]
    assert all(inverse is None for _, _, inverse in seen)


def test_observer_receives_inverse_accumulator():
    seen = []
    reduce(Matrix([[2, 1], [1, 1]]), INVERSE, observer=lambda step, working, inverse: seen.append((step, inverse.tolist())))
    assert [step for step, _ in seen] == [NORMALIZE, ELIMINATE, NORMALIZE, ELIMINATE]
    assert seen[0][1] == [[0.5, 0], [0, 1]]
    assert seen[-1][1] == [[1, -1], [-1, 2]]


def test_failing_observer_leaves_input_usable():
    m = Matrix([[0, 1], [1, 0]])

    def observer(step, working, inverse):
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        reduce(m, INVERSE, observer=observer)
    assert not m.released
    assert m == [[0, 1], [1, 0]]
