import logging
import sys
import traceback
from typing import Optional, Callable

import matrix_config as config
from calculations import determinant_by_cofactor, determinant_by_elimination, rank, row_echelon, gauss_jordan, \
    inverse
from matrix import Matrix, MatrixError
from solutions import describe_solutions, InconsistentSystemError

logger = logging.getLogger(__name__)

# Globals
steps = getattr(config, "STEP_BY_STEP", False)
quit_app = False


# Helpers
def read_number(prompt: str, convert: Callable = float):
    """Ask until the user enters something `convert` accepts"""
    while True:
        text = input(prompt)
        try:
            return convert(text.strip())
        except ValueError:
            print(f"Invalid number: {text!r}")


def read_dimension(prompt: str) -> int:
    while True:
        value = read_number(prompt, int)
        if value > 0:
            return value
        print(f"The value should be a positive integer, got {value}")


def read_matrix() -> Matrix:
    width = read_dimension("Enter the width of the matrix: ")
    height = read_dimension("Enter the height of the matrix: ")
    matrix = Matrix.allocate(width, height)
    for i in range(height):
        for j in range(width):
            matrix[i, j] = read_number(f"Enter the number for the position [{i + 1}x{j + 1}]: ")
    return matrix


def print_matrix(matrix: Matrix):
    print(matrix)


def print_step(step: str, matrix: Matrix, inverse_matrix: Optional[Matrix]):
    """Observer for the elimination engine that prints every intermediate state"""
    print(f"Gauss step ({step}):")
    print_matrix(matrix)
    if inverse_matrix is not None:
        print("\nInverse step:")
        print_matrix(inverse_matrix)
    print()


def step_observer():
    return print_step if steps else None


def print_menu():
    print("Select an option:")
    for number, option in enumerate(config.MENU_OPTIONS, start=1):
        if ACTIONS.get(number) is toggle_steps:
            option = f"{option} (currently {int(steps)})"
        print(f" {number}. {option}")


# Actions
def show_determinant(matrix: Matrix):
    if not matrix.is_square:
        print("This is not a square matrix.")
        return
    print(f"Determinant of the matrix: {determinant_by_cofactor(matrix):.{config.PRINT_PRECISION}f}")


def show_determinant_gauss(matrix: Matrix):
    if not matrix.is_square:
        print("This is not a square matrix.")
        return
    determinant = determinant_by_elimination(matrix, observer=step_observer())
    print(f"Determinant of the matrix: {determinant:.{config.PRINT_PRECISION}f}")


def show_gauss(matrix: Matrix):
    with row_echelon(matrix, observer=step_observer()) as reduced:
        print("Gauss:")
        print_matrix(reduced)


def show_rank(matrix: Matrix):
    print(f"The rank is {rank(matrix, observer=step_observer())}")


def show_inverse(matrix: Matrix):
    if not matrix.is_square:
        print("The matrix should be a square matrix.")
        return
    with inverse(matrix, observer=step_observer()) as inverse_matrix:
        print("Inverse matrix:")
        print_matrix(inverse_matrix)


def show_solutions(matrix: Matrix):
    if matrix.width <= 1:
        print("The matrix should have at least two columns.")
        return
    with gauss_jordan(matrix, observer=step_observer()) as reduced:
        print("Gauss-Jordan:")
        print_matrix(reduced)
        print("\nSolution:")
        try:
            for description in describe_solutions(reduced):
                print(description)
        except InconsistentSystemError:
            print("There is no solution.")


def toggle_steps(_matrix: Matrix):
    global steps
    steps = not steps
    logger.debug(f"Step-by-step output {'enabled' if steps else 'disabled'}")


def quit_menu(_matrix: Matrix):
    global quit_app
    quit_app = True


ACTIONS = {
    1: show_determinant,
    2: show_gauss,
    3: show_determinant_gauss,
    4: show_rank,
    5: show_inverse,
    6: show_solutions,
    7: toggle_steps,
    8: quit_menu,
}


def execute(option: int, matrix: Matrix):
    action = ACTIONS.get(option)
    if action is None:
        print(f"Unknown option {option}")
        return
    try:
        action(matrix)
    except MatrixError as e:
        print(e)


def main():
    global quit_app
    quit_app = False
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    try:
        with read_matrix() as matrix:
            print()
            print_matrix(matrix)
            print()
            while not quit_app:
                print()
                print_menu()
                option = read_number("Enter a number: ", int)
                print()
                execute(option, matrix)
    except (KeyboardInterrupt, EOFError):
        print()
    except Exception as e:
        print(f"An error occurred: {e}")
        print(traceback.format_exc())
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
