import os

# Output
PRINT_PRECISION = 6  # decimal places when printing matrices and solutions
VARIABLE_PREFIX = "x"  # unknowns are printed as x1, x2, ...
PARAMETER_PREFIX = "k"  # free parameters are printed as k1, k2, ...

# Shell
STEP_BY_STEP = False  # initial state of the step-by-step toggle
MENU_OPTIONS = [  # menu number is the position in this list + 1
    "Determinant",
    "Gauss",
    "Determinant (Gauss)",
    "Rank",
    "Inverse",
    "Solve as equation",
    "Switch step-by-step flag",
    "Quit",
]

# Logging
LOG_LEVEL = os.environ.get("MATRIX_CALC_LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
