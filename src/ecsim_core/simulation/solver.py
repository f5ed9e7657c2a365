# src/ecsim_core/simulation/solver.py
import logging
from typing import Optional

import numpy as np

from .exceptions import SingularMatrixError

logger = logging.getLogger(__name__)


def gauss_jordan_solve(matrix: np.ndarray, vector: np.ndarray, frequency: Optional[float] = None) -> np.ndarray:
    """
    Solves `matrix @ x = vector` by dense Gauss-Jordan elimination with partial pivoting.

    Args:
        matrix: Square (k, k) coefficient matrix. It is not modified.
        vector: Right-hand side of length k. It is not modified.
        frequency: The frequency of the system, for error context only.

    Returns:
        The complex solution vector of length k.

    Raises:
        SingularMatrixError: If a column has no non-zero pivot candidate, or if the
                             solution contains NaN or Inf. Near-singular systems are
                             not detected.
        ValueError: If the shapes are inconsistent.
    """
    a = np.array(matrix, dtype=np.complex128)
    b = np.array(vector, dtype=np.complex128).reshape(-1)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {a.shape}.")
    size = a.shape[0]
    if b.shape[0] != size:
        raise ValueError(f"Right-hand side length {b.shape[0]} does not match matrix size {size}.")

    logger.debug(f"Gauss-Jordan solve of a {size}x{size} system...")
    for column in range(size):
        pivot = column + int(np.argmax(np.abs(a[column:, column])))
        if a[pivot, column] == 0:
            logger.error(f"No non-zero pivot in column {column}; matrix is singular.")
            raise SingularMatrixError(
                details=f"Column {column} of the {size}x{size} MNA system has no non-zero pivot.",
                frequency=frequency,
            )
        if pivot != column:
            a[[column, pivot]] = a[[pivot, column]]
            b[[column, pivot]] = b[[pivot, column]]

        scale = a[column, column]
        a[column] /= scale
        b[column] /= scale

        factors = a[:, column].copy()
        factors[column] = 0
        a -= np.outer(factors, a[column])
        b -= factors * b[column]

    if not np.all(np.isfinite(b)):
        logger.error("NaN or Inf detected in MNA solution vector.")
        raise SingularMatrixError(details="MNA system solve resulted in NaN/Inf values.", frequency=frequency)
    return b
