# src/ecsim_core/simulation/matrix.py
"""
The MNA system container.

    [ A  B ] [ v ]   [ I ]
    [ C  D ] [ j ] = [ E ]

A is node_count x node_count, B node_count x active_count, C active_count x node_count,
D active_count x active_count. v holds the node potentials and j the branch currents of
the active elements (voltage sources and op-amps).
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .exceptions import MatrixDimensionError
from .solver import gauss_jordan_solve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MnaSolution:
    """Solution of one MNA system: node potentials and active-element branch currents."""
    node_potentials: np.ndarray
    active_currents: np.ndarray
    frequency: float = 0.0

    def potential(self, node_index: int) -> complex:
        """Potential of a node. The reference node (index -1) is 0."""
        return 0j if node_index < 0 else complex(self.node_potentials[node_index])


class AdmittanceMatrix:
    """
    Holds the four MNA submatrices and the two free-term vectors.

    Every submatrix is replaced only through its property setter, which validates the
    exact shape. The arrays returned by the getters are the live arrays and may be
    stamped in place.
    """

    def __init__(self, node_count: int, active_count: int, frequency: float = 0.0):
        if node_count <= 0:
            raise MatrixDimensionError(details=f"Admittance matrix node count must be positive, got {node_count}.")
        if active_count < 0:
            raise MatrixDimensionError(details=f"Admittance matrix active-element count must be non-negative, got {active_count}.")
        self.node_count = int(node_count)
        self.active_count = int(active_count)
        self.frequency = float(frequency)
        n, m = self.node_count, self.active_count
        self._a = np.zeros((n, n), dtype=np.complex128)
        self._b = np.zeros((n, m), dtype=np.complex128)
        self._c = np.zeros((m, n), dtype=np.complex128)
        self._d = np.zeros((m, m), dtype=np.complex128)
        self._i = np.zeros(n, dtype=np.complex128)
        self._e = np.zeros(m, dtype=np.complex128)

    def _validated(self, name: str, value, shape: Tuple[int, ...]) -> np.ndarray:
        array = np.asarray(value, dtype=np.complex128)
        if array.shape != shape:
            raise MatrixDimensionError(
                details=f"Submatrix '{name}' has the wrong dimensions.",
                expected_shape=shape,
                actual_shape=array.shape,
            )
        return array.copy()

    @property
    def size(self) -> int:
        return self.node_count + self.active_count

    @property
    def a(self) -> np.ndarray:
        return self._a

    @a.setter
    def a(self, value):
        self._a = self._validated('A', value, (self.node_count, self.node_count))

    @property
    def b(self) -> np.ndarray:
        return self._b

    @b.setter
    def b(self, value):
        self._b = self._validated('B', value, (self.node_count, self.active_count))

    @property
    def c(self) -> np.ndarray:
        return self._c

    @c.setter
    def c(self, value):
        self._c = self._validated('C', value, (self.active_count, self.node_count))

    @property
    def d(self) -> np.ndarray:
        return self._d

    @d.setter
    def d(self, value):
        self._d = self._validated('D', value, (self.active_count, self.active_count))

    @property
    def i(self) -> np.ndarray:
        return self._i

    @i.setter
    def i(self, value):
        self._i = self._validated('I', value, (self.node_count,))

    @property
    def e(self) -> np.ndarray:
        return self._e

    @e.setter
    def e(self, value):
        self._e = self._validated('E', value, (self.active_count,))

    def system(self) -> Tuple[np.ndarray, np.ndarray]:
        """The concatenated (n+m)x(n+m) coefficient matrix and (n+m) right-hand side."""
        n = self.node_count
        full = np.zeros((self.size, self.size), dtype=np.complex128)
        full[:n, :n] = self._a
        full[:n, n:] = self._b
        full[n:, :n] = self._c
        full[n:, n:] = self._d
        rhs = np.concatenate([self._i, self._e])
        return full, rhs

    def solve(self) -> MnaSolution:
        full, rhs = self.system()
        solution = gauss_jordan_solve(full, rhs, frequency=self.frequency or None)
        return MnaSolution(
            node_potentials=solution[:self.node_count],
            active_currents=solution[self.node_count:],
            frequency=self.frequency,
        )

    def copy(self) -> "AdmittanceMatrix":
        clone = AdmittanceMatrix(self.node_count, self.active_count, self.frequency)
        clone.a, clone.b, clone.c = self._a, self._b, self._c
        clone.d, clone.i, clone.e = self._d, self._i, self._e
        return clone

    def __repr__(self) -> str:
        return f"AdmittanceMatrix(nodes={self.node_count}, active={self.active_count}, f={self.frequency:g} Hz)"
