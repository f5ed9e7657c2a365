# src/ecsim_core/simulation/results.py
"""
Formal result contracts of the simulation engine that are not query layers.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import GROUND_NODE_INDEX
from .operating_point import OperatingPointResult


@dataclass(frozen=True)
class FrequencySweepResult:
    """
    Transfer functions of one AC source over a frequency sweep.

    Attributes:
        source_id: The AC voltage source that was driven with unit amplitude.
        frequencies_hz: The swept frequencies.
        node_transfer: Complex array of shape (num_freqs, node_count); entry [f, n] is
                       the potential of node n per volt of source drive at frequency f.
        operating_point: The DC operating point whose op-amp modes were used.
    """
    source_id: str
    frequencies_hz: np.ndarray
    node_transfer: np.ndarray
    operating_point: Optional[OperatingPointResult] = None

    @property
    def node_count(self) -> int:
        return int(self.node_transfer.shape[1])

    def _column(self, node_index: int) -> np.ndarray:
        if node_index == GROUND_NODE_INDEX:
            return np.zeros(len(self.frequencies_hz), dtype=np.complex128)
        if not 0 <= node_index < self.node_count:
            raise IndexError(f"Node index {node_index} is out of range [-1, {self.node_count}).")
        return self.node_transfer[:, node_index]

    def transfer(self, node_a: int, node_b: int = GROUND_NODE_INDEX) -> np.ndarray:
        """(V_a - V_b) per unit drive at every swept frequency."""
        return self._column(node_a) - self._column(node_b)

    def magnitude_db(self, node_a: int, node_b: int = GROUND_NODE_INDEX) -> np.ndarray:
        with np.errstate(divide='ignore'):
            return 20.0 * np.log10(np.abs(self.transfer(node_a, node_b)))

    def phase_deg(self, node_a: int, node_b: int = GROUND_NODE_INDEX) -> np.ndarray:
        return np.degrees(np.angle(self.transfer(node_a, node_b)))
