# src/ecsim_core/simulation/operating_point.py
"""
Determines the operating mode of every op-amp.

Each op-amp starts out active. The iterator solves the aggregate DC system, asks the
factory whether the op-amp outputs agree with their assumed modes and, if not, lets the
factory correct the first mismatching op-amp before solving again. The loop ends when
the modes are self-consistent or when the iteration cap is exceeded.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..constants import DEFAULT_MAX_OPERATING_POINT_ITERATIONS
from .exceptions import OscillatingOperatingPointError
from .factory import AdmittanceMatrixFactory, OpAmpOperationMode
from .matrix import MnaSolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatingPointResult:
    """
    Attributes:
        iterations: Aggregate DC solves performed.
        corrections: Op-amp mode changes applied along the way.
        modes: Final mode of every op-amp, keyed by component id.
        solution: The aggregate DC solution under the final modes, None when the
                  schematic has no op-amps and no solve was needed.
        mode_history: Mode assignment used for each solve, in order.
    """
    iterations: int
    corrections: int
    modes: Dict[str, OpAmpOperationMode]
    solution: Optional[MnaSolution]
    mode_history: List[Dict[str, str]] = field(default_factory=list)

    @property
    def saturated_op_amps(self) -> List[str]:
        return [op_amp_id for op_amp_id, mode in self.modes.items() if mode.is_saturated]


class OperatingPointIterator:
    """
    Runs the op-amp mode fixed-point loop against an `AdmittanceMatrixFactory`.

    Args:
        factory: The factory whose op-amp modes are adjusted in place.
        max_iterations: Cap on the number of aggregate DC solves.
    """

    def __init__(self, factory: AdmittanceMatrixFactory, max_iterations: int = DEFAULT_MAX_OPERATING_POINT_ITERATIONS):
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}.")
        self.factory = factory
        self.max_iterations = max_iterations

    def run(self) -> OperatingPointResult:
        if not self.factory.op_amp_nodes:
            logger.debug("No op-amps; operating point is trivially settled.")
            return OperatingPointResult(iterations=0, corrections=0, modes={}, solution=None)

        history: List[Dict[str, str]] = []
        corrections = 0
        for iteration in range(1, self.max_iterations + 1):
            history.append({op_amp_id: mode.value for op_amp_id, mode in self.factory.op_amp_modes.items()})
            solution = self.factory.construct_dc_aggregate().solve()
            if self.factory.check_operation(solution.node_potentials, adjust=True):
                logger.info(
                    f"Op-amp operating point settled after {iteration} solve(s) and {corrections} correction(s)."
                )
                return OperatingPointResult(
                    iterations=iteration,
                    corrections=corrections,
                    modes=self.factory.op_amp_modes,
                    solution=solution,
                    mode_history=history,
                )
            corrections += 1

        logger.error(f"Op-amp operating point did not settle within {self.max_iterations} iterations.")
        raise OscillatingOperatingPointError(iterations=self.max_iterations, mode_history=history)
