# src/ecsim_core/results/power.py
import logging
import math
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class PowerType(Enum):
    NONE = "none"
    DISSIPATED = "dissipated"
    SUPPLIED = "supplied"


@dataclass(frozen=True)
class PowerInformation:
    """
    Average, maximum and minimum power of a component, in watts, under the passive
    sign convention: positive values are absorbed, negative values supplied.
    NaN marks a quantity that cannot be derived from the available signals.
    """
    average: float = 0.0
    maximum: float = 0.0
    minimum: float = 0.0

    @property
    def power_type(self) -> PowerType:
        if math.isnan(self.average) or self.average == 0:
            return PowerType.NONE
        return PowerType.DISSIPATED if self.average > 0 else PowerType.SUPPLIED

    @classmethod
    def from_bounds(cls, average: float, first: float, second: float) -> "PowerInformation":
        return cls(average=average, maximum=max(first, second), minimum=min(first, second))


#: Returned for components that neither dissipate nor supply power.
NO_POWER = PowerInformation()
