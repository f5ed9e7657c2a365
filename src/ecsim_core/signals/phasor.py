# src/ecsim_core/signals/phasor.py
"""
Phasor-domain signals: a DC offset plus a set of complex phasors, one per AC source.

Every steady-state quantity the simulator reports (node potentials, voltage drops,
currents) is first expressed in this form. The interpreter deliberately treats the
phasors as if they could all peak at the same instant, so `maximum()` and
`minimum()` are worst-case bounds rather than exact extrema when several frequencies
are present.
"""
import cmath
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Tuple

from .base import SignalType
from .descriptions import SourceDescription

logger = logging.getLogger(__name__)

_SQRT2 = math.sqrt(2.0)


@dataclass(frozen=True, eq=False)
class PhasorSignal:
    """
    Immutable phasor-domain signal.

    Attributes:
        dc: The constant (DC) component.
        phasors: Read-only mapping from the AC source description that produced a
                 component to its complex peak phasor.
    """
    dc: float = 0.0
    phasors: Mapping[SourceDescription, complex] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'dc', float(self.dc))
        frozen = {description: complex(value) for description, value in dict(self.phasors).items()}
        object.__setattr__(self, 'phasors', MappingProxyType(frozen))

    # --- Construction helpers ---

    def zero_like(self) -> "PhasorSignal":
        return PhasorSignal()

    # --- Structure ---

    @property
    def signal_type(self) -> SignalType:
        result = SignalType.EMPTY
        if self.dc != 0:
            result |= SignalType.DC
        count = len(self.phasors)
        if count > 1:
            result |= SignalType.MULTIPLE_AC
        elif count == 1:
            result |= SignalType.SINGLE_AC
        return result

    @property
    def is_empty(self) -> bool:
        return self.signal_type == SignalType.EMPTY

    @property
    def frequencies(self) -> Tuple[float, ...]:
        """Distinct frequencies of the composing phasors, in ascending order."""
        return tuple(sorted({description.frequency for description in self.phasors}))

    def ac_potentials_by_frequency(self) -> Dict[float, complex]:
        """Collapses the phasors onto their frequencies, summing same-frequency sources."""
        result: Dict[float, complex] = {}
        for description, value in self.phasors.items():
            result[description.frequency] = result.get(description.frequency, 0j) + value
        return result

    # --- Interpreter ---

    def maximum(self) -> float:
        return self.dc + sum(abs(value) for value in self.phasors.values())

    def minimum(self) -> float:
        return self.dc - sum(abs(value) for value in self.phasors.values())

    def rms(self) -> float:
        return math.sqrt(self.dc ** 2 + sum((abs(value) / _SQRT2) ** 2 for value in self.phasors.values()))

    def average(self) -> float:
        # Sinusoids average to zero over a period.
        return self.dc

    # --- Algebra ---

    def negate(self) -> "PhasorSignal":
        return PhasorSignal(-self.dc, {description: -value for description, value in self.phasors.items()})

    def __neg__(self) -> "PhasorSignal":
        return self.negate()

    def __add__(self, other: "PhasorSignal") -> "PhasorSignal":
        if not isinstance(other, PhasorSignal):
            return NotImplemented
        phasors = dict(self.phasors)
        for description, value in other.phasors.items():
            phasors[description] = phasors[description] + value if description in phasors else value
        return PhasorSignal(self.dc + other.dc, phasors)

    def __sub__(self, other: "PhasorSignal") -> "PhasorSignal":
        """
        Subtracts `other` from this signal. Phasors present in both are subtracted,
        phasors only in `self` are copied and phasors only in `other` are negated.
        """
        if not isinstance(other, PhasorSignal):
            return NotImplemented
        phasors = dict(self.phasors)
        for description, value in other.phasors.items():
            phasors[description] = phasors[description] - value if description in phasors else -value
        return PhasorSignal(self.dc - other.dc, phasors)

    def transform(
        self, dc_factor: float, phasor_factor: Callable[[SourceDescription], complex]
    ) -> "PhasorSignal":
        """
        Scales the DC part by `dc_factor` and every phasor by `phasor_factor(description)`.
        This is how a voltage drop becomes a current through an admittance.
        """
        return PhasorSignal(
            self.dc * dc_factor,
            {description: value * phasor_factor(description) for description, value in self.phasors.items()},
        )

    # --- Value semantics ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PhasorSignal):
            return NotImplemented
        return self.dc == other.dc and dict(self.phasors) == dict(other.phasors)

    __hash__ = None

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{description}: {abs(value):.6g}∠{math.degrees(cmath.phase(value)):.3g}°"
            for description, value in self.phasors.items()
        )
        return f"PhasorSignal(dc={self.dc:.6g}, phasors={{{parts}}})"
