# src/ecsim_core/signals/descriptions.py
"""
Source descriptions: the immutable identity of every independent contribution to a
superposition run.

Each per-source MNA solve is keyed by a `SourceDescription`. Phasor signals keep
their AC components keyed by the description that produced them, so the frequency
of every phasor (and the component responsible for it) remains recoverable after
superposition.
"""
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

logger = logging.getLogger(__name__)


class SourceType(Enum):
    """The kind of independent contribution described by a `SourceDescription`."""
    DC_VOLTAGE_SOURCE = auto()
    AC_VOLTAGE_SOURCE = auto()
    DC_OFFSET_OF_AC_VOLTAGE_SOURCE = auto()
    DC_CURRENT_SOURCE = auto()
    OPAMP_SATURATION = auto()

    @property
    def is_dc(self) -> bool:
        return self is not SourceType.AC_VOLTAGE_SOURCE


@dataclass(frozen=True)
class SourceDescription:
    """
    Immutable value describing one independent source instance.

    Attributes:
        source_type: The kind of contribution.
        frequency: Frequency in Hz, 0 for every DC kind.
        output_value: Scalar drive (volts for voltage sources, amperes for current
                      sources, peak volts for AC sources).
        component_id: The owning component's instance id, or None for synthesized
                      descriptions.
    """
    source_type: SourceType
    frequency: float
    output_value: float
    component_id: Optional[str] = None

    def __post_init__(self):
        if self.source_type.is_dc and self.frequency != 0:
            raise ValueError(f"DC source description '{self.component_id}' must have frequency 0, got {self.frequency}.")
        if not self.source_type.is_dc and self.frequency <= 0:
            raise ValueError(f"AC source description '{self.component_id}' must have a positive frequency, got {self.frequency}.")

    @property
    def is_dc(self) -> bool:
        return self.source_type.is_dc

    def __str__(self) -> str:
        owner = self.component_id or "<synthesized>"
        if self.is_dc:
            return f"{self.source_type.name}({owner}, {self.output_value:g})"
        return f"{self.source_type.name}({owner}, {self.output_value:g} @ {self.frequency:g} Hz)"


#: The synthesized description under which saturated op-amps contribute their rail
#: voltages. Its output value is nominal: each saturated op-amp drives its own rail.
OPAMP_SATURATION_SOURCE = SourceDescription(
    source_type=SourceType.OPAMP_SATURATION,
    frequency=0.0,
    output_value=0.0,
    component_id=None,
)
