# src/ecsim_core/signals/waveforms.py
import logging
import math
from typing import Optional

import numpy as np

from ..constants import DEFAULT_CYCLES, DEFAULT_DC_TIME_WINDOW_S, DEFAULT_POINTS_PER_CYCLE
from .phasor import PhasorSignal
from .time_domain import TimeDomainSignal

logger = logging.getLogger(__name__)


def sine_wave(
    amplitude: float,
    frequency: float,
    phase_shift: float,
    sample_count: int,
    time_step: float,
    constant_offset: float = 0.0,
    start_time: float = 0.0,
) -> np.ndarray:
    """Returns A * sin(2*pi*f*t + phi) + B sampled at t = start_time + k * time_step."""
    t = start_time + time_step * np.arange(sample_count, dtype=float)
    return amplitude * np.sin(2.0 * math.pi * frequency * t + phase_shift) + constant_offset


def constant_waveform(value: float, sample_count: int) -> np.ndarray:
    return np.full(sample_count, float(value), dtype=float)


class WaveformBuilder:
    """
    Renders phasor signals on a fixed time axis.

    A phasor p at frequency f contributes |p| * sin(2*pi*f*t + arg(p)), matching the
    sine convention of the AC sources whose peak value drives E. The DC component is
    added as a constant.
    """

    def __init__(self, sample_count: int, time_step: float, start_time: float = 0.0):
        if sample_count < 0:
            raise ValueError(f"Sample count must be non-negative, got {sample_count}.")
        if time_step <= 0:
            raise ValueError(f"Time step must be positive, got {time_step}.")
        self.sample_count = int(sample_count)
        self.time_step = float(time_step)
        self.start_time = float(start_time)

    @classmethod
    def for_lowest_frequency(
        cls,
        lowest_frequency: Optional[float],
        points_per_cycle: int = DEFAULT_POINTS_PER_CYCLE,
        cycles: float = DEFAULT_CYCLES,
        dc_time_window: float = DEFAULT_DC_TIME_WINDOW_S,
    ) -> "WaveformBuilder":
        """
        Chooses a time axis covering `cycles` periods of the lowest AC frequency, or
        `dc_time_window` seconds when there is no AC source.
        """
        if lowest_frequency:
            period = 1.0 / lowest_frequency
            sample_count = int(math.ceil(points_per_cycle * cycles))
            time_step = period / points_per_cycle
        else:
            sample_count = int(math.ceil(points_per_cycle * cycles))
            time_step = dc_time_window * cycles / sample_count
        logger.debug(f"Waveform axis: {sample_count} samples, step {time_step:.4e} s.")
        return cls(sample_count, time_step)

    def times(self) -> np.ndarray:
        return self.start_time + self.time_step * np.arange(self.sample_count, dtype=float)

    def build(self, signal: PhasorSignal) -> TimeDomainSignal:
        values = constant_waveform(signal.dc, self.sample_count)
        for description, phasor in signal.phasors.items():
            values += sine_wave(
                abs(phasor), description.frequency, float(np.angle(phasor)),
                self.sample_count, self.time_step, start_time=self.start_time,
            )
        return TimeDomainSignal(values, self.time_step, self.start_time)

    def zero(self) -> TimeDomainSignal:
        return TimeDomainSignal(np.zeros(self.sample_count), self.time_step, self.start_time)
