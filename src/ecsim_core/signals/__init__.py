# src/ecsim_core/signals/__init__.py
"""
Exposes the public interface of the signal algebra package.
"""
from .base import Signal, SignalInterpreter, SignalType, negate, zero_like
from .descriptions import OPAMP_SATURATION_SOURCE, SourceDescription, SourceType
from .phasor import PhasorSignal
from .time_domain import TimeDomainSignal
from .waveforms import WaveformBuilder, constant_waveform, sine_wave

__all__ = [
    "Signal",
    "SignalInterpreter",
    "SignalType",
    "negate",
    "zero_like",
    "OPAMP_SATURATION_SOURCE",
    "SourceDescription",
    "SourceType",
    "PhasorSignal",
    "TimeDomainSignal",
    "WaveformBuilder",
    "constant_waveform",
    "sine_wave",
]
