# src/ecsim_core/simulation/config.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np
import pint

from ..constants import (
    DEFAULT_CYCLES,
    DEFAULT_DC_TIME_WINDOW_S,
    DEFAULT_MAX_OPERATING_POINT_ITERATIONS,
    DEFAULT_POINTS_PER_CYCLE,
    MIN_POINTS_PER_CYCLE,
)
from ..units import to_si_magnitude

logger = logging.getLogger(__name__)


class ConfigParsingError(ValueError):
    """Custom exception for errors during simulation configuration parsing."""
    pass


@dataclass(frozen=True)
class SimulationOptions:
    """
    Tunables of a simulation run.

    Attributes:
        max_operating_point_iterations: Cap on aggregate DC solves while settling op-amp modes.
        points_per_cycle: Samples per period of the lowest AC frequency in time-domain results.
        cycles: Number of periods of the lowest AC frequency rendered in time-domain results.
        dc_time_window: Window in seconds rendered when there is no AC source.
    """
    max_operating_point_iterations: int = DEFAULT_MAX_OPERATING_POINT_ITERATIONS
    points_per_cycle: int = DEFAULT_POINTS_PER_CYCLE
    cycles: float = DEFAULT_CYCLES
    dc_time_window: float = DEFAULT_DC_TIME_WINDOW_S

    def __post_init__(self):
        if self.max_operating_point_iterations < 1:
            raise ConfigParsingError(f"max_operating_point_iterations must be >= 1, got {self.max_operating_point_iterations}.")
        if self.points_per_cycle < MIN_POINTS_PER_CYCLE:
            raise ConfigParsingError(f"points_per_cycle must be >= {MIN_POINTS_PER_CYCLE}, got {self.points_per_cycle}.")
        if self.cycles <= 0:
            raise ConfigParsingError(f"cycles must be > 0, got {self.cycles}.")
        if self.dc_time_window <= 0:
            raise ConfigParsingError(f"dc_time_window must be > 0, got {self.dc_time_window}.")


def parse_simulation_options(raw_options: Optional[Dict[str, Any]]) -> SimulationOptions:
    """
    Builds `SimulationOptions` from the optional `simulation` section of a schematic
    file. Missing keys keep their defaults; `dc_time_window` accepts unit strings.
    """
    if not raw_options:
        return SimulationOptions()
    unknown = sorted(set(raw_options) - set(SimulationOptions.__dataclass_fields__))
    if unknown:
        raise ConfigParsingError(f"Unknown simulation option(s): {unknown}.")
    try:
        values: Dict[str, Any] = {}
        if 'max_operating_point_iterations' in raw_options:
            values['max_operating_point_iterations'] = int(raw_options['max_operating_point_iterations'])
        if 'points_per_cycle' in raw_options:
            values['points_per_cycle'] = int(raw_options['points_per_cycle'])
        if 'cycles' in raw_options:
            values['cycles'] = float(raw_options['cycles'])
        if 'dc_time_window' in raw_options:
            values['dc_time_window'] = to_si_magnitude(raw_options['dc_time_window'], 'second')
        options = SimulationOptions(**values)
    except ConfigParsingError:
        raise
    except (TypeError, ValueError, pint.DimensionalityError, pint.UndefinedUnitError) as e:
        raise ConfigParsingError(f"Failed to parse simulation options: {e}") from e
    logger.debug(f"Parsed simulation options: {options}")
    return options


def parse_sweep_config(raw_sweep_config: Dict[str, Any]) -> np.ndarray:
    """
    Parses a raw sweep configuration dictionary into a sorted NumPy frequency array.
    """
    if not raw_sweep_config:
        raise ConfigParsingError("Sweep configuration is missing or empty.")
    try:
        sweep_type = raw_sweep_config['type']
        freq_values_hz = np.array([], dtype=float)

        if sweep_type in ['linear', 'log']:
            start_hz = to_si_magnitude(raw_sweep_config['start'], 'hertz')
            stop_hz = to_si_magnitude(raw_sweep_config['stop'], 'hertz')
            num_points = int(raw_sweep_config['num_points'])

            if num_points < 1: raise ValueError("num_points must be >= 1.")
            if stop_hz < start_hz: raise ValueError("Stop frequency cannot be less than start frequency.")

            if sweep_type == 'linear':
                if start_hz <= 0: raise ValueError("Linear sweep start frequency must be > 0.")
                freq_values_hz = np.linspace(start_hz, stop_hz, num_points, dtype=float)
            else: # log
                if start_hz <= 0 or stop_hz <= 0: raise ValueError("Log sweep frequencies must be > 0.")
                freq_values_hz = np.geomspace(start_hz, stop_hz, num_points, dtype=float)

        elif sweep_type == 'list':
            points = [to_si_magnitude(p, 'hertz') for p in raw_sweep_config['points']]
            if any(f <= 0 for f in points): raise ValueError("Frequencies in list must be positive.")
            freq_values_hz = np.array(sorted(set(points)), dtype=float)

        else:
            raise ValueError(f"Unknown sweep type '{sweep_type}'. Expected 'linear', 'log' or 'list'.")

        return freq_values_hz
    except (KeyError, TypeError, ValueError, pint.DimensionalityError, pint.UndefinedUnitError) as e:
        raise ConfigParsingError(f"Failed to parse sweep configuration: {e}") from e
