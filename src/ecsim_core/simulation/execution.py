# src/ecsim_core/simulation/execution.py
"""
Provides the public API functions for running simulations.

This module is a thin Facade over the simulation engine. Each entry point:

1.  Uses the given `SimulationCache` or creates a new one, so callers can reuse the
    process-level node-generation cache across runs.
2.  Runs the `SchematicValidator` and refuses to simulate a schematic with
    error-level issues.
3.  Builds the immutable `SimulationContext` and hands it to a `SimulationEngine`.
4.  Wraps every `DiagnosableError` in a single, user-facing `SimulationRunError`
    carrying the diagnostic report. Unexpected exceptions get a generic report.

Every function returns `(result, cache)`.
"""
import logging
from pathlib import Path
from typing import Callable, Optional, Tuple, TypeVar, Union

import numpy as np

from ..cache.service import SimulationCache
from ..errors import DiagnosableError, SimulationRunError, format_diagnostic_report
from ..results.bias import BiasResults
from ..results.time import TimeResults
from ..schematic.schematic import Schematic
from ..validation.exceptions import SemanticValidationError
from ..validation.schematic_validator import SchematicValidator
from .config import SimulationOptions
from .context import SimulationContext
from .engine import SimulationEngine, SimulationType
from .results import FrequencySweepResult

logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")


def _run_guarded(
    schematic: Schematic,
    label: str,
    options: Optional[SimulationOptions],
    cache: Optional[SimulationCache],
    action: Callable[[SimulationEngine], TResult],
) -> Tuple[TResult, SimulationCache]:
    effective_cache = cache if cache is not None else SimulationCache()
    effective_options = options if options is not None else SimulationOptions()

    try:
        logger.info(f"--- Starting {label} for '{schematic.name}' ---")
        issues = SchematicValidator(schematic, effective_cache).validate()
        if any(issue.is_error for issue in issues):
            raise SemanticValidationError(issues)

        context = SimulationContext(schematic=schematic, options=effective_options, cache=effective_cache)
        result = action(SimulationEngine(context))
        logger.info(f"{label.capitalize()} successful. Cache stats: {effective_cache.get_stats()}")
        return result, effective_cache

    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during {label}: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e

    except Exception as e:
        logger.critical(f"An unexpected internal error occurred during {label}: {e}", exc_info=True)
        report = format_diagnostic_report(
            error_type=f"An Unexpected Simulation Error Occurred ({type(e).__name__})",
            details=f"The simulator encountered an unexpected internal error: {e}",
            suggestion="This may be a bug. Review the traceback and consider filing a bug report.",
            context={'component': schematic.name}
        )
        raise SimulationRunError(report) from e


def run_bias(
    schematic: Schematic,
    simulation_type: SimulationType = SimulationType.AC_BIAS,
    options: Optional[SimulationOptions] = None,
    cache: Optional[SimulationCache] = None,
) -> Tuple[BiasResults, SimulationCache]:
    """
    Runs a DC or AC bias simulation of `schematic`.

    Args:
        schematic: The simulation-ready schematic.
        simulation_type: `DC_BIAS` for DC sources only, `AC_BIAS` to add every AC phasor.
        options: Simulation tunables; defaults are used when None.
        cache: An optional `SimulationCache` to reuse. A new one is created when None.

    Returns:
        The populated `BiasResults` and the cache used for the run.

    Raises:
        SimulationRunError: If validation, matrix assembly, solving or the op-amp
                            operating point fails.
    """
    return _run_guarded(
        schematic, f"{simulation_type.value} simulation", options, cache,
        lambda engine: engine.execute_bias(simulation_type)
    )


def run_ac_cycle(
    schematic: Schematic,
    options: Optional[SimulationOptions] = None,
    cache: Optional[SimulationCache] = None,
) -> Tuple[TimeResults, SimulationCache]:
    """Runs the AC bias and renders it as waveforms over the lowest AC frequency's period."""
    return _run_guarded(schematic, "AC cycle simulation", options, cache, lambda engine: engine.execute_ac_cycle())


def run_frequency_sweep(
    schematic: Schematic,
    freq_array_hz: np.ndarray,
    source_id: str,
    options: Optional[SimulationOptions] = None,
    cache: Optional[SimulationCache] = None,
) -> Tuple[FrequencySweepResult, SimulationCache]:
    """
    Computes the node transfer functions of AC source `source_id` at every frequency
    in `freq_array_hz`.
    """
    return _run_guarded(
        schematic, "frequency sweep", options, cache,
        lambda engine: engine.execute_frequency_sweep(source_id, freq_array_hz)
    )


def simulate_file(
    path: Union[str, Path],
    simulation_type: SimulationType = SimulationType.AC_BIAS,
    cache: Optional[SimulationCache] = None,
) -> Tuple[BiasResults, SimulationCache]:
    """
    Loads a YAML schematic file and runs a bias simulation with the options it declares.

    Raises:
        SchematicBuildError: If the file cannot be loaded or built.
        SimulationRunError: If the simulation fails.
    """
    from ..schematic_builder import load_schematic

    schematic, options, _ = load_schematic(path)
    return run_bias(schematic, simulation_type, options=options, cache=cache)
