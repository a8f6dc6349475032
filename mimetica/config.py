"""Run configuration - presets and JSON persistence."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime
import json
import math
from pathlib import Path
from typing import Any

from mimetica import defaults
from mimetica.errors import ConfigLoadError, InvalidParameter
from mimetica.integrators import Scheme

SCHEMA_VERSION = "1.0"


@dataclass(frozen=True)
class SimulationConfig:
    """Everything the solver needs to set up a run.

    Attributes:
        dimension: 1 or 2
        order: Accuracy order of the spatial operators
        cells: Cells per axis
        bounds: (lower, upper) per axis
        wave_speed: Wave speed c
        total_time: Simulated time; the step count is round(total_time / dt)
        scheme: Time integrator
        robin_alpha: Coefficient of u in the boundary condition
        robin_beta: Coefficient of du/dn in the boundary condition
        weight_a: Interpolation weight of the lower neighbour
        weight_b: Interpolation weight of the upper neighbour
        use_interpolation: Stagger the velocity on faces; None means 2D only
        time_step: Explicit dt (> 0, never compared with the CFL bound); None derives it from the bound
        cfl_factor: dt = cfl_factor * min(spacing) / wave_speed
        initial_condition: Name in the initial condition registry
    """
    dimension: int = 1
    order: int = defaults.DEFAULT_ACCURACY_ORDER
    cells: tuple[int, ...] = (defaults.DEFAULT_NUM_CELLS,)
    bounds: tuple[tuple[float, float], ...] = (defaults.DEFAULT_BOUNDS_1D,)
    wave_speed: float = defaults.DEFAULT_WAVE_SPEED
    total_time: float = defaults.DEFAULT_TOTAL_TIME_1D
    scheme: Scheme = Scheme.POSITION_VERLET
    robin_alpha: float = defaults.DEFAULT_ROBIN_ALPHA
    robin_beta: float = defaults.DEFAULT_ROBIN_BETA
    weight_a: float = defaults.DEFAULT_WEIGHT_A
    weight_b: float = defaults.DEFAULT_WEIGHT_B
    use_interpolation: bool | None = None
    time_step: float | None = None
    cfl_factor: float = defaults.CFL_FACTOR
    initial_condition: str = defaults.DEFAULT_INITIAL_CONDITION

    def __post_init__(self) -> None:
        if self.dimension not in (1, 2):
            raise InvalidParameter(f"dimension must be 1 or 2, got {self.dimension!r}")
        if len(self.cells) != self.dimension or len(self.bounds) != self.dimension:
            raise InvalidParameter(
                f"dimension {self.dimension} needs {self.dimension} cell counts and bounds, "
                f"got {len(self.cells)} and {len(self.bounds)}"
            )
        if not isinstance(self.scheme, Scheme):
            raise InvalidParameter(f"Unknown integration scheme: {self.scheme!r}")
        if not (math.isfinite(self.total_time) and self.total_time >= 0.0):
            raise InvalidParameter(f"total_time must be finite and >= 0, got {self.total_time}")
        if self.time_step is not None and not (math.isfinite(self.time_step) and self.time_step > 0.0):
            raise InvalidParameter(f"time_step must be positive and finite, got {self.time_step}")

    @property
    def interpolated(self) -> bool:
        if self.use_interpolation is None:
            return self.dimension == 2
        return bool(self.use_interpolation)

    def with_overrides(self, **changes: Any) -> SimulationConfig:
        """Copy with the given fields replaced; None values are ignored."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def preset_1d() -> SimulationConfig:
    """Vibrating string on [1, 4] with a sine bump, Position Verlet."""
    return SimulationConfig()


def preset_2d() -> SimulationConfig:
    """Elastic membrane on [-5, 10]^2 with a sine bump, staggered velocity."""
    n = defaults.DEFAULT_NUM_CELLS
    return SimulationConfig(
        dimension=2,
        cells=(n, n),
        bounds=(defaults.DEFAULT_BOUNDS_2D, defaults.DEFAULT_BOUNDS_2D),
        total_time=defaults.DEFAULT_TOTAL_TIME_2D,
    )


PRESETS = {
    "wave1d": preset_1d,
    "wave2d": preset_2d,
}


def config_to_dict(config: SimulationConfig) -> dict[str, Any]:
    data = asdict(config)
    data['scheme'] = config.scheme.value
    data['cells'] = list(config.cells)
    data['bounds'] = [list(b) for b in config.bounds]
    return data


def config_from_dict(data: dict[str, Any]) -> SimulationConfig:
    """
    Build a config from a plain dict, filling missing keys with defaults.

    Raises:
        InvalidParameter: If a value is malformed
    """
    known = {f for f in SimulationConfig.__dataclass_fields__}
    unknown = set(data) - known
    if unknown:
        raise InvalidParameter(f"Unknown configuration keys: {sorted(unknown)}")

    kwargs = dict(data)
    try:
        if 'scheme' in kwargs:
            kwargs['scheme'] = Scheme(kwargs['scheme'])
        if 'cells' in kwargs:
            kwargs['cells'] = tuple(int(n) for n in kwargs['cells'])
        if 'bounds' in kwargs:
            kwargs['bounds'] = tuple((float(lo), float(hi)) for lo, hi in kwargs['bounds'])
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"Malformed configuration value: {e}")

    if kwargs.get('dimension', 1) == 2:
        # Field defaults are 1D; take the axis-shaped ones from the 2D preset.
        preset = preset_2d()
        kwargs.setdefault('cells', preset.cells)
        kwargs.setdefault('bounds', preset.bounds)
        kwargs.setdefault('total_time', preset.total_time)
    return SimulationConfig(**kwargs)


def save_config(config: SimulationConfig, filepath: str | Path) -> None:
    """Write a config as JSON with a schema version."""
    filepath = Path(filepath)
    metadata = {
        'schema_version': SCHEMA_VERSION,
        'created_at': datetime.now().isoformat(),
        'simulation': config_to_dict(config),
    }
    filepath.write_text(json.dumps(metadata, indent=2))


def load_config(filepath: str | Path) -> SimulationConfig:
    """
    Read a config written by save_config.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigLoadError: If the file is corrupt, has the wrong schema or bad values
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    try:
        metadata = json.loads(filepath.read_text())
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Corrupt config file {filepath}: {e}")

    schema_version = metadata.get('schema_version', '1.0')
    if schema_version != SCHEMA_VERSION:
        raise ConfigLoadError(
            f"Schema version {schema_version} not supported. Expected {SCHEMA_VERSION}."
        )
    if 'simulation' not in metadata:
        raise ConfigLoadError(f"Config file {filepath} has no 'simulation' section")

    try:
        return config_from_dict(metadata['simulation'])
    except InvalidParameter as e:
        raise ConfigLoadError(f"Invalid config in {filepath}: {e}")
