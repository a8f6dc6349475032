"""Central place for mimetica default settings."""

# Spatial discretization
DEFAULT_ACCURACY_ORDER: int = 4
DEFAULT_NUM_CELLS: int = 101

# 1D demo domain
DEFAULT_BOUNDS_1D: tuple[float, float] = (1.0, 4.0)
DEFAULT_TOTAL_TIME_1D: float = 0.06

# 2D demo domain (same bounds on both axes)
DEFAULT_BOUNDS_2D: tuple[float, float] = (-5.0, 10.0)
DEFAULT_TOTAL_TIME_2D: float = 0.3

# Physics
DEFAULT_WAVE_SPEED: float = 100.0  # tension over density

# dt = CFL_FACTOR * spacing / wave_speed
CFL_FACTOR: float = 0.5

# Robin boundary: alpha * u + beta * du/dn = 0 (1, 0 is Dirichlet)
DEFAULT_ROBIN_ALPHA: float = 1.0
DEFAULT_ROBIN_BETA: float = 0.0

# Interpolation averaging weights
DEFAULT_WEIGHT_A: float = 0.5
DEFAULT_WEIGHT_B: float = 0.5
MIN_INTERPOLATION_CELLS: int = 4

# Forest-Ruth coefficient, 1 / (2 - 2^(1/3))
FOREST_RUTH_THETA: float = 1.0 / (2.0 - 2.0 ** (1.0 / 3.0))

# Initial condition
DEFAULT_INITIAL_CONDITION: str = "sine_bump"
SINE_BUMP_SUPPORT: tuple[float, float] = (2.0, 3.0)

# Snapshot history
DEFAULT_HISTORY_STRIDE: int = 1
