"""
Configuration & Global Constants
================================
Central registry for default simulation parameters, input bounds and
presentation constants.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (lattice sizes, slider limits,
   frame intervals) from being scattered throughout the GUI code.
2. Deployment: The simulation engine is located at runtime through an import
   path, so a different engine build can be plugged in via the environment.

Exports:
    ENGINE_FACTORY_PATH (str): 'module:attribute' of the engine constructor.
    LOG_LEVEL_NAME (str): Logging level requested through the environment.
"""
import os

# --- ENGINE ---
ENGINE_FACTORY_PATH: str = os.environ.get("XYEXPLORER_ENGINE", "xy_gui_rust:XY")

# --- LOGGING ---
LOG_LEVEL_NAME: str = os.environ.get("XYEXPLORER_LOG_LEVEL", "INFO")
LOG_FILE: str | None = os.environ.get("XYEXPLORER_LOG_FILE") or None

# --- SIMULATION DEFAULTS ---
LATTICE_SIZES: tuple[int, ...] = (16, 32, 64, 128, 256)
DEFAULT_LATTICE_SIZE: int = 64
DEFAULT_TEMPERATURE: float = 2.27
DEFAULT_COUPLING: float = 1.0
DEFAULT_FIELD: float = 0.0
DEFAULT_SWEEPS_PER_FRAME: int = 1

# Coupling restored when a cluster algorithm rejects the current parameters
SAFE_CLUSTER_COUPLING: float = 1.0

# --- INPUT BOUNDS (min, max) ---
TEMPERATURE_BOUNDS: tuple[float, float] = (0.1, 5.0)
COUPLING_BOUNDS: tuple[float, float] = (-2.0, 2.0)
FIELD_BOUNDS: tuple[float, float] = (-2.0, 2.0)
SWEEPS_PER_FRAME_BOUNDS: tuple[int, int] = (1, 500)

# --- SWEEP DEFAULTS ---
DEFAULT_SWEEP_T_INIT: float = 0.5
DEFAULT_SWEEP_T_FINAL: float = 2.5
DEFAULT_SWEEP_T_STEP: float = 0.1
DEFAULT_SWEEP_WARMUP: int = 500
DEFAULT_SWEEP_DECOR: int = 100
DEFAULT_SWEEP_MEASURE: int = 1000
DEFAULT_TARGET_BINS: int = 10

# --- PRESENTATION ---
HISTORY_CAPACITY: int = 400
QUIVER_RESOLUTION: int = 400
FRAME_INTERVAL_MS: int = 16  # ~60 FPS
THROUGHPUT_WINDOW_S: float = 30.0
ZOOM_PLOT_RESOLUTION: int = 800
