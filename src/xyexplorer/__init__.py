"""Interactive XY-model Monte Carlo explorer with automated temperature sweeps."""
