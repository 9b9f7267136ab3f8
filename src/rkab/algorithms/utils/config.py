# Default tolerance applied when the caller does not provide one
TOL = 1e-6

# Step budget of the integrator classes (the functional core takes it explicitly)
MAX_STEPS = 100000

# Step-size adaptation
MAX_GROWTH = 10.0          # ceiling on the growth factor after an accepted step
MIN_SHRINK = 0.5           # floor on the shrink factor after the first rejection
SAFETY = 0.8               # scales acceptability**(1/bstages) in both directions
PESSIMISTIC_SHRINK = 0.5   # flat factor for every further rejection within one step

# Minimum meaningful step, in units in the last place of the current t
HMIN_ULPS = 16

# Rejected attempts allowed within a single step before giving up
MAX_RETRIES = 4096

# Initial step heuristic: min(INITIAL_STEP_FRACTION * |t_end - t_start|, INITIAL_STEP_CAP)
INITIAL_STEP_FRACTION = 0.1
INITIAL_STEP_CAP = 0.1

FASTMATH = False  # Global flag for Numba's fastmath option
