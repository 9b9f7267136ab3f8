from dataclasses import dataclass
from typing import Optional

from rkab.algorithms.utils.config import (HMIN_ULPS, MAX_GROWTH, MAX_RETRIES,
                                          MIN_SHRINK, PESSIMISTIC_SHRINK,
                                          SAFETY)


@dataclass(frozen=True)
class _StepControlConfig:
    """Configuration of the step-size controller used by the embedded RK driver.

    Parameters
    ----------
    max_growth : float, default 10.0
        Largest factor by which the step may grow after an accepted step.
    min_shrink : float, default 0.5
        Smallest factor applied on the first rejection within a step.
    safety : float, default 0.8
        Multiplier on ``acceptability ** (1 / bstages)`` for both growth and
        the first shrink.
    pessimistic_shrink : float, default 0.5
        Flat factor applied on every rejection after the first one within the
        same step.
    hmin_ulps : float, default 16
        Minimum meaningful step magnitude, in units in the last place of the
        current parameter value.
    max_retries : int, default 4096
        Rejected attempts tolerated within a single step before
        :class:`~rkab.algorithms.utils.exceptions.ConvergenceError` is raised.
    initial_step : float or None, default None
        Magnitude of the first trial step. When *None* it is
        ``min(|t_end - t_start| / 10, 0.1)``.
    """

    max_growth: float = MAX_GROWTH
    min_shrink: float = MIN_SHRINK
    safety: float = SAFETY
    pessimistic_shrink: float = PESSIMISTIC_SHRINK
    hmin_ulps: float = HMIN_ULPS
    max_retries: int = MAX_RETRIES
    initial_step: Optional[float] = None

    def __post_init__(self):
        if not self.max_growth >= 1.0:
            raise ValueError(f"max_growth must be >= 1, got {self.max_growth}")
        if not 0.0 < self.min_shrink < 1.0:
            raise ValueError(f"min_shrink must lie in (0, 1), got {self.min_shrink}")
        if not 0.0 < self.pessimistic_shrink < 1.0:
            raise ValueError(
                f"pessimistic_shrink must lie in (0, 1), got {self.pessimistic_shrink}"
            )
        if not 0.0 < self.safety <= 1.0:
            raise ValueError(f"safety must lie in (0, 1], got {self.safety}")
        if not self.hmin_ulps > 0:
            raise ValueError(f"hmin_ulps must be positive, got {self.hmin_ulps}")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {self.max_retries}")
        if self.initial_step is not None and not self.initial_step > 0.0:
            raise ValueError(f"initial_step must be positive, got {self.initial_step}")
