"""Example script: adaptive integration of the simple harmonic oscillator
``x'' = -x`` starting from ``x = 0, x' = 1``.

Run with
    python examples/harmonic_oscillator.py --method rk45 --tol 1e-3
"""

import argparse
import os
import sys

import numpy as np

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from rkab import ConvergenceError, get_entry_point
from rkab.utils.log_config import logger


def oscillator(t, y):
    return np.array([y[1], -y[0]])


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--method", default="rk45",
                        help="Entry point, e.g. rk45, rk23_f or rk12_ld")
    parser.add_argument("--tol", type=float, default=1e-3)
    parser.add_argument("--t-end", type=float, default=50.0)
    parser.add_argument("--max-steps", type=int, default=1000)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    y0 = np.array([0.0, 1.0])
    tol = np.full(y0.size, args.tol) if "_arrtol" in args.method else args.tol

    try:
        integrate = get_entry_point(args.method)
        sol = integrate(y0, y0.size, args.max_steps, tol, 0.0, args.t_end, oscillator)
    except (KeyError, ValueError, ConvergenceError) as exc:
        logger.error("Integration failed: %s", exc)
        return 1

    logger.info("%s: %d steps, %d failures", args.method, sol.num_steps, sol.num_failures)
    if sol.num_steps:
        t_last = sol.times[-1]
        exact = np.array([np.sin(t_last), np.cos(t_last)])
        logger.info("t=%s  state=%s  |error|=%.3e", t_last, sol.states[-1],
                    np.max(np.abs(sol.states[-1] - exact)))
    if not sol.completed:
        logger.warning("Stopped before t_end=%s", args.t_end)
    return 0


if __name__ == "__main__":
    sys.exit(main())
