"""Provide abstract interfaces for numerical time integration.

References
----------
Hairer, E., Norsett, S. P., & Wanner, G. (1993). "Solving Ordinary
Differential Equations I: Non-stiff Problems".
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

import numpy as np

from rkab.algorithms.dynamics.base import (_DynamicalSystem,
                                           _DynamicalSystemProtocol)
from rkab.algorithms.dynamics.rhs import create_rhs_system
from rkab.algorithms.integrators.types import _Solution

SystemLike = Union[_DynamicalSystemProtocol, Callable[[float, np.ndarray], np.ndarray]]


class _Integrator(ABC):
    """Define the minimal interface that every concrete integrator must satisfy.

    Parameters
    ----------
    name : str
        Human-readable identifier of the method.

    Notes
    -----
    Subclasses *must* implement the abstract members :func:`~rkab.algorithms.integrators.base._Integrator.order` and
    :func:`~rkab.algorithms.integrators.base._Integrator.integrate`.
    """

    def __init__(self, name: str):
        self.name = name

    @property
    @abstractmethod
    def order(self) -> Optional[int]:
        """Order of accuracy of the integrator.

        Returns
        -------
        int or None
            Order of the method, or None if not applicable
        """
        pass

    @abstractmethod
    def integrate(
        self,
        system: SystemLike,
        y0: np.ndarray,
        t_vals: np.ndarray,
        **kwargs
    ) -> _Solution:
        """Integrate the dynamical system from initial conditions.

        Parameters
        ----------
        system : _DynamicalSystemProtocol or callable
            The dynamical system to integrate, or a bare ``f(t, y)`` callable
        y0 : numpy.ndarray
            Initial state vector, shape (system.dim,)
        t_vals : numpy.ndarray
            Time points delimiting the integration
        **kwargs
            Additional integration options

        Returns
        -------
        :class:`~rkab.algorithms.integrators.types._Solution`
            Accepted times and states

        Raises
        ------
        ValueError
            If the system is incompatible with this integrator
        """
        pass

    def resolve_system(self, system: SystemLike, y0: np.ndarray) -> _DynamicalSystemProtocol:
        """Wrap a bare ``f(t, y)`` callable into a system of dimension ``len(y0)``."""
        if hasattr(system, 'rhs'):
            return system
        if callable(system):
            return create_rhs_system(system, dim=len(y0), name=getattr(system, "__name__", "Generic RHS"))
        raise ValueError(f"{self.name} needs a dynamical system or an f(t, y) callable, got {type(system).__name__}")

    def validate_system(self, system: _DynamicalSystemProtocol) -> None:
        """Check that *system* complies with :class:`~rkab.algorithms.dynamics.base._DynamicalSystemProtocol`.

        Raises
        ------
        ValueError
            If the required attribute ``rhs`` is absent.
        """
        if not hasattr(system, 'rhs'):
            raise ValueError(f"System must implement 'rhs' method for {self.name}")

    def validate_inputs(
        self,
        system: _DynamicalSystemProtocol,
        y0: np.ndarray,
        t_vals: np.ndarray
    ) -> None:
        """Validate that the input arguments form a consistent integration task.

        Parameters
        ----------
        system : :class:`~rkab.algorithms.dynamics.base._DynamicalSystemProtocol`
            System to be integrated.
        y0 : numpy.ndarray
            Initial state vector of length ``system.dim``.
        t_vals : numpy.ndarray
            Strictly monotonic array of time nodes with at least two entries.

        Raises
        ------
        ValueError
            If any of the following conditions holds:
            - ``len(y0)`` differs from ``system.dim``.
            - ``t_vals`` contains fewer than two points.
            - ``t_vals`` is not strictly monotonic.
        """
        self.validate_system(system)

        if isinstance(system, _DynamicalSystem):
            system.validate_state(y0)
        elif len(y0) != system.dim:
            raise ValueError(
                f"Initial state dimension {len(y0)} != system dimension {system.dim}"
            )

        if len(t_vals) < 2:
            raise ValueError("Must provide at least 2 time points")

        dt = np.diff(t_vals)
        # Zero-span intervals are allowed; drivers return an empty trajectory
        if np.all(dt == 0.0):
            return
        if not (np.all(dt > 0) or np.all(dt < 0)):
            raise ValueError("Time values must be strictly monotonic (either increasing or decreasing)")

    def __str__(self):
        return f"RKAB-{self.name}"

    def __repr__(self):
        return f"{self.__class__.__name__}(name='{self.name}', order={self.order})"
