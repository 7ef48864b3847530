"""
Wind Tunnel Fluid Solver

D2Q9 BGK solver for flow around arbitrary obstacles in an open tunnel:
free-stream inlet on the left, zero-gradient outlet on the right,
free-stream top and bottom, bounce-back on solid sites.

Each step runs two full passes over the grid:
    1. streaming + boundary resolution into the "next" buffer
    2. moments, velocity ceiling and BGK collision on the "next" buffer
and then swaps the roles of the two buffers.
"""

import logging

import numpy as np
from .lattice import EX, EY, W, Q, OPPOSITE, U_MAX, omega_from_viscosity, check_omega
from .equilibrium import rest_populations
from .streaming import stream_pull_numba
from .collision import collide_bgk_numba
from .obstacles import mask_size_matches, as_mask
from .observables import compute_velocity_magnitude, compute_obstacle_force

logger = logging.getLogger(__name__)


def _read_only(arr):
    view = arr.view()
    view.flags.writeable = False
    return view


class FluidSolver:
    """
    Lattice Boltzmann wind tunnel on a fixed width x height grid.

    Parameters
    ----------
    width : int
        Number of lattice points in x-direction
    height : int
        Number of lattice points in y-direction
    viscosity : float
        Kinematic viscosity in lattice units (must be > 0)

    Attributes
    ----------
    rho : ndarray
        Density field, shape (height, width), read-only
    ux, uy : ndarray
        Velocity fields, shape (height, width), read-only
    obstacle_mask : ndarray
        Boolean solid mask, shape (height, width), read-only
    step_count : int
        Steps taken since the last configure
    rejected_masks : int
        Mask updates ignored because of a size mismatch

    Notes
    -----
    The field arrays are overwritten in place by ``step``; copy them if a
    value must outlive the next step.
    """

    def __init__(self, width, height, viscosity=0.04):
        self._configure(width, height, viscosity)

    def configure(self, width, height, viscosity):
        """
        Allocate all arrays and reset to a fluid at rest.

        Every population is set to its lattice weight (rho = 1, u = 0)
        and the obstacle mask is cleared.

        Raises
        ------
        ValueError
            If width or height is not a positive integer
        """
        self._configure(width, height, viscosity)

    def _configure(self, width, height, viscosity):
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

        self.width = int(width)
        self.height = int(height)
        ny, nx = self.height, self.width

        # Two population buffers; _current selects the one holding the state
        self._f = np.empty((2, Q, ny, nx), dtype=np.float64)
        self._f[0] = rest_populations(ny, nx)
        self._f[1] = self._f[0]
        self._current = 0

        self._rho = np.ones((ny, nx), dtype=np.float64)
        self._ux = np.zeros((ny, nx), dtype=np.float64)
        self._uy = np.zeros((ny, nx), dtype=np.float64)
        self._solid = np.zeros((ny, nx), dtype=bool)

        self.step_count = 0
        self.rejected_masks = 0
        # Warnings point at the caller of __init__ or configure
        self._set_viscosity(viscosity, stacklevel=5)

    def set_viscosity(self, viscosity):
        """
        Set the kinematic viscosity and recompute omega.

        The viscosity must be positive; omega outside (0, 2) triggers a
        RuntimeWarning but is used as given.
        """
        self._set_viscosity(viscosity, stacklevel=4)

    def _set_viscosity(self, viscosity, stacklevel):
        self.viscosity = viscosity
        self.omega = omega_from_viscosity(viscosity)
        check_omega(self.omega, viscosity, stacklevel=stacklevel)

    def set_obstacle_mask(self, mask):
        """
        Replace the obstacle mask.

        A mask that does not hold exactly width * height entries is
        ignored: the current mask stays in place. This tolerates a stale
        mask arriving while the caller resizes the grid.

        Parameters
        ----------
        mask : array_like
            Boolean mask, flat (row-major) or shape (height, width)

        Returns
        -------
        accepted : bool
            False if the mask was ignored
        """
        if not mask_size_matches(mask, self.width, self.height):
            self.rejected_masks += 1
            logger.debug("Ignoring obstacle mask of size %d for %dx%d grid",
                         np.size(mask), self.width, self.height)
            return False

        self._solid = as_mask(mask, self.width, self.height)
        return True

    def step(self, inlet_speed):
        """
        Advance the simulation by one time step.

        Parameters
        ----------
        inlet_speed : float
            Free-stream x-velocity at the inlet, top and bottom
        """
        f = self._f[self._current]
        f_next = self._f[1 - self._current]

        stream_pull_numba(f, f_next, self._solid, self._rho, self._ux, self._uy,
                          float(inlet_speed), EX, EY, W, OPPOSITE)
        collide_bgk_numba(f_next, self._solid, self._rho, self._ux, self._uy,
                          self.omega, U_MAX, EX, EY, W)

        self._current = 1 - self._current
        self.step_count += 1

    def run(self, num_steps, inlet_speed):
        """Run ``num_steps`` steps at a constant inlet speed."""
        for _ in range(num_steps):
            self.step(inlet_speed)

    @property
    def rho(self):
        return _read_only(self._rho)

    @property
    def ux(self):
        return _read_only(self._ux)

    @property
    def uy(self):
        return _read_only(self._uy)

    @property
    def obstacle_mask(self):
        return _read_only(self._solid)

    @property
    def populations(self):
        """Current distribution, shape (Q, height, width), read-only."""
        return _read_only(self._f[self._current])

    def speed(self):
        """Velocity magnitude field."""
        return compute_velocity_magnitude(self._ux, self._uy)

    def obstacle_force(self):
        """Momentum exchange force (fx, fy) on the obstacles."""
        return compute_obstacle_force(self._f[self._current], self._solid)
