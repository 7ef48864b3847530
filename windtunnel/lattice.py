"""
D2Q9 Lattice Constants and Relaxation Parameters

Defines the D2Q9 lattice used by the wind tunnel solver, together with the
mapping between kinematic viscosity and the BGK relaxation frequency.
"""
import warnings

import numpy as np

# D2Q9 lattice velocities
#     6   2   5
#       \ | /
#     3 - 0 - 1
#       / | \
#     7   4   8

# Lattice velocity components
EX = np.array([0, 1, 0, -1, 0, 1, -1, -1, 1], dtype=np.int64)
EY = np.array([0, 0, 1, 0, -1, 1, 1, -1, -1], dtype=np.int64)

# Lattice weights: rest, 4 axis directions, 4 diagonals
W = np.array([4/9, 1/9, 1/9, 1/9, 1/9, 1/36, 1/36, 1/36, 1/36], dtype=np.float64)

# Opposite direction indices (for bounce-back)
OPPOSITE = np.array([0, 3, 4, 1, 2, 7, 8, 5, 6], dtype=np.int64)

# Lattice sound speed squared
CS2 = 1.0 / 3.0

# Number of lattice velocities
Q = 9

# Speed ceiling applied after every collision (lattice units)
U_MAX = 0.35


def omega_from_viscosity(nu):
    """
    Relaxation frequency for a kinematic viscosity.

    omega = 1 / (3 * nu + 0.5)

    Parameters
    ----------
    nu : float
        Kinematic viscosity in lattice units. Expected to be > 0.

    Returns
    -------
    omega : float
        BGK relaxation frequency
    """
    return 1.0 / (3.0 * nu + 0.5)


def viscosity_from_omega(omega):
    """
    Kinematic viscosity for a relaxation frequency.

    nu = (1 / omega - 0.5) / 3
    """
    return (1.0 / omega - 0.5) / 3.0


def check_omega(omega, nu=None, stacklevel=3):
    """
    Warn when omega leaves the stable BGK range (0, 2).

    The value is neither clamped nor rejected; supplying a positive
    viscosity is the caller's responsibility.

    Parameters
    ----------
    omega : float
        Relaxation frequency to check
    nu : float, optional
        Viscosity it was derived from, for the warning message
    stacklevel : int
        Passed to warnings.warn; the default points at the caller of the
        function that called check_omega

    Returns
    -------
    stable : bool
        True if 0 < omega < 2
    """
    if 0.0 < omega < 2.0:
        return True

    source = f" (viscosity {nu})" if nu is not None else ""
    warnings.warn(
        f"omega = {omega}{source} is outside (0, 2); "
        f"the simulation will not be stable. Use a positive viscosity.",
        RuntimeWarning,
        stacklevel=stacklevel,
    )
    return False
