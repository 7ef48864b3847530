"""
Flow Diagnostics

Derived quantities computed from the solver's fields:
    - Speed: |u| = sqrt(ux^2 + uy^2)
    - Vorticity: omega_z = du_y/dx - du_x/dy
    - Total fluid mass: sum of rho over fluid sites
    - Obstacle force by momentum exchange over bounce-back links
"""

import numpy as np
from numba import njit
from .lattice import EX, EY


def compute_velocity_magnitude(ux, uy):
    """
    Compute velocity magnitude field.

    Parameters
    ----------
    ux : ndarray
        X-velocity field, shape (ny, nx)
    uy : ndarray
        Y-velocity field, shape (ny, nx)

    Returns
    -------
    velocity_mag : ndarray
        Velocity magnitude, shape (ny, nx)
    """
    return np.sqrt(ux * ux + uy * uy)


def max_speed(ux, uy):
    """Largest speed in the field."""
    return float(np.max(compute_velocity_magnitude(ux, uy)))


def compute_vorticity(ux, uy, dx=1.0):
    """
    Compute vorticity field.

    Central differences in the interior, one-sided at the domain edges
    (the tunnel is not periodic).

    Parameters
    ----------
    ux : ndarray
        X-velocity field, shape (ny, nx)
    uy : ndarray
        Y-velocity field, shape (ny, nx)
    dx : float
        Grid spacing (default 1.0 in lattice units)

    Returns
    -------
    vorticity : ndarray
        Vorticity field, shape (ny, nx)
    """
    duy_dx = np.gradient(uy, dx, axis=1)
    dux_dy = np.gradient(ux, dx, axis=0)
    return duy_dx - dux_dy


def compute_total_mass(rho, solid=None):
    """
    Total density over fluid sites.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    solid : ndarray, optional
        Boolean obstacle mask; solid sites are excluded
    """
    if solid is None:
        return float(np.sum(rho))
    return float(np.sum(rho[~solid]))


@njit(cache=True)
def obstacle_force_numba(f, solid, ex, ey):
    """
    Momentum exchange force on all solid sites.

    Every population a fluid site sends into a solid neighbour comes back
    reversed, transferring 2 * f_k * e_k to the obstacle.
    """
    q, ny, nx = f.shape
    fx = 0.0
    fy = 0.0

    for j in range(ny):
        for i in range(nx):
            if solid[j, i]:
                continue
            for k in range(1, q):
                ni = i + ex[k]
                nj = j + ey[k]
                if 0 <= ni < nx and 0 <= nj < ny and solid[nj, ni]:
                    fx += 2.0 * f[k, j, i] * ex[k]
                    fy += 2.0 * f[k, j, i] * ey[k]

    return fx, fy


def compute_obstacle_force(f, solid):
    """
    Force exerted by the fluid on the obstacles.

    Parameters
    ----------
    f : ndarray
        Post-collision distribution, shape (Q, ny, nx)
    solid : ndarray
        Boolean obstacle mask, shape (ny, nx)

    Returns
    -------
    fx, fy : float
        Force components in lattice units
    """
    return obstacle_force_numba(f, solid, EX, EY)


def drag_coefficient(force_x, u_ref, length, rho_ref=1.0):
    """
    Drag coefficient C_D = F_x / (0.5 * rho * U^2 * L).

    Returns 0.0 when the reference speed or length is zero.
    """
    denom = 0.5 * rho_ref * u_ref ** 2 * length
    if denom == 0.0:
        return 0.0
    return force_x / denom
