"""
Equilibrium Distribution Functions

Second-order Maxwell-Boltzmann equilibrium for the D2Q9 lattice:

    f_i^eq = w_i * rho * [1 + 3 (e_i . u) + 4.5 (e_i . u)^2 - 1.5 |u|^2]

which is the usual expansion with c_s^2 = 1/3 written out with its
numeric coefficients. Boundary populations and the BGK target both use
this exact form.
"""

import numpy as np
from numba import njit
from .lattice import EX, EY, W, Q


@njit(cache=True)
def equilibrium_numba(k, rho, ux, uy, ex, ey, w):
    """
    Equilibrium population of direction k at one site.

    Scalar kernel shared by the streaming and collision passes.
    """
    eu = ex[k] * ux + ey[k] * uy
    u_sq = ux * ux + uy * uy
    return w[k] * rho * (1.0 + 3.0 * eu + 4.5 * eu * eu - 1.5 * u_sq)


def equilibrium_single_site(rho, ux, uy):
    """
    Compute equilibrium distribution for a single lattice site.

    Parameters
    ----------
    rho : float
        Density at the site
    ux : float
        X-velocity at the site
    uy : float
        Y-velocity at the site

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q,)
    """
    f_eq = np.zeros(Q, dtype=np.float64)
    u_sq = ux * ux + uy * uy

    for i in range(Q):
        eu = EX[i] * ux + EY[i] * uy
        f_eq[i] = W[i] * rho * (1.0 + 3.0 * eu + 4.5 * eu * eu - 1.5 * u_sq)

    return f_eq


def compute_equilibrium(rho, ux, uy):
    """
    Compute equilibrium distribution for all lattice sites.

    Parameters
    ----------
    rho : ndarray
        Density field, shape (ny, nx)
    ux : ndarray
        X-velocity field, shape (ny, nx)
    uy : ndarray
        Y-velocity field, shape (ny, nx)

    Returns
    -------
    f_eq : ndarray
        Equilibrium distribution, shape (Q, ny, nx)
    """
    ny, nx = np.shape(rho)
    f_eq = np.zeros((Q, ny, nx), dtype=np.float64)

    u_sq = ux * ux + uy * uy

    for i in range(Q):
        eu = EX[i] * ux + EY[i] * uy
        f_eq[i] = W[i] * rho * (1.0 + 3.0 * eu + 4.5 * eu * eu - 1.5 * u_sq)

    return f_eq


def rest_populations(ny, nx):
    """
    Populations of a fluid at rest with unit density.

    Every population equals its lattice weight, so rho = 1 and u = 0.

    Returns
    -------
    f : ndarray
        Distribution, shape (Q, ny, nx)
    """
    f = np.empty((Q, ny, nx), dtype=np.float64)
    for i in range(Q):
        f[i] = W[i]
    return f
