"""
Collision Operator

Single-relaxation-time (BGK) collision with a velocity ceiling.

After streaming, each fluid site computes its moments

    rho = sum_i f_i,    rho * u = sum_i f_i * e_i

limits |u| to U_MAX (direction preserved) and relaxes toward equilibrium:

    f_i <- (1 - omega) * f_i + omega * f_i^eq(rho, u)

The ceiling keeps the explicit scheme bounded for inlet speeds that would
otherwise blow up; it hides instability rather than reporting it.
"""

import math

from numba import njit
from .equilibrium import equilibrium_numba


@njit(cache=True)
def collide_bgk_numba(f, solid, rho, ux, uy, omega, u_max, ex, ey, w):
    """
    Collision pass (CPU, numba). Updates ``f`` in place.

    Parameters
    ----------
    f : ndarray
        Post-streaming distribution, shape (Q, ny, nx). Modified in place.
    solid : ndarray
        Boolean obstacle mask, shape (ny, nx). Solid sites are skipped.
    rho, ux, uy : ndarray
        Output macroscopic fields, shape (ny, nx)
    omega : float
        Relaxation frequency
    u_max : float
        Speed ceiling
    ex, ey : ndarray
        Lattice velocity components
    w : ndarray
        Lattice weights
    """
    q, ny, nx = f.shape

    for j in range(ny):
        for i in range(nx):
            if solid[j, i]:
                continue

            rho_local = 0.0
            ux_local = 0.0
            uy_local = 0.0

            for k in range(q):
                f_k = f[k, j, i]
                rho_local += f_k
                ux_local += f_k * ex[k]
                uy_local += f_k * ey[k]

            # rho <= 0 keeps the raw momentum; not treated as an error
            if rho_local > 0.0:
                ux_local /= rho_local
                uy_local /= rho_local

            speed = math.sqrt(ux_local * ux_local + uy_local * uy_local)
            if speed > u_max:
                scale = u_max / speed
                ux_local *= scale
                uy_local *= scale

            rho[j, i] = rho_local
            ux[j, i] = ux_local
            uy[j, i] = uy_local

            for k in range(q):
                f_eq = equilibrium_numba(k, rho_local, ux_local, uy_local, ex, ey, w)
                f[k, j, i] = (1.0 - omega) * f[k, j, i] + omega * f_eq
