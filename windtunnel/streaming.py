"""
Streaming and Boundary Resolution

Pull-scheme propagation of the distribution functions:

    f_i(x, t + dt) = f_i(x - e_i, t)

Each fluid site gathers the population arriving from its upstream
neighbour. When that neighbour is not ordinary fluid the arriving value
is resolved by a boundary rule instead:

- solid neighbour: bounce-back, f_i(x) = f_{i*}(x) (no-slip wall)
- left of the domain: inlet, free-stream equilibrium (rho = 1, u = (U, 0))
- right of the domain: outlet, zero-gradient copy of the last column
- above/below the domain: free-stream equilibrium, as the inlet

The top and bottom edges therefore behave like an unbounded tunnel rather
than free-slip walls.
"""

from numba import njit
from .equilibrium import equilibrium_numba


@njit(cache=True)
def stream_pull_numba(f, f_out, solid, rho, ux, uy, inlet_speed,
                      ex, ey, w, opposite):
    """
    Streaming pass with boundary resolution (CPU, numba).

    Reads only ``f`` and ``solid``; writes ``f_out`` at fluid sites and the
    macroscopic fields at solid sites.

    Parameters
    ----------
    f : ndarray
        Current distribution, shape (Q, ny, nx)
    f_out : ndarray
        Next distribution, shape (Q, ny, nx)
    solid : ndarray
        Boolean obstacle mask, shape (ny, nx)
    rho, ux, uy : ndarray
        Macroscopic fields, shape (ny, nx). Solid sites are reset to
        rho = 1, u = 0.
    inlet_speed : float
        Free-stream x-velocity imposed at the inlet, top and bottom
    ex, ey : ndarray
        Lattice velocity components
    w : ndarray
        Lattice weights
    opposite : ndarray
        Opposite direction indices
    """
    q, ny, nx = f.shape

    for j in range(ny):
        for i in range(nx):
            if solid[j, i]:
                rho[j, i] = 1.0
                ux[j, i] = 0.0
                uy[j, i] = 0.0
                continue

            for k in range(q):
                i_src = i - ex[k]
                j_src = j - ey[k]

                if 0 <= i_src < nx and 0 <= j_src < ny:
                    if solid[j_src, i_src]:
                        # Bounce-back: reflect what this site sent into the wall
                        f_out[k, j, i] = f[opposite[k], j, i]
                    else:
                        f_out[k, j, i] = f[k, j_src, i_src]
                elif i_src < 0:
                    # Inlet
                    f_out[k, j, i] = equilibrium_numba(k, 1.0, inlet_speed, 0.0,
                                                       ex, ey, w)
                elif i_src >= nx:
                    # Outlet: zero gradient
                    f_out[k, j, i] = f[k, j, nx - 1]
                else:
                    # Top / bottom: free stream
                    f_out[k, j, i] = equilibrium_numba(k, 1.0, inlet_speed, 0.0,
                                                       ex, ey, w)
