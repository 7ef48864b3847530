"""
Streamline Tracing

Integrates paths tangent to a frozen velocity field with forward Euler
steps of fixed length:

    x_{n+1} = x_n + h * u(x_n) / |u(x_n)|

Velocities are sampled bilinearly between lattice sites. A path stops at
stagnation (|u| < 0.001), on a solid site, at the grid edge, or after
``max_steps`` steps. Euler is used rather than RK4 since paths are
recomputed every rendered frame.
"""

import math

import numpy as np
from numba import njit

STAGNATION_SPEED = 0.001
DEFAULT_STEP_SIZE = 0.5
DEFAULT_STRIDE = 3
DEFAULT_MARGIN = 2


@njit(cache=True)
def sample_bilinear(field, x, y):
    """
    Bilinear sample of ``field`` (shape (ny, nx)) at (x, y).

    x is clamped to [0, nx - 1.001]; a sample whose lower or upper row
    falls outside the grid is 0.
    """
    ny, nx = field.shape
    xx = max(0.0, min(x, nx - 1.001))

    x0 = int(math.floor(xx))
    y0 = int(math.floor(y))
    x1 = min(x0 + 1, nx - 1)
    y1 = y0 + 1

    if y0 < 0 or y1 >= ny:
        return 0.0

    dx = xx - x0
    dy = y - y0

    v0 = field[y0, x0] * (1.0 - dx) + field[y0, x1] * dx
    v1 = field[y1, x0] * (1.0 - dx) + field[y1, x1] * dx
    return v0 * (1.0 - dy) + v1 * dy


@njit(cache=True)
def trace_numba(ux, uy, solid, x, y, step_size, max_steps, out):
    """
    Trace one streamline into ``out`` (shape (max_steps, 2)).

    Returns the number of points written.
    """
    ny, nx = ux.shape
    n = 0

    for _ in range(max_steps):
        if x < 0.0 or x >= nx - 1 or y < 0.0 or y >= ny - 1:
            break

        u = sample_bilinear(ux, x, y)
        v = sample_bilinear(uy, x, y)
        speed = math.sqrt(u * u + v * v)
        if speed < STAGNATION_SPEED:
            break

        if solid[int(math.floor(y)), int(math.floor(x))]:
            break

        x += u / speed * step_size
        y += v / speed * step_size

        if x < 0.0 or x >= nx - 1 or y < 0.0 or y >= ny - 1:
            break

        out[n, 0] = x
        out[n, 1] = y
        n += 1

    return n


class StreamlineTracer:
    """
    Streamline generator over a velocity snapshot.

    The arrays are used as given, not copied: callers must not step the
    solver while a trace is running (the wind tunnel driver passes copies).

    Parameters
    ----------
    ux, uy : ndarray
        Velocity fields, shape (ny, nx)
    solid : ndarray
        Boolean obstacle mask, shape (ny, nx)
    step_size : float
        Distance advanced per Euler step (lattice units)
    max_steps : int, optional
        Step budget per streamline (default 2.5 * nx)
    """

    def __init__(self, ux, uy, solid, step_size=DEFAULT_STEP_SIZE, max_steps=None):
        if step_size <= 0:
            raise ValueError(f"step_size must be positive, got {step_size}")

        self.ux = np.asarray(ux, dtype=np.float64)
        self.uy = np.asarray(uy, dtype=np.float64)
        self.solid = np.asarray(solid, dtype=bool)
        if not (self.ux.shape == self.uy.shape == self.solid.shape):
            raise ValueError(
                f"field shapes differ: ux {self.ux.shape}, uy {self.uy.shape}, "
                f"solid {self.solid.shape}"
            )

        self.height, self.width = self.ux.shape
        self.step_size = float(step_size)
        if max_steps is None:
            max_steps = int(self.width * 2.5)
        self.max_steps = int(max_steps)

    @classmethod
    def from_solver(cls, solver, **kwargs):
        """Tracer over the solver's current fields (no copy)."""
        return cls(solver.ux, solver.uy, solver.obstacle_mask, **kwargs)

    def _inside(self, x, y):
        return 0.0 <= x < self.width - 1 and 0.0 <= y < self.height - 1

    def sample(self, field, x, y):
        """Bilinear sample of ``field`` at (x, y)."""
        return sample_bilinear(field, float(x), float(y))

    def trace(self, seed):
        """
        Yield the points of the streamline starting at ``seed``.

        The seed itself is not yielded. Every yielded point lies inside
        [0, width - 1) x [0, height - 1).

        Parameters
        ----------
        seed : tuple of float
            Starting position (x, y) in lattice coordinates

        Yields
        ------
        point : tuple of float
        """
        x, y = float(seed[0]), float(seed[1])

        for _ in range(self.max_steps):
            if not self._inside(x, y):
                return

            u = sample_bilinear(self.ux, x, y)
            v = sample_bilinear(self.uy, x, y)
            speed = math.sqrt(u * u + v * v)
            if speed < STAGNATION_SPEED:
                return

            if self.solid[int(math.floor(y)), int(math.floor(x))]:
                return

            x += u / speed * self.step_size
            y += v / speed * self.step_size

            if not self._inside(x, y):
                return

            yield x, y

    def trace_fast(self, seed):
        """
        Numba version of ``trace``.

        Returns
        -------
        points : ndarray
            Traced points, shape (n, 2)
        """
        out = np.empty((self.max_steps, 2), dtype=np.float64)
        n = trace_numba(self.ux, self.uy, self.solid, float(seed[0]), float(seed[1]),
                        self.step_size, self.max_steps, out)
        return out[:n].copy()

    def polyline(self, seed):
        """Seed followed by its traced points, shape (n + 1, 2)."""
        points = self.trace_fast(seed)
        start = np.array([[float(seed[0]), float(seed[1])]])
        return np.concatenate([start, points])

    def seed_points(self, stride=DEFAULT_STRIDE, margin=DEFAULT_MARGIN,
                    jitter=0.0, rng=None):
        """
        Seeds along the inlet edge (x = 0).

        Parameters
        ----------
        stride : int
            Rows between seeds
        margin : int
            Rows skipped at the top and bottom
        jitter : float
            Maximum random y offset added to each seed
        rng : numpy.random.Generator, optional
            Source of the jitter (default: a fresh generator)

        Returns
        -------
        seeds : list of tuple
        """
        if jitter and rng is None:
            rng = np.random.default_rng()

        seeds = []
        for y in range(margin, self.height - margin, stride):
            offset = jitter * rng.random() if jitter else 0.0
            seeds.append((0.0, y + offset))
        return seeds

    def trace_all(self, seeds=None):
        """Polylines for ``seeds`` (default: ``seed_points()``)."""
        if seeds is None:
            seeds = self.seed_points()
        return [self.polyline(seed) for seed in seeds]
