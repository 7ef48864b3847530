"""
Flow Visualization

Static matplotlib rendering of the tunnel: speed map with obstacles and
an optional streamline overlay.
"""

import matplotlib.pyplot as plt
import numpy as np
from .observables import compute_velocity_magnitude

# Speeds of about 1/6 lattice units saturate the color map
SPEED_SCALE = 6.0
OBSTACLE_COLOR = (0.05, 0.05, 0.05)


def speed_colors(ux, uy):
    """Speed normalised to [0, 1] for color mapping."""
    return np.clip(compute_velocity_magnitude(ux, uy) * SPEED_SCALE, 0.0, 1.0)


def plot_speed(ux, uy, solid=None, ax=None, cmap="jet"):
    """
    Plot the speed field with obstacles drawn dark.

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8 * ux.shape[0] / ux.shape[1]))

    rgba = plt.get_cmap(cmap)(speed_colors(ux, uy))
    if solid is not None:
        rgba[solid, :3] = OBSTACLE_COLOR

    ax.imshow(rgba, origin="upper", interpolation="bilinear")
    ax.set_xlim(-0.5, ux.shape[1] - 0.5)
    ax.set_ylim(ux.shape[0] - 0.5, -0.5)
    ax.set_axis_off()
    return ax


def plot_streamlines(polylines, ax=None, color="white", alpha=0.45, linewidth=1.2):
    """Draw streamline polylines (each of shape (n, 2))."""
    if ax is None:
        _, ax = plt.subplots()

    for line in polylines:
        if len(line) < 2:
            continue
        ax.plot(line[:, 0], line[:, 1], color=color, alpha=alpha,
                linewidth=linewidth, solid_capstyle="round")
    return ax


def plot_flow(snapshot, polylines=None, ax=None):
    """Speed map plus streamlines for a driver snapshot."""
    ax = plot_speed(snapshot.ux, snapshot.uy, snapshot.solid, ax=ax)
    if polylines:
        plot_streamlines(polylines, ax=ax)
    ax.set_title(f"Step {snapshot.step}")
    return ax
