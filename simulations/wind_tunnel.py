"""
Virtual Wind Tunnel Demo

Flow past an obstacle in the open tunnel, with streamlines.

Obstacle: a cylinder, or the dark pixels of an image given as the first
command line argument.

Usage:
    python simulations/wind_tunnel.py [image.png]
"""

import sys
import os
import time

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel.driver import SimulationConfig, WindTunnel
from windtunnel.obstacles import create_cylinder_mask
from windtunnel.observables import drag_coefficient, max_speed
from windtunnel.plotting import plot_flow

# Parameters
NX, NY = 200, 100
RADIUS = 10
VISCOSITY = 0.04
WIND_SPEED = 0.1
NUM_FRAMES = 500
REPORT_EVERY = 100
OUTPUT = "wind_tunnel.png"


def main():
    print("=" * 50)
    print("Virtual Wind Tunnel")
    print("=" * 50)

    config = SimulationConfig(viscosity=VISCOSITY, wind_speed=WIND_SPEED,
                              grid_width=NX, grid_height=NY)
    tunnel = WindTunnel(config)

    if len(sys.argv) > 1:
        tunnel.load_image(sys.argv[1])
        length = NY / 4
    else:
        tunnel.load_mask(create_cylinder_mask(NX, NY, NX // 4, NY // 2, RADIUS))
        length = 2 * RADIUS

    solver = tunnel.solver
    print(f"Grid: {solver.width}x{solver.height}, omega={solver.omega:.4f}, "
          f"solid nodes: {int(np.sum(solver.obstacle_mask))}")

    start = time.time()
    for frame in range(NUM_FRAMES):
        snapshot = tunnel.advance_frame()

        if (frame + 1) % REPORT_EVERY == 0:
            F_x, F_y = solver.obstacle_force()
            C_D = drag_coefficient(F_x, WIND_SPEED, length)
            print(f"Frame {frame + 1}: step={snapshot.step}, C_D={C_D:.4f}, "
                  f"max |u|={max_speed(snapshot.ux, snapshot.uy):.4f}")

    elapsed = time.time() - start
    mlups = snapshot.step * solver.width * solver.height / elapsed / 1e6
    print(f"\nDone: {elapsed:.1f}s, {mlups:.2f} MLUPS")

    polylines = tunnel.streamlines(snapshot, jitter=0.5, rng=np.random.default_rng(0))
    fig, ax = plt.subplots(figsize=(10, 10 * solver.height / solver.width))
    plot_flow(snapshot, polylines, ax=ax)
    fig.savefig(OUTPUT, dpi=150, bbox_inches="tight")
    print(f"Saved {OUTPUT}")


if __name__ == "__main__":
    main()
