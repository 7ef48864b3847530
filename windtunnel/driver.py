"""
Wind Tunnel Frame Driver

Runs the solver at a fixed batch of steps per rendered frame and hands
consumers copies of the fields, so a renderer or tracer never reads an
array the solver is writing.
"""

import logging
from collections import namedtuple
from dataclasses import dataclass, replace
from enum import Enum

import numpy as np
from .solver import FluidSolver
from .tracer import StreamlineTracer
from .obstacles import (
    DEFAULT_THRESHOLD, MAX_GRID_SIZE, mask_size_matches, load_obstacle_mask,
)

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


@dataclass
class SimulationConfig:
    viscosity: float = 0.04
    wind_speed: float = 0.1
    grid_width: int = MAX_GRID_SIZE
    grid_height: int = MAX_GRID_SIZE
    contrast_threshold: float = DEFAULT_THRESHOLD
    steps_per_frame: int = 6
    max_grid_size: int = MAX_GRID_SIZE


FlowSnapshot = namedtuple("FlowSnapshot", ["rho", "ux", "uy", "solid", "step"])


class WindTunnel:
    """
    Owns a solver and advances it frame by frame.

    Parameters
    ----------
    config : SimulationConfig, optional
        Initial configuration (defaults if omitted)
    """

    def __init__(self, config=None):
        self.config = config if config is not None else SimulationConfig()
        self.state = SimulationState.IDLE
        self.solver = FluidSolver(self.config.grid_width, self.config.grid_height,
                                  self.config.viscosity)

    def apply_config(self, config):
        """
        Switch to a new configuration.

        The solver is re-created when the grid size changes (losing the
        flow and the obstacles); otherwise only the viscosity is updated.
        """
        solver = self.solver
        if solver.width != config.grid_width or solver.height != config.grid_height:
            logger.debug("Grid resized to %dx%d, re-creating solver",
                         config.grid_width, config.grid_height)
            self.solver = FluidSolver(config.grid_width, config.grid_height,
                                      config.viscosity)
        elif solver.viscosity != config.viscosity:
            solver.set_viscosity(config.viscosity)
        self.config = config

    def set_obstacles(self, mask):
        """
        Inject an obstacle mask if it matches the current grid.

        Returns
        -------
        accepted : bool
        """
        if not mask_size_matches(mask, self.config.grid_width, self.config.grid_height):
            logger.debug("Obstacle mask of size %d does not fit %dx%d grid",
                         np.size(mask), self.config.grid_width, self.config.grid_height)
            return False
        return self.solver.set_obstacle_mask(mask)

    def load_mask(self, mask):
        """
        Resize the grid to a 2D mask, inject it and start running.
        """
        mask = np.asarray(mask, dtype=bool)
        ny, nx = mask.shape
        self.apply_config(replace(self.config, grid_width=nx, grid_height=ny))
        self.set_obstacles(mask)
        self.start()

    def load_image(self, path):
        """
        Build the obstacle mask from an image file and start running.

        The grid is resized to the image's aspect ratio.
        """
        mask = load_obstacle_mask(path, self.config.contrast_threshold,
                                  self.config.max_grid_size)
        self.load_mask(mask)

    def start(self):
        self.state = SimulationState.RUNNING

    def pause(self):
        if self.state == SimulationState.RUNNING:
            self.state = SimulationState.PAUSED

    def reset(self):
        """Stop and restart from a fluid at rest, keeping the obstacles."""
        mask = self.solver.obstacle_mask.copy()
        self.solver.configure(self.config.grid_width, self.config.grid_height,
                              self.config.viscosity)
        self.solver.set_obstacle_mask(mask)
        self.state = SimulationState.IDLE

    def advance_frame(self):
        """
        Run one frame's batch of steps (only while RUNNING).

        Returns
        -------
        snapshot : FlowSnapshot
            Copies of the fields after the batch
        """
        if self.state == SimulationState.RUNNING:
            self.solver.run(self.config.steps_per_frame, self.config.wind_speed)
        return self.snapshot()

    def snapshot(self):
        """Copies of the current fields."""
        solver = self.solver
        return FlowSnapshot(solver.rho.copy(), solver.ux.copy(), solver.uy.copy(),
                            solver.obstacle_mask.copy(), solver.step_count)

    def streamlines(self, snapshot=None, jitter=0.0, rng=None, **kwargs):
        """
        Streamline polylines seeded along the inlet.

        Parameters
        ----------
        snapshot : FlowSnapshot, optional
            Fields to trace (default: a fresh snapshot)
        jitter : float
            Random y offset of the seeds
        rng : numpy.random.Generator, optional
            Source of the jitter
        **kwargs
            Passed to StreamlineTracer (step_size, max_steps)
        """
        if snapshot is None:
            snapshot = self.snapshot()
        tracer = StreamlineTracer(snapshot.ux, snapshot.uy, snapshot.solid, **kwargs)
        return tracer.trace_all(tracer.seed_points(jitter=jitter, rng=rng))
