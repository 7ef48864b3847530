"""
Tests for the wind tunnel frame driver.
"""

import pytest
import numpy as np
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dataclasses import replace

from windtunnel.driver import SimulationConfig, SimulationState, WindTunnel
from windtunnel.obstacles import create_cylinder_mask


@pytest.fixture
def config():
    return SimulationConfig(grid_width=24, grid_height=12)


@pytest.fixture
def tunnel(config):
    return WindTunnel(config)


class TestConfig:

    def test_defaults(self):
        config = SimulationConfig()

        assert config.viscosity == 0.04
        assert config.wind_speed == 0.1
        assert (config.grid_width, config.grid_height) == (200, 200)
        assert config.contrast_threshold == 100
        assert config.steps_per_frame == 6

    def test_resize_recreates_solver(self, tunnel, config):
        old = tunnel.solver

        tunnel.apply_config(replace(config, grid_width=30))

        assert tunnel.solver is not old
        assert (tunnel.solver.width, tunnel.solver.height) == (30, 12)

    def test_viscosity_change_keeps_solver(self, tunnel, config):
        old = tunnel.solver
        tunnel.start()
        tunnel.advance_frame()

        tunnel.apply_config(replace(config, viscosity=0.1))

        assert tunnel.solver is old
        assert np.isclose(tunnel.solver.omega, 1.0 / 0.8)
        assert tunnel.solver.step_count == 6


class TestFrames:

    def test_idle_does_not_step(self, tunnel):
        snapshot = tunnel.advance_frame()

        assert tunnel.state == SimulationState.IDLE
        assert snapshot.step == 0

    def test_running_steps_a_batch(self, tunnel):
        tunnel.start()

        tunnel.advance_frame()
        snapshot = tunnel.advance_frame()

        assert snapshot.step == 12
        assert np.max(snapshot.ux) > 0.0

    def test_pause(self, tunnel):
        tunnel.start()
        tunnel.advance_frame()
        tunnel.pause()

        snapshot = tunnel.advance_frame()

        assert tunnel.state == SimulationState.PAUSED
        assert snapshot.step == 6

    def test_snapshot_is_a_copy(self, tunnel):
        tunnel.start()
        first = tunnel.advance_frame()
        saved = first.ux.copy()

        tunnel.advance_frame()
        first.ux[0, 0] = 42.0

        np.testing.assert_array_equal(first.ux[1:], saved[1:])
        assert tunnel.solver.ux[0, 0] != 42.0

    def test_reset_keeps_obstacles(self, tunnel, config):
        mask = create_cylinder_mask(24, 12, 8, 6, 2)
        tunnel.set_obstacles(mask)
        tunnel.start()
        tunnel.advance_frame()

        tunnel.reset()

        assert tunnel.state == SimulationState.IDLE
        assert tunnel.solver.step_count == 0
        assert np.all(tunnel.solver.ux == 0.0)
        np.testing.assert_array_equal(tunnel.solver.obstacle_mask, mask)


class TestObstacles:

    def test_mismatched_mask_ignored(self, tunnel):
        mask = create_cylinder_mask(24, 12, 8, 6, 2)
        tunnel.set_obstacles(mask)

        assert not tunnel.set_obstacles(np.ones((10, 10), dtype=bool))

        np.testing.assert_array_equal(tunnel.solver.obstacle_mask, mask)

    def test_load_mask_resizes_and_starts(self, tunnel):
        mask = create_cylinder_mask(40, 16, 10, 8, 3)

        tunnel.load_mask(mask)

        assert (tunnel.config.grid_width, tunnel.config.grid_height) == (40, 16)
        assert tunnel.state == SimulationState.RUNNING
        np.testing.assert_array_equal(tunnel.solver.obstacle_mask, mask)

    def test_load_image(self, config, tmp_path):
        image = np.full((30, 60, 3), 255, dtype=np.uint8)
        image[10:20, 20:30] = 0
        path = tmp_path / "obstacle.png"
        plt.imsave(path, image)

        tunnel = WindTunnel(replace(config, max_grid_size=30))
        tunnel.load_image(str(path))

        assert (tunnel.solver.width, tunnel.solver.height) == (30, 16)
        assert tunnel.solver.obstacle_mask.any()
        assert tunnel.state == SimulationState.RUNNING


class TestStreamlines:

    def test_streamlines_from_inlet(self, tunnel):
        tunnel.start()
        for _ in range(10):
            tunnel.advance_frame()

        lines = tunnel.streamlines(jitter=0.5, rng=np.random.default_rng(1))

        assert len(lines) == 3
        assert all(line[0, 0] == 0.0 for line in lines)
        assert max(len(line) for line in lines) > 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
