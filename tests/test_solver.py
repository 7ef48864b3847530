"""
Tests for the wind tunnel fluid solver.

Covers configuration, the rest-state fixed point, inflow propagation,
the speed ceiling, obstacle mask handling and determinism.
"""

import warnings

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel.lattice import W, Q, U_MAX
from windtunnel.solver import FluidSolver
from windtunnel.obstacles import create_cylinder_mask


class TestConfiguration:
    """Grid allocation and parameter handling."""

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-3, 5), (5, -1)])
    def test_non_positive_dimensions_rejected(self, width, height):
        with pytest.raises(ValueError):
            FluidSolver(width, height, 0.04)

    @pytest.mark.parametrize("width, height", [(2.5, 10), (10, "8"), (True, 4)])
    def test_non_integer_dimensions_rejected(self, width, height):
        with pytest.raises(ValueError):
            FluidSolver(width, height, 0.04)

    def test_initial_state_at_rest(self):
        solver = FluidSolver(12, 7, 0.04)

        assert solver.populations.shape == (Q, 7, 12)
        for k in range(Q):
            assert np.all(solver.populations[k] == W[k])
        assert np.all(solver.rho == 1.0)
        assert np.all(solver.ux == 0.0)
        assert np.all(solver.uy == 0.0)
        assert not solver.obstacle_mask.any()
        assert solver.step_count == 0

    def test_omega_from_viscosity(self):
        solver = FluidSolver(10, 10, 0.04)

        assert np.isclose(solver.omega, 1.0 / 0.62)

    def test_set_viscosity_recomputes_omega(self):
        solver = FluidSolver(10, 10, 0.04)

        solver.set_viscosity(0.1)

        assert solver.viscosity == 0.1
        assert np.isclose(solver.omega, 1.0 / 0.8)

    @pytest.mark.parametrize("viscosity", [0.0, -0.1])
    def test_unstable_viscosity_warns_without_clamping(self, viscosity):
        solver = FluidSolver(10, 10, 0.04)

        with pytest.warns(RuntimeWarning):
            solver.set_viscosity(viscosity)

        assert np.isclose(solver.omega, 1.0 / (3.0 * viscosity + 0.5))

    def test_unstable_viscosity_warning_points_at_caller(self):
        here = os.path.basename(__file__)

        with pytest.warns(RuntimeWarning) as record:
            solver = FluidSolver(10, 10, -0.2)
        assert os.path.basename(record[0].filename) == here

        with pytest.warns(RuntimeWarning) as record:
            solver.configure(8, 8, -0.2)
        assert os.path.basename(record[0].filename) == here

        with pytest.warns(RuntimeWarning) as record:
            solver.set_viscosity(-0.2)
        assert os.path.basename(record[0].filename) == here

    def test_stable_viscosity_does_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            FluidSolver(10, 10, 0.04)

    def test_configure_reallocates(self):
        solver = FluidSolver(10, 10, 0.04)
        solver.set_obstacle_mask(np.ones(100, dtype=bool))
        solver.run(3, 0.1)

        solver.configure(8, 6, 0.1)

        assert (solver.width, solver.height) == (8, 6)
        assert solver.rho.shape == (6, 8)
        assert solver.populations.shape == (Q, 6, 8)
        assert not solver.obstacle_mask.any()
        assert solver.step_count == 0

    def test_fields_are_read_only(self):
        solver = FluidSolver(5, 5, 0.04)

        with pytest.raises(ValueError):
            solver.ux[0, 0] = 1.0
        with pytest.raises(ValueError):
            solver.obstacle_mask[0, 0] = True


class TestObstacleMask:
    """Mask injection and size-mismatch tolerance."""

    def test_flat_mask_is_row_major(self):
        solver = FluidSolver(6, 4, 0.04)
        flat = [False] * 24
        flat[1 * 6 + 4] = True  # x = 4, y = 1

        assert solver.set_obstacle_mask(flat)

        assert solver.obstacle_mask[1, 4]
        assert solver.obstacle_mask.sum() == 1

    def test_wrong_size_mask_is_ignored(self):
        solver = FluidSolver(10, 8, 0.04)
        mask = create_cylinder_mask(10, 8, 5, 4, 2)
        solver.set_obstacle_mask(mask)

        accepted = solver.set_obstacle_mask(np.ones(81, dtype=bool))

        assert not accepted
        np.testing.assert_array_equal(solver.obstacle_mask, mask)
        assert solver.rejected_masks == 1

    def test_mask_is_copied(self):
        solver = FluidSolver(6, 6, 0.04)
        mask = np.zeros((6, 6), dtype=bool)
        solver.set_obstacle_mask(mask)

        mask[3, 3] = True

        assert not solver.obstacle_mask[3, 3]

    def test_step_does_not_touch_mask(self):
        solver = FluidSolver(20, 10, 0.04)
        mask = create_cylinder_mask(20, 10, 8, 5, 2)
        solver.set_obstacle_mask(mask)

        solver.run(10, 0.1)

        np.testing.assert_array_equal(solver.obstacle_mask, mask)

    def test_solid_cells_report_rest(self):
        solver = FluidSolver(30, 16, 0.04)
        mask = create_cylinder_mask(30, 16, 10, 8, 3)
        solver.set_obstacle_mask(mask)

        solver.run(20, 0.1)

        assert np.all(solver.rho[mask] == 1.0)
        assert np.all(solver.ux[mask] == 0.0)
        assert np.all(solver.uy[mask] == 0.0)


class TestDynamics:
    """Physical behaviour of the step operation."""

    def test_rest_is_fixed_point(self):
        """With zero inflow the fluid stays at rho = 1, u = 0."""
        solver = FluidSolver(16, 12, 0.04)
        mask = create_cylinder_mask(16, 12, 6, 6, 2)
        solver.set_obstacle_mask(mask)

        solver.run(100, 0.0)

        fluid = ~mask
        np.testing.assert_allclose(solver.rho[fluid], 1.0, atol=1e-12)
        np.testing.assert_allclose(solver.ux[fluid], 0.0, atol=1e-12)
        np.testing.assert_allclose(solver.uy[fluid], 0.0, atol=1e-12)

    def test_inflow_front_moves_one_cell_per_step(self):
        """After n steps only the first n columns have felt the inlet."""
        solver = FluidSolver(41, 41, 0.04)
        mid = 20

        solver.run(5, 0.1)

        assert solver.ux[mid, 0] > 0.0
        assert solver.ux[mid, 0] > solver.ux[mid, 2]
        np.testing.assert_allclose(solver.ux[mid, 5:35], 0.0, atol=1e-14)

    def test_converges_to_free_stream(self):
        """10x10 tunnel, nu = 0.04, U = 0.1: near-uniform flow after 50 steps."""
        solver = FluidSolver(10, 10, 0.04)

        solver.run(50, 0.1)

        profile = solver.ux[:, 9]
        np.testing.assert_allclose(profile, profile[::-1], atol=1e-10)

        # Free-stream rows carry the fastest flow; the core lags behind
        assert 0.085 < profile[0] < 0.11
        assert profile[0] >= profile[1:9].max()
        assert 0.03 < profile[4] < profile[0] - 0.01
        assert np.max(np.abs(solver.uy)) < 0.05

    def test_mirror_symmetry_without_obstacle(self):
        """Top and bottom are equivalent, so uy is antisymmetric."""
        solver = FluidSolver(10, 10, 0.04)

        solver.run(50, 0.1)

        np.testing.assert_allclose(solver.uy, -solver.uy[::-1, :], atol=1e-10)
        np.testing.assert_allclose(solver.ux, solver.ux[::-1, :], atol=1e-10)

    @pytest.mark.parametrize("inlet_speed", [0.0, 0.1, 0.2, 0.35, 0.5])
    def test_speed_ceiling(self, inlet_speed):
        """|u| never exceeds the ceiling after a step."""
        solver = FluidSolver(24, 12, 0.04)
        solver.set_obstacle_mask(create_cylinder_mask(24, 12, 8, 6, 2))

        for _ in range(40):
            solver.step(inlet_speed)
            speed = solver.speed()
            assert np.all(np.isfinite(speed))
            assert np.all(speed <= U_MAX + 1e-12)

    def test_determinism(self):
        """Identical solvers fed identical steps agree bit for bit."""
        mask = create_cylinder_mask(30, 14, 10, 7, 3)
        a = FluidSolver(30, 14, 0.04)
        b = FluidSolver(30, 14, 0.04)
        a.set_obstacle_mask(mask)
        b.set_obstacle_mask(mask)

        for speed in [0.05, 0.1, 0.1, 0.15] * 8:
            a.step(speed)
            b.step(speed)

        np.testing.assert_array_equal(a.rho, b.rho)
        np.testing.assert_array_equal(a.ux, b.ux)
        np.testing.assert_array_equal(a.uy, b.uy)

    def test_step_counter(self):
        solver = FluidSolver(8, 8, 0.04)

        solver.step(0.1)
        solver.run(4, 0.1)

        assert solver.step_count == 5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
