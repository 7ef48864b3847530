"""
Lattice Boltzmann wind tunnel: D2Q9 solver and streamline tracer.
"""

from .solver import FluidSolver
from .tracer import StreamlineTracer
from .driver import SimulationConfig, SimulationState, WindTunnel

__version__ = "0.1.0"
