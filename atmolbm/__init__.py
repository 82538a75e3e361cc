"""Atmospheric lattice Boltzmann modelling with terrain, surface physics and VTK output."""

__version__ = "1.0.0"

__all__ = ["cli", "components", "physics", "simulation", "terrain"]