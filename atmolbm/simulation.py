"""Lattice Boltzmann atmosphere over terrain, with the enhanced physics coupled in.

Three-dimensional fields are indexed ``[z, y, x]``, surface fields ``[y, x]``,
velocity carries its three components in a trailing axis and the distribution
functions are indexed ``[q, z, y, x]`` over the D3Q19 lattice.
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np

from atmolbm.physics import (
    DEFAULT_SOLAR_CONSTANT,
    DEFAULT_SOLAR_ZENITH,
    AtmosphericPhysics,
    coriolis_force,
    orographic_lifting,
    terrain_following_boundary,
)
from atmolbm.terrain import Domain, GeographicCoordinates, TerrainManager

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEFAULT_DEM_FILE = "darling_downs_dem.bin"
DEFAULT_OUTPUT_PREFIX = "atmospheric_enhanced"

SEA_LEVEL_TEMPERATURE = 288.0
LAPSE_RATE = 0.0065
SEA_LEVEL_PRESSURE = 101325.0
GAS_CONSTANT = 287.0
GRAVITY = 9.81
KELVIN_OFFSET = 273.15

PROGRESS_INTERVAL = 50
OUTPUT_INTERVAL = 250

_VELOCITIES = np.array(
    [
        (0, 0, 0),
        (1, 0, 0), (-1, 0, 0), (0, 1, 0), (0, -1, 0), (0, 0, 1), (0, 0, -1),
        (1, 1, 0), (-1, -1, 0), (1, -1, 0), (-1, 1, 0),
        (1, 0, 1), (-1, 0, -1), (1, 0, -1), (-1, 0, 1),
        (0, 1, 1), (0, -1, -1), (0, 1, -1), (0, -1, 1),
    ],
    dtype=np.int64,
)
_WEIGHTS = np.array([1 / 3] + [1 / 18] * 6 + [1 / 36] * 12, dtype=np.float32)
_OPPOSITE = np.array(
    [int(np.flatnonzero((_VELOCITIES == -e).all(axis=1))[0]) for e in _VELOCITIES]
)
Q = len(_VELOCITIES)


@dataclass(frozen=True)
class SimulationStats:
    """Ranges of air and surface temperature in Celsius and the peak wind speed."""

    air_temperature_min: float
    air_temperature_max: float
    surface_temperature_min: float
    surface_temperature_max: float
    max_velocity: float


class AtmosphericLBMEnhanced:
    """A lattice Boltzmann atmosphere with terrain, surface energy, mixing and Coriolis."""

    def __init__(self, domain: Domain, grid_spacing: float, viscosity: float,
                 origin: GeographicCoordinates):
        if not grid_spacing > 0:
            raise ValueError(f"grid spacing must be positive, got {grid_spacing!r}")
        if not viscosity > 0:
            raise ValueError(f"viscosity must be positive, got {viscosity!r}")
        self.domain = domain
        self.dx = self.dy = self.dz = float(grid_spacing)
        self.nu = float(viscosity)
        self.origin = origin
        self.dt = 0.1 * self.dx

        nu_lattice = self.nu * self.dt / (self.dx * self.dx)
        self.omega = np.float32(1.0 / (3.0 * nu_lattice + 0.5))

        self.terrain = TerrainManager(domain, self.dx, origin)
        self.physics = AtmosphericPhysics(domain, self.dx, self.dt, origin)

        volume = (domain.nz, domain.ny, domain.nx)
        surface = (domain.ny, domain.nx)
        self.velocity = np.zeros(volume + (3,), dtype=np.float32)
        self.density = np.zeros(volume, dtype=np.float32)
        self.temperature = np.zeros(volume, dtype=np.float32)
        self.pressure = np.zeros(volume, dtype=np.float32)
        self.surface_temperature = np.zeros(surface, dtype=np.float32)
        self.flags = np.zeros(volume, dtype=np.uint8)
        self.f = np.zeros((Q,) + volume, dtype=np.float32)
        self._initialized = False

        self._log_info()

    def initialize(self, dem_path: PathLike = DEFAULT_DEM_FILE) -> bool:
        """Load the terrain and set up the atmosphere.

        Returns True when the elevation file was read, False when the
        synthetic terrain was used instead.
        """
        loaded = self.terrain.load_srtm_data(dem_path)
        if not loaded:
            logger.info("Using synthetic terrain for testing")
        self._init_atmospheric_profile()
        self._apply_terrain_following_grid()
        self._init_surface_temperature()
        self.f[...] = self.density[None] / np.float32(19.0)
        self._initialized = True
        logger.info("Enhanced atmospheric fields initialised")
        return loaded

    def _level_heights(self) -> np.ndarray:
        return np.arange(self.domain.nz, dtype=np.float32) * np.float32(self.dz)

    def _init_atmospheric_profile(self) -> None:
        height = self._level_heights()
        t_surface = np.float32(SEA_LEVEL_TEMPERATURE)
        lapse = np.float32(LAPSE_RATE)
        t_height = t_surface - lapse * height
        exponent = np.float32(GRAVITY / (GAS_CONSTANT * LAPSE_RATE))
        p_height = np.float32(SEA_LEVEL_PRESSURE) * np.power(t_height / t_surface, exponent)
        rho_height = p_height / (np.float32(GAS_CONSTANT) * t_height)

        self.temperature[...] = t_height[:, None, None]
        self.pressure[...] = p_height[:, None, None]
        self.density[...] = rho_height[:, None, None]
        self.flags[...] = 0
        self.velocity[...] = 0.0

        u_wind = (np.float32(10.0) * np.log(np.maximum(height, np.float32(10.0)) / np.float32(0.1))
                  / np.float32(math.log(10.0 / 0.1)))
        v_wind = np.float32(2.0) + np.float32(5.0) * height / np.float32(2000.0)
        self.velocity[..., 0] = u_wind[:, None, None]
        self.velocity[..., 1] = v_wind[:, None, None]

    def _apply_terrain_following_grid(self) -> None:
        levels = np.trunc(self.terrain.elevation / np.float32(self.dz))
        z = np.arange(self.domain.nz, dtype=np.float32)[:, None, None]
        solid = z <= levels[None]
        self.flags[solid] = 1
        self.velocity[solid] = 0.0

    def _init_surface_temperature(self) -> None:
        self.surface_temperature[...] = (
            np.float32(SEA_LEVEL_TEMPERATURE) - np.float32(LAPSE_RATE) * self.terrain.elevation
        )

    def run_timestep(self) -> None:
        """Advance the whole model by one time step."""
        if not self._initialized:
            raise RuntimeError("simulation must be initialised before it is run")
        self._streaming_step()
        self._collision_step()

        self.physics.compute_stability(self.temperature, self.pressure)
        self.surface_temperature = self.physics.update_surface(
            self.temperature, self.surface_temperature, self.terrain,
            DEFAULT_SOLAR_ZENITH, DEFAULT_SOLAR_CONSTANT,
        )
        self.physics.update_mixing_length(self.terrain)
        self.velocity = coriolis_force(self.velocity, self.origin.latitude, self.dt)
        self.velocity = orographic_lifting(self.velocity, self.terrain.slope_x,
                                           self.terrain.slope_y, self.dt)
        self.flags = terrain_following_boundary(self.f, self.velocity, self.terrain.elevation,
                                                self.dz)

    def _streaming_step(self) -> None:
        solid = self.flags.astype(bool)
        streamed = np.empty_like(self.f)
        for q, (ex, ey, ez) in enumerate(_VELOCITIES):
            shift = (int(ez), int(ey), int(ex))
            moved = np.roll(self.f[q], shift=shift, axis=(0, 1, 2))
            from_solid = np.roll(solid, shift=shift, axis=(0, 1, 2))
            streamed[q] = np.where(from_solid, self.f[_OPPOSITE[q]], moved)
        streamed[:, solid] = self.f[:, solid]
        self.f = streamed

    def _collision_step(self) -> None:
        fluid = self.flags == 0
        rho = self.f.sum(axis=0)
        equilibrium = _WEIGHTS[:, None, None, None] * rho[None]
        relaxed = self.f + self.omega * (equilibrium - self.f)
        self.f[:, fluid] = relaxed[:, fluid]
        self.density[fluid] = rho[fluid]

    def save_enhanced_vtk(self, filename: PathLike, timestep: int) -> Path:
        """Write the fields as a legacy ASCII VTK file and return its path."""
        path = Path(f"{filename}_enhanced_{timestep}.vtk")
        d = self.domain
        with open(path, "w", encoding="ascii") as handle:
            handle.write("# vtk DataFile Version 3.0\n")
            handle.write("Atmospheric LBM Enhanced - Enhanced Physics\n")
            handle.write("ASCII\n")
            handle.write("DATASET STRUCTURED_POINTS\n")
            handle.write(f"DIMENSIONS {d.nx} {d.ny} {d.nz}\n")
            handle.write("ORIGIN 0 0 0\n")
            handle.write(f"SPACING {self.dx:g} {self.dy:g} {self.dz:g}\n")
            handle.write(f"POINT_DATA {d.total_cells()}\n")

            scalars = (
                ("temperature", self.temperature - np.float32(KELVIN_OFFSET)),
                ("pressure", self.pressure / np.float32(100.0)),
                ("density", self.density),
                ("flags", self.flags.astype(np.float32)),
            )
            for name, values in scalars:
                handle.write(f"SCALARS {name} float 1\n")
                handle.write("LOOKUP_TABLE default\n")
                np.savetxt(handle, values.reshape(-1), fmt="%g")

            handle.write("VECTORS velocity float\n")
            np.savetxt(handle, self.velocity.reshape(-1, 3), fmt="%g %g %g")
        logger.info("Saved enhanced output: %s", path)
        return path

    def statistics(self) -> SimulationStats:
        """Temperature ranges in Celsius and the largest wind speed in m/s."""
        speed = np.sqrt((self.velocity * self.velocity).sum(axis=-1))
        return SimulationStats(
            air_temperature_min=float(self.temperature.min()) - KELVIN_OFFSET,
            air_temperature_max=float(self.temperature.max()) - KELVIN_OFFSET,
            surface_temperature_min=float(self.surface_temperature.min()) - KELVIN_OFFSET,
            surface_temperature_max=float(self.surface_temperature.max()) - KELVIN_OFFSET,
            max_velocity=float(speed.max()),
        )

    def run_simulation(self, num_steps: int,
                       output_prefix: PathLike = DEFAULT_OUTPUT_PREFIX) -> list[Path]:
        """Run ``num_steps`` steps, writing snapshots; return the files written."""
        if not isinstance(num_steps, int) or num_steps < 0:
            raise ValueError(f"number of steps must be a non-negative integer, got {num_steps!r}")
        logger.info("Starting enhanced atmospheric simulation")
        started = time.perf_counter()
        written: list[Path] = []

        for step in range(num_steps):
            self.run_timestep()
            if step % PROGRESS_INTERVAL == 0:
                progress = 100.0 * step / num_steps
                logger.info("Step %5d/%d (%5.1f%%)", step, num_steps, progress)
                if step % OUTPUT_INTERVAL == 0:
                    written.append(self.save_enhanced_vtk(output_prefix, step))
                    self._log_statistics()

        written.append(self.save_enhanced_vtk(f"{output_prefix}_final", num_steps))
        elapsed = time.perf_counter() - started
        logger.info("Enhanced simulation complete")
        logger.info("Total time: %.2f seconds", elapsed)
        return written

    def _log_info(self) -> None:
        d = self.domain
        logger.info("Atmospheric LBM Enhanced - Enhanced Physics")
        logger.info("Domain: %d x %d x %d", d.nx, d.ny, d.nz)
        logger.info("Physical size: %g x %g x %g km", d.nx * self.dx / 1000.0,
                    d.ny * self.dy / 1000.0, d.nz * self.dz / 1000.0)
        logger.info("Origin: %s°N, %s°E", self.origin.latitude, self.origin.longitude)
        logger.info("Grid spacing: %g m", self.dx)
        logger.info("Enhanced features: Terrain, Surface Physics, PBL, Coriolis")

    def _log_statistics(self) -> None:
        s = self.statistics()
        logger.info(
            "Enhanced Physics: T_air=[%.1f,%.1f]°C T_surf=[%.1f,%.1f]°C V_max=%.2f m/s",
            s.air_temperature_min, s.air_temperature_max,
            s.surface_temperature_min, s.surface_temperature_max, s.max_velocity,
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the enhanced atmospheric simulation.")
    parser.add_argument("--steps", type=int, default=2000, help="number of time steps")
    parser.add_argument("--nx", type=int, default=150)
    parser.add_argument("--ny", type=int, default=150)
    parser.add_argument("--nz", type=int, default=60)
    parser.add_argument("--spacing", type=float, default=50.0, help="grid spacing in metres")
    parser.add_argument("--viscosity", type=float, default=1.5e-5,
                        help="kinematic viscosity in m^2/s")
    parser.add_argument("--latitude", type=float, default=-27.0)
    parser.add_argument("--longitude", type=float, default=151.5)
    parser.add_argument("--elevation", type=float, default=300.0)
    parser.add_argument("--dem", default=DEFAULT_DEM_FILE, help="raw float32 elevation file")
    parser.add_argument("--output", default=DEFAULT_OUTPUT_PREFIX, help="output file prefix")
    return parser


def main(argv=None) -> int:
    """Run the enhanced simulation from the command line."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        domain = Domain(args.nx, args.ny, args.nz)
        origin = GeographicCoordinates(args.latitude, args.longitude, args.elevation)
        lbm = AtmosphericLBMEnhanced(domain, args.spacing, args.viscosity, origin)
        lbm.initialize(args.dem)
        lbm.run_simulation(args.steps, args.output)
    except (ValueError, RuntimeError, OSError) as exc:
        print(f"Enhanced error: {exc}", file=sys.stderr)
        return 1

    print("Enhanced atmospheric simulation with terrain effects complete!")
    print("Features demonstrated:")
    for feature in (
        "Terrain-following coordinates",
        "Surface energy balance",
        "Planetary boundary layer mixing",
        "Coriolis effects",
        "Orographic lifting",
        "Atmospheric stability analysis",
    ):
        print(f"  {feature}")
    return 0