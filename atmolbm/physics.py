"""Atmospheric physics on the model grid: stability, surface energy, mixing, forcing.

Three-dimensional fields are indexed ``[z, y, x]`` and surface fields ``[y, x]``.
Velocity fields carry the three components in a trailing axis.
Distribution functions are indexed ``[q, z, y, x]``.
"""

from __future__ import annotations

import logging
import math

import numpy as np

from atmolbm.terrain import Domain, GeographicCoordinates, TerrainManager

logger = logging.getLogger(__name__)

G = 9.81
R_D = 287.0
CP = 1004.0
KAPPA = R_D / CP
OMEGA_EARTH = 7.27e-5
REFERENCE_PRESSURE = 101325.0

STEFAN_BOLTZMANN = 5.67e-8
HEAT_TRANSFER_COEFFICIENT = 0.001
SURFACE_WIND_SPEED = 2.0
AIR_DENSITY = 1.2

VON_KARMAN = 0.4
PBL_HEIGHT = 1000.0
ASYMPTOTIC_MIXING_LENGTH = 100.0

DEFAULT_SOLAR_ZENITH = 0.5
DEFAULT_SOLAR_CONSTANT = 1361.0

_F32 = np.float32


def _f32(values) -> np.ndarray:
    return np.asarray(values, dtype=np.float32)


def _require_velocity(velocity: np.ndarray, ndim: int | None = None) -> None:
    if velocity.ndim < 1 or velocity.shape[-1] != 3:
        raise ValueError(f"velocity needs a trailing axis of 3 components, got shape {velocity.shape}")
    if ndim is not None and velocity.ndim != ndim:
        raise ValueError(f"velocity must have {ndim} dimensions, got shape {velocity.shape}")


def potential_temperature(temperature, pressure, p0=REFERENCE_PRESSURE) -> np.ndarray:
    """Potential temperature theta = T * (p0 / p) ** (R_d / cp)."""
    t = _f32(temperature)
    p = _f32(pressure)
    if t.shape != p.shape:
        raise ValueError(f"temperature shape {t.shape} does not match pressure shape {p.shape}")
    return t * np.power(_F32(p0) / p, _F32(KAPPA))


def buoyancy_frequency(potential_temp, dz) -> np.ndarray:
    """Squared Brunt-Vaisala frequency N^2 = (g / theta) * dtheta/dz.

    The bottom and top levels are set to zero.
    """
    theta = _f32(potential_temp)
    if theta.ndim != 3:
        raise ValueError(f"potential temperature must be indexed [z, y, x], got shape {theta.shape}")
    if not dz > 0:
        raise ValueError(f"vertical spacing must be positive, got {dz!r}")
    result = np.zeros_like(theta)
    if theta.shape[0] >= 3:
        dtheta_dz = (theta[2:] - theta[:-2]) / _F32(2.0 * dz)
        result[1:-1] = (_F32(G) / theta[1:-1]) * dtheta_dz
    return result


def surface_energy_balance(
    air_temperature,
    surface_temperature,
    albedo,
    emissivity,
    heat_capacity,
    solar_zenith,
    solar_constant,
    dt,
) -> tuple[np.ndarray, np.ndarray]:
    """Advance the surface temperature by one step of a bulk energy budget.

    Returns the new surface temperature and the surface fluxes, whose
    trailing axis holds the sensible heat, moisture and momentum fluxes.
    """
    t_air = _f32(air_temperature)
    t_surf = _f32(surface_temperature)
    alb = _f32(albedo)
    emis = _f32(emissivity)
    cap = _f32(heat_capacity)
    shape = t_surf.shape
    for name, arr in (("air temperature", t_air), ("albedo", alb), ("emissivity", emis),
                      ("heat capacity", cap)):
        if arr.shape != shape:
            raise ValueError(f"{name} shape {arr.shape} does not match surface shape {shape}")
    if np.any(cap <= 0):
        raise ValueError("heat capacity must be positive everywhere")

    cos_zenith = _F32(math.cos(solar_zenith))
    solar_flux = _F32(solar_constant) * max(_F32(0.0), cos_zenith)
    absorbed_solar = solar_flux * (_F32(1.0) - alb)

    sigma = _F32(STEFAN_BOLTZMANN)
    emitted_lw = emis * sigma * np.power(t_surf, _F32(4.0))
    incoming_lw = sigma * np.power(t_air, _F32(4.0))

    wind = _F32(SURFACE_WIND_SPEED)
    sensible = (_F32(CP) * _F32(AIR_DENSITY) * _F32(HEAT_TRANSFER_COEFFICIENT) * wind
                * (t_surf - t_air))

    net_flux = absorbed_solar + incoming_lw - emitted_lw - sensible
    new_surface = t_surf + (net_flux / cap) * _F32(dt)

    fluxes = np.zeros(shape + (3,), dtype=np.float32)
    fluxes[..., 0] = sensible
    fluxes[..., 2] = wind * _F32(0.001)
    return new_surface.astype(np.float32), fluxes


def planetary_boundary_layer(roughness, dz, nz) -> np.ndarray:
    """Turbulent mixing length on every level above the surface grid.

    The ground level takes the surface roughness length; inside the
    boundary layer l = k z / (1 + k z / lambda); above it l = lambda.
    """
    rough = _f32(roughness)
    if rough.ndim != 2:
        raise ValueError(f"roughness must be indexed [y, x], got shape {rough.shape}")
    if not isinstance(nz, int) or nz < 1:
        raise ValueError(f"number of levels must be a positive integer, got {nz!r}")
    if not dz > 0:
        raise ValueError(f"vertical spacing must be positive, got {dz!r}")

    height = np.arange(nz, dtype=np.float32) * _F32(dz)
    k = _F32(VON_KARMAN)
    lam = _F32(ASYMPTOTIC_MIXING_LENGTH)
    per_level = np.where(height < _F32(PBL_HEIGHT), k * height / (_F32(1.0) + k * height / lam), lam)

    result = np.empty((nz,) + rough.shape, dtype=np.float32)
    result[...] = per_level.astype(np.float32)[:, None, None]
    result[0] = rough
    return result


def coriolis_force(velocity, latitude, dt) -> np.ndarray:
    """Apply one explicit step of f-plane Coriolis acceleration; w is unchanged."""
    vel = _f32(velocity)
    _require_velocity(vel)
    f = _F32(2.0) * _F32(OMEGA_EARTH) * np.sin(_F32(latitude) * _F32(math.pi) / _F32(180.0))
    step = _F32(dt)
    u = vel[..., 0]
    v = vel[..., 1]
    result = vel.copy()
    result[..., 0] = u + f * v * step
    result[..., 1] = v - f * u * step
    return result


def terrain_following_boundary(f, velocity, elevation, dz) -> np.ndarray:
    """Mark cells at or below the ground as solid and clear them in place.

    ``f`` and ``velocity`` are zeroed in solid cells.  Returns the flags,
    1 for solid and 0 for fluid, indexed ``[z, y, x]``.
    """
    if not isinstance(f, np.ndarray) or not isinstance(velocity, np.ndarray):
        raise TypeError("distribution functions and velocity must be numpy arrays")
    _require_velocity(velocity, ndim=4)
    grid = velocity.shape[:3]
    if f.ndim != 4 or f.shape[1:] != grid:
        raise ValueError(f"distribution shape {f.shape} does not match grid {grid}")
    elev = _f32(elevation)
    if elev.shape != grid[1:]:
        raise ValueError(f"elevation shape {elev.shape} does not match surface {grid[1:]}")
    if not dz > 0:
        raise ValueError(f"vertical spacing must be positive, got {dz!r}")

    levels = np.trunc(elev / _F32(dz))
    z = np.arange(grid[0], dtype=np.float32)[:, None, None]
    solid = z <= levels[None, :, :]
    velocity[solid] = 0.0
    f[:, solid] = 0.0
    return solid.astype(np.uint8)


def orographic_lifting(velocity, slope_x, slope_y, dt) -> np.ndarray:
    """Add the vertical wind forced by flow over sloping ground.

    The ground level is left alone; the forcing decays with level index.
    """
    vel = _f32(velocity)
    _require_velocity(vel, ndim=4)
    sx = _f32(slope_x)
    sy = _f32(slope_y)
    surface = vel.shape[1:3]
    if sx.shape != surface or sy.shape != surface:
        raise ValueError(f"slope shapes {sx.shape}, {sy.shape} do not match surface {surface}")

    result = vel.copy()
    nz = vel.shape[0]
    if nz < 2:
        return result
    above = vel[1:]
    lift = above[..., 0] * sx + above[..., 1] * sy
    z = np.arange(1, nz, dtype=np.float32)[:, None, None]
    factor = np.exp(-z * _F32(0.001))
    result[1:, ..., 2] = above[..., 2] + lift * factor * _F32(dt)
    return result


class AtmosphericPhysics:
    """Diagnostic fields of the enhanced physics over one domain."""

    def __init__(self, domain: Domain, grid_spacing: float, time_step: float,
                 origin: GeographicCoordinates):
        if not grid_spacing > 0:
            raise ValueError(f"grid spacing must be positive, got {grid_spacing!r}")
        if not time_step > 0:
            raise ValueError(f"time step must be positive, got {time_step!r}")
        self.domain = domain
        self.dx = self.dy = self.dz = float(grid_spacing)
        self.dt = float(time_step)
        self.origin = origin

        volume = (domain.nz, domain.ny, domain.nx)
        surface = (domain.ny, domain.nx)
        self.potential_temp = np.zeros(volume, dtype=np.float32)
        self.brunt_vaisala = np.zeros(volume, dtype=np.float32)
        self.surface_fluxes = np.zeros(surface + (3,), dtype=np.float32)
        self.mixing_length = np.zeros(volume, dtype=np.float32)

    @property
    def _volume(self) -> tuple[int, int, int]:
        return (self.domain.nz, self.domain.ny, self.domain.nx)

    def compute_stability(self, temperature, pressure) -> tuple[np.ndarray, np.ndarray]:
        """Update and return potential temperature and squared buoyancy frequency."""
        t = _f32(temperature)
        if t.shape != self._volume:
            raise ValueError(f"temperature shape {t.shape} does not match domain {self._volume}")
        self.potential_temp = potential_temperature(t, pressure, REFERENCE_PRESSURE)
        self.brunt_vaisala = buoyancy_frequency(self.potential_temp, self.dz)
        return self.potential_temp, self.brunt_vaisala

    def update_surface(self, air_temperature, surface_temperature, terrain: TerrainManager,
                       solar_zenith=DEFAULT_SOLAR_ZENITH,
                       solar_constant=DEFAULT_SOLAR_CONSTANT) -> np.ndarray:
        """Advance the surface temperature one step and store the surface fluxes.

        ``air_temperature`` may be the whole volume, whose ground level is used.
        """
        t_air = _f32(air_temperature)
        if t_air.ndim == 3:
            t_air = t_air[0]
        new_surface, fluxes = surface_energy_balance(
            t_air,
            surface_temperature,
            terrain.albedo,
            terrain.emissivity,
            terrain.heat_capacity,
            solar_zenith,
            solar_constant,
            self.dt,
        )
        self.surface_fluxes = fluxes
        return new_surface

    def update_mixing_length(self, terrain: TerrainManager) -> np.ndarray:
        """Recompute and return the mixing length from the terrain roughness."""
        self.mixing_length = planetary_boundary_layer(terrain.roughness_length, self.dz,
                                                      self.domain.nz)
        return self.mixing_length