"""Model domain, geographic origin, surface properties and terrain elevation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

PI = 3.141592653589793

_SYNTHETIC_PI = np.float32(3.14159)
_MIN_SYNTHETIC_ELEVATION = np.float32(100.0)
_LOWLAND_LIMIT = 300.0
_UPLAND_LIMIT = 600.0

PathLike = Union[str, "Path"]


@dataclass(frozen=True)
class Domain:
    """A three-dimensional grid of ``nx`` by ``ny`` by ``nz`` cells."""

    nx: int
    ny: int
    nz: int

    def __post_init__(self) -> None:
        for name in ("nx", "ny", "nz"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"domain size {name} must be a positive integer, got {value!r}")

    def index(self, x: int, y: int, z: int) -> int:
        """Linear index of cell (x, y, z), x varying fastest."""
        return x + y * self.nx + z * self.nx * self.ny

    def total_cells(self) -> int:
        """Number of cells in the whole volume."""
        return self.nx * self.ny * self.nz


@dataclass(frozen=True)
class GeographicCoordinates:
    """A point on the Earth: degrees north, degrees east, metres above sea level."""

    latitude: float = 0.0
    longitude: float = 0.0
    elevation: float = 0.0


class LandUse(IntEnum):
    """Land use classes assigned to surface cells."""

    UNCLASSIFIED = 0
    AGRICULTURAL = 1
    MIXED_FOREST = 2
    ROCKY = 3


@dataclass(frozen=True)
class SurfaceProperties:
    """Physical properties of the ground surface in one cell."""

    roughness_length: float = 0.0
    albedo: float = 0.0
    emissivity: float = 0.0
    heat_capacity: float = 0.0
    thermal_diffusivity: float = 0.0
    land_use_type: LandUse = LandUse.UNCLASSIFIED


@dataclass
class AtmosphericProfile:
    """A vertical sounding of the atmosphere."""

    height: list[float] = field(default_factory=list)
    temperature: list[float] = field(default_factory=list)
    pressure: list[float] = field(default_factory=list)
    humidity: list[float] = field(default_factory=list)
    u_wind: list[float] = field(default_factory=list)
    v_wind: list[float] = field(default_factory=list)


_SURFACE_PRESETS: dict[LandUse, SurfaceProperties] = {
    LandUse.UNCLASSIFIED: SurfaceProperties(),
    LandUse.AGRICULTURAL: SurfaceProperties(
        roughness_length=0.1,
        albedo=0.25,
        emissivity=0.95,
        heat_capacity=2.0e6,
        thermal_diffusivity=1.0e-6,
        land_use_type=LandUse.AGRICULTURAL,
    ),
    LandUse.MIXED_FOREST: SurfaceProperties(
        roughness_length=0.5,
        albedo=0.15,
        emissivity=0.98,
        heat_capacity=2.5e6,
        thermal_diffusivity=0.8e-6,
        land_use_type=LandUse.MIXED_FOREST,
    ),
    LandUse.ROCKY: SurfaceProperties(
        roughness_length=1.0,
        albedo=0.35,
        emissivity=0.90,
        heat_capacity=1.5e6,
        thermal_diffusivity=1.5e-6,
        land_use_type=LandUse.ROCKY,
    ),
}


def _property_table(name: str) -> np.ndarray:
    return np.array(
        [getattr(_SURFACE_PRESETS[use], name) for use in sorted(LandUse)], dtype=np.float32
    )


@dataclass(frozen=True)
class TerrainStats:
    """Ranges of elevation and slope over the terrain."""

    min_elevation: float
    max_elevation: float
    min_slope_x: float
    max_slope_x: float
    min_slope_y: float
    max_slope_y: float

    @property
    def relief(self) -> float:
        return self.max_elevation - self.min_elevation


class TerrainManager:
    """Elevation, slopes and surface properties over the horizontal grid.

    Arrays are indexed ``[y, x]``.
    """

    def __init__(self, domain: Domain, grid_spacing: float, origin: GeographicCoordinates):
        if domain.nx < 2 or domain.ny < 2:
            raise ValueError("terrain needs at least 2 cells in x and in y")
        if not grid_spacing > 0:
            raise ValueError(f"grid spacing must be positive, got {grid_spacing!r}")
        self.domain = domain
        self.dx = float(grid_spacing)
        self.dy = float(grid_spacing)
        self.origin = origin

        shape = (domain.ny, domain.nx)
        self._elevation = np.zeros(shape, dtype=np.float32)
        self._slope_x = np.zeros(shape, dtype=np.float32)
        self._slope_y = np.zeros(shape, dtype=np.float32)
        self._land_use = np.zeros(shape, dtype=np.uint8)
        self._refresh_surface_fields()

        logger.info("Terrain manager initialised for domain %dx%d", domain.nx, domain.ny)
        logger.info("Origin: %s°N, %s°E", origin.latitude, origin.longitude)

    @staticmethod
    def _readonly(array: np.ndarray) -> np.ndarray:
        view = array.view()
        view.flags.writeable = False
        return view

    @property
    def elevation(self) -> np.ndarray:
        return self._readonly(self._elevation)

    @property
    def slope_x(self) -> np.ndarray:
        return self._readonly(self._slope_x)

    @property
    def slope_y(self) -> np.ndarray:
        return self._readonly(self._slope_y)

    @property
    def land_use(self) -> np.ndarray:
        return self._readonly(self._land_use)

    def initialize(self) -> None:
        """Prepare the terrain with the built-in synthetic landscape."""
        logger.info("Initialising terrain")
        self.create_synthetic_terrain()

    def load_srtm_data(self, filename: PathLike) -> bool:
        """Load raw little-endian 32-bit float elevations, row by row.

        If the file cannot be opened, a synthetic terrain is built instead
        and False is returned.  A short file fills only the leading cells.
        """
        logger.info("Loading SRTM elevation data from: %s", filename)
        count = self._elevation.size
        try:
            with open(filename, "rb") as handle:
                raw = handle.read(count * 4)
        except OSError:
            logger.error("Cannot open DEM file: %s", filename)
            self.create_synthetic_terrain()
            return False

        values = np.frombuffer(raw[: len(raw) - len(raw) % 4], dtype="<f4")
        self._elevation.reshape(-1)[: values.size] = values

        self._compute_terrain_slopes()
        self._initialize_surface_properties()
        logger.info("Loaded real terrain data")
        self._log_stats()
        return True

    def create_synthetic_terrain(self) -> None:
        """Build a landscape of a sloping plain, rolling hills and one plateau."""
        logger.info("Creating synthetic Darling Downs terrain")
        nx, ny = self.domain.nx, self.domain.ny
        x_norm = np.arange(nx, dtype=np.float32) / np.float32(nx)
        y_norm = np.arange(ny, dtype=np.float32) / np.float32(ny)
        xn, yn = np.meshgrid(x_norm, y_norm)

        base = np.float32(200.0) + np.float32(600.0) * (np.float32(1.0) - xn)
        hills = (
            np.float32(100.0)
            * np.sin(xn * _SYNTHETIC_PI * np.float32(3.0))
            * np.cos(yn * _SYNTHETIC_PI * np.float32(2.0))
        )
        dx_hub = xn - np.float32(0.7)
        dy_hub = yn - np.float32(0.6)
        dist = np.sqrt(dx_hub * dx_hub + dy_hub * dy_hub)
        plateau = np.float32(200.0) * np.exp(-dist * dist * np.float32(50.0))

        self._elevation[...] = np.maximum(base + hills + plateau, _MIN_SYNTHETIC_ELEVATION)

        self._compute_terrain_slopes()
        self._initialize_surface_properties()
        logger.info("Created synthetic terrain")
        self._log_stats()

    def _compute_terrain_slopes(self) -> None:
        elev = self._elevation
        self._slope_x[1:-1, 1:-1] = (elev[1:-1, 2:] - elev[1:-1, :-2]) / np.float32(2.0 * self.dx)
        self._slope_y[1:-1, 1:-1] = (elev[2:, 1:-1] - elev[:-2, 1:-1]) / np.float32(2.0 * self.dy)

        self._slope_x[:, 0] = self._slope_x[:, 1]
        self._slope_x[:, -1] = self._slope_x[:, -2]
        self._slope_y[0, :] = self._slope_y[1, :]
        self._slope_y[-1, :] = self._slope_y[-2, :]

    def _initialize_surface_properties(self) -> None:
        elev = self._elevation
        self._land_use[...] = np.select(
            [elev < _LOWLAND_LIMIT, elev < _UPLAND_LIMIT],
            [LandUse.AGRICULTURAL, LandUse.MIXED_FOREST],
            default=LandUse.ROCKY,
        )
        self._refresh_surface_fields()

    def _refresh_surface_fields(self) -> None:
        codes = self._land_use
        self.roughness_length = _property_table("roughness_length")[codes]
        self.albedo = _property_table("albedo")[codes]
        self.emissivity = _property_table("emissivity")[codes]
        self.heat_capacity = _property_table("heat_capacity")[codes]
        self.thermal_diffusivity = _property_table("thermal_diffusivity")[codes]

    def _in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.domain.nx and 0 <= y < self.domain.ny

    def get_elevation(self, x: int, y: int) -> float:
        """Elevation at (x, y) in metres; 0.0 outside the grid."""
        if not self._in_bounds(x, y):
            return 0.0
        return float(self._elevation[y, x])

    def get_surface_properties(self, x: int, y: int) -> SurfaceProperties:
        """Surface properties at (x, y); all zero outside the grid."""
        if not self._in_bounds(x, y):
            return SurfaceProperties()
        return _SURFACE_PRESETS[LandUse(int(self._land_use[y, x]))]

    def get_terrain_level(self, x: int, y: int, dz: float) -> int:
        """Index of the vertical level that holds the ground at (x, y)."""
        if not dz > 0:
            raise ValueError(f"vertical spacing must be positive, got {dz!r}")
        level = self.get_elevation(x, y) / dz
        if math.isnan(level):
            return 0
        return max(0, int(level))

    def stats(self) -> TerrainStats:
        """Ranges of elevation and slope over the whole grid."""
        return TerrainStats(
            min_elevation=float(self._elevation.min()),
            max_elevation=float(self._elevation.max()),
            min_slope_x=float(self._slope_x.min()),
            max_slope_x=float(self._slope_x.max()),
            min_slope_y=float(self._slope_y.min()),
            max_slope_y=float(self._slope_y.max()),
        )

    def _log_stats(self) -> None:
        s = self.stats()
        logger.info("Terrain statistics:")
        logger.info("  Elevation: %s - %s m", s.min_elevation, s.max_elevation)
        logger.info("  Slope X: %s - %s", s.min_slope_x, s.max_slope_x)
        logger.info("  Slope Y: %s - %s", s.min_slope_y, s.max_slope_y)
        logger.info("  Relief: %s m", s.relief)