# atmolbm

Atmospheric modelling on a regular 3-D grid: a lattice Boltzmann flow core
(D3Q19) with atmospheric physics layered on top, all on NumPy arrays.

- terrain from a raw elevation file, or a synthetic landscape of the Darling
  Downs region when no file can be opened
- surface properties (roughness, albedo, emissivity, heat capacity, thermal
  diffusivity) chosen by elevation band
- a standard-atmosphere initial state with a boundary-layer wind profile
- potential temperature and squared Brunt–Väisälä frequency
- a surface energy balance driving the surface temperature
- planetary boundary layer mixing lengths
- f-plane Coriolis forcing and orographic lifting over slopes
- terrain-following solid cells
- legacy ASCII VTK (`STRUCTURED_POINTS`) output

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command-line tools

| Command            | What it does                                                          |
|--------------------|-----------------------------------------------------------------------|
| `atmolbm-enhanced` | Runs the enhanced simulation and writes VTK snapshots                 |
| `atmospheric-lbm`  | Runs `AtmosphericLBM` and prints that the simulation was executed     |
| `tornado-sim`      | Runs `TornadoSimulator`                                               |
| `weather-forecast` | Calls `WeatherData.load("forecast.nc")` and prints a forecast message |
| `benchmark-lbm`    | Times one `AtmosphericLBM.run()` and prints the milliseconds taken    |

### `atmolbm-enhanced`

```
atmolbm-enhanced --steps 500 --nx 40 --ny 40 --nz 20 --output run1
```

Options and their defaults:

| Option        | Default                  | Meaning                                  |
|---------------|--------------------------|------------------------------------------|
| `--steps`     | 2000                     | number of time steps                     |
| `--nx`, `--ny`, `--nz` | 150, 150, 60    | grid size in cells                       |
| `--spacing`   | 50.0                     | grid spacing in metres                   |
| `--viscosity` | 1.5e-5                   | kinematic viscosity in m²/s              |
| `--latitude`  | -27.0                    | degrees north                            |
| `--longitude` | 151.5                    | degrees east                             |
| `--elevation` | 300.0                    | origin elevation in metres               |
| `--dem`       | `darling_downs_dem.bin`  | raw float32 elevation file               |
| `--output`    | `atmospheric_enhanced`   | prefix of the VTK files                  |

Progress is logged every 50 steps. At every 250th step (starting with step 0)
the fields are written to `<prefix>_enhanced_<step>.vtk` and summary
statistics are logged. When the run ends a final snapshot is written to
`<prefix>_final_enhanced_<steps>.vtk`. An invalid setting or an I/O failure
is reported on standard error and the command exits with status 1.

## Using the library

### Terrain (`atmolbm.terrain`)

```python
from atmolbm.terrain import Domain, GeographicCoordinates, TerrainManager

domain = Domain(150, 150, 60)
origin = GeographicCoordinates(-27.0, 151.5, 300.0)

terrain = TerrainManager(domain, 50.0, origin)
terrain.create_synthetic_terrain()

terrain.get_elevation(10, 20)            # metres
terrain.get_surface_properties(10, 20)   # SurfaceProperties
terrain.get_terrain_level(10, 20, 50.0)  # index of the ground level
terrain.stats()                          # TerrainStats, with .relief
```

`Domain` takes positive integer sizes; `index(x, y, z)` gives the linear cell
index with x varying fastest and `total_cells()` the cell count. A
`TerrainManager` needs at least 2 cells in x and y and a positive spacing.

`terrain.initialize()` builds the synthetic landscape.
`terrain.load_srtm_data(filename)` reads little-endian 32-bit floats, `nx * ny`
values row by row with x varying fastest, and returns `True`. A short file
fills only the leading cells. If the file cannot be opened, the synthetic
landscape is built instead and `False` is returned.

The elevation, slopes (`elevation`, `slope_x`, `slope_y`) and `land_use` are
read-only arrays indexed `[y, x]`; `roughness_length`, `albedo`, `emissivity`,
`heat_capacity` and `thermal_diffusivity` are arrays of the same shape.
Slopes are central differences, copied from the neighbouring row or column at
the edges.

Queries outside the grid return an elevation of 0.0 and a `SurfaceProperties`
of all zeros. `get_terrain_level` raises `ValueError` if `dz` is not positive.

Surface properties follow elevation bands, tagged with a `LandUse` value:

| Elevation        | `LandUse`       | Roughness | Albedo | Emissivity | Heat capacity |
|------------------|-----------------|-----------|--------|------------|---------------|
| below 300 m      | `AGRICULTURAL`  | 0.1 m     | 0.25   | 0.95       | 2.0e6         |
| 300 m to 600 m   | `MIXED_FOREST`  | 0.5 m     | 0.15   | 0.98       | 2.5e6         |
| 600 m and above  | `ROCKY`         | 1.0 m     | 0.35   | 0.90       | 1.5e6         |

`AtmosphericProfile` is a plain container for a vertical sounding (height,
temperature, pressure, humidity and wind lists).

### Physics (`atmolbm.physics`)

Three-dimensional fields are indexed `[z, y, x]`, surface fields `[y, x]`,
velocity has a trailing axis of three components and distributions are
indexed `[q, z, y, x]`. Mismatched shapes raise `ValueError`.

- `potential_temperature(temperature, pressure, p0)`: θ = T (p0/p)^(R_d/c_p)
- `buoyancy_frequency(potential_temp, dz)`: N² = (g/θ) ∂θ/∂z, zero at the
  bottom and top levels
- `surface_energy_balance(air_temperature, surface_temperature, albedo,
  emissivity, heat_capacity, solar_zenith, solar_constant, dt)`: returns the
  new surface temperature and a flux array whose last axis holds sensible heat,
  moisture (zero) and momentum fluxes
- `planetary_boundary_layer(roughness, dz, nz)`: mixing length on every
  level; the ground level takes the roughness length, then
  l = κz / (1 + κz/λ) below 1000 m and 100 m above
- `coriolis_force(velocity, latitude, dt)`: returns a new velocity after one
  f-plane Coriolis step; w is unchanged
- `orographic_lifting(velocity, slope_x, slope_y, dt)`: returns a new velocity
  with vertical wind forced by flow over slopes, decaying with level; the
  ground level is unchanged
- `terrain_following_boundary(f, velocity, elevation, dz)`: zeroes `f` and
  `velocity` in place in cells at or below the ground and returns flags
  (1 solid, 0 fluid)

`AtmosphericPhysics(domain, grid_spacing, time_step, origin)` keeps the
diagnostic fields `potential_temp`, `brunt_vaisala`, `surface_fluxes` and
`mixing_length`, updated by `compute_stability(temperature, pressure)`,
`update_surface(air_temperature, surface_temperature, terrain, solar_zenith,
solar_constant)` and `update_mixing_length(terrain)`.

### The full simulation (`atmolbm.simulation`)

```python
from atmolbm.terrain import Domain, GeographicCoordinates
from atmolbm.simulation import AtmosphericLBMEnhanced

lbm = AtmosphericLBMEnhanced(Domain(40, 40, 20), 50.0, 1.5e-5,
                             GeographicCoordinates(-27.0, 151.5, 300.0))
lbm.initialize("darling_downs_dem.bin")   # False if synthetic terrain was used

lbm.run_timestep()
print(lbm.statistics())                   # SimulationStats, temperatures in °C

lbm.save_enhanced_vtk("snapshot", 1)      # writes snapshot_enhanced_1.vtk
paths = lbm.run_simulation(500, "run1")   # list of files written
```

The time step is `dt = 0.1 * dx`. `run_timestep` raises `RuntimeError` before
`initialize`. Each step streams the distributions (periodic edges, bounce-back
from solid cells) and relaxes them in fluid cells, then updates stability, the
surface energy balance and mixing length, applies Coriolis and orographic
forcing, and re-imposes the solid cells below the terrain.

The VTK files hold temperature in °C, pressure in hPa, density, the
solid/fluid flags and the velocity vectors.

### Components (`atmolbm.components`)

`AtmosphericLBM.run()`, `BoundaryConditions.apply()`,
`TornadoSimulator.simulate()`, `Visualization.render()` and
`WeatherData.load(path)` each print a line saying what they do, to standard
output or to the `stream` given to the constructor. `WeatherData.load` records
the path and returns `True`.

## What the package does not do

- The components in `atmolbm.components` only report their step: the tornado
  simulator computes no tornado, visualisation renders nothing, and
  `WeatherData.load` does not open or read the file it is given.
- The relaxation step uses a density-only equilibrium, so the velocity field is
  not recovered from the distributions; winds change only through the Coriolis
  and orographic forcing.
- Everything runs on the CPU with NumPy; there is no GPU execution.
- Output is legacy ASCII VTK only; there is no plotting or viewer.