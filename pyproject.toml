[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "atmolbm"
version = "1.0.0"
description = "Atmospheric lattice Boltzmann modelling with terrain, surface physics, boundary layer mixing and Coriolis effects"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "lattice boltzmann",
    "atmosphere",
    "boundary layer",
    "terrain",
    "weather",
    "simulation",
    "vtk",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Atmospheric Science",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
atmospheric-lbm = "atmolbm.cli:main"
tornado-sim = "atmolbm.cli:tornado_main"
weather-forecast = "atmolbm.cli:forecast_main"
benchmark-lbm = "atmolbm.cli:benchmark_main"
atmolbm-enhanced = "atmolbm.simulation:main"

[tool.hatch.build.targets.wheel]
packages = ["atmolbm"]

[tool.hatch.build.targets.sdist]
include = [
    "atmolbm",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
