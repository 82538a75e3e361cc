"""Command entry points for the atmospheric model."""

from __future__ import annotations

import argparse
import time

from atmolbm.components import AtmosphericLBM, TornadoSimulator, WeatherData

FORECAST_FILE = "forecast.nc"


def _parse(argv, description: str) -> argparse.Namespace:
    return argparse.ArgumentParser(description=description).parse_args(argv)


def main(argv=None) -> int:
    """Run the atmospheric simulation."""
    _parse(argv, "Run the atmospheric LBM simulation.")
    AtmosphericLBM().run()
    print("Atmospheric LBM simulation executed.", flush=True)
    return 0


def tornado_main(argv=None) -> int:
    """Run the tornado simulation."""
    _parse(argv, "Run the tornado simulation.")
    TornadoSimulator().simulate()
    return 0


def forecast_main(argv=None) -> int:
    """Load forecast data and run the weather forecast."""
    _parse(argv, "Run the weather forecast.")
    WeatherData().load(FORECAST_FILE)
    print("Running weather forecast...", flush=True)
    return 0


def benchmark_main(argv=None) -> int:
    """Time one run of the core solver."""
    _parse(argv, "Benchmark the atmospheric LBM core.")
    lbm = AtmosphericLBM()
    start = time.perf_counter()
    lbm.run()
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    print(f"Benchmark took {elapsed_ms} ms", flush=True)
    return 0