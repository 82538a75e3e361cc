"""Top-level simulation components that report what they are doing."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from os import PathLike, fspath
from typing import Optional, TextIO, Union


@dataclass
class _Reporter:
    stream: Optional[TextIO] = field(default=None, repr=False)

    def _say(self, message: str) -> None:
        print(message, file=self.stream if self.stream is not None else sys.stdout, flush=True)


@dataclass
class AtmosphericLBM(_Reporter):
    """The core lattice Boltzmann driver."""

    def run(self) -> None:
        """Run the core solver."""
        self._say("Running LBM core...")


@dataclass
class BoundaryConditions(_Reporter):
    """Boundary conditions of the model domain."""

    def apply(self) -> None:
        """Apply the boundary conditions."""
        self._say("Applying boundary conditions...")


@dataclass
class TornadoSimulator(_Reporter):
    """A tornado-scale simulation."""

    def simulate(self) -> None:
        """Run the tornado simulation."""
        self._say("Simulating tornado...")


@dataclass
class Visualization(_Reporter):
    """Rendering of model output."""

    def render(self) -> None:
        """Render the current output."""
        self._say("Rendering visualization...")


@dataclass
class WeatherData(_Reporter):
    """Weather input data for the model."""

    path: Optional[str] = None

    def load(self, path: Union[str, PathLike]) -> bool:
        """Load weather data from ``path``; return True on success."""
        self.path = fspath(path)
        self._say(f"Loading weather data from {self.path}")
        return True