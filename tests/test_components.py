import io
from pathlib import Path

from atmolbm.components import (
    AtmosphericLBM,
    BoundaryConditions,
    TornadoSimulator,
    Visualization,
    WeatherData,
)


def test_lbm_run_reports_core(capsys):
    lbm = AtmosphericLBM()
    assert lbm.run() is None
    assert capsys.readouterr().out == "Running LBM core...\n"


def test_tornado_simulate_reports(capsys):
    sim = TornadoSimulator()
    sim.simulate()
    assert capsys.readouterr().out == "Simulating tornado...\n"


def test_boundary_conditions_apply(capsys):
    BoundaryConditions().apply()
    assert capsys.readouterr().out == "Applying boundary conditions...\n"


def test_visualization_render(capsys):
    Visualization().render()
    assert capsys.readouterr().out == "Rendering visualization...\n"


def test_weather_data_load_returns_true(capsys):
    data = WeatherData()
    assert data.load("forecast.nc") is True
    assert capsys.readouterr().out == "Loading weather data from forecast.nc\n"
    assert data.path == "forecast.nc"


def test_weather_data_accepts_path_object():
    stream = io.StringIO()
    data = WeatherData(stream=stream)
    assert data.load(Path("forecast.nc")) is True
    assert stream.getvalue() == "Loading weather data from forecast.nc\n"


def test_custom_stream_receives_output(capsys):
    stream = io.StringIO()
    AtmosphericLBM(stream=stream).run()
    TornadoSimulator(stream=stream).simulate()
    assert stream.getvalue().splitlines() == ["Running LBM core...", "Simulating tornado..."]
    assert capsys.readouterr().out == ""


def test_repeated_runs_repeat_output():
    stream = io.StringIO()
    lbm = AtmosphericLBM(stream=stream)
    lbm.run()
    lbm.run()
    assert stream.getvalue().count("Running LBM core...") == 2