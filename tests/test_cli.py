import re

import pytest

from atmolbm.cli import benchmark_main, forecast_main, main, tornado_main


def test_main_runs_core_then_reports(capsys):
    assert main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Running LBM core...", "Atmospheric LBM simulation executed."]


def test_tornado_main(capsys):
    assert tornado_main([]) == 0
    assert capsys.readouterr().out.splitlines() == ["Simulating tornado..."]


def test_forecast_main_loads_forecast_file(capsys):
    assert forecast_main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Loading weather data from forecast.nc", "Running weather forecast..."]


def test_benchmark_main_reports_timing(capsys):
    assert benchmark_main([]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Running LBM core..."
    match = re.fullmatch(r"Benchmark took (\d+) ms", lines[1])
    assert match is not None
    assert int(match.group(1)) >= 0


@pytest.mark.parametrize("entry", [main, tornado_main, forecast_main, benchmark_main])
def test_unknown_argument_is_rejected(entry, capsys):
    with pytest.raises(SystemExit) as excinfo:
        entry(["--bogus"])
    assert excinfo.value.code == 2
    assert "--bogus" in capsys.readouterr().err