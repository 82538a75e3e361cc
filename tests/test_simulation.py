import numpy as np
import pytest

from atmolbm.simulation import AtmosphericLBMEnhanced, main
from atmolbm.terrain import Domain, GeographicCoordinates

ORIGIN = GeographicCoordinates(-27.0, 151.5, 300.0)


def _dem(tmp_path, domain, height):
    path = tmp_path / "dem.bin"
    np.full(domain.nx * domain.ny, height, dtype="<f4").tofile(path)
    return path


def _model(tmp_path, height=120.0, domain=Domain(4, 5, 8), spacing=50.0):
    lbm = AtmosphericLBMEnhanced(domain, spacing, 1.5e-5, ORIGIN)
    loaded = lbm.initialize(_dem(tmp_path, domain, height))
    assert loaded is True
    return lbm


def test_time_step_follows_grid_spacing():
    lbm = AtmosphericLBMEnhanced(Domain(3, 3, 3), 50.0, 1.5e-5, ORIGIN)
    assert lbm.dt == pytest.approx(5.0)


def test_rejects_non_positive_viscosity():
    with pytest.raises(ValueError):
        AtmosphericLBMEnhanced(Domain(3, 3, 3), 50.0, 0.0, ORIGIN)


def test_rejects_non_positive_spacing():
    with pytest.raises(ValueError):
        AtmosphericLBMEnhanced(Domain(3, 3, 3), -1.0, 1.5e-5, ORIGIN)


def test_flat_terrain_sets_solid_levels(tmp_path):
    lbm = _model(tmp_path, height=120.0)
    assert np.all(lbm.flags[:3] == 1)
    assert np.all(lbm.flags[3:] == 0)
    assert np.all(lbm.velocity[:3] == 0.0)
    assert np.all(lbm.velocity[3:, ..., 0] > 0.0)


def test_profile_starts_from_standard_sea_level(tmp_path):
    lbm = _model(tmp_path)
    assert np.allclose(lbm.temperature[0], 288.0)
    assert np.allclose(lbm.pressure[0], 101325.0)
    column_t = lbm.temperature[:, 0, 0]
    column_p = lbm.pressure[:, 0, 0]
    assert np.all(np.diff(column_t) < 0)
    assert np.all(np.diff(column_p) < 0)


def test_distributions_sum_to_density(tmp_path):
    lbm = _model(tmp_path)
    assert np.allclose(lbm.f.sum(axis=0), lbm.density, rtol=1e-5)


def test_sea_level_surface_temperature(tmp_path):
    lbm = _model(tmp_path, height=0.0)
    assert np.allclose(lbm.surface_temperature, 288.0)


def test_missing_dem_falls_back_to_synthetic(tmp_path):
    lbm = AtmosphericLBMEnhanced(Domain(6, 6, 5), 200.0, 1.5e-5, ORIGIN)
    assert lbm.initialize(tmp_path / "absent.bin") is False
    assert lbm.terrain.elevation.min() >= 100.0
    assert np.all(lbm.flags[0] == 1)


def test_timestep_requires_initialization():
    lbm = AtmosphericLBMEnhanced(Domain(3, 3, 3), 50.0, 1.5e-5, ORIGIN)
    with pytest.raises(RuntimeError):
        lbm.run_timestep()


def test_timestep_conserves_fluid_mass(tmp_path):
    lbm = _model(tmp_path)
    fluid = lbm.flags == 0
    before = float(lbm.f[:, fluid].sum())
    lbm.run_timestep()
    lbm.run_timestep()
    after = float(lbm.f[:, lbm.flags == 0].sum())
    assert after == pytest.approx(before, rel=1e-5)


def test_timestep_clears_solid_cells(tmp_path):
    lbm = _model(tmp_path)
    lbm.run_timestep()
    solid = lbm.flags == 1
    assert np.all(lbm.f[:, solid] == 0.0)
    assert np.all(lbm.velocity[solid] == 0.0)
    assert np.all(lbm.flags[:3] == 1)


def test_timestep_updates_diagnostics(tmp_path):
    lbm = _model(tmp_path)
    lbm.run_timestep()
    assert lbm.physics.potential_temp.shape == lbm.temperature.shape
    assert np.allclose(lbm.physics.potential_temp[0], lbm.temperature[0])
    assert np.all(lbm.physics.brunt_vaisala[0] == 0.0)
    assert np.all(lbm.physics.surface_fluxes[..., 1] == 0.0)


def test_save_vtk_layout(tmp_path):
    domain = Domain(4, 5, 8)
    lbm = _model(tmp_path, domain=domain)
    path = lbm.save_enhanced_vtk(tmp_path / "snap", 7)
    assert path.name == "snap_enhanced_7.vtk"
    lines = path.read_text().splitlines()
    assert lines[0] == "# vtk DataFile Version 3.0"
    assert "DIMENSIONS 4 5 8" in lines
    assert "SPACING 50 50 50" in lines
    assert "POINT_DATA 160" in lines
    cells = domain.total_cells()
    assert len(lines) == 8 + 4 * (cells + 2) + 1 + cells
    flags_start = lines.index("SCALARS flags float 1") + 2
    flag_values = {float(v) for v in lines[flags_start:flags_start + cells]}
    assert flag_values == {0.0, 1.0}
    assert len(lines[-1].split()) == 3


def test_statistics_ranges(tmp_path):
    lbm = _model(tmp_path, height=0.0)
    stats = lbm.statistics()
    assert stats.air_temperature_min < stats.air_temperature_max
    assert stats.surface_temperature_min == pytest.approx(stats.surface_temperature_max)
    assert stats.max_velocity >= 10.0


def test_run_simulation_writes_snapshots(tmp_path):
    lbm = _model(tmp_path)
    prefix = tmp_path / "out"
    written = lbm.run_simulation(3, prefix)
    names = [p.name for p in written]
    assert names == ["out_enhanced_0.vtk", "out_final_enhanced_3.vtk"]
    assert all(p.exists() for p in written)


def test_run_simulation_rejects_negative_steps(tmp_path):
    lbm = _model(tmp_path)
    with pytest.raises(ValueError):
        lbm.run_simulation(-1, tmp_path / "out")


def test_main_runs_small_case(tmp_path):
    prefix = tmp_path / "cli"
    code = main([
        "--steps", "1", "--nx", "4", "--ny", "4", "--nz", "6", "--spacing", "200",
        "--dem", str(tmp_path / "absent.bin"), "--output", str(prefix),
    ])
    assert code == 0
    assert (tmp_path / "cli_final_enhanced_1.vtk").exists()
    assert (tmp_path / "cli_enhanced_0.vtk").exists()


def test_main_reports_bad_domain(tmp_path):
    code = main(["--steps", "1", "--nx", "0", "--output", str(tmp_path / "x")])
    assert code == 1