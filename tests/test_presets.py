from __future__ import annotations

import json

import pytest

from grating_sweep.__main__ import main
from grating_sweep.adapters.presets_local.store import SCHEMA_VERSION, LocalPresetStore
from grating_sweep.exporting.io import read_output_file
from grating_sweep.exporting.writer import ResumableWriter
from grating_sweep.orchestration.controller import SweepController
from grating_sweep.orchestration.session import build_config, config_from_input_items

FLAT = {
    "mode": "constantIncludedAngle",
    "includedAngle": 172.0,
    "toOrder": 1,
    "units": "eV",
    "min": 100,
    "max": 200,
    "increment": 10,
    "gratingType": "trapezoidal",
    "gratingPeriod": 1.2,
    "gratingGeometry": "0.01,0.4,3,30",
    "gratingMaterial": "Ni",
    "N": 4,
}


def _write(store: LocalPresetStore, name: str, data: dict) -> None:
    store.path_for(name).write_text(json.dumps(data), encoding="utf-8")


def test_flat_preset_is_migrated(tmp_path) -> None:
    store = LocalPresetStore(tmp_path)
    _write(store, "ni", FLAT)
    cfg = store.load("ni")
    assert cfg == build_config(
        mode="constantIncludedAngle",
        minimum=100.0,
        maximum=200.0,
        increment=10.0,
        included_deg=172.0,
        to_order=1,
        energy_units=True,
        grating_type="trapezoidal",
        grating_period=1.2,
        grating_geometry=[0.01, 0.4, 3.0, 30.0],
        grating_material="Ni",
        N=4,
    )

    store.save("ni", cfg)
    saved = json.loads(store.path_for("ni").read_text(encoding="utf-8"))
    assert saved["schema_version"] == SCHEMA_VERSION
    assert store.load("ni") == cfg


def test_explicit_legacy_version_is_migrated(tmp_path) -> None:
    store = LocalPresetStore(tmp_path)
    _write(store, "ni", {**FLAT, "schema_version": "1.0.0"})
    assert store.load("ni").grating.grating_type == "trapezoidal"


def test_preset_without_mode_parameters_is_refused(tmp_path, make_config) -> None:
    store = LocalPresetStore(tmp_path)
    data = make_config().model_dump()
    data["incidence_deg"] = None
    _write(store, "broken", {**data, "schema_version": SCHEMA_VERSION})
    with pytest.raises(ValueError, match="(?s)preset 'broken'.*incidenceAngle"):
        store.load("broken")


def test_flat_preset_missing_a_key_is_refused(tmp_path) -> None:
    store = LocalPresetStore(tmp_path)
    _write(store, "short", {k: v for k, v in FLAT.items() if k != "min"})
    with pytest.raises(ValueError, match="missing 'min'"):
        store.load("short")


def test_newer_schema_is_refused(tmp_path, make_config) -> None:
    store = LocalPresetStore(tmp_path)
    _write(store, "future", {**make_config().model_dump(), "schema_version": "3.0.0"})
    with pytest.raises(ValueError, match="newer than"):
        store.load("future")


def test_output_header_rebuilds_the_configuration(tmp_path, make_config, scripted) -> None:
    cfg = make_config()
    out = tmp_path / "out.txt"
    with ResumableWriter(out) as writer:
        SweepController(cfg, scripted(), writer).run()
    assert config_from_input_items(read_output_file(out).inputs) == cfg


def test_cli_reports_invalid_preset(tmp_path, make_config, capsys) -> None:
    presets = tmp_path / "presets"
    store = LocalPresetStore(presets)
    data = make_config().model_dump()
    data["incidence_deg"] = None
    _write(store, "broken", {**data, "schema_version": SCHEMA_VERSION})

    rc = main(["--preset", "broken", "--preset-dir", str(presets), "--solver", "mock",
               "--outputFile", str(tmp_path / "out.txt")])
    assert rc == 1
    assert "Invalid command-line options: preset 'broken'" in capsys.readouterr().err
    assert not (tmp_path / "out.txt").exists()
