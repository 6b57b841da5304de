"""Tests for the command-line entry point."""

from __future__ import annotations

from omegaconf import OmegaConf

from dispersal.__main__ import main


def _write_config(tmp_path, fixture: str | None, **distribution) -> str:
    cfg = {
        "dispersal": {
            "system": {"log_level": "WARNING"},
            "time": {"mode": "simulated", "start_epoch": 1000.0},
            "distribution": {"strategy": "spread-evenly", "max_per_position": 0, **distribution},
            "operator": {"id": "cli", "username": "cli", "role": "admin"},
            "fixture": fixture,
        },
    }
    path = tmp_path / "config.yaml"
    OmegaConf.save(OmegaConf.create(cfg), path)
    return str(path)


class TestMain:
    def test_default_run(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        assert main(["--config", config]) == 0
        out = capsys.readouterr().out
        assert "Palmachim Apron 1" in out
        assert "Unassigned" not in out

    def test_no_distribute_lists_unassigned(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        assert main(["--config", config, "--no-distribute"]) == 0
        out = capsys.readouterr().out
        assert "Unassigned: TFA-001" in out
        assert "TFA-005" not in out.split("Unassigned:")[1]

    def test_cap_leaves_shortfall(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        assert main(["--config", config, "--max-per-position", "1", "--strategy", "cluster"]) == 0
        out = capsys.readouterr().out
        # 11 positions capped at 1 leave 3 of the 14 eligible aircraft
        assert "Unassigned:" in out
        assert len(out.split("Unassigned:")[1].split(",")) == 3

    def test_export_csv(self, tmp_path, fixture_path):
        config = _write_config(tmp_path, str(fixture_path))
        out = tmp_path / "out" / "table.csv"
        assert main(["--config", config, "--export-csv", str(out)]) == 0
        lines = out.read_text().splitlines()
        assert lines[0] == "Base,Position,Capacity,Assigned Aircraft,Notes"
        assert len(lines) == 12

    def test_grouped_by_base(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        assert main(["--config", config, "--no-distribute"]) == 0
        lines = capsys.readouterr().out.splitlines()
        head = lines.index("Palmachim")
        assert lines[head + 1].startswith("  Palmachim Apron 1 ")
        assert "Tel Nof" in lines

    def test_import_notes(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        notes = tmp_path / "old.csv"
        notes.write_text(
            "Base,Position,Capacity,Assigned Aircraft,Notes\n"
            "Tel Nof,Tel Nof Hangar 2,4,,Runway works\n",
        )
        out = tmp_path / "table.csv"
        assert main([
            "--config", config, "--import-notes", str(notes), "--export-csv", str(out),
        ]) == 0
        assert "[Runway works]" in capsys.readouterr().out
        assert "Tel Nof,Tel Nof Hangar 2,4," in out.read_text()
        assert out.read_text().count("Runway works") == 1

    def test_missing_notes_file(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path))
        assert main(["--config", config, "--import-notes", str(tmp_path / "none.csv")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_fixture_override(self, tmp_path, capsys):
        fixture = tmp_path / "tiny.yaml"
        OmegaConf.save(OmegaConf.create({
            "bases": [{"id": "B1", "name": "Alpha", "latitude": 0, "longitude": 0}],
            "positions": [{"id": "P1", "base_id": "B1", "name": "Only Slot",
                           "latitude": 0, "longitude": 0, "type": "apron", "capacity": 1}],
            "aircraft": [{"id": "A1", "type": "fighter", "callsign": "TFA-777"}],
        }), fixture)
        config = _write_config(tmp_path, None)
        assert main(["--config", config, "--fixture", str(fixture)]) == 0
        out = capsys.readouterr().out
        assert "Only Slot" in out
        assert "TFA-777" in out

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "nope.yaml")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_config(self, tmp_path, fixture_path, capsys):
        config = _write_config(tmp_path, str(fixture_path), max_per_position=-2)
        assert main(["--config", config, "--validate-config"]) == 1
        assert "validation failed" in capsys.readouterr().err

    def test_missing_fixture(self, tmp_path, capsys):
        config = _write_config(tmp_path, str(tmp_path / "absent.yaml"))
        assert main(["--config", config]) == 1
        assert "Fixture not found" in capsys.readouterr().err

    def test_no_fixture_configured(self, tmp_path, capsys):
        config = _write_config(tmp_path, None)
        assert main(["--config", config]) == 1
        assert "no fixture" in capsys.readouterr().err

    def test_bad_fixture(self, tmp_path, capsys):
        fixture = tmp_path / "bad.yaml"
        fixture.write_text("aircraft:\n  - {id: A1, type: zeppelin, callsign: Z}\n")
        config = _write_config(tmp_path, str(fixture))
        assert main(["--config", config]) == 1
        assert "zeppelin" in capsys.readouterr().err
