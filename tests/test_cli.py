"""Tests for the command line entry point and config loading."""

import json

import pytest

from elibz2kicad.cli import run
from elibz2kicad.config import load_config, DEFAULT_CONFIG
from elibz2kicad.converters.footprint_converter import FootprintConverter


class TestLoadConfig:

    def test_no_path_gives_defaults(self):
        assert load_config(None) is DEFAULT_CONFIG

    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "none.json")) == DEFAULT_CONFIG

    def test_overrides(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"arc_segments": 8, "bogus": 1}))
        config = load_config(str(path))
        assert config.arc_segments == 8
        assert config.default_mask_margin == DEFAULT_CONFIG.default_mask_margin

    @pytest.mark.parametrize("overrides", [
        {"arc_segments": "20"},
        {"arc_segments": 20.0},
        {"arc_segments": 0},
        {"arc_segments": True},
        {"thru_hole_mask_margin": "x"},
        {"default_mask_margin": None},
        {"version": 20211014},
    ])
    def test_values_of_wrong_type_are_ignored(self, tmp_path, overrides):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(overrides))
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_int_accepted_for_float_setting(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"default_mask_margin": 3, "arc_segments": "x"}))
        config = load_config(str(path))
        assert config.default_mask_margin == 3
        assert config.arc_segments == DEFAULT_CONFIG.arc_segments

    def test_rejected_value_does_not_break_conversion(self, tmp_path):
        """A chain with an arc still converts after a bad arc_segments override."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"arc_segments": "20"}))
        line = json.dumps(
            ["POLY", "e1", 0, "", 9, 6, [0, 0, "L", 10, 0, "ARC", 90, 20, 10, "L", 20, 20], 0]
        )

        converter = FootprintConverter(load_config(str(path)))
        result = converter.convert(line)

        assert result.unparsed == 0
        assert len(converter.current_footprint.graphics[0].points) == 3 + 20

    @pytest.mark.parametrize("text", ["{broken", "[1, 2]"])
    def test_invalid_file_gives_defaults(self, tmp_path, text):
        path = tmp_path / "config.json"
        path.write_text(text)
        assert load_config(str(path)) == DEFAULT_CONFIG


class TestRun:

    def test_archive(self, make_elibz, tmp_path, capsys):
        code = run([str(make_elibz()), "-o", str(tmp_path)])
        assert code == 0
        assert (tmp_path / "FP_TEST.kicad_mod").exists()
        assert "Parsed successfully" in capsys.readouterr().out

    def test_missing_archive(self, tmp_path, capsys):
        code = run([str(tmp_path / "missing.elibz"), "-o", str(tmp_path)])
        assert code == 1
        assert "not found" in capsys.readouterr().out

    def test_raw_efoo(self, sample_efoo, tmp_path, capsys):
        efoo = tmp_path / "chip.efoo"
        efoo.write_text(sample_efoo, encoding="utf-8")
        out_dir = tmp_path / "out"
        out_dir.mkdir()

        code = run(["--efoo", str(efoo), "-o", str(out_dir)])
        assert code == 0
        assert (out_dir / "chip.kicad_mod").exists()
        assert "chip converted, unparsed records: 0" in capsys.readouterr().out

    def test_raw_efoo_with_name_and_config(self, sample_efoo, tmp_path):
        efoo = tmp_path / "chip.efoo"
        efoo.write_text(sample_efoo, encoding="utf-8")
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"arc_segments": 4}))

        code = run([
            "--efoo", str(efoo), "--name", "QFN", "-o", str(tmp_path),
            "--config", str(config)
        ])
        assert code == 0
        assert (tmp_path / "QFN.kicad_mod").exists()

    def test_unreadable_efoo(self, tmp_path):
        assert run(["--efoo", str(tmp_path / "none.efoo")]) == 1

    def test_requires_input(self):
        with pytest.raises(SystemExit):
            run([])
