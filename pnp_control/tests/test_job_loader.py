"""Tests for job file loading."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest
import yaml

from pnp_control.board.loader import Job, build_job, load_job
from pnp_control.board.models import Point
from pnp_control.configs.loader import ConfigError
from pnp_control.gcode.heights import board_thickness


@pytest.fixture()
def data(job_data: dict[str, Any]) -> dict[str, Any]:
    return copy.deepcopy(job_data)


class TestBuildJob:
    def test_converts(self, data: dict[str, Any]) -> None:
        job = build_job(data)
        assert isinstance(job, Job)
        assert [p.component_name for p in job.parts] == ["R1", "R2"]
        assert job.config.board.origin == Point(10.0, 20.0)
        assert board_thickness(job.config) == 5.0
        r1 = job.parts[0]
        assert r1.key == "0805@10k"
        assert r1.pads[1].area == pytest.approx(1.3)

    def test_tapes_keyed_by_component(self, data: dict[str, Any]) -> None:
        job = build_job(data)
        tape = job.config.tape_for(job.parts[0])
        assert tape is not None
        assert tape.remaining == 3
        assert tape.current_feed_position() == Point(100.0, 10.0)

    def test_tape_mapping_read_only(self, data: dict[str, Any]) -> None:
        job = build_job(data)
        with pytest.raises(TypeError):
            job.config.tape_for_component["x@y"] = None  # type: ignore[index]

    @pytest.mark.parametrize("field, number", [("footprint", 0o603), ("value", 100), ("value", 4.7)])
    def test_numeric_label_rejected(
        self, data: dict[str, Any], field: str, number: float,
    ) -> None:
        data["parts"][1][field] = number
        with pytest.raises(ConfigError, match="quote it"):
            build_job(data)

    def test_missing_tape_warns(self, data: dict[str, Any], caplog) -> None:
        data["tapes"] = []
        job = build_job(data)
        assert job.config.tape_for(job.parts[0]) is None
        assert "0805@10k" in caplog.text

    def test_bad_component_key(self, data: dict[str, Any]) -> None:
        data["tapes"][0]["component"] = "0805-10k"
        with pytest.raises(ConfigError, match="footprint"):
            build_job(data)

    def test_duplicate_tape(self, data: dict[str, Any]) -> None:
        data["tapes"].append(copy.deepcopy(data["tapes"][0]))
        with pytest.raises(ConfigError, match="Duplicate tapes"):
            build_job(data)

    def test_duplicate_part(self, data: dict[str, Any]) -> None:
        data["parts"][1]["name"] = "R1"
        with pytest.raises(ConfigError, match="Duplicate part"):
            build_job(data)

    def test_board_below_bed(self, data: dict[str, Any]) -> None:
        data["bed_level"] = 6.0
        with pytest.raises(ConfigError, match="bed_level"):
            build_job(data)

    def test_negative_count(self, data: dict[str, Any]) -> None:
        data["tapes"][0]["count"] = -1
        with pytest.raises(ConfigError):
            build_job(data)

    def test_unknown_key(self, data: dict[str, Any]) -> None:
        data["parts"][0]["rotation"] = 90
        with pytest.raises(ConfigError):
            build_job(data)


class TestLoadJob:
    def test_from_file(self, tmp_path: Path, data: dict[str, Any]) -> None:
        p = tmp_path / "job.yaml"
        p.write_text(yaml.safe_dump(data), encoding="utf-8")
        job = load_job(p)
        assert job.source == p
        assert len(job.parts) == 2

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_job(tmp_path / "nope.yaml")

    def test_empty(self, tmp_path: Path) -> None:
        p = tmp_path / "job.yaml"
        p.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="Empty"):
            load_job(p)

    def test_not_mapping(self, tmp_path: Path) -> None:
        p = tmp_path / "job.yaml"
        p.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_job(p)

    def test_unquoted_footprint_in_file(self, tmp_path: Path) -> None:
        """``0603`` unquoted is octal to YAML; the loader must not turn it into ``387``."""
        p = tmp_path / "job.yaml"
        p.write_text(
            "board: {origin: [0, 0], top: 1.6}\n"
            "tapes:\n"
            "  - {component: \"0603@100n\", first: [0, 0], height: 1.0}\n"
            "parts:\n"
            "  - {name: C1, footprint: 0603, value: 100n, pos: [1, 1]}\n",
            encoding="utf-8",
        )
        with pytest.raises(ConfigError, match="0603"):
            load_job(p)

    def test_quoted_footprint_in_file(self, tmp_path: Path) -> None:
        p = tmp_path / "job.yaml"
        p.write_text(
            "board: {origin: [0, 0], top: 1.6}\n"
            "tapes:\n"
            "  - {component: \"0603@100n\", first: [0, 0], height: 1.0}\n"
            "parts:\n"
            "  - {name: C1, footprint: \"0603\", value: 100n, pos: [1, 1]}\n",
            encoding="utf-8",
        )
        job = load_job(p)
        assert job.parts[0].key == "0603@100n"
        assert job.config.tape_for(job.parts[0]) is not None
