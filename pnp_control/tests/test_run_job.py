"""Tests for the run_job command-line entrypoint."""

from __future__ import annotations

import copy
import io
import logging
from pathlib import Path
from typing import Any, Callable, Iterator

import pytest
import yaml

from pnp_control.board.loader import Job, build_job
from pnp_control.configs.loader import load_config
from pnp_control.gcode.generator import GCodeEmitter
from pnp_control.scripts.run_job import main, run


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """main() reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def job_file(tmp_path: Path, job_data: dict[str, Any]) -> Path:
    p = tmp_path / "job.yaml"
    p.write_text(yaml.safe_dump(job_data), encoding="utf-8")
    return p


@pytest.fixture()
def make_job(job_data: dict[str, Any]) -> Callable[..., Job]:
    def _make(count: int = 3) -> Job:
        data = copy.deepcopy(job_data)
        data["tapes"][0]["count"] = count
        return build_job(data)
    return _make


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


class TestRun:
    def test_place_advances_tape(self, make_job: Callable[..., Job]) -> None:
        job = make_job()
        em = GCodeEmitter()
        stats = run(job, load_config(), em)
        assert stats == {"parts": 2, "placed": 2, "skipped": 0, "pads": 0}
        text = em.getvalue()
        assert "X100.000 Y10.000" in text
        assert "X104.000 Y10.000" in text
        assert job.config.tape_for(job.parts[0]).remaining == 1

    def test_runs_out_of_tape(self, make_job: Callable[..., Job]) -> None:
        em = GCodeEmitter()
        stats = run(make_job(count=1), load_config(), em)
        assert stats["placed"] == 1
        assert stats["skipped"] == 1
        assert em.getvalue().count(";; -- Pick") == 1
        assert em.getvalue().count("M84") == 1

    def test_dispense_mode(self, make_job: Callable[..., Job]) -> None:
        job = make_job()
        em = GCodeEmitter()
        stats = run(job, load_config(), em, mode="dispense")
        assert stats["pads"] == 2
        assert ";; -- Pick" not in em.getvalue()
        assert job.config.tape_for(job.parts[0]).remaining == 3

    def test_banner_first(self, make_job: Callable[..., Job]) -> None:
        em = GCodeEmitter()
        run(make_job(), load_config(), em, banner="board.yaml")
        assert em.getvalue().startswith("; board.yaml\n\nG28 X0 Y0")

    def test_unknown_mode(self, make_job: Callable[..., Job]) -> None:
        with pytest.raises(ValueError, match="mode"):
            run(make_job(), load_config(), GCodeEmitter(), mode="solder")


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------


class TestMain:
    def test_stdout(self, job_file: Path) -> None:
        out = io.StringIO()
        assert main(["--job", str(job_file)], stdout=out) == 0
        text = out.getvalue()
        assert text.startswith(f"; {job_file}\n")
        assert text.rstrip().endswith("M84        ; stop motors")

    def test_output_file(self, job_file: Path, tmp_path: Path) -> None:
        target = tmp_path / "out" / "job.gcode"
        out = io.StringIO()
        rc = main(["-j", str(job_file), "-o", str(target), "--banner", "test"], stdout=out)
        assert rc == 0
        assert out.getvalue() == ""
        text = target.read_text(encoding="utf-8")
        assert text.startswith("; test\n")
        assert text.count(";; -- Place") == 2

    def test_dispense_timing_flags(self, job_file: Path) -> None:
        out = io.StringIO()
        rc = main(
            ["-j", str(job_file), "-m", "dispense", "--init-ms", "10", "--area-ms", "0"],
            stdout=out,
        )
        assert rc == 0
        assert "G4 P10.0  ; Wait time dependent on area 1.30 mm^2" in out.getvalue()

    def test_missing_job(self, tmp_path: Path, capsys) -> None:
        rc = main(["--job", str(tmp_path / "missing.yaml")], stdout=io.StringIO())
        assert rc == 1
        assert "missing.yaml" in capsys.readouterr().err

    def test_malformed_job_yaml(self, tmp_path: Path, capsys) -> None:
        bad = tmp_path / "job.yaml"
        bad.write_text("board: {origin: [0, 0\n", encoding="utf-8")
        out = io.StringIO()
        assert main(["-j", str(bad)], stdout=out) == 1
        assert out.getvalue() == ""
        assert "job.yaml" in capsys.readouterr().err

    def test_invalid_config(self, job_file: Path, tmp_path: Path) -> None:
        bad = tmp_path / "machine.yaml"
        bad.write_text("heights: {}\n", encoding="utf-8")
        out = io.StringIO()
        assert main(["-j", str(job_file), "-c", str(bad)], stdout=out) == 1
        assert out.getvalue() == ""

    def test_json_logs(self, job_file: Path, capsys) -> None:
        main(["-j", str(job_file), "--json-logs"], stdout=io.StringIO())
        err = capsys.readouterr().err
        assert '"app": "pnp"' in err
        assert '"mode": "place"' in err
        assert '"job": "job.yaml"' in err
