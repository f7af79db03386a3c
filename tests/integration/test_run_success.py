from __future__ import annotations

import json
import re
from pathlib import Path

from enrollment_trends.cli import main as cli_main
from enrollment_trends.config.loader import load_config
from enrollment_trends.services.orchestrator import run_pipeline

"""End-to-end run on the sample table (2 semesters, 3 target universities).

Sample contents after cleaning:
  2007/08: Bielefeld 1000, Bochum 1200 (imputed), Bonn 900, Uni Total 3100
  2008/09: Bielefeld 1100, Bochum 1250, Bonn <absent>, Uni Total 2350 (incomplete)
"""


def test_run_pipeline_writes_both_artifacts(write_config: Path, sample_csv: Path, temp_workdir: Path):
    cfg = load_config(write_config)
    result = run_pipeline(cfg)

    assert result.chart_path == Path("./output") / "enrollment_trends.png"
    assert result.chart_path.exists()
    assert result.animation_path is not None and result.animation_path.exists()
    assert result.animation_path.read_bytes()[:4] == b"GIF8"

    assert result.raw_rows == 11
    table = result.cleaning.table
    assert table["Semester"].tolist() == ["2007/08"] * 4 + ["2008/09"] * 4
    assert table["University"].tolist() == [
        "Universität Bielefeld", "Universität Bochum", "Universität Bonn", "Uni Total",
    ] * 2
    totals = table["Total"].tolist()
    assert totals[:4] == [1000, 1200, 900, 3100]
    assert totals[4:6] == [1100, 1250]
    assert totals[7] == 2350
    assert result.cleaning.incomplete_semesters == ["2008/09"]
    assert result.cleaning.missing_universities == []


def test_run_pipeline_records_conflicts_to_error_log(write_config: Path, sample_csv: Path):
    result = run_pipeline(load_config(write_config), render=False)

    assert result.conflict_count == 1
    assert result.chart_path is None
    assert result.error_log_path is not None
    records = [json.loads(line) for line in result.error_log_path.read_text(encoding="utf-8").splitlines()]
    assert len(records) == 1
    assert records[0]["error_type"] == "IMPUTATION_CONFLICT"
    assert records[0]["semester"] == "2008/09"
    assert records[0]["university"] == "Universität Bonn"
    assert records[0]["row"] == 9


def test_cli_full_run(write_config: Path, sample_csv: Path, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out

    assert code == 0
    assert (temp_workdir / "output" / "enrollment_trends.png").exists()
    assert (temp_workdir / "output" / "enrollment_trends.gif").exists()
    assert "INFO Loaded 11 rows" in out
    assert "WARN imputation conflict row=9 semester=2008/09 university=Universität Bonn" in out
    match = re.search(r"SUMMARY semesters=(\d+) rows=(\d+) universities=(\d+)/(\d+) conflicts=(\d+) "
                      r"incomplete_semesters=(\d+)", out)
    assert match, out
    assert match.groups() == ("2", "8", "3", "3", "1", "1")


def test_cli_no_animation(write_config: Path, sample_csv: Path, temp_workdir: Path):
    assert cli_main(["--no-animation"]) == 0
    assert (temp_workdir / "output" / "enrollment_trends.png").exists()
    assert not (temp_workdir / "output" / "enrollment_trends.gif").exists()


def test_cli_env_file_overrides_output_dir(write_config: Path, sample_csv: Path, temp_workdir: Path):
    (temp_workdir / ".env").write_text("ENROLLMENT_OUTPUT_DIR=./charts\n", encoding="utf-8")
    assert cli_main(["--no-animation"]) == 0
    assert (temp_workdir / "charts" / "enrollment_trends.png").exists()
    assert not (temp_workdir / "output").exists()


def test_cli_config_option(write_config: Path, sample_csv: Path, temp_workdir: Path):
    moved = temp_workdir / "alt.yml"
    moved.write_text(write_config.read_text(encoding="utf-8"), encoding="utf-8")
    write_config.unlink()
    assert cli_main(["--config", str(moved), "--no-animation"]) == 0


def test_cli_inspect_data(write_config: Path, sample_csv: Path, temp_workdir: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "RAW: rows=11" in out
    assert "CLEANED: rows=8 semesters=2" in out
    assert "incomplete aggregate: semester=2008/09 total=2350" in out
    assert not (temp_workdir / "output").exists()


def test_cli_debug_mode(write_config: Path, sample_csv: Path, capsys):
    assert cli_main(["--debug", "--inspect-data"]) == 0
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG filter kept 6/11 rows" in out
