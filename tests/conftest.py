# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from enrollment_trends.logging.init import reset_logging

# 先頭 6 行はタイトル/メタデータ (読み込み時にスキップ)
SAMPLE_HEADER = [
    "GENESIS-Tabelle: 21331-02i",
    "Gasthörer: Nordrhein-Westfalen, Hochschulen, Geschlecht,",
    "Wintersemester",
    "Landesdatenbank NRW",
    ";;Gasthörer;;",
    "Semester;Hochschulen;Insgesamt;männlich;weiblich",
]

SAMPLE_ROWS = [
    "2007/08;Hochschulen insgesamt;6000;2800;3200",
    "2007/08;  Universität Bielefeld;1000;400;600",
    "2007/08;  Universität Bochum;-;500;700",
    "2007/08;  Universität Bonn;900;-;500",
    "2007/08;  Universität Bielefeld Extern;50;20;30",
    "2008/09;Hochschulen insgesamt;6100;2900;3200",
    "2008/09;  Universität Bielefeld;1100;500;600",
    "2008/09;  Universität Bochum;1250;550;700",
    "2008/09;  Universität Bonn;-;-;520",
]

SAMPLE_FOOTER = [
    "__________",
    "(C)opyright Information und Technik Nordrhein-Westfalen, Düsseldorf, 2024",
]

UNIVERSITIES = ["Universität Bielefeld", "Universität Bochum", "Universität Bonn"]


def write_enrollment_csv(path: Path, rows: list[str] | None = None, footer: bool = True) -> Path:
    lines = SAMPLE_HEADER + (SAMPLE_ROWS if rows is None else rows)
    if footer:
        lines = lines + SAMPLE_FOOTER
    path.write_bytes(("\n".join(lines) + "\n").encode("ISO-8859-1"))
    return path


@pytest.fixture(autouse=True)
def _clean_logging_state(monkeypatch):
    reset_logging()
    # 空文字は未設定扱い。setenv で登録しておけば .env による上書きもテスト後に戻る
    monkeypatch.setenv("ENROLLMENT_SOURCE", "")
    monkeypatch.setenv("ENROLLMENT_OUTPUT_DIR", "")
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_csv(temp_workdir: Path) -> Path:
    return write_enrollment_csv(temp_workdir / "data" / "enrollment.csv")


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source:
  location: ./data/enrollment.csv
  delimiter: ";"
  skip_rows: 6
  encoding: ISO-8859-1
  null_tokens: ["-", "NA"]
universities:
  - Universität Bielefeld
  - Universität Bochum
  - Universität Bonn
aggregate:
  label: Uni Total
  policy: absent_as_zero
display:
  y_min: 0
  y_max: 3000
  colors:
    Uni Total: red
    Universität Bielefeld: black
    Universität Bochum: black
    Universität Bonn: black
  fps: 10
output:
  directory: ./output
  dpi: 40
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "pipeline.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
