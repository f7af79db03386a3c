from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pandas as pd

from .error_record import ErrorRecord
from .row_data import AggregateRow

"""Result models for the cleaning stage and the whole pipeline run."""


@dataclass(frozen=True, eq=False)
class CleaningResult:
    """Output of the Cleaner/Reshaper stage.

    table holds Semester/University/Total (filtered rows followed by the
    aggregate row per semester, sorted by semester label).
    """
    table: pd.DataFrame
    conflicts: list[ErrorRecord] = field(default_factory=list)  # 2 つ以上欠損した行
    incomplete_semesters: list[str] = field(default_factory=list)  # 集計に欠損 total を含む学期
    missing_universities: list[str] = field(default_factory=list)  # 1 行も一致しなかった対象名

    aggregate_label: str = "Uni Total"

    @property
    def semesters(self) -> list[str]:
        return sorted(self.table["Semester"].unique().tolist())

    def aggregate_rows(self) -> list[AggregateRow]:
        agg = self.table[self.table["University"] == self.aggregate_label]
        incomplete = set(self.incomplete_semesters)
        return [
            AggregateRow(
                semester=r["Semester"],
                university=r["University"],
                total=None if pd.isna(r["Total"]) else int(r["Total"]),
                incomplete=r["Semester"] in incomplete,
            )
            for r in agg.to_dict(orient="records")
        ]


@dataclass(frozen=True, eq=False)
class PipelineResult:
    """Aggregated result of one end-to-end run (SUMMARY line source)."""
    raw_rows: int  # 読み込んだデータ行数
    cleaning: CleaningResult
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    chart_path: Path | None = None
    animation_path: Path | None = None
    error_log_path: Path | None = None

    @property
    def output_rows(self) -> int:
        return len(self.cleaning.table)

    @property
    def semester_count(self) -> int:
        return len(self.cleaning.semesters)

    @property
    def conflict_count(self) -> int:
        return len(self.cleaning.conflicts)
