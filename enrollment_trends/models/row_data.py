from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

"""Row models for the enrollment table.

RawRow is what the loader parses from one CSV line, AggregateRow the
synthetic per-semester sum. Cleaned rows exist only as rows of the output
DataFrame (Semester, University, Total); these dataclasses are the row-level
view used at the edges (inspection, tests).

Absent counts are None, never a sentinel number.
"""

__all__ = [
    "RawRow",
    "AggregateRow",
]


def _optional_int(value: Any) -> int | None:
    # pandas の NA / NaN は None に揃える
    if value is None or pd.isna(value):
        return None
    return int(value)


@dataclass(frozen=True)
class RawRow:
    semester: str
    university: str  # leading whitespace preserved
    total: int | None = None
    male: int | None = None
    female: int | None = None

    @staticmethod
    def from_record(record: dict[str, Any]) -> RawRow:
        return RawRow(
            semester=record["Semester"],
            university=record["University"],
            total=_optional_int(record.get("Total")),
            male=_optional_int(record.get("Male")),
            female=_optional_int(record.get("Female")),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "Semester": self.semester,
            "University": self.university,
            "Total": self.total,
            "Male": self.male,
            "Female": self.female,
        }


@dataclass(frozen=True)
class AggregateRow:
    semester: str
    university: str
    total: int | None
    incomplete: bool = False  # group contained a row without total
