from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for structured error logging.

One record per problem found while processing the enrollment table. Row-level
problems (imputation conflicts) carry the 1-based data row number; source-level
failures where no row applies use row=-1.
"""

__all__ = [
    "ErrorRecord",
    "IMPUTATION_CONFLICT",
    "SOURCE_UNAVAILABLE",
    "SCHEMA_MISMATCH",
]

IMPUTATION_CONFLICT = "IMPUTATION_CONFLICT"
SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
SCHEMA_MISMATCH = "SCHEMA_MISMATCH"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Source location (URL or path) being processed
        semester: Semester label of the affected row ("" if not row-level)
        university: Cleaned university name of the affected row ("" if not row-level)
        row: Data row number (1-based, after the header skip). -1 if unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    semester: str
    university: str
    row: int  # 不明な場合 -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        source: str,
        semester: str,
        university: str,
        row: int,
        error_type: str,
        message: str,
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            semester=semester,
            university=university,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
