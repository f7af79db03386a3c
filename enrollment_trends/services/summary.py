from __future__ import annotations

from ..models.processing_result import PipelineResult

"""SUMMARY line rendering."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: PipelineResult, configured_universities: int) -> str:
    """Render the SUMMARY line of a pipeline run.

    Format:
    SUMMARY semesters={n} rows={n} universities={found}/{configured}
    conflicts={n} incomplete_semesters={n} elapsed_sec={sec}

    Examples:
        >>> import pandas as pd
        >>> from datetime import datetime, timezone
        >>> from enrollment_trends.models.processing_result import CleaningResult
        >>> table = pd.DataFrame({"Semester": ["2007/08"], "University": ["Uni Total"], "Total": [1]})
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = PipelineResult(raw_rows=3, cleaning=CleaningResult(table=table),
        ...                    start_time=t, end_time=t, elapsed_seconds=2.0)
        >>> render_summary_line(r, configured_universities=3)
        'SUMMARY semesters=1 rows=1 universities=3/3 conflicts=0 incomplete_semesters=0 elapsed_sec=2'
    """
    found = configured_universities - len(result.cleaning.missing_universities)
    return (
        f"SUMMARY semesters={result.semester_count} "
        f"rows={result.output_rows} "
        f"universities={found}/{configured_universities} "
        f"conflicts={result.conflict_count} "
        f"incomplete_semesters={len(result.cleaning.incomplete_semesters)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
