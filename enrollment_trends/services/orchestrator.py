from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import PipelineConfig
from ..models.error_record import SCHEMA_MISMATCH, SOURCE_UNAVAILABLE
from ..models.processing_result import CleaningResult, PipelineResult
from ..source.reader import SchemaMismatch, SourceUnavailable, read_enrollment_csv
from .cleaning import clean_table

"""Pipeline orchestration: Loader -> Cleaner/Reshaper -> Presenter.

One synchronous pass. A load or render failure aborts the whole run with
PipelineError (no retry, no partial artifacts reported as success).
Imputation conflicts are recorded to the error log and the run continues.
"""

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Fatal pipeline failure (source, schema or rendering)."""


def load_and_clean(
    config: PipelineConfig, error_log: ErrorLogBuffer | None = None
) -> tuple[pd.DataFrame, CleaningResult]:
    """Load the source table and run the cleaning stage.

    Returns the raw DataFrame and the CleaningResult. Conflicts are appended
    to error_log when given.
    """
    location = config.source.location
    logger.info(f"Loading enrollment table from: {location}")
    try:
        raw = read_enrollment_csv(location, config.source)
    except SourceUnavailable as e:
        if error_log is not None:
            error_log.append(ErrorRecord.create(location, "", "", -1, SOURCE_UNAVAILABLE, str(e)))
        raise PipelineError(f"source unavailable: {e}") from e
    except SchemaMismatch as e:
        if error_log is not None:
            error_log.append(ErrorRecord.create(location, "", "", -1, SCHEMA_MISMATCH, str(e)))
        raise PipelineError(f"schema mismatch: {e}") from e
    logger.info(f"Loaded {len(raw)} rows")

    cleaning = clean_table(raw, config, source=location)
    if error_log is not None:
        error_log.extend(cleaning.conflicts)
    logger.info(
        f"Cleaned table: {len(cleaning.table)} rows over {len(cleaning.semesters)} semesters"
    )
    return raw, cleaning


def _render(config: PipelineConfig, table: pd.DataFrame, animation: bool) -> tuple[Path, Path | None]:
    # render パッケージは matplotlib を読み込むので必要時のみ import
    from ..render import save_animation, save_chart

    out_dir = Path(config.output.directory)
    chart_path = out_dir / config.output.chart_file
    anim_path: Path | None = None
    try:
        save_chart(table, config.display, chart_path, dpi=config.output.dpi)
        logger.info(f"Chart written: {chart_path}")
        if animation:
            anim_path = out_dir / config.output.animation_file
            save_animation(table, config.display, anim_path, dpi=config.output.dpi)
            logger.info(f"Animation written: {anim_path}")
    except Exception as e:
        # matplotlib / Pillow 由来の例外もすべて PipelineError に変換
        raise PipelineError(f"rendering failed: {e}") from e
    return chart_path, anim_path


def run_pipeline(
    config: PipelineConfig,
    *,
    render: bool = True,
    animation: bool = True,
) -> PipelineResult:
    """Run the pipeline end to end.

    Args:
        config: pipeline configuration
        render: write the static chart (and the animation unless disabled)
        animation: also write the animated GIF

    Returns:
        PipelineResult with row counts, conflicts, timings and artifact paths

    Raises:
        PipelineError: source/schema/render failures (fatal)
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer()
    try:
        raw, cleaning = load_and_clean(config, error_log)
        chart_path: Path | None = None
        anim_path: Path | None = None
        if render:
            chart_path, anim_path = _render(config, cleaning.table, animation)
    finally:
        # 失敗時も記録済みエラーは書き出す
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"Error records written: {log_path}")

    end_time = datetime.now(UTC)
    return PipelineResult(
        raw_rows=len(raw),
        cleaning=cleaning,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        chart_path=chart_path,
        animation_path=anim_path,
        error_log_path=log_path,
    )
