from __future__ import annotations

import codecs
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.config_models import COUNT_COLUMNS, SourceConfig
from ..models.row_data import RawRow

"""Enrollment CSV reader.

Reads the Landesdatenbank NRW semester table:
- `;` delimited, Latin-1, first 6 lines are title/metadata
- 5 columns Semester;University;Total;Male;Female, no header row of its own
- `-` and `NA` mark missing counts
- whitespace is kept verbatim (University の先頭スペース = 階層)

Count cells that are null tokens, empty or not an integer become <NA>
(pandas nullable Int64), never 0 and never an error.
"""

__all__ = [
    "LoaderError",
    "SourceUnavailable",
    "SchemaMismatch",
    "read_enrollment_csv",
    "to_raw_rows",
    "frame_from_raw_rows",
]


class LoaderError(Exception):
    """Base class for fatal loader failures."""


class SourceUnavailable(LoaderError):
    """Raised when the source URL/path cannot be fetched or opened."""


class SchemaMismatch(LoaderError):
    """Raised when the parsed rows do not have the expected 5-column layout."""


def _coerce_counts(series: pd.Series) -> pd.Series:
    nums = pd.to_numeric(series, errors="coerce")
    # 小数は整数列として不正 -> 欠損扱い
    nums = nums.where(nums % 1 == 0)
    return nums.astype("Int64")


def read_enrollment_csv(source: str | Path, schema: SourceConfig | None = None) -> pd.DataFrame:
    """Read the enrollment table into a DataFrame.

    Parameters
    ----------
    source: URL or local file path
    schema: delimiter / header skip / encoding / null tokens / column names

    Returns
    -------
    DataFrame with text columns Semester, University (object dtype, untrimmed)
    and Int64 columns Total, Male, Female. Rows with fewer fields are padded
    with absent values.

    Raises
    ------
    SourceUnavailable: the resource cannot be opened or downloaded, or the
        configured encoding is unknown
    SchemaMismatch: a row has more fields than the schema, the text does not
        decode, no data rows, or no row reaches the last column
    """
    schema = schema or SourceConfig()
    columns = list(schema.columns)
    try:
        codecs.lookup(schema.encoding)
    except LookupError as e:
        raise SourceUnavailable(f"unknown encoding {schema.encoding!r} for {source}") from e

    try:
        # names 固定: 列数は 1 行目ではなくスキーマで決まる。短い行は欠損で埋まり、長い行は ParserError
        df = pd.read_csv(
            source,
            sep=schema.delimiter,
            skiprows=schema.skip_rows,
            header=None,
            names=columns,
            engine="python",
            on_bad_lines="error",
            dtype=str,
            encoding=schema.encoding,
            na_values=list(schema.null_tokens),
            keep_default_na=False,
            skipinitialspace=False,
            skip_blank_lines=True,
        )
    except OSError as e:
        raise SourceUnavailable(f"cannot open source {source}: {e}") from e
    except UnicodeDecodeError as e:
        raise SchemaMismatch(f"cannot decode {source} as {schema.encoding}: {e}") from e
    except pd.errors.EmptyDataError as e:
        raise SchemaMismatch(f"no data rows after skipping {schema.skip_rows} lines: {source}") from e
    except pd.errors.ParserError as e:
        raise SchemaMismatch(f"malformed rows in {source}: {e}") from e

    # 先頭行の列数が多いと pandas は余剰列を暗黙の index にする
    if not isinstance(df.index, pd.RangeIndex):
        raise SchemaMismatch(f"first data row has more than {len(columns)} fields in {source}")
    if df.empty:
        raise SchemaMismatch(f"no data rows after skipping {schema.skip_rows} lines: {source}")

    for col in COUNT_COLUMNS:
        if col in df.columns:
            df[col] = _coerce_counts(df[col])
    if df[columns[-1]].isna().all():
        raise SchemaMismatch(
            f"no row carries all {len(columns)} columns {columns} in {source}"
        )
    return df.reset_index(drop=True)


def to_raw_rows(df: pd.DataFrame) -> list[RawRow]:
    """Row-level view of a loaded table (used for inspection and tests)."""
    records: list[dict[str, Any]] = df.to_dict(orient="records")
    return [RawRow.from_record(r) for r in records]


def frame_from_raw_rows(rows: list[RawRow]) -> pd.DataFrame:
    """Build a loader-shaped DataFrame from RawRow objects."""
    df = pd.DataFrame(
        [r.to_record() for r in rows],
        columns=list(SourceConfig().columns),
    )
    df["Semester"] = df["Semester"].astype(object)
    df["University"] = df["University"].astype(object)
    for col in COUNT_COLUMNS:
        df[col] = df[col].astype("Int64")
    return df
