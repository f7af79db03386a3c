from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import Any

import pandas as pd

from ..models.config_models import AGGREGATE_POLICIES, AGGREGATE_PROPAGATE, PipelineConfig
from ..models.error_record import IMPUTATION_CONFLICT, ErrorRecord
from ..models.processing_result import CleaningResult

"""Cleaning and reshaping of the raw enrollment table.

Stages (each returns a new DataFrame, inputs are never modified):
1. impute_counts       -- fill the one missing count of Total/Male/Female
2. decode_hierarchy    -- leading whitespace -> hierarchy depth, strip the name
3. filter_universities -- exact, case-sensitive match on target names
4. project             -- keep Semester/University/Total
5. aggregate_semesters -- one synthetic row per semester with the summed total
6. merge_and_order     -- concat + stable sort by the semester label

clean_table() runs all of them for a PipelineConfig.
"""

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["Semester", "University", "Total"]
_YEAR_RE = re.compile(r"\d{4}")


def impute_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Fill a missing count from the other two (Total = Male + Female).

    Each rule applies only when exactly that one field is absent. All three
    conditions are evaluated against the original values, so the order of the
    rules does not matter. Rows with two or more absent fields are unchanged.
    """
    out = df.copy()
    total, male, female = df["Total"], df["Male"], df["Female"]
    t_na, m_na, f_na = total.isna(), male.isna(), female.isna()

    out["Total"] = total.mask(t_na & ~m_na & ~f_na, male + female)
    out["Male"] = male.mask(~t_na & m_na & ~f_na, total - female)
    out["Female"] = female.mask(~t_na & ~m_na & f_na, total - male)
    return out


def hierarchy_depth(label: Any) -> int:
    """Number of leading whitespace characters of a raw university label."""
    if not isinstance(label, str):
        return 0
    return len(label) - len(label.lstrip())


def strip_hierarchy(label: Any) -> Any:
    if not isinstance(label, str):
        return label
    return label.lstrip()


def decode_hierarchy(df: pd.DataFrame) -> pd.DataFrame:
    """Add `hierarchy` and replace University by the indentation-free name."""
    out = df.copy()
    out["hierarchy"] = df["University"].map(hierarchy_depth).astype(int)
    out["University"] = df["University"].map(strip_hierarchy)
    return out


def filter_universities(df: pd.DataFrame, names: Iterable[str]) -> pd.DataFrame:
    """Keep rows whose (decoded) University equals one of names exactly.

    The original row index is kept so later stages can report row numbers.
    """
    return df[df["University"].isin(list(names))].copy()


def find_imputation_conflicts(df: pd.DataFrame, source: str = "") -> list[ErrorRecord]:
    """One IMPUTATION_CONFLICT record per row with two or more absent counts."""
    absent = df[["Total", "Male", "Female"]].isna().sum(axis=1)
    records: list[ErrorRecord] = []
    for idx, row in df[absent >= 2].iterrows():
        missing = [c for c in ("Total", "Male", "Female") if pd.isna(row[c])]
        records.append(
            ErrorRecord.create(
                source=source,
                semester=str(row["Semester"]),
                university=str(row["University"]),
                row=int(idx) + 1,
                error_type=IMPUTATION_CONFLICT,
                message=f"cannot impute, absent fields: {', '.join(missing)}",
            )
        )
    return records


def project(df: pd.DataFrame) -> pd.DataFrame:
    """Drop Male/Female/hierarchy; only Semester, University, Total survive."""
    return df[OUTPUT_COLUMNS].reset_index(drop=True)


def aggregate_semesters(
    df: pd.DataFrame,
    label: str = "Uni Total",
    policy: str = "absent_as_zero",
) -> tuple[pd.DataFrame, list[str]]:
    """Sum Total per semester into one synthetic row labelled `label`.

    policy:
        absent_as_zero -- absent totals count as 0 (the semester is reported
                          as incomplete)
        propagate      -- any absent total makes the aggregate absent

    Returns the aggregate rows and the sorted list of incomplete semesters.
    """
    if policy not in AGGREGATE_POLICIES:
        raise ValueError(f"unknown aggregate policy: {policy!r}")

    totals = df["Total"].astype("Int64")
    grouped = totals.groupby(df["Semester"], sort=True)
    sums = grouped.sum(min_count=0)
    has_absent = totals.isna().groupby(df["Semester"], sort=True).any()
    if policy == AGGREGATE_PROPAGATE:
        sums = sums.mask(has_absent)

    agg = pd.DataFrame({
        "Semester": list(sums.index),
        "University": [label] * len(sums),
        "Total": pd.array(sums.tolist(), dtype="Int64"),
    })
    incomplete = sorted(str(s) for s, flag in has_absent.items() if flag)
    return agg, incomplete


def merge_and_order(filtered: pd.DataFrame, aggregates: pd.DataFrame) -> pd.DataFrame:
    """Concatenate rows and aggregates, sorted by the semester label.

    Lexicographic sort on the label; stable, so inside one semester the
    filtered rows keep their order and the aggregate row comes last.
    """
    merged = pd.concat([filtered[OUTPUT_COLUMNS], aggregates[OUTPUT_COLUMNS]], ignore_index=True)
    merged["Total"] = merged["Total"].astype("Int64")
    return merged.sort_values("Semester", kind="stable").reset_index(drop=True)


def semester_year(label: str) -> int:
    """Numeric year of a semester label: "2007/08" -> 2007."""
    m = _YEAR_RE.search(str(label))
    if m is None:
        raise ValueError(f"semester label has no 4-digit year: {label!r}")
    return int(m.group(0))


def clean_table(raw: pd.DataFrame, config: PipelineConfig, source: str = "") -> CleaningResult:
    """Run imputation, hierarchy decode, filter, aggregation and ordering."""
    imputed = impute_counts(raw)
    decoded = decode_hierarchy(imputed)
    filtered = filter_universities(decoded, config.universities)
    logger.debug(f"filter kept {len(filtered)}/{len(decoded)} rows")

    found = set(filtered["University"].unique())
    missing_universities = [u for u in config.universities if u not in found]
    for name in missing_universities:
        logger.warning(f"no rows matched university '{name}' (renamed or re-indented upstream?)")

    conflicts = find_imputation_conflicts(filtered, source=source)
    for c in conflicts:
        logger.warning(f"imputation conflict row={c.row} semester={c.semester} university={c.university}: {c.message}")

    projected = project(filtered)
    aggregates, incomplete = aggregate_semesters(
        projected, label=config.aggregate_label, policy=config.aggregate_policy
    )
    if incomplete:
        logger.warning(
            f"aggregate '{config.aggregate_label}' includes absent totals "
            f"(policy={config.aggregate_policy}): {', '.join(incomplete)}"
        )

    table = merge_and_order(projected, aggregates)
    return CleaningResult(
        table=table,
        conflicts=conflicts,
        incomplete_semesters=incomplete,
        missing_universities=missing_universities,
        aggregate_label=config.aggregate_label,
    )
