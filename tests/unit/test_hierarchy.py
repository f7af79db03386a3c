from __future__ import annotations

import pandas as pd

from enrollment_trends.models.row_data import RawRow
from enrollment_trends.services.cleaning import (
    decode_hierarchy,
    hierarchy_depth,
    strip_hierarchy,
)
from enrollment_trends.source.reader import frame_from_raw_rows


def test_hierarchy_depth_counts_leading_whitespace():
    assert hierarchy_depth(" Universität Bonn") == 1
    assert hierarchy_depth("Universität Bonn") == 0
    assert hierarchy_depth("    Universität Bonn") == 4
    assert hierarchy_depth("\t Universität Bonn") == 2


def test_hierarchy_depth_ignores_inner_and_trailing_whitespace():
    assert hierarchy_depth("Universität Bonn  ") == 0


def test_strip_hierarchy_only_removes_leading_run():
    assert strip_hierarchy("  Universität Bonn ") == "Universität Bonn "
    assert strip_hierarchy("Universität Bonn") == "Universität Bonn"


def test_non_text_labels_are_depth_zero():
    assert hierarchy_depth(None) == 0
    assert hierarchy_depth(float("nan")) == 0
    assert strip_hierarchy(None) is None


def test_decode_hierarchy_adds_column_and_strips_names():
    df = frame_from_raw_rows([
        RawRow("2007/08", "Hochschulen insgesamt", 10, 5, 5),
        RawRow("2007/08", " Universitäten", 8, 4, 4),
        RawRow("2007/08", "  Universität Bonn", 3, 1, 2),
    ])
    out = decode_hierarchy(df)
    assert out["hierarchy"].tolist() == [0, 1, 2]
    assert out["University"].tolist() == ["Hochschulen insgesamt", "Universitäten", "Universität Bonn"]
    # 入力は変更しない
    assert df.loc[2, "University"] == "  Universität Bonn"


def test_decode_hierarchy_handles_missing_label():
    df = frame_from_raw_rows([RawRow("__________", None)])  # type: ignore[arg-type]
    out = decode_hierarchy(df)
    assert out.loc[0, "hierarchy"] == 0
    assert pd.isna(out.loc[0, "University"])
