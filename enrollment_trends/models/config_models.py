from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

"""Config dataclasses for the NRW enrollment trends pipeline.

These are the typed, frozen configuration objects handed into every stage.
The YAML loading/validation lives in enrollment_trends/config/loader.py;
this module only defines the shapes and their defaults.
"""

DEFAULT_SOURCE = (
    "https://www.landesdatenbank.nrw.de/ldbnrwws/downloader/00/tables/21331-02i_00.csv"
)
DEFAULT_COLUMNS = ("Semester", "University", "Total", "Male", "Female")
COUNT_COLUMNS = ("Total", "Male", "Female")

AGGREGATE_ABSENT_AS_ZERO = "absent_as_zero"
AGGREGATE_PROPAGATE = "propagate"
AGGREGATE_POLICIES = (AGGREGATE_ABSENT_AS_ZERO, AGGREGATE_PROPAGATE)


@dataclass(frozen=True)
class SourceConfig:
    """Where and how to read the semicolon-delimited enrollment table.

    Text fields are never trimmed: leading spaces in the University column
    encode the nesting depth of the institution.
    """
    location: str = DEFAULT_SOURCE  # URL or local path
    delimiter: str = ";"
    skip_rows: int = 6  # title/metadata lines before the first data row
    encoding: str = "ISO-8859-1"
    null_tokens: tuple[str, ...] = ("-", "NA")
    columns: tuple[str, ...] = DEFAULT_COLUMNS


@dataclass(frozen=True)
class DisplayConfig:
    """Chart and animation settings.

    colors maps the cleaned university name (aggregate label included) to a
    matplotlib color. A mapping is accepted and stored as sorted (name, color)
    pairs.
    """
    title: str = "Total Number of Guest Students at Selected Universities"
    x_label: str = "Semester"
    y_label: str = "Total number of students"
    y_min: int = 0
    y_max: int = 3000
    tick_prefix: str = "WS "
    tick_rotation: int = 50
    colors: tuple[tuple[str, str], ...] = ()
    default_color: str = "black"
    frame_interval_ms: int = 400
    fps: int = 5

    def __post_init__(self) -> None:
        pairs = self.colors.items() if isinstance(self.colors, Mapping) else self.colors
        object.__setattr__(self, "colors", tuple(sorted((str(k), str(v)) for k, v in pairs)))

    def color_for(self, university: str) -> str:
        return dict(self.colors).get(university, self.default_color)


@dataclass(frozen=True)
class OutputConfig:
    directory: str = "output"
    chart_file: str = "enrollment_trends.png"
    animation_file: str = "enrollment_trends.gif"
    dpi: int = 100


@dataclass(frozen=True)
class PipelineConfig:
    """Root configuration for one pipeline run."""
    universities: tuple[str, ...]  # exact, case-sensitive target names
    source: SourceConfig = field(default_factory=SourceConfig)
    aggregate_label: str = "Uni Total"
    aggregate_policy: str = AGGREGATE_ABSENT_AS_ZERO
    display: DisplayConfig = field(default_factory=DisplayConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
