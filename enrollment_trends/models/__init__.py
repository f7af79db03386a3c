"""Domain models for the enrollment trends pipeline."""

from .config_models import DisplayConfig, OutputConfig, PipelineConfig, SourceConfig
from .error_record import ErrorRecord
from .processing_result import CleaningResult, PipelineResult
from .row_data import AggregateRow, RawRow

__all__ = [
    # Configuration models
    "DisplayConfig",
    "OutputConfig",
    "PipelineConfig",
    "SourceConfig",
    # Row models
    "RawRow",
    "AggregateRow",
    # Results
    "CleaningResult",
    "ErrorRecord",
    "PipelineResult",
]
