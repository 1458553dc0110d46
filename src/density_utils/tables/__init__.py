"""CSV input and output for density tables."""

from .csv_files import (
    MISSING_HEADER,
    REFERENCE_HEADER,
    ResultWriter,
    load_missing_csv,
    load_reference_csv,
    open_output_writer,
    parse_missing_row,
    parse_reference_row,
    save_missing_csv,
    save_reference_csv,
)

__all__ = [
    "MISSING_HEADER",
    "REFERENCE_HEADER",
    "ResultWriter",
    "load_missing_csv",
    "load_reference_csv",
    "open_output_writer",
    "parse_missing_row",
    "parse_reference_row",
    "save_missing_csv",
    "save_reference_csv",
]
