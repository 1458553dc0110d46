"""Reading and writing the density reference and missing-density CSV files."""

import csv
import logging
import pathlib
from typing import List, Optional, Sequence, Union

import pandas as pd

from ..ingredients.density import parse_density_value
from ..ingredients.models import (
    Action,
    MissingIngredient,
    ReferenceIngredient,
    Resolution,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, pathlib.Path]

REFERENCE_HEADER = ["id", "ingredient", "normalised_form", "density", "source"]
MISSING_HEADER = [
    "popularity",
    "density_ingredient",
    "action",
    "match_to",
    "density",
    "example",
    "confidence",
]


def _read_rows(file_path: PathLike, names: List[str]) -> List[tuple]:
    """Read every data row of a CSV file as a tuple of strings.

    Columns are taken from ``names`` rather than the file's header, so an
    optional trailing column is kept even when the header omits it. Each
    row holds only the fields present in the file; a row longer than
    ``names`` comes back with one field more than ``names`` so callers can
    reject it.
    """
    df = pd.read_csv(
        file_path,
        header=0,
        names=names + ["_overflow"],
        dtype=str,
        keep_default_na=False,
        index_col=False,
    )
    rows = []
    for values in df.itertuples(index=False, name=None):
        values = list(values)
        # pandas pads short rows with NaN; empty fields stay ""
        while values and pd.isna(values[-1]):
            values.pop()
        rows.append(tuple(values))
    return rows


def parse_reference_row(row: Sequence[str]) -> ReferenceIngredient:
    """Parse one reference CSV row.

    Raises:
        ValueError: If the row has the wrong length or its id or density is invalid.
    """
    if len(row) != len(REFERENCE_HEADER):
        raise ValueError(f"unexpected number of fields: {len(row)}")

    id_text = row[0].strip()
    try:
        ref_id = int(id_text) if id_text else None
    except ValueError:
        raise ValueError(f"invalid id: {row[0]!r}") from None

    try:
        density = parse_density_value(row[3])
    except ValueError as e:
        raise ValueError(f"invalid density: {e}") from None

    return ReferenceIngredient(
        id=ref_id,
        ingredient=row[1],
        normalised=row[2],
        density=density,
        source=row[4],
    )


def _parse_action(value: str) -> Optional[Action]:
    if not value:
        return None
    # Older files spell it with a space
    if value == "NO MATCH":
        return Action.NO_MATCH
    return Action(value)


def parse_missing_row(row: Sequence[str]) -> MissingIngredient:
    """Parse one missing-densities CSV row.

    Empty ``action``, ``match_to``, ``density`` and ``confidence`` fields
    load as absent. The ``confidence`` column is optional.

    Raises:
        ValueError: If the row has the wrong length or a numeric field is invalid.
    """
    # The trailing confidence column is optional
    if not len(MISSING_HEADER) - 1 <= len(row) <= len(MISSING_HEADER):
        raise ValueError(f"unexpected number of fields: {len(row)}")

    try:
        popularity = int(row[0])
    except ValueError:
        raise ValueError(f"invalid popularity: {row[0]!r}") from None

    density = None
    if row[4] != "":
        try:
            density = float(row[4])
        except ValueError:
            raise ValueError(f"invalid density: {row[4]!r}") from None

    confidence = row[6] if len(row) > 6 and row[6] else None

    return MissingIngredient(
        popularity=popularity,
        ingredient=row[1],
        example=row[5],
        resolution=Resolution(
            action=_parse_action(row[2]),
            match_to=row[3] or None,
            density=density,
            confidence=confidence,
        ),
    )


def _load(file_path: PathLike, names: List[str], parse_row, kind: str) -> list:
    records = []
    for i, row in enumerate(_read_rows(file_path, names), start=1):
        try:
            records.append(parse_row(row))
        except ValueError as e:
            logger.warning(f"Could not parse {kind} row {i}: {e}")
    logger.info(f"Loaded {len(records)} {kind} records from {file_path}")
    return records


def load_reference_csv(file_path: PathLike) -> List[ReferenceIngredient]:
    """Load the density reference list, skipping rows that fail to parse.

    Args:
        file_path: CSV with columns id, ingredient, normalised_form, density, source.

    Returns:
        Reference ingredients in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    return _load(file_path, REFERENCE_HEADER, parse_reference_row, "density reference")


def load_missing_csv(file_path: PathLike) -> List[MissingIngredient]:
    """Load the ingredients with missing densities, skipping bad rows."""
    return _load(file_path, MISSING_HEADER, parse_missing_row, "missing density")


def _save(file_path: PathLike, header: List[str], rows: List[List[str]]) -> None:
    df = pd.DataFrame(rows, columns=header)
    df.to_csv(file_path, index=False)


def save_reference_csv(
    file_path: PathLike, records: Sequence[ReferenceIngredient]
) -> None:
    _save(file_path, REFERENCE_HEADER, [record.to_row() for record in records])


def save_missing_csv(file_path: PathLike, records: Sequence[MissingIngredient]) -> None:
    _save(file_path, MISSING_HEADER, [record.to_row() for record in records])


class ResultWriter:
    """Streams resolved records to a CSV file, one flushed row at a time.

    Example:
        with ResultWriter("filled.csv") as writer:
            writer.write(record)
    """

    def __init__(self, file_path: PathLike):
        self.file_path = file_path
        self.output_handle = None
        self.csv_writer = None
        self.results_written = 0

    def open(self) -> "ResultWriter":
        self.output_handle = open(self.file_path, "w", newline="", encoding="utf-8")
        self.csv_writer = csv.writer(self.output_handle)
        self.csv_writer.writerow(MISSING_HEADER)
        self.output_handle.flush()
        return self

    def write(self, record: MissingIngredient) -> None:
        self.csv_writer.writerow(record.to_row())
        self.output_handle.flush()
        self.results_written += 1

    def close(self) -> None:
        if self.output_handle is not None:
            self.output_handle.close()
            self.output_handle = None

    def __enter__(self) -> "ResultWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_output_writer(file_path: PathLike) -> ResultWriter:
    """Open ``file_path`` for streaming results; use as a context manager."""
    return ResultWriter(file_path)
