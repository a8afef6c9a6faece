"""Measurement window types and validation of raw form input."""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from .config import (
    MEASUREMENT_FIELDS,
    OPTIONAL_FIELD_DEFAULT,
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    WINDOW_DAYS,
)
from .errors import InvalidNumber, InvalidWindow, MissingRequiredField


# ============================================================
# NUMERIC WINDOW
# ============================================================

@dataclass(frozen=True)
class MeasurementRow:
    """One calendar day of observations."""
    max_temp: float
    min_temp: float
    precipitation: float = 0.0
    snowfall: float = 0.0
    snow_depth: float = 0.0

    def value(self, field_name: str) -> float:
        return getattr(self, field_name)

    def as_list(self, fields: Sequence[str] = MEASUREMENT_FIELDS) -> List[float]:
        return [self.value(name) for name in fields]

    @property
    def is_complete(self) -> bool:
        return math.isfinite(self.max_temp) and math.isfinite(self.min_temp)


@dataclass(frozen=True)
class MeasurementMatrix:
    """
    Fixed-length window of daily rows, earliest day first.

    Index ``WINDOW_DAYS - 1`` is the most recent day before the day being
    predicted. ``dates`` is only set when the window came from provider
    history.
    """
    rows: Tuple[MeasurementRow, ...]
    dates: Optional[Tuple[str, ...]] = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, 'rows', tuple(self.rows))
        if len(self.rows) != WINDOW_DAYS:
            raise InvalidWindow(len(self.rows), WINDOW_DAYS)
        for day, row in enumerate(self.rows):
            if not row.is_complete:
                missing = 'max_temp' if not math.isfinite(row.max_temp) else 'min_temp'
                raise MissingRequiredField(day, missing)
        if self.dates is not None:
            object.__setattr__(self, 'dates', tuple(self.dates))
            if len(self.dates) != WINDOW_DAYS:
                raise InvalidWindow(len(self.dates), WINDOW_DAYS)

    def __len__(self):
        return len(self.rows)

    def __iter__(self):
        return iter(self.rows)

    def column(self, field_name: str) -> List[float]:
        """All values of one field, in chronological order."""
        return [row.value(field_name) for row in self.rows]

    def to_array(self, fields: Sequence[str] = MEASUREMENT_FIELDS) -> np.ndarray:
        """Return a (WINDOW_DAYS, len(fields)) float array."""
        return np.array([row.as_list(fields) for row in self.rows], dtype=float)

    def flatten(self, fields: Sequence[str] = MEASUREMENT_FIELDS) -> np.ndarray:
        """Row-major feature vector: day 1 fields, then day 2 fields, ..."""
        return self.to_array(fields).reshape(-1)

    def to_payload(self, fields: Sequence[str] = MEASUREMENT_FIELDS) -> List[List[float]]:
        """Nested lists ready for a JSON request body."""
        return [row.as_list(fields) for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        index = list(self.dates) if self.dates else [f"Day {i + 1}" for i in range(len(self.rows))]
        return pd.DataFrame(self.to_payload(), columns=MEASUREMENT_FIELDS, index=index)


# ============================================================
# RAW FORM GRID
# ============================================================

def _to_text(value) -> str:
    """Render a cell coming from a widget or DataFrame as form text."""
    if value is None:
        return ''
    if isinstance(value, float) and math.isnan(value):
        return ''
    return str(value)


@dataclass(frozen=True)
class MeasurementForm:
    """
    Immutable grid of raw text values as typed by the user.

    Every edit returns a new form, so a request always reads a snapshot
    that cannot change underneath it.
    """
    cells: Tuple[Tuple[str, ...], ...]

    def __post_init__(self):
        cells = tuple(tuple(_to_text(v) for v in row) for row in self.cells)
        for row in cells:
            if len(row) != len(MEASUREMENT_FIELDS):
                raise ValueError(
                    f"Each row needs {len(MEASUREMENT_FIELDS)} values, got {len(row)}"
                )
        object.__setattr__(self, 'cells', cells)

    @classmethod
    def empty(cls, n_days: int = WINDOW_DAYS) -> "MeasurementForm":
        return cls(tuple(('',) * len(MEASUREMENT_FIELDS) for _ in range(n_days)))

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, object]]) -> "MeasurementForm":
        return cls(tuple(
            tuple(_to_text(row.get(name)) for name in MEASUREMENT_FIELDS)
            for row in rows
        ))

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "MeasurementForm":
        """Build a form from a data-editor frame with one column per field."""
        missing_cols = [name for name in MEASUREMENT_FIELDS if name not in df.columns]
        if missing_cols:
            raise ValueError(f"Frame is missing columns: {missing_cols}")
        return cls.from_rows(df[MEASUREMENT_FIELDS].to_dict('records'))

    @classmethod
    def from_matrix(cls, matrix: MeasurementMatrix) -> "MeasurementForm":
        return cls(tuple(
            tuple(str(v) for v in row.as_list()) for row in matrix.rows
        ))

    @property
    def n_days(self) -> int:
        return len(self.cells)

    def value(self, day: int, field_name: str) -> str:
        return self.cells[day][MEASUREMENT_FIELDS.index(field_name)]

    def rows(self) -> List[Dict[str, str]]:
        return [dict(zip(MEASUREMENT_FIELDS, row)) for row in self.cells]

    def with_column(self, field_name: str, values: Sequence) -> "MeasurementForm":
        if len(values) != self.n_days:
            raise ValueError(f"Expected {self.n_days} values for {field_name}, got {len(values)}")
        col = MEASUREMENT_FIELDS.index(field_name)
        cells = [list(row) for row in self.cells]
        for day, text in enumerate(values):
            cells[day][col] = _to_text(text)
        return MeasurementForm(tuple(tuple(row) for row in cells))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [list(row) for row in self.cells],
            columns=MEASUREMENT_FIELDS,
            index=[f"Day {i + 1}" for i in range(self.n_days)],
        )


# ============================================================
# MATRIX BUILDER
# ============================================================

def parse_number(text: str, day: int, field_name: str) -> float:
    """Parse one cell; reject anything that is not a finite float."""
    try:
        value = float(text.strip())
    except ValueError:
        raise InvalidNumber(day, field_name, text) from None
    if not math.isfinite(value):
        raise InvalidNumber(day, field_name, text, reason="is not a finite number")
    return value


def build_measurement_matrix(
    measurements: Union[MeasurementForm, Sequence[Mapping[str, object]]],
    dates: Optional[Sequence[str]] = None,
) -> MeasurementMatrix:
    """
    Validate raw form input and build the numeric window.

    Parameters:
    -----------
    measurements : MeasurementForm or sequence of mappings
        One entry per day (earliest first) mapping field name to text
    dates : sequence of str, optional
        Calendar dates of the rows

    Returns:
    --------
    matrix : MeasurementMatrix
        Parsed window with blank optional fields set to 0

    Raises:
    -------
    InvalidWindow
        Wrong number of days
    MissingRequiredField
        A temperature cell is blank (checked for all days before parsing)
    InvalidNumber
        A cell is not a finite number, or an optional field is negative
    """
    if isinstance(measurements, MeasurementForm):
        rows = measurements.rows()
    else:
        rows = [{name: _to_text(row.get(name)) for name in MEASUREMENT_FIELDS}
                for row in measurements]

    if len(rows) != WINDOW_DAYS:
        raise InvalidWindow(len(rows), WINDOW_DAYS)

    # Required fields first, across the whole window
    for day, row in enumerate(rows):
        for name in REQUIRED_FIELDS:
            if not row[name].strip():
                raise MissingRequiredField(day, name)

    parsed = []
    for day, row in enumerate(rows):
        values = {}
        for name in REQUIRED_FIELDS:
            values[name] = parse_number(row[name], day, name)
        for name in OPTIONAL_FIELDS:
            text = row[name]
            if not text.strip():
                values[name] = OPTIONAL_FIELD_DEFAULT
                continue
            value = parse_number(text, day, name)
            if value < 0:
                raise InvalidNumber(day, name, text, reason="must not be negative")
            values[name] = value
        parsed.append(MeasurementRow(**values))

    return MeasurementMatrix(tuple(parsed), tuple(dates) if dates is not None else None)
