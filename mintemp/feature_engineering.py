"""Turn provider history into the measurement window used for prediction."""

import logging
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional, Tuple

import pandas as pd

from .config import (
    DAILY_VARIABLES,
    HOURLY_SNOW_DEPTH,
    MEASUREMENT_FIELDS,
    OPTIONAL_FIELD_DEFAULT,
    REQUIRED_FIELDS,
    WINDOW_DAYS,
)
from .errors import InsufficientHistory, MissingRequiredField
from .preprocessing import MeasurementMatrix, MeasurementRow

logger = logging.getLogger(__name__)


def history_date_range(today: Optional[date] = None, window: int = WINDOW_DAYS) -> Tuple[date, date]:
    """
    Calendar range to request from the archive.

    The range ends yesterday, so the current (incomplete) day is never part
    of the window, and spans ``window`` days inclusive.
    """
    today = today or date.today()
    end_date = today - timedelta(days=1)
    start_date = today - timedelta(days=window)
    return start_date, end_date


def daily_snow_depth(hourly: Mapping) -> Dict[str, float]:
    """
    Aggregate hourly snow depth to a per-day maximum.

    Parameters:
    -----------
    hourly : mapping
        Provider ``hourly`` block with ``time`` and snow depth arrays

    Returns:
    --------
    depth_by_day : dict
        ISO date -> max snow depth for that day (days with no data omitted)
    """
    times = hourly.get('time') or []
    depths = hourly.get(HOURLY_SNOW_DEPTH) or []
    if not times or not depths:
        return {}

    n = min(len(times), len(depths))
    series = pd.Series(
        pd.to_numeric(pd.Series(depths[:n]), errors='coerce').values,
        index=pd.to_datetime(list(times[:n])),
    )
    daily_max = series.resample('D').max().dropna()
    return {ts.strftime('%Y-%m-%d'): float(v) for ts, v in daily_max.items()}


def _optional_value(values: List, idx: int) -> float:
    if idx >= len(values) or values[idx] is None:
        return OPTIONAL_FIELD_DEFAULT
    return float(values[idx])


def matrix_from_history(payload: Mapping, window: int = WINDOW_DAYS) -> MeasurementMatrix:
    """
    Select the most recent ``window`` days of an archive response.

    Parameters:
    -----------
    payload : mapping
        Archive response with a ``daily`` block of parallel arrays
        (``time`` plus one array per variable), ascending by date
    window : int
        Number of trailing days to keep

    Returns:
    --------
    matrix : MeasurementMatrix
        Rows for the last ``window`` dates, earliest first

    Raises:
    -------
    InsufficientHistory
        ``time`` or a required field has fewer than ``window`` entries
    MissingRequiredField
        A required value inside the selected window is null
    """
    daily = payload.get('daily') or {}
    times = daily.get('time') or []
    if len(times) < window:
        raise InsufficientHistory('time', len(times), window)

    columns = {name: daily.get(variable) or [] for name, variable in DAILY_VARIABLES.items()}
    for name in REQUIRED_FIELDS:
        if len(columns[name]) < window:
            raise InsufficientHistory(name, len(columns[name]), window)

    depth_by_day = daily_snow_depth(payload.get('hourly') or {})

    start_idx = len(times) - window
    rows = []
    for day, idx in enumerate(range(start_idx, len(times))):
        values = {}
        for name in REQUIRED_FIELDS:
            raw = columns[name][idx] if idx < len(columns[name]) else None
            if raw is None:
                raise MissingRequiredField(day, name)
            values[name] = float(raw)
        for name in MEASUREMENT_FIELDS:
            if name in values:
                continue
            if name == 'snow_depth':
                values[name] = depth_by_day.get(str(times[idx]), OPTIONAL_FIELD_DEFAULT)
            else:
                values[name] = _optional_value(columns.get(name, []), idx)
        rows.append(MeasurementRow(**values))

    selected_dates = tuple(str(t) for t in times[start_idx:])
    logger.debug(f"Selected history window {selected_dates[0]} .. {selected_dates[-1]}")
    return MeasurementMatrix(tuple(rows), selected_dates)
