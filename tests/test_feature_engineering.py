"""
UNIT TESTS - HISTORICAL DATA ADAPTER
====================================
"""

from datetime import date

import pytest

from mintemp.config import WINDOW_DAYS
from mintemp.errors import InsufficientHistory, MissingRequiredField
from mintemp.feature_engineering import daily_snow_depth, history_date_range, matrix_from_history

from conftest import make_history


class TestHistoryDateRange:

    def test_window_ends_yesterday(self):
        start, end = history_date_range(date(2026, 10, 18))

        assert end == date(2026, 10, 17)
        assert start == date(2026, 10, 4)
        assert (end - start).days + 1 == WINDOW_DAYS

    def test_crosses_year_boundary(self):
        start, end = history_date_range(date(2026, 1, 3))

        assert end == date(2026, 1, 2)
        assert start == date(2025, 12, 20)


class TestMatrixFromHistory:

    def test_selects_last_window_days_in_order(self):
        payload = make_history(n_days=20)
        matrix = matrix_from_history(payload)

        times = payload['daily']['time']
        assert len(matrix) == WINDOW_DAYS
        assert matrix.dates == tuple(times[6:])
        assert matrix.column('min_temp') == payload['daily']['temperature_2m_min'][6:]
        assert matrix.column('max_temp') == payload['daily']['temperature_2m_max'][6:]

    def test_exact_window(self):
        payload = make_history(n_days=WINDOW_DAYS)
        matrix = matrix_from_history(payload)

        assert matrix.dates[0] == payload['daily']['time'][0]
        assert matrix.dates[-1] == payload['daily']['time'][-1]

    @pytest.mark.parametrize("n_days", [0, 1, WINDOW_DAYS - 1])
    def test_short_history(self, n_days):
        with pytest.raises(InsufficientHistory):
            matrix_from_history(make_history(n_days=n_days))

    def test_missing_daily_block(self):
        with pytest.raises(InsufficientHistory):
            matrix_from_history({'latitude': 1.0})

    @pytest.mark.parametrize("variable,field", [
        ('temperature_2m_max', 'max_temp'),
        ('temperature_2m_min', 'min_temp'),
    ])
    def test_short_required_field(self, variable, field):
        payload = make_history(n_days=20)
        payload['daily'][variable] = payload['daily'][variable][:WINDOW_DAYS - 1]

        with pytest.raises(InsufficientHistory) as exc_info:
            matrix_from_history(payload)

        assert exc_info.value.field == field

    def test_missing_optional_fields_default_to_zero(self):
        payload = make_history(n_days=16)
        del payload['daily']['precipitation_sum']
        payload['daily']['snowfall_sum'] = payload['daily']['snowfall_sum'][:3]

        matrix = matrix_from_history(payload)

        assert matrix.column('precipitation') == [0.0] * WINDOW_DAYS
        assert matrix.column('snowfall') == [0.0] * WINDOW_DAYS
        assert matrix.column('snow_depth') == [0.0] * WINDOW_DAYS

    def test_null_optional_value_defaults_to_zero(self):
        payload = make_history(n_days=WINDOW_DAYS)
        payload['daily']['precipitation_sum'][4] = None

        matrix = matrix_from_history(payload)

        assert matrix.rows[4].precipitation == 0.0
        assert matrix.rows[5].precipitation == pytest.approx(0.5)

    def test_null_required_value_inside_window(self):
        payload = make_history(n_days=WINDOW_DAYS)
        payload['daily']['temperature_2m_min'][13] = None

        with pytest.raises(MissingRequiredField) as exc_info:
            matrix_from_history(payload)

        assert exc_info.value.day == 13

    def test_null_required_value_outside_window_is_ignored(self):
        payload = make_history(n_days=20)
        payload['daily']['temperature_2m_max'][0] = None

        assert len(matrix_from_history(payload)) == WINDOW_DAYS

    def test_snow_depth_uses_daily_maximum(self):
        payload = make_history(n_days=WINDOW_DAYS, hourly_depth=lambda day, hour: day * 0.01 + hour * 0.001)

        matrix = matrix_from_history(payload)

        assert matrix.rows[0].snow_depth == pytest.approx(0.023)
        assert matrix.rows[10].snow_depth == pytest.approx(0.123)


class TestDailySnowDepth:

    def test_ignores_null_hours(self):
        hourly = {
            'time': ['2026-01-01T00:00', '2026-01-01T01:00', '2026-01-02T00:00'],
            'snow_depth': [None, 0.4, None],
        }

        assert daily_snow_depth(hourly) == {'2026-01-01': 0.4}

    def test_empty_block(self):
        assert daily_snow_depth({}) == {}
