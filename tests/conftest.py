"""Shared fixtures: form input, provider payloads and HTTP stubs."""

import json
from datetime import date, timedelta
from unittest.mock import Mock

import pytest
import requests

from mintemp.config import WINDOW_DAYS


def make_response(status=200, body=None, text=None, url="http://test.local"):
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = 'utf-8'
    if body is not None:
        response._content = json.dumps(body).encode('utf-8')
        response.headers['Content-Type'] = 'application/json'
    else:
        response._content = (text or '').encode('utf-8')
    return response


def make_rows(n_days=WINDOW_DAYS):
    return [
        {
            'max_temp': f"{24 + 0.5 * i:.1f}",
            'min_temp': f"{14 + 0.25 * i:.2f}",
            'precipitation': '' if i % 3 else '2.5',
            'snowfall': '0',
            'snow_depth': '',
        }
        for i in range(n_days)
    ]


def make_history(n_days=20, start=date(2026, 9, 20), hourly_depth=None):
    """Archive payload with ``n_days`` of daily arrays, ascending by date."""
    times = [(start + timedelta(days=i)).isoformat() for i in range(n_days)]
    payload = {
        'latitude': 52.52,
        'longitude': 13.41,
        'daily': {
            'time': times,
            'temperature_2m_max': [20.0 + i for i in range(n_days)],
            'temperature_2m_min': [5.0 + i for i in range(n_days)],
            'precipitation_sum': [0.1 * i for i in range(n_days)],
            'snowfall_sum': [0.0] * n_days,
        },
    }
    if hourly_depth is not None:
        hourly_times, depths = [], []
        for i, day in enumerate(times):
            for hour in range(24):
                hourly_times.append(f"{day}T{hour:02d}:00")
                depths.append(hourly_depth(i, hour))
        payload['hourly'] = {'time': hourly_times, 'snow_depth': depths}
    return payload


class StubInferenceClient:
    """Stands in for InferenceClient and records every call."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def predict(self, model_ids, matrix):
        self.calls.append((list(model_ids), matrix))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def valid_rows():
    return make_rows()


@pytest.fixture
def valid_form(valid_rows):
    from mintemp.preprocessing import MeasurementForm
    return MeasurementForm.from_rows(valid_rows)


@pytest.fixture
def valid_matrix(valid_rows):
    from mintemp.preprocessing import build_measurement_matrix
    return build_measurement_matrix(valid_rows)


@pytest.fixture
def mock_session():
    return Mock(spec=requests.Session)
