"""Pseudo-random demo input for the form. Never used by the pipeline itself."""

from typing import Optional

import numpy as np

from .config import DEMO_CONFIG, WINDOW_DAYS
from .preprocessing import MeasurementForm


def generate_demo_form(rng: Optional[np.random.Generator] = None,
                       n_days: int = WINDOW_DAYS,
                       config: dict = DEMO_CONFIG) -> MeasurementForm:
    """
    Fill a form with a plausible two-week temperature series.

    Min temps follow a sine trend around ``base_temp`` with uniform noise;
    max temps sit a random diurnal range above them. Optional fields are
    zero or blank, so the optional-field default is exercised too.
    """
    rng = rng if rng is not None else np.random.default_rng()
    days = np.arange(n_days)

    trend = np.sin(days / 2) * config['trend_amplitude']
    noise = rng.uniform(-config['noise'], config['noise'], size=n_days)
    min_temps = config['base_temp'] + trend + noise

    low, high = config['diurnal_range']
    max_temps = min_temps + rng.uniform(low, high, size=n_days)

    precip = np.where(rng.random(n_days) < 0.3, rng.gamma(1.5, 2.0, size=n_days), 0.0)

    form = MeasurementForm.empty(n_days)
    form = form.with_column('min_temp', [f"{t:.1f}" for t in min_temps])
    form = form.with_column('max_temp', [f"{t:.1f}" for t in max_temps])
    form = form.with_column('precipitation', [f"{p:.1f}" if p > 0 else '' for p in precip])
    form = form.with_column('snowfall', ['0'] * n_days)
    return form
