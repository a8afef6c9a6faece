"""Configuration settings for the minimum temperature prediction form."""

import os

# ============================================================
# RANDOM SEED CONFIGURATION
# ============================================================
RANDOM_STATE = 42

# ============================================================
# MEASUREMENT WINDOW
# ============================================================
WINDOW_DAYS = 14  # Days of history feeding one prediction

MEASUREMENT_FIELDS = ['max_temp', 'min_temp', 'precipitation', 'snowfall', 'snow_depth']
REQUIRED_FIELDS = ['max_temp', 'min_temp']
OPTIONAL_FIELDS = ['precipitation', 'snowfall', 'snow_depth']
OPTIONAL_FIELD_DEFAULT = 0.0

FIELD_LABELS = {
    'max_temp': 'Max Temp (°C)',
    'min_temp': 'Min Temp (°C)',
    'precipitation': 'Precipitation (mm)',
    'snowfall': 'Snowfall (cm)',
    'snow_depth': 'Snow Depth (m)',
}

# ============================================================
# OPEN-METEO DATA PROVIDERS
# ============================================================
GEOCODING_API_URL = "https://geocoding-api.open-meteo.com/v1/search"
ARCHIVE_API_URL = "https://archive-api.open-meteo.com/v1/archive"

# Provider daily variable -> measurement field
DAILY_VARIABLES = {
    'max_temp': 'temperature_2m_max',
    'min_temp': 'temperature_2m_min',
    'precipitation': 'precipitation_sum',
    'snowfall': 'snowfall_sum',
}
# Only available hourly in the archive, aggregated to a daily max
HOURLY_SNOW_DEPTH = 'snow_depth'

ARCHIVE_UNITS = {
    'temperature_unit': 'celsius',
    'precipitation_unit': 'mm',
}
ARCHIVE_TIMEZONE = 'auto'

# ============================================================
# INFERENCE SERVICE
# ============================================================
INFERENCE_API_URL = os.environ.get("MINTEMP_INFERENCE_URL", "http://localhost:5000")

# 'window' sends the full 14 x k matrix, 'data' sends the 14 min temps only
INFERENCE_PAYLOAD_STYLE = os.environ.get("MINTEMP_INFERENCE_PAYLOAD", "window")

DEFAULT_UNIT = "°C"
MISSING_RESULT_MESSAGE = "No result returned for this model."
FAILED_WITHOUT_MESSAGE = "Model failed without a message."

REQUEST_TIMEOUT_SECONDS = 30

# ============================================================
# MODEL CATALOG
# ============================================================
MODEL_CATALOG = [
    {'id': 'linear_regression', 'name': 'Linear Regression', 'local': True},
    {'id': 'ridge', 'name': 'Ridge Regression', 'local': False},
    {'id': 'rf', 'name': 'Random Forest', 'local': False},
    {'id': 'gbr_tuned', 'name': 'Gradient Boosting (Tuned)', 'local': False},
    {'id': 'ann', 'name': 'ANN (Neural Network)', 'local': False},
]

# UX default only
RECOMMENDED_MODELS = ['linear_regression', 'rf', 'gbr_tuned']

# ============================================================
# LOCAL LINEAR MODEL (extracted from linear_regression_model.joblib)
# ============================================================
LINEAR_MODEL_PARAMS = {
    'coef': [
        0.04580286497755781, -0.011584427506313083, 0.01661403037395369,
        0.03961451535563647, -0.037207508480158274, 0.013884377296592913,
        0.03579110776650467, -0.024399272308905685, -0.009818628453376832,
        0.03930261370839062, 0.05580468660604358, 0.02335354609210913,
        -0.15547531276564677, 0.943872100008633
    ],
    'intercept': 1.1008575337049606,
    'fields': ['min_temp'],
}

# ============================================================
# DEMO DATA
# ============================================================
DEMO_CONFIG = {
    'base_temp': 20.0,
    'trend_amplitude': 5.0,
    'noise': 1.0,  # +/- noise around the trend
    'diurnal_range': (6.0, 10.0),  # max_temp sits this far above min_temp
}
