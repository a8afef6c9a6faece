"""MinTemp Forecast - next-day minimum temperature prediction form

A 14-day observation window is validated, turned into a numeric matrix and
sent to a set of user-selected models:
- Manual entry or Open-Meteo city history
- Remote multi-model inference with per-model failure tolerance
- Embedded linear regression evaluated locally
- Streamlit UI
"""

__version__ = "1.0.0"
