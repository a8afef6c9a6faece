"""Display state derived from the orchestrator's last outcome."""

import html
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

import pandas as pd

from .models import DEFAULT_CATALOG, ModelCatalog
from .orchestrator import PredictionOutcome, RequestFailed, RequestOutcome, Success


@dataclass(frozen=True)
class NoResult:
    """Before the first request, or after a reset."""


@dataclass(frozen=True)
class RequestError:
    message: str


@dataclass(frozen=True)
class ResultSet:
    outcomes: Dict[str, PredictionOutcome] = field(default_factory=dict)


DisplayState = Union[NoResult, RequestError, ResultSet]


def reset_state() -> DisplayState:
    return NoResult()


def display_state_for(outcome: Optional[RequestOutcome]) -> DisplayState:
    if outcome is None:
        return NoResult()
    if isinstance(outcome, RequestFailed):
        return RequestError(outcome.message)
    return ResultSet(dict(outcome.outcomes))


def results_table(state: DisplayState, catalog: ModelCatalog = DEFAULT_CATALOG,
                  decimals: int = 2) -> pd.DataFrame:
    """
    Tabulate a result set for display, one row per model.

    Values are rounded here and nowhere else.

    Parameters:
    -----------
    state : DisplayState
        Only a ResultSet produces rows
    catalog : ModelCatalog
        Source of display names
    decimals : int
        Rounding applied to predictions

    Returns:
    --------
    table : DataFrame
        Columns Model, Prediction, Unit, Status, Message
    """
    columns = ['Model', 'Prediction', 'Unit', 'Status', 'Message']
    if not isinstance(state, ResultSet):
        return pd.DataFrame(columns=columns)

    rows = []
    for model_id, outcome in state.outcomes.items():
        if isinstance(outcome, Success):
            rows.append({
                'Model': catalog.display_name(model_id),
                'Prediction': round(outcome.value, decimals),
                'Unit': outcome.unit,
                'Status': 'ok',
                'Message': '',
            })
        else:
            rows.append({
                'Model': catalog.display_name(model_id),
                'Prediction': None,
                'Unit': '',
                'Status': 'failed',
                'Message': outcome.message,
            })
    return pd.DataFrame(rows, columns=columns)


def result_card_html(name: str, outcome: PredictionOutcome, decimals: int = 2) -> str:
    """Card markup for one model; every service-supplied string is escaped."""
    title = f'<p style="font-size: 1.1rem; font-weight: 600; margin: 0;">{html.escape(name)}</p>'
    if isinstance(outcome, Success):
        return (
            f'<div class="result-card">{title}'
            f'<h2 style="margin: 0.6rem 0;">{outcome.value:.{decimals}f}{html.escape(outcome.unit)}</h2>'
            f'</div>'
        )
    return (
        f'<div class="result-card failed">{title}'
        f'<p style="margin: 0.6rem 0;">{html.escape(outcome.message)}</p>'
        f'</div>'
    )
