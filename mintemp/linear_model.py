"""Embedded linear regression used as the local reference predictor."""

from dataclasses import dataclass
from typing import Sequence, Tuple

import joblib
import numpy as np

from .config import LINEAR_MODEL_PARAMS
from .errors import ShapeMismatch
from .preprocessing import MeasurementMatrix


@dataclass(frozen=True)
class LinearModelParameters:
    """
    Fixed coefficients and intercept of a fitted linear regressor.

    ``fields`` names the measurement columns the coefficients are paired
    with; the matrix is flattened row-major over those fields.
    """
    coef: Tuple[float, ...]
    intercept: float
    fields: Tuple[str, ...] = ('min_temp',)

    def __post_init__(self):
        object.__setattr__(self, 'coef', tuple(float(c) for c in self.coef))
        object.__setattr__(self, 'intercept', float(self.intercept))
        object.__setattr__(self, 'fields', tuple(self.fields))

    @property
    def n_features(self) -> int:
        return len(self.coef)


DEFAULT_LINEAR_PARAMS = LinearModelParameters(
    coef=tuple(LINEAR_MODEL_PARAMS['coef']),
    intercept=LINEAR_MODEL_PARAMS['intercept'],
    fields=tuple(LINEAR_MODEL_PARAMS['fields']),
)


def predict_linear(vector: Sequence[float], params: LinearModelParameters = DEFAULT_LINEAR_PARAMS) -> float:
    """
    Evaluate ``dot(vector, coef) + intercept``.

    Parameters:
    -----------
    vector : sequence of float
        Flattened features, same length as ``params.coef``
    params : LinearModelParameters
        Model to evaluate

    Returns:
    --------
    prediction : float
        Unrounded prediction

    Raises:
    -------
    ShapeMismatch
        ``len(vector) != len(params.coef)``
    """
    x = np.asarray(vector, dtype=float).reshape(-1)
    if x.shape[0] != params.n_features:
        raise ShapeMismatch(x.shape[0], params.n_features)
    return float(np.dot(x, np.asarray(params.coef, dtype=float)) + params.intercept)


def predict_from_matrix(matrix: MeasurementMatrix, params: LinearModelParameters = DEFAULT_LINEAR_PARAMS) -> float:
    """Predict from a measurement window using the fields the model was fitted on."""
    return predict_linear(matrix.flatten(params.fields), params)


def load_linear_parameters(model_path, fields: Sequence[str] = ('min_temp',)) -> LinearModelParameters:
    """
    Read coefficients from a joblib-saved scikit-learn linear regressor.

    Accepts either the bare estimator or a dict with a ``model`` entry, the
    layout used by the training notebooks.
    """
    model_data = joblib.load(model_path)
    model = model_data.get('model') if isinstance(model_data, dict) else model_data

    if not hasattr(model, 'coef_') or not hasattr(model, 'intercept_'):
        raise ValueError(f"{model_path} does not contain a fitted linear model")

    coef = np.asarray(model.coef_, dtype=float)
    if coef.ndim != 1:
        raise ValueError(f"Expected a single-output model, got coef_ with shape {coef.shape}")

    return LinearModelParameters(coef=tuple(coef.tolist()), intercept=float(model.intercept_), fields=tuple(fields))
