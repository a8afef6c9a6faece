"""HTTP client for the remote multi-model inference service."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

import requests
from pydantic import ValidationError as SchemaError

from .config import (
    FAILED_WITHOUT_MESSAGE,
    INFERENCE_API_URL,
    INFERENCE_PAYLOAD_STYLE,
    MEASUREMENT_FIELDS,
    REQUEST_TIMEOUT_SECONDS,
)
from .errors import TransportError
from .preprocessing import MeasurementMatrix
from .schema import ErrorPayload, InferenceResponse, ModelPrediction, SeriesRequest, WindowRequest

logger = logging.getLogger(__name__)

PAYLOAD_STYLES = ('window', 'data')


@dataclass
class InferenceResult:
    """Per-model results of one round-trip, already validated."""
    predictions: Dict[str, ModelPrediction] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


def parse_inference_response(body: Any) -> InferenceResult:
    """
    Validate a response body from ``/predict``.

    A body that is not an object with a ``predictions`` map is a
    request-level failure. Individual entries that are not numbers or
    ``{value, unit}`` objects become per-model errors.
    """
    try:
        response = InferenceResponse.model_validate(body)
    except SchemaError as e:
        raise TransportError(f"Inference service returned an unexpected response: {e.error_count()} schema error(s)") from e

    result = InferenceResult()
    for model_id, entry in response.predictions.items():
        try:
            if isinstance(entry, dict):
                result.predictions[model_id] = ModelPrediction.model_validate(entry)
            elif isinstance(entry, (int, float)) and not isinstance(entry, bool):
                result.predictions[model_id] = ModelPrediction(value=entry)
            else:
                raise ValueError(f"unsupported prediction entry {entry!r}")
        except (SchemaError, ValueError) as e:
            logger.warning(f"Malformed prediction for {model_id}: {e}")
            result.errors[model_id] = "Malformed result returned for this model."

    for model_id, message in (response.errors or {}).items():
        if message is None or (isinstance(message, str) and not message.strip()):
            result.errors[model_id] = FAILED_WITHOUT_MESSAGE
        else:
            result.errors[model_id] = message if isinstance(message, str) else str(message)

    return result


class InferenceClient:
    """
    Client for the inference service: ``POST /predict`` and ``GET /health``.

    One ``predict`` call is one round-trip for all requested models; the
    service fans out per model.
    """

    def __init__(self, base_url: str = INFERENCE_API_URL,
                 session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT_SECONDS,
                 payload_style: str = INFERENCE_PAYLOAD_STYLE):
        if payload_style not in PAYLOAD_STYLES:
            raise ValueError(f"payload_style must be one of {PAYLOAD_STYLES}, got {payload_style!r}")
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.payload_style = payload_style

    def build_payload(self, model_ids: Sequence[str], matrix: MeasurementMatrix) -> Dict[str, Any]:
        if self.payload_style == 'data':
            request = SeriesRequest(models=list(model_ids), data=matrix.column('min_temp'))
        else:
            request = WindowRequest(models=list(model_ids), window=matrix.to_payload(MEASUREMENT_FIELDS))
        return request.model_dump()

    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Inference service timed out after {self.timeout}s.") from e
        except requests.exceptions.ConnectionError as e:
            raise TransportError(f"Could not reach the inference service at {self.base_url}.") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Inference request failed: {e}") from e

        if not response.ok:
            raise TransportError(_error_message(response))
        return response

    def predict(self, model_ids: Sequence[str], matrix: MeasurementMatrix) -> InferenceResult:
        """
        Request predictions for ``model_ids`` from one measurement window.

        Raises:
        -------
        TransportError
            Connection failure, timeout, non-2xx status or malformed body
        """
        payload = self.build_payload(model_ids, matrix)
        logger.info(f"POST {self.base_url}/predict for models {list(model_ids)}")
        response = self._send('POST', '/predict', json=payload)
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError("Inference service returned invalid JSON.") from e
        return parse_inference_response(body)

    def check_health(self) -> Dict[str, Any]:
        response = self._send('GET', '/health')
        try:
            return response.json()
        except ValueError:
            return {'status': response.text.strip() or 'ok'}


def _error_message(response: requests.Response) -> str:
    """Prefer the service's own error text over a generic status message."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        try:
            message = ErrorPayload.model_validate(body).best_message()
        except SchemaError:
            message = None
        if message:
            return message
    elif isinstance(body, str) and body.strip():
        return body

    return f"Inference service returned HTTP {response.status_code}."
