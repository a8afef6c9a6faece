"""
Ensemble prediction orchestrator.

Validates a request, sends one round-trip to the inference service for all
remote models, evaluates local models in-process, and reconciles the
results so that every selected model ends up with exactly one outcome.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional, Union

from .config import DEFAULT_UNIT, MISSING_RESULT_MESSAGE
from .errors import EmptySelection, ModelError, TransportError, ValidationError
from .inference_client import InferenceClient, InferenceResult
from .linear_model import DEFAULT_LINEAR_PARAMS, LinearModelParameters, predict_from_matrix
from .models import ModelSelection
from .preprocessing import MeasurementForm, MeasurementMatrix, build_measurement_matrix

logger = logging.getLogger(__name__)


# ============================================================
# OUTCOME TYPES
# ============================================================

@dataclass(frozen=True)
class Success:
    value: float
    unit: str = DEFAULT_UNIT


@dataclass(frozen=True)
class Failure:
    message: str


PredictionOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class RequestSucceeded:
    """Round-trip completed; outcomes may still mix successes and failures."""
    outcomes: Dict[str, PredictionOutcome] = field(default_factory=dict)

    @property
    def successes(self) -> Dict[str, Success]:
        return {k: v for k, v in self.outcomes.items() if isinstance(v, Success)}

    @property
    def failures(self) -> Dict[str, Failure]:
        return {k: v for k, v in self.outcomes.items() if isinstance(v, Failure)}


@dataclass(frozen=True)
class RequestFailed:
    """Nothing could be predicted; ``kind`` is 'validation' or 'transport'."""
    message: str
    kind: str = 'validation'

    @property
    def outcomes(self) -> Dict[str, PredictionOutcome]:
        return {}


RequestOutcome = Union[RequestSucceeded, RequestFailed]


class RequestPhase(Enum):
    IDLE = 'idle'
    VALIDATING = 'validating'
    VALIDATION_FAILED = 'validation_failed'
    DISPATCHING = 'dispatching'
    RECONCILED = 'reconciled'


PhaseCallback = Callable[[RequestPhase], None]


# ============================================================
# RECONCILIATION
# ============================================================

def reconcile(selection: ModelSelection, result: InferenceResult,
              requested=None) -> Dict[str, PredictionOutcome]:
    """
    Merge a service response into one outcome per requested model.

    Parameters:
    -----------
    selection : ModelSelection
        Models the user asked for
    result : InferenceResult
        Validated ``predictions`` and ``errors`` from the service
    requested : iterable of str, optional
        Subset of the selection actually sent (defaults to all of it)

    Returns:
    --------
    outcomes : dict
        model id -> Success or Failure, covering exactly ``requested``
    """
    requested = list(selection.ids if requested is None else requested)
    outcomes: Dict[str, PredictionOutcome] = {}

    for model_id in requested:
        if model_id in result.errors:
            if model_id in result.predictions:
                logger.warning(f"Service returned both a result and an error for {model_id}")
            outcomes[model_id] = Failure(result.errors[model_id])
        elif model_id in result.predictions:
            prediction = result.predictions[model_id]
            outcomes[model_id] = Success(prediction.value, prediction.unit)
        else:
            logger.warning(f"Service omitted {model_id} from its response")
            outcomes[model_id] = Failure(MISSING_RESULT_MESSAGE)

    extra = (set(result.predictions) | set(result.errors)) - set(requested)
    if extra:
        logger.debug(f"Ignoring unrequested models in response: {sorted(extra)}")

    return outcomes


# ============================================================
# ORCHESTRATOR
# ============================================================

class PredictionOrchestrator:
    """
    Runs one prediction request at a time; keeps no state between requests.

    Parameters:
    -----------
    client : InferenceClient
        Remote inference boundary
    linear_params : LinearModelParameters
        Model used for catalog entries marked as local
    """

    def __init__(self, client: Optional[InferenceClient] = None,
                 linear_params: LinearModelParameters = DEFAULT_LINEAR_PARAMS):
        self.client = client or InferenceClient()
        self.linear_params = linear_params

    def _local_outcome(self, model_id: str, matrix: MeasurementMatrix) -> PredictionOutcome:
        try:
            return Success(predict_from_matrix(matrix, self.linear_params), DEFAULT_UNIT)
        except ModelError as e:
            logger.warning(f"Local model {model_id} failed: {e}")
            return Failure(str(e))

    def submit(self, selection: ModelSelection,
               measurements: Union[MeasurementForm, MeasurementMatrix],
               on_phase: Optional[PhaseCallback] = None) -> RequestOutcome:
        """
        Validate, dispatch and reconcile one prediction request.

        Parameters:
        -----------
        selection : ModelSelection
            Models to run; must not be empty
        measurements : MeasurementForm or MeasurementMatrix
            Raw form input (validated here) or an already built window
        on_phase : callable, optional
            Called with each RequestPhase as the request advances

        Returns:
        --------
        outcome : RequestSucceeded or RequestFailed
        """
        def enter(phase):
            logger.debug(f"Request phase: {phase.value}")
            if on_phase is not None:
                on_phase(phase)

        enter(RequestPhase.VALIDATING)
        try:
            if selection.is_empty:
                raise EmptySelection()
            if isinstance(measurements, MeasurementMatrix):
                matrix = measurements
            else:
                matrix = build_measurement_matrix(measurements)
        except ValidationError as e:
            logger.info(f"Request rejected: {e}")
            enter(RequestPhase.VALIDATION_FAILED)
            return RequestFailed(str(e), kind='validation')

        remote_ids = selection.remote_ids
        remote_outcomes: Dict[str, PredictionOutcome] = {}
        if remote_ids:
            enter(RequestPhase.DISPATCHING)
            try:
                result = self.client.predict(remote_ids, matrix)
            except TransportError as e:
                logger.error(f"Inference request failed: {e}")
                enter(RequestPhase.VALIDATION_FAILED)
                return RequestFailed(str(e), kind='transport')
            remote_outcomes = reconcile(selection, result, remote_ids)

        outcomes: Dict[str, PredictionOutcome] = {}
        for model_id in selection.ids:
            if model_id in remote_outcomes:
                outcomes[model_id] = remote_outcomes[model_id]
            else:
                outcomes[model_id] = self._local_outcome(model_id, matrix)

        enter(RequestPhase.RECONCILED)
        n_ok = sum(isinstance(o, Success) for o in outcomes.values())
        logger.info(f"Request reconciled: {n_ok}/{len(outcomes)} models succeeded")
        return RequestSucceeded(outcomes)
