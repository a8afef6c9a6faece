"""
UNIT TESTS - ENSEMBLE PREDICTION ORCHESTRATOR
=============================================
"""

import pytest
import requests

from mintemp.config import DEFAULT_UNIT, MISSING_RESULT_MESSAGE, WINDOW_DAYS
from mintemp.errors import TransportError
from mintemp.inference_client import InferenceClient, InferenceResult
from mintemp.linear_model import LinearModelParameters, predict_from_matrix
from mintemp.models import ModelSelection
from mintemp.orchestrator import (
    Failure,
    PredictionOrchestrator,
    RequestFailed,
    RequestPhase,
    RequestSucceeded,
    Success,
    reconcile,
)
from mintemp.preprocessing import MeasurementForm
from mintemp.schema import ModelPrediction

from conftest import StubInferenceClient, make_response, make_rows


def result_of(predictions=None, errors=None):
    return InferenceResult(
        predictions={k: ModelPrediction(value=v) for k, v in (predictions or {}).items()},
        errors=dict(errors or {}),
    )


class TestEndToEnd:

    def test_partial_success_through_http(self, mock_session, valid_matrix):
        mock_session.request.return_value = make_response(body={
            'predictions': {'rf': {'value': 41.2, 'unit': '°F'}},
            'errors': {'gbr_tuned': 'timeout'},
        })
        orchestrator = PredictionOrchestrator(InferenceClient(session=mock_session))

        outcome = orchestrator.submit(ModelSelection.of(['rf', 'gbr_tuned']), valid_matrix)

        assert isinstance(outcome, RequestSucceeded)
        assert outcome.outcomes == {'rf': Success(41.2, '°F'), 'gbr_tuned': Failure('timeout')}
        assert mock_session.request.call_count == 1
        assert mock_session.request.call_args.kwargs['json']['models'] == ['rf', 'gbr_tuned']

    def test_connection_failure_is_request_level(self, mock_session, valid_matrix):
        mock_session.request.side_effect = requests.exceptions.ConnectionError("refused")
        orchestrator = PredictionOrchestrator(InferenceClient(session=mock_session))

        outcome = orchestrator.submit(ModelSelection.of(['rf', 'ann']), valid_matrix)

        assert isinstance(outcome, RequestFailed)
        assert outcome.kind == 'transport'
        assert outcome.outcomes == {}
        assert "Could not reach the inference service" in outcome.message


class TestValidationShortCircuits:

    def test_empty_selection_makes_no_call(self, valid_form):
        stub = StubInferenceClient(result_of())

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of([]), valid_form)

        assert outcome == RequestFailed("Please select at least one model.", kind='validation')
        assert stub.calls == []

    def test_invalid_form_makes_no_call(self):
        rows = make_rows()
        rows[6]['max_temp'] = ''
        stub = StubInferenceClient(result_of({'rf': 1.0}))

        outcome = PredictionOrchestrator(stub).submit(
            ModelSelection.of(['rf']), MeasurementForm.from_rows(rows)
        )

        assert isinstance(outcome, RequestFailed)
        assert outcome.message == "Day 7: max_temp is required."
        assert stub.calls == []

    def test_empty_selection_checked_before_form(self):
        stub = StubInferenceClient(result_of())

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of([]), MeasurementForm.empty())

        assert outcome.message == "Please select at least one model."

    def test_form_is_validated_once_and_sent(self, valid_form, valid_matrix):
        stub = StubInferenceClient(result_of({'rf': 10.0}))

        PredictionOrchestrator(stub).submit(ModelSelection.of(['rf']), valid_form)

        assert len(stub.calls) == 1
        assert stub.calls[0][1] == valid_matrix


class TestReconciliation:

    def test_omitted_model_gets_missing_result(self, valid_matrix):
        stub = StubInferenceClient(result_of({'rf': 12.0}))

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of(['rf', 'ann']), valid_matrix)

        assert outcome.outcomes['ann'] == Failure(MISSING_RESULT_MESSAGE)
        assert outcome.outcomes['rf'] == Success(12.0, DEFAULT_UNIT)

    def test_unrequested_models_are_dropped(self, valid_matrix):
        stub = StubInferenceClient(result_of({'rf': 12.0, 'ridge': 11.0}, {'ann': 'boom'}))

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of(['rf']), valid_matrix)

        assert set(outcome.outcomes) == {'rf'}

    def test_error_wins_over_prediction(self):
        result = result_of({'rf': 12.0}, {'rf': 'model crashed'})

        assert reconcile(ModelSelection.of(['rf']), result) == {'rf': Failure('model crashed')}

    @pytest.mark.parametrize("selected,predictions,errors", [
        (['rf'], {}, {}),
        (['rf', 'ann'], {'rf': 1.0}, {}),
        (['rf', 'gbr_tuned', 'ann'], {'gbr_tuned': 2.0}, {'ann': 'x'}),
        (['ridge', 'ann'], {'rf': 3.0, 'ridge': 4.0}, {'gbr_tuned': 'y'}),
    ])
    def test_outcome_keys_equal_selection(self, valid_matrix, selected, predictions, errors):
        stub = StubInferenceClient(result_of(predictions, errors))

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of(selected), valid_matrix)

        assert list(outcome.outcomes) == selected

    def test_successes_and_failures_partition(self, valid_matrix):
        stub = StubInferenceClient(result_of({'rf': 5.0}, {'ann': 'nope'}))

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of(['rf', 'ann']), valid_matrix)

        assert set(outcome.successes) == {'rf'}
        assert set(outcome.failures) == {'ann'}


class TestLocalModels:

    def test_local_only_selection_makes_no_call(self, valid_matrix):
        stub = StubInferenceClient(error=TransportError("should not be called"))

        outcome = PredictionOrchestrator(stub).submit(ModelSelection.of(['linear_regression']), valid_matrix)

        assert stub.calls == []
        assert outcome.outcomes['linear_regression'] == Success(predict_from_matrix(valid_matrix), DEFAULT_UNIT)

    def test_mixed_selection_sends_remote_ids_only(self, valid_matrix):
        stub = StubInferenceClient(result_of({'rf': 9.0}))

        outcome = PredictionOrchestrator(stub).submit(
            ModelSelection.of(['linear_regression', 'rf']), valid_matrix
        )

        assert stub.calls[0][0] == ['rf']
        assert list(outcome.outcomes) == ['linear_regression', 'rf']
        assert isinstance(outcome.outcomes['linear_regression'], Success)

    def test_local_shape_mismatch_fails_only_that_model(self, valid_matrix):
        bad_params = LinearModelParameters(coef=(0.1,) * (WINDOW_DAYS - 1), intercept=0.0)
        stub = StubInferenceClient(result_of({'rf': 9.0}))

        outcome = PredictionOrchestrator(stub, linear_params=bad_params).submit(
            ModelSelection.of(['linear_regression', 'rf']), valid_matrix
        )

        assert isinstance(outcome, RequestSucceeded)
        assert isinstance(outcome.outcomes['linear_regression'], Failure)
        assert outcome.outcomes['rf'] == Success(9.0, DEFAULT_UNIT)


class TestPhases:

    def test_successful_request_phases(self, valid_matrix):
        phases = []
        stub = StubInferenceClient(result_of({'rf': 9.0}))

        PredictionOrchestrator(stub).submit(ModelSelection.of(['rf']), valid_matrix, on_phase=phases.append)

        assert phases == [RequestPhase.VALIDATING, RequestPhase.DISPATCHING, RequestPhase.RECONCILED]

    def test_rejected_request_phases(self):
        phases = []

        PredictionOrchestrator(StubInferenceClient()).submit(
            ModelSelection.of([]), MeasurementForm.empty(), on_phase=phases.append
        )

        assert phases == [RequestPhase.VALIDATING, RequestPhase.VALIDATION_FAILED]

    def test_local_only_request_skips_dispatch(self, valid_matrix):
        phases = []

        PredictionOrchestrator(StubInferenceClient()).submit(
            ModelSelection.of(['linear_regression']), valid_matrix, on_phase=phases.append
        )

        assert RequestPhase.DISPATCHING not in phases

    def test_repeated_submission_gives_same_outcome(self, valid_form):
        stub = StubInferenceClient(result_of({'rf': 7.5}, {'ann': 'down'}))
        orchestrator = PredictionOrchestrator(stub)
        selection = ModelSelection.of(['linear_regression', 'rf', 'ann'])

        first = orchestrator.submit(selection, valid_form)
        second = orchestrator.submit(selection, valid_form)

        assert first == second
        assert len(stub.calls) == 2
