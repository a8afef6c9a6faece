# schema.py

import math
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .config import DEFAULT_UNIT


class WindowRequest(BaseModel):
    models: List[str]
    window: List[List[float]]  # 14 rows x k fields


class SeriesRequest(BaseModel):
    models: List[str]
    data: List[float]  # 14 min temps


class ModelPrediction(BaseModel):
    value: float = Field(strict=True)  # no bool or numeric strings
    unit: str = DEFAULT_UNIT

    @field_validator('value')
    @classmethod
    def value_must_be_finite(cls, v):
        if not math.isfinite(v):
            raise ValueError('prediction must be a finite number')
        return v


class InferenceResponse(BaseModel):
    # Entries are validated one at a time so one bad model cannot sink the rest
    predictions: Dict[str, Any] = Field(default_factory=dict)
    errors: Optional[Dict[str, Any]] = None
    input_data: Optional[Union[List[float], List[List[float]]]] = None

    @field_validator('predictions', mode='before')
    @classmethod
    def none_predictions_as_empty(cls, v):
        return {} if v is None else v

    @field_validator('errors', mode='before')
    @classmethod
    def empty_list_errors_as_empty(cls, v):
        return {} if isinstance(v, list) and not v else v


class ErrorPayload(BaseModel):
    error: Optional[str] = None
    message: Optional[str] = None
    detail: Optional[Any] = None

    def best_message(self) -> Optional[str]:
        for candidate in (self.error, self.message, self.detail):
            if isinstance(candidate, str) and candidate.strip():
                return candidate
        return None
