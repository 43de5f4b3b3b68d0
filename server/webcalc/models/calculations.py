from __future__ import annotations

import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from webcalc.db.models import EXPRESSION_MAX_LENGTH, TYPE_MAX_LENGTH


def _serialize_result(value: float) -> float | str:
    # JSON has no literal for non-finite numbers.
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return value


class CalculationPreview(BaseModel):
    expression: str = Field(..., description="The arithmetic expression that was evaluated.")
    type: str = Field(..., description="Operator category of the expression.")
    result: float = Field(..., description="Left-to-right evaluated result.")

    @field_serializer("result", when_used="json")
    def serialize_result(self, value: float) -> float | str:
        return _serialize_result(value)


class CalculationModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int = Field(0, ge=0, description="Calculation number.")
    type: str = Field(..., min_length=1, max_length=TYPE_MAX_LENGTH, description="Operator category label.")
    expression: str = Field(..., min_length=1, max_length=EXPRESSION_MAX_LENGTH)
    create_date: datetime = Field(..., description="When the calculation was recorded.")
    result: float = 0.0

    @field_validator("result", mode="before")
    @classmethod
    def restore_nan(cls, value: object) -> object:
        return math.nan if value is None else value

    @field_serializer("result", when_used="json")
    def serialize_result(self, value: float) -> float | str:
        return _serialize_result(value)
