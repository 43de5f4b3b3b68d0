from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List

from webcalc.core.config import get_settings
from webcalc.core.exceptions import AppError
from webcalc.db.models import Calculation
from webcalc.models.calculations import CalculationModel, CalculationPreview
from webcalc.services.evaluator import classify, evaluate
from webcalc.services.repository import CalculationRepository

logger = logging.getLogger("webcalc.calculations")


class CalculationNotFoundError(AppError):
    status_code = 404
    error_type = "CALCULATION_NOT_FOUND"


class CalculationValidationError(AppError):
    status_code = 422
    error_type = "CALCULATION_VALIDATION_ERROR"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CalculatorService:
    max_expression_length: int = 100

    @classmethod
    def from_settings(cls) -> "CalculatorService":
        return cls(max_expression_length=get_settings().expression_max_length)

    def evaluate(self, expression: str) -> CalculationPreview:
        cleaned = expression.strip()
        if len(cleaned) > self.max_expression_length:
            raise CalculationValidationError(
                f"Expression exceeds {self.max_expression_length} characters.",
                details={"field": "expression", "maxLength": self.max_expression_length},
            )

        return CalculationPreview(
            expression=cleaned,
            type=classify(cleaned).value,
            result=evaluate(cleaned),
        )


@dataclass
class CalculationService:
    """Records evaluated expressions and serves the calculation history."""

    repository: CalculationRepository
    calculator: CalculatorService = field(default_factory=CalculatorService)
    clock: Callable[[], datetime] = field(default=_utcnow)

    @classmethod
    def from_repository(cls, repository: CalculationRepository) -> "CalculationService":
        return cls(repository=repository, calculator=CalculatorService.from_settings())

    def history(self) -> List[CalculationModel]:
        calculations = self.repository.get_all()
        if not calculations:
            logger.warning("calculations.history_empty")
            raise CalculationNotFoundError("History is empty.")
        return [CalculationModel.model_validate(calculation) for calculation in calculations]

    def get(self, calculation_id: int) -> CalculationModel:
        return CalculationModel.model_validate(self._require(calculation_id))

    def search(self, term: str) -> List[CalculationModel]:
        if not term or not term.strip():
            raise CalculationValidationError("Search term cannot be empty.", details={"field": "predicate"})

        calculations = self.repository.search(term)
        if not calculations:
            logger.warning("calculations.search_empty", extra={"term": term})
            raise CalculationNotFoundError(f"Calculations matching {term!r} don't exist.")
        return [CalculationModel.model_validate(calculation) for calculation in calculations]

    def create(self, expression: str) -> CalculationModel:
        evaluated = self.calculator.evaluate(expression)
        calculation = Calculation(
            type=evaluated.type,
            expression=evaluated.expression,
            create_date=self.clock(),
            result=evaluated.result,
        )
        stored = self.repository.create(calculation)
        logger.info("calculations.create", extra={"calculation_id": stored.id, "type": stored.type})
        return CalculationModel.model_validate(stored)

    def update(self, calculation_id: int, model: CalculationModel) -> CalculationModel:
        if model.id != calculation_id:
            logger.warning(
                "calculations.update_id_mismatch",
                extra={"calculation_id": calculation_id, "body_id": model.id},
            )
            raise CalculationNotFoundError(
                f"Calculation with id {calculation_id} doesn't exist.",
                details={"id": calculation_id, "bodyId": model.id},
            )
        self._require(calculation_id)

        updated = self.repository.update(
            Calculation(
                id=model.id,
                type=model.type,
                expression=model.expression,
                create_date=model.create_date,
                result=model.result,
            )
        )
        logger.info("calculations.update", extra={"calculation_id": calculation_id})
        return CalculationModel.model_validate(updated)

    def delete(self, calculation_id: int) -> None:
        self._require(calculation_id)
        self.repository.delete(calculation_id)
        logger.info("calculations.delete", extra={"calculation_id": calculation_id})

    def _require(self, calculation_id: int) -> Calculation:
        calculation = self.repository.find_by_id(calculation_id)
        if calculation is None:
            logger.warning("calculations.not_found", extra={"calculation_id": calculation_id})
            raise CalculationNotFoundError(
                f"Calculation with id {calculation_id} doesn't exist.", details={"id": calculation_id}
            )
        return calculation
