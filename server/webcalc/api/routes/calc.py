from fastapi import APIRouter, Depends, Query

from webcalc.models.calculations import CalculationPreview
from webcalc.services.calculations import CalculatorService

router = APIRouter(tags=["calculator"])


def get_calculator_service() -> CalculatorService:
    return CalculatorService.from_settings()


@router.get("/calc", response_model=CalculationPreview)
def evaluate_calculator_expression(
    query: str = Query(..., description="Arithmetic expression to evaluate without recording it."),
    service: CalculatorService = Depends(get_calculator_service),
) -> CalculationPreview:
    return service.evaluate(query)
