from typing import List

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from webcalc.db.session import get_session
from webcalc.models.calculations import CalculationModel
from webcalc.services.calculations import CalculationService
from webcalc.services.repository import CalculationRepository

router = APIRouter(prefix="/calculations", tags=["calculations"])


def get_calculation_service(session: Session = Depends(get_session)) -> CalculationService:
    return CalculationService.from_repository(CalculationRepository(session))


@router.get("/history", response_model=List[CalculationModel])
def calculation_history(
    service: CalculationService = Depends(get_calculation_service),
) -> List[CalculationModel]:
    """Display the calculation history, newest first."""
    return service.history()


@router.get("/search/{predicate}", response_model=List[CalculationModel])
def search_calculations(
    predicate: str = Path(..., description="Text to look for in type, expression, id or create date."),
    service: CalculationService = Depends(get_calculation_service),
) -> List[CalculationModel]:
    return service.search(predicate)


@router.get("/{calculation_id}", response_model=CalculationModel)
def get_calculation(
    calculation_id: int = Path(..., description="Calculation number."),
    service: CalculationService = Depends(get_calculation_service),
) -> CalculationModel:
    return service.get(calculation_id)


@router.post("", response_model=CalculationModel, status_code=status.HTTP_201_CREATED)
def create_calculation(
    response: Response,
    expression: str = Query(..., description="Arithmetic expression to evaluate and record."),
    service: CalculationService = Depends(get_calculation_service),
) -> CalculationModel:
    calculation = service.create(expression)
    response.headers["Location"] = f"{router.prefix}/{calculation.id}"
    return calculation


@router.put("/{calculation_id}", response_model=CalculationModel)
def update_calculation(
    calculation: CalculationModel,
    calculation_id: int = Path(...),
    service: CalculationService = Depends(get_calculation_service),
) -> CalculationModel:
    return service.update(calculation_id, calculation)


@router.delete("/{calculation_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_calculation(
    calculation_id: int = Path(...),
    service: CalculationService = Depends(get_calculation_service),
) -> Response:
    service.delete(calculation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
