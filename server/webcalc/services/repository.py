from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List

from sqlalchemy import String, cast, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webcalc.core.exceptions import AppError
from webcalc.db.models import Calculation

logger = logging.getLogger("webcalc.repository")

_ISO_DATE_TIME_SEPARATOR = re.compile(r"(?<=\d)T(?=\d)")


class CalculationStorageError(AppError):
    status_code = 500
    error_type = "CALCULATION_STORAGE_ERROR"


@dataclass
class CalculationRepository:
    session: Session

    def get_all(self) -> List[Calculation]:
        """All calculations, newest first."""
        logger.info("calculations.repository.get_all")
        stmt = select(Calculation).order_by(Calculation.create_date.desc(), Calculation.id.desc())
        return self._fetch(stmt)

    def search(self, term: str) -> List[Calculation]:
        """
        Calculations whose type, expression, id or create date contains ``term``.

        Matching is a plain substring test on the stored text, so it is
        case-sensitive on backends with case-sensitive LIKE. Dates are stored
        with a space between date and time, while the API renders them in ISO
        form, so an ISO ``T`` separator in the term is matched as a space.
        """
        logger.info("calculations.repository.search", extra={"term": term})
        date_term = _ISO_DATE_TIME_SEPARATOR.sub(" ", term)
        stmt = (
            select(Calculation)
            .where(
                or_(
                    Calculation.type.contains(term, autoescape=True),
                    Calculation.expression.contains(term, autoescape=True),
                    cast(Calculation.id, String).contains(term, autoescape=True),
                    cast(Calculation.create_date, String).contains(date_term, autoescape=True),
                )
            )
            .order_by(Calculation.create_date.desc(), Calculation.id.desc())
        )
        return self._fetch(stmt)

    def find_by_id(self, calculation_id: int) -> Calculation | None:
        logger.info("calculations.repository.find_by_id", extra={"calculation_id": calculation_id})
        try:
            return self.session.get(Calculation, calculation_id)
        except SQLAlchemyError as exc:
            raise CalculationStorageError("Failed to load calculation.") from exc

    def create(self, calculation: Calculation) -> Calculation:
        logger.info("calculations.repository.create")
        self.session.add(calculation)
        self._commit("Failed to store calculation.")
        self.session.refresh(calculation)
        return calculation

    def update(self, calculation: Calculation) -> Calculation:
        logger.info("calculations.repository.update", extra={"calculation_id": calculation.id})
        merged = self.session.merge(calculation)
        self._commit("Failed to update calculation.")
        return merged

    def delete(self, calculation_id: int) -> None:
        logger.info("calculations.repository.delete", extra={"calculation_id": calculation_id})
        calculation = self.find_by_id(calculation_id)
        if calculation is None:
            return
        self.session.delete(calculation)
        self._commit("Failed to delete calculation.")

    def _fetch(self, stmt) -> List[Calculation]:
        try:
            return list(self.session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise CalculationStorageError("Failed to query calculations.") from exc

    def _commit(self, message: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise CalculationStorageError(message) from exc
