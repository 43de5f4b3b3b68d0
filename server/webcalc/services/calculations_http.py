from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List
from urllib.parse import quote

import httpx

from webcalc.core.config import get_settings
from webcalc.core.exceptions import AppError
from webcalc.models.calculations import CalculationModel, CalculationPreview
from webcalc.services.calculations import CalculationNotFoundError, CalculationValidationError
from webcalc.services.evaluator import ExpressionParseError


class CalculationsHttpError(AppError):
    status_code = 502
    error_type = "CALCULATIONS_HTTP_ERROR"


@dataclass
class CalculationsHttpClient:
    """Talks to a remote calculations API over HTTP."""

    base_url: str
    timeout: float = 5.0

    @classmethod
    def from_settings(cls) -> "CalculationsHttpClient":
        settings = get_settings()
        if not settings.calculations_http_base_url:
            raise CalculationsHttpError("CALCULATIONS_HTTP_BASE_URL is not configured.")
        return cls(
            base_url=settings.calculations_http_base_url.rstrip("/"),
            timeout=float(settings.calculations_http_timeout_sec),
        )

    def preview(self, expression: str) -> CalculationPreview:
        payload = self._request("GET", "/calc", params={"query": self._require_expression(expression)})
        return CalculationPreview.model_validate(payload)

    def create(self, expression: str) -> CalculationModel:
        payload = self._request(
            "POST", "/calculations", params={"expression": self._require_expression(expression)}, expected=201
        )
        return CalculationModel.model_validate(payload)

    def get(self, calculation_id: int) -> CalculationModel:
        return CalculationModel.model_validate(self._request("GET", f"/calculations/{calculation_id}"))

    def history(self) -> List[CalculationModel]:
        return [CalculationModel.model_validate(item) for item in self._request("GET", "/calculations/history")]

    def search(self, term: str) -> List[CalculationModel]:
        payload = self._request("GET", f"/calculations/search/{quote(term, safe='')}")
        return [CalculationModel.model_validate(item) for item in payload]

    def delete(self, calculation_id: int) -> None:
        self._request("DELETE", f"/calculations/{calculation_id}", expected=204)

    def _require_expression(self, expression: str) -> str:
        cleaned = expression.strip()
        if not cleaned:
            raise ExpressionParseError("Expression cannot be empty.")
        return cleaned

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        expected: int = 200,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.request(method, url, params=params)
        except httpx.RequestError as exc:
            raise CalculationsHttpError("Calculations service is unavailable.") from exc

        if response.status_code != expected:
            message = _remote_error_message(response) or "Calculations request failed."
            if response.status_code == 404:
                raise CalculationNotFoundError(message)
            if response.status_code == 400:
                raise ExpressionParseError(message)
            if response.status_code == 422:
                raise CalculationValidationError(message)
            raise CalculationsHttpError(message, details={"status": response.status_code})

        if expected == 204:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise CalculationsHttpError("Calculations response was not valid JSON.") from exc


def _remote_error_message(response: httpx.Response) -> str | None:
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return error.get("message")
    return None
