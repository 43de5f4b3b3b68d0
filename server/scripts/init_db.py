from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from webcalc.core.config import AppSettings
from webcalc.core.exceptions import AppError
from webcalc.db.session import ensure_sqlite_directory, init_db
from webcalc.services.calculations import CalculationService, CalculatorService
from webcalc.services.calculations_http import CalculationsHttpClient, CalculationsHttpError
from webcalc.services.repository import CalculationRepository

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("init_db")


@dataclass
class InitResult:
    recorded: List[int] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)


def _default_db_url() -> str:
    try:
        return AppSettings().database_url
    except ValueError:
        return "sqlite:///./data/sqlite/calculations.db"


def _prepare_engine(db_url: str) -> Engine:
    ensure_sqlite_directory(db_url)
    return create_engine(db_url)


def initialize(*, db_url: str, expressions: Iterable[str] = (), max_expression_length: int = 100) -> InitResult:
    """Create the schema and optionally record a first batch of calculations."""

    engine = init_db(_prepare_engine(db_url))
    result = InitResult()
    try:
        with Session(engine, expire_on_commit=False) as session:
            service = CalculationService(
                repository=CalculationRepository(session),
                calculator=CalculatorService(max_expression_length=max_expression_length),
            )
            for expression in expressions:
                try:
                    calculation = service.create(expression)
                except AppError as exc:
                    logger.warning("Skipping %r: %s", expression, exc.message)
                    result.rejected.append(expression)
                    continue
                result.recorded.append(calculation.id)
    finally:
        engine.dispose()

    logger.info(
        "Initialized calculations database at %s (recorded=%d, rejected=%d)",
        db_url,
        len(result.recorded),
        len(result.rejected),
    )
    return result


def record_remote(*, client: CalculationsHttpClient, expressions: Iterable[str]) -> InitResult:
    """Record calculations on a running instance instead of a local database."""

    result = InitResult()
    for expression in expressions:
        try:
            calculation = client.create(expression)
        except CalculationsHttpError:
            raise
        except AppError as exc:
            logger.warning("Skipping %r: %s", expression, exc.message)
            result.rejected.append(expression)
            continue
        result.recorded.append(calculation.id)

    logger.info(
        "Recorded calculations on %s (recorded=%d, rejected=%d)",
        client.base_url,
        len(result.recorded),
        len(result.rejected),
    )
    return result


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the calculations schema (SQLite or Postgres).")
    parser.add_argument(
        "--db",
        type=str,
        default=None,
        help="SQLAlchemy database URL (defaults to the configured backend).",
    )
    parser.add_argument(
        "--expression",
        dest="expressions",
        action="append",
        default=[],
        help="Expression to evaluate and record after creating the schema. May be repeated.",
    )
    parser.add_argument(
        "--remote",
        nargs="?",
        const="",
        default=None,
        metavar="BASE_URL",
        help=(
            "Record expressions through a running calculations API instead of the local database. "
            "Without a value, CALCULATIONS_HTTP_BASE_URL is used."
        ),
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    if args.remote is not None:
        client = (
            CalculationsHttpClient(base_url=args.remote.rstrip("/"))
            if args.remote
            else CalculationsHttpClient.from_settings()
        )
        record_remote(client=client, expressions=args.expressions)
        return
    initialize(db_url=args.db or _default_db_url(), expressions=args.expressions)


if __name__ == "__main__":
    main()
