from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webcalc.db.models import Calculation
from webcalc.services.repository import CalculationRepository, CalculationStorageError

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_calculation(expression: str, type_: str, result: float, minutes: int = 0) -> Calculation:
    return Calculation(
        type=type_,
        expression=expression,
        create_date=BASE_TIME + timedelta(minutes=minutes),
        result=result,
    )


@pytest.fixture()
def repository(session: Session) -> CalculationRepository:
    return CalculationRepository(session)


@pytest.fixture()
def seeded(repository: CalculationRepository) -> list[Calculation]:
    return [
        repository.create(make_calculation("3+5", "Addition", 8.0, minutes=0)),
        repository.create(make_calculation("12-9", "Subtract", 3.0, minutes=5)),
        repository.create(make_calculation("1+2*3", "Combine", 9.0, minutes=10)),
    ]


def test_create_assigns_ids(seeded: list[Calculation]) -> None:
    ids = [calculation.id for calculation in seeded]

    assert all(ids)
    assert len(set(ids)) == 3


def test_get_all_orders_newest_first(repository: CalculationRepository, seeded: list[Calculation]) -> None:
    expressions = [calculation.expression for calculation in repository.get_all()]

    assert expressions == ["1+2*3", "12-9", "3+5"]


def test_get_all_returns_empty_list(repository: CalculationRepository) -> None:
    assert repository.get_all() == []


def test_find_by_id(repository: CalculationRepository, seeded: list[Calculation]) -> None:
    found = repository.find_by_id(seeded[1].id)

    assert found is not None
    assert found.expression == "12-9"
    assert repository.find_by_id(9999) is None


@pytest.mark.parametrize(
    ("term", "expected"),
    [
        ("Combine", ["1+2*3"]),
        ("+", ["1+2*3", "3+5"]),
        ("12-", ["12-9"]),
        ("2024-03-01", ["1+2*3", "12-9", "3+5"]),
        ("2024-03-01T12:05", ["12-9"]),
        ("nothing", []),
    ],
)
def test_search_matches_type_expression_and_date(
    repository: CalculationRepository, seeded: list[Calculation], term: str, expected: list[str]
) -> None:
    matches = [calculation.expression for calculation in repository.search(term)]

    assert matches == expected


def test_search_matches_id_text(repository: CalculationRepository, seeded: list[Calculation]) -> None:
    target = seeded[2]

    matches = repository.search(str(target.id))

    assert target.id in [calculation.id for calculation in matches]


def test_search_treats_wildcards_literally(repository: CalculationRepository, seeded: list[Calculation]) -> None:
    assert repository.search("%") == []
    assert repository.search("_") == []


def test_update_persists_changes(repository: CalculationRepository, session: Session, seeded: list[Calculation]) -> None:
    original = seeded[0]

    repository.update(
        Calculation(
            id=original.id,
            type="Other",
            expression="8",
            create_date=original.create_date,
            result=8.0,
        )
    )
    session.expire_all()

    reloaded = repository.find_by_id(original.id)
    assert reloaded is not None
    assert reloaded.type == "Other"
    assert reloaded.expression == "8"


def test_delete_removes_row_and_ignores_missing(repository: CalculationRepository, seeded: list[Calculation]) -> None:
    repository.delete(seeded[0].id)
    repository.delete(424242)

    assert repository.find_by_id(seeded[0].id) is None
    assert len(repository.get_all()) == 2


def test_storage_failures_are_wrapped(repository: CalculationRepository, monkeypatch) -> None:
    def broken_execute(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(repository.session, "execute", broken_execute)

    with pytest.raises(CalculationStorageError) as exc_info:
        repository.get_all()

    assert exc_info.value.status_code == 500
