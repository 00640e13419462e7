from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from people_db import ConnectionProvider, PersonRecord


@pytest.fixture
def provider() -> Iterator[ConnectionProvider]:
    engine = create_engine('sqlite://', connect_args={'check_same_thread': False}, poolclass=StaticPool)
    with ConnectionProvider(engine=engine).lifespan() as provider:
        yield provider


@pytest.fixture
def db(provider: ConnectionProvider) -> Session:
    return provider.get_instance()


@pytest.fixture
def ada() -> dict:
    return {'name': 'Ada', 'surname': 'Lovelace', 'birthday': '1815-12-10', 'sex': 0, 'birth_city': 'London'}


@pytest.fixture
def people(db: Session) -> list[PersonRecord]:
    rows = [
        ('Ada', 'Lovelace', '1815-12-10', 0, 'London'),
        ('Alan', 'Turing', '1912-06-23', 1, 'London'),
        ('Grace', 'Hopper', '1906-12-09', 0, 'New York'),
        ('Edsger', 'Dijkstra', '1930-05-11', 1, 'Rotterdam'),
        ('Donald', 'Knuth', '1938-01-10', 1, 'Milwaukee'),
        ('Barbara', 'Liskov', '1939-11-07', 0, 'Los Angeles'),
    ]
    return [
        PersonRecord.from_fields(db, dict(zip(('name', 'surname', 'birthday', 'sex', 'birth_city'), row, strict=True)))
        for row in rows
    ]
