import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from people_db import Condition, PersonCollection, PersonRecord, ValidationError


def test_no_conditions(db: Session, people: list[PersonRecord]) -> None:
    collection = PersonCollection(db)
    assert collection.get_person_list() == [person.id for person in people]

    pool = collection.get_persons_pool()
    assert len(pool) == len(people)
    assert sorted(person.id for person in pool) == collection.get_person_list()


def test_empty_table(db: Session) -> None:
    collection = PersonCollection(db)
    assert len(collection) == 0
    assert collection.get_persons_pool() == []
    assert collection.delete_persons() == 0


def test_conditions_are_conjunctions(db: Session, people: list[PersonRecord]) -> None:
    collection = PersonCollection(db, [('birth_city', '=', 'London'), Condition('sex', '=', 1)])
    assert [person.surname for person in collection.get_persons_pool()] == ['Turing']


@pytest.mark.parametrize(('condition', 'surnames'), [
    (('name', 'like', 'A%'), {'Lovelace', 'Turing'}),
    (('sex', '!=', 1), {'Lovelace', 'Hopper', 'Liskov'}),
    (('surname', 'IN', ['Knuth', 'Hopper']), {'Knuth', 'Hopper'}),
    (('birth_city', '>=', 'Rotterdam'), {'Dijkstra'}),
])
def test_operators(db: Session, people: list[PersonRecord], condition: tuple, surnames: set[str]) -> None:
    collection = PersonCollection(db, [condition])
    assert {person.surname for person in collection.get_persons_pool()} == surnames


def test_condition_values_are_parameters(db: Session, people: list[PersonRecord]) -> None:
    collection = PersonCollection(db, [('name', '=', "x' OR '1'='1")])
    assert collection.get_person_list() == []


@pytest.mark.parametrize('condition', [
    ('age', '=', 3),
    ('name', 'between', 'A'),
    ('1=1; --', '=', 1),
    ('name', 'in', 'Ann'),
    ('id', 'in', 5),
    ('name', 1, 'Ann'),
    (['name'], '=', 'Ann'),
    ('name', '='),
    ('name', '=', 'Ann', 'extra'),
    'name',
])
def test_invalid_conditions(db: Session, condition: tuple) -> None:
    with pytest.raises(ValidationError):
        PersonCollection(db, [condition])


def test_delete_persons(db: Session, people: list[PersonRecord]) -> None:
    ids = [person.id for person in people]
    collection = PersonCollection(db, [('id', 'in', [ids[1], ids[4]])])

    assert collection.delete_persons() == 2

    remaining = PersonCollection(db).get_person_list()
    assert remaining == [id for id in ids if id not in (ids[1], ids[4])]


def test_set_person_list(db: Session, people: list[PersonRecord]) -> None:
    collection = PersonCollection(db, [('birth_city', '=', 'London')])
    assert len(collection) == 2

    ids = [people[2].id, people[3].id]
    assert collection.set_person_list(ids) is collection
    assert list(collection) == ids
    assert {person.name for person in collection.get_persons_pool()} == {'Grace', 'Edsger'}

    collection.delete_persons()
    assert len(PersonCollection(db)) == len(people) - 2


def test_person_list_is_a_copy(db: Session, people: list[PersonRecord]) -> None:
    collection = PersonCollection(db)
    collection.get_person_list().clear()
    assert len(collection) == len(people)


def test_pool_includes_rows_written_elsewhere(db: Session, people: list[PersonRecord]) -> None:
    db.execute(text(
        "INSERT INTO person (name, surname, birthday, sex, birth_city) VALUES ('Jean-Luc', 'Picard', '1940-07-13', 1, 'Paris')",
    ))
    db.commit()

    pool = PersonCollection(db).get_persons_pool()
    assert len(pool) == len(people) + 1
    assert 'Jean-Luc' in {person.name for person in pool}
