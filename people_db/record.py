import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from sqlalchemy import delete, insert, update
from sqlalchemy.orm import Session

from .errors import NotFoundError, ValidationError
from .functions import (
    current_date,
    data_validation,
    get_age,
    get_sex_as_string,
    parse_birthday,
    parse_sex,
    select_all,
    write,
)
from .persons import Persons
from .sex import Sex

logger = logging.getLogger(__name__)

person_table = Persons.__table__


class PersonSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int | None
    name: str
    surname: str
    birthday: date
    age: int
    sex: str
    birth_city: str


class PersonRecord:
    """One row of the ``person`` table.

    Setters only change the in-memory state; nothing is written until ``save()``,
    which validates the record first.
    """

    def __init__(
        self,
        db: Session,
        *,
        name: str,
        surname: str,
        birthday: date | str,
        sex: int | Sex,
        birth_city: str,
        id: int | None = None,  # noqa: A002
    ) -> None:
        self._db = db
        self._id = id
        self._name = name
        self._surname = surname
        self._birthday: date | str = birthday
        self._sex: int | Sex = sex
        self._birth_city = birth_city
        self.validate()

    @classmethod
    def load(cls, db: Session, id: int) -> Self:  # noqa: A002
        row = find(db, id)
        if row is None:
            raise NotFoundError(f'Person {id} not found')
        return cls.from_row(db, row)

    @classmethod
    def from_row(cls, db: Session, row: Mapping[str, Any]) -> Self:
        # stored rows are taken as they are, validation only guards writes
        record = cls.__new__(cls)
        record._db = db
        record._id = row['id']
        record._name = row['name']
        record._surname = row['surname']
        record._birthday = row['birthday']
        record._sex = row['sex']
        record._birth_city = row['birth_city']
        return record

    @classmethod
    def from_fields(cls, db: Session, fields: Mapping[str, Any], id: int | None = None) -> Self:  # noqa: A002
        """Build a record from a field mapping.

        Without an id (neither the argument nor ``fields['id']``) the record is
        inserted right away and gets the generated id.
        """
        if not data_validation(fields):
            raise ValidationError('Invalid parameters "name" or "surname"')

        missing = [key for key in ('birthday', 'sex', 'birth_city') if key not in fields]
        if missing:
            raise ValidationError(f'Missing fields: {", ".join(missing)}')

        record = cls(
            db,
            id=id if id is not None else fields.get('id'),
            name=fields['name'],
            surname=fields['surname'],
            birthday=fields['birthday'],
            sex=fields['sex'],
            birth_city=fields['birth_city'],
        )
        if record.id is None:
            record.save()
        return record

    def validate(self) -> None:
        if not data_validation({'name': self._name, 'surname': self._surname}):
            raise ValidationError('Invalid parameters "name" or "surname"')
        self._birthday = parse_birthday(self._birthday)
        if self._birthday > current_date():
            raise ValidationError(f'Birthday {self._birthday.isoformat()} is in the future')
        self._sex = parse_sex(self._sex)

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self._name,
            'surname': self._surname,
            'birthday': self._birthday,
            'sex': int(self._sex),
            'birth_city': self._birth_city,
        }

    def save(self) -> Self:
        self.validate()
        values = self.to_dict()

        if self._id is not None and self.find(self._id) is not None:
            stmt = update(person_table).where(person_table.c.id == self._id).values(**values)
            write(self._db, stmt)
            logger.info('Updated person %d', self._id)
            return self

        result = write(self._db, insert(person_table).values(**values))
        self._id = int(result.inserted_primary_key[0])
        logger.info('Inserted person %d', self._id)
        return self

    def find(self, id: int) -> dict | None:  # noqa: A002
        return find(self._db, id)

    def remove(self, id: int | None = None) -> None:  # noqa: A002
        target = id if id is not None else self._id
        if target is None:
            return
        result = write(self._db, delete(person_table).where(person_table.c.id == target))
        logger.info('Removed person %d (%d rows)', target, result.rowcount)

    get_age = staticmethod(get_age)
    get_sex_as_string = staticmethod(get_sex_as_string)

    def format(self) -> PersonSnapshot:
        return PersonSnapshot(
            id=self._id,
            name=self._name,
            surname=self._surname,
            birthday=self.birthday,
            age=get_age(self.birthday),
            sex=get_sex_as_string(self.sex),
            birth_city=self._birth_city,
        )

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def surname(self) -> str:
        return self._surname

    @property
    def birthday(self) -> date:
        return parse_birthday(self._birthday)

    @property
    def sex(self) -> Sex:
        return parse_sex(self._sex)

    @property
    def birth_city(self) -> str:
        return self._birth_city

    def set_name(self, name: str) -> Self:
        self._name = name
        return self

    def set_surname(self, surname: str) -> Self:
        self._surname = surname
        return self

    def set_birthday(self, birthday: date | str) -> Self:
        self._birthday = birthday
        return self

    def set_sex(self, sex: int | Sex) -> Self:
        self._sex = sex
        return self

    def set_birth_city(self, birth_city: str) -> Self:
        self._birth_city = birth_city
        return self

    def __repr__(self) -> str:
        return f'<PersonRecord(id={self._id}, name={self._name!r}, surname={self._surname!r})>'


def find(db: Session, id: int) -> dict | None:  # noqa: A002
    rows = select_all(db, person_table, person_table.c.id == id)
    return rows[0] if rows else None
