import logging
import operator
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any, NamedTuple, Self

from sqlalchemy import ColumnElement, delete, select
from sqlalchemy.orm import Session

from .errors import ValidationError
from .functions import fetch, select_all, write
from .persons import columns
from .record import PersonRecord, person_table

logger = logging.getLogger(__name__)

operators: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    '=': operator.eq,
    '!=': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    'like': lambda column, value: column.like(value),
    'in': lambda column, value: column.in_(list(value)),
}


class Condition(NamedTuple):
    field: str
    operator: str
    value: Any

    @classmethod
    def parse(cls, condition: 'Condition | Sequence[Any]') -> 'Condition':
        if isinstance(condition, Condition):
            return condition
        if isinstance(condition, str) or not isinstance(condition, Sequence) or len(condition) != 3:
            raise ValidationError(f'Condition {condition!r} is not a (field, operator, value) triple')
        return cls(*condition)

    def to_clause(self) -> ColumnElement[bool]:
        if not isinstance(self.field, str) or self.field not in columns:
            raise ValidationError(f'Unknown field {self.field!r}')
        op = operators.get(self.operator.lower()) if isinstance(self.operator, str) else None
        if op is None:
            raise ValidationError(f'Unknown operator {self.operator!r}')
        if op is operators['in'] and (isinstance(self.value, str | bytes) or not isinstance(self.value, Iterable)):
            raise ValidationError(f'Operator "in" needs a collection of values, got {self.value!r}')
        return op(person_table.c[self.field], self.value)


class PersonCollection:
    """Ids of the persons matching all of the given conditions, ordered by id."""

    def __init__(self, db: Session, conditions: Sequence[Condition | tuple[str, str, Any]] | None = None) -> None:
        self._db = db
        where = [Condition.parse(condition).to_clause() for condition in conditions or ()]
        stmt = select(person_table.c.id).where(*where).order_by(person_table.c.id)
        self._person_list: list[int] = [row.id for row in fetch(db, stmt)]

    def get_persons_pool(self) -> list[PersonRecord]:
        if not self._person_list:
            return []
        rows = select_all(self._db, person_table, person_table.c.id.in_(self._person_list))
        logger.debug('Hydrating %d persons', len(rows))
        return [PersonRecord.from_row(self._db, row) for row in rows]

    def delete_persons(self) -> int:
        if not self._person_list:
            return 0
        result = write(self._db, delete(person_table).where(person_table.c.id.in_(self._person_list)))
        logger.info('Deleted %d persons', result.rowcount)
        return result.rowcount

    def get_person_list(self) -> list[int]:
        return list(self._person_list)

    def set_person_list(self, person_list: Iterable[int]) -> Self:
        self._person_list = [int(person_id) for person_id in person_list]
        return self

    def __len__(self) -> int:
        return len(self._person_list)

    def __iter__(self) -> Iterator[int]:
        return iter(self._person_list)
