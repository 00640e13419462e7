import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import ColumnExpressionArgument, select
from sqlalchemy.engine import CursorResult, Row
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session
from sqlalchemy.sql.expression import Executable, FromClause

from .errors import ValidationError
from .sex import Sex

logger = logging.getLogger(__name__)


def fetch(db: Session, stmt: Executable) -> list[Row[Any]]:
    """Run a read and end its transaction, so the next read sees fresh data."""
    logger.debug('Executing %s', stmt)
    try:
        rows = list(db.execute(stmt).all())
        db.commit()
    except DBAPIError:
        logger.warning('Read failed, rolling back', exc_info=True)
        db.rollback()
        raise
    return rows


def select_all(db: Session, source: FromClause, *where: ColumnExpressionArgument[bool]) -> list[dict]:
    return [row._asdict() for row in fetch(db, select(source).where(*where))]


def is_alphabetic(value: Any) -> bool:  # noqa: ANN401
    return isinstance(value, str) and value.isalpha()


def data_validation(data: Mapping[str, Any]) -> bool:
    return is_alphabetic(data.get('name')) and is_alphabetic(data.get('surname'))


def parse_birthday(value: date | str) -> date:
    # datetime is a subclass of date, so it has to be checked first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        raise ValidationError(f'Invalid birthday {value!r}, expected YYYY-MM-DD') from None


def parse_sex(value: int | Sex) -> Sex:
    try:
        return Sex(value)
    except ValueError:
        raise ValidationError(f'Invalid sex {value!r}, expected 0 (woman) or 1 (man)') from None


def current_date() -> date:
    return datetime.now(UTC).date()


def get_age(birthday: date | str, today: date | str | None = None) -> int:
    """Full years between ``birthday`` and ``today`` (the current UTC date by default)."""
    born = parse_birthday(birthday)
    now = parse_birthday(today) if today is not None else current_date()
    if born > now:
        raise ValidationError(f'Birthday {born.isoformat()} is in the future')
    return now.year - born.year - ((now.month, now.day) < (born.month, born.day))


def get_sex_as_string(sex: int | Sex) -> str:
    return parse_sex(sex).label


def write(db: Session, stmt: Executable) -> CursorResult[Any]:
    try:
        result = db.execute(stmt)
        db.commit()
    except DBAPIError:
        logger.warning('Write failed, rolling back', exc_info=True)
        db.rollback()
        raise
    return result  # type: ignore[return-value]
