from datetime import date

from sqlalchemy import SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from .config import Base


class Persons(Base):
    __tablename__ = 'person'

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    surname: Mapped[str] = mapped_column(String(255))
    birthday: Mapped[date]
    sex: Mapped[int] = mapped_column(SmallInteger)
    birth_city: Mapped[str] = mapped_column(String(255))


columns = frozenset(Persons.__table__.columns.keys())
