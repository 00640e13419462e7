from enum import IntEnum


class Sex(IntEnum):
    WOMAN = 0
    MAN = 1

    @property
    def label(self) -> str:
        return self.name.lower()
