"""Enumerations whose members carry an identifier and a display name."""

import enum
from typing import NamedTuple, Self


class Choice(NamedTuple):
    """Value of a `ChoiceEnum` member."""

    id: str
    display_name: str

    def __str__(self):
        return self.id


class ChoiceEnum(enum.Enum):
    """Base enum for `Choice` values, looked up by identifier.

    Members can be built from their `Choice`, their identifier or their name
    (case-insensitively). `from_id` only accepts the exact identifier.
    """

    def __str__(self) -> str:
        return self.id

    @property
    def id(self) -> str:
        return self.value.id

    @property
    def display_name(self) -> str:
        return self.value.display_name

    @classmethod
    def from_id(cls, identifier: str) -> Self:
        for member in cls:
            if member.id == identifier:
                return member
        raise ValueError(f"Unknown {cls.__name__} id: {identifier}")

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.id == value or member.name.lower() == value.lower():
                    return member
        return None
