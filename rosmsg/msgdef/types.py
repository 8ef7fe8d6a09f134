"""Descriptors for parsed ROS message definitions."""

from dataclasses import dataclass, field

from dataclasses_json import DataClassJsonMixin

__all__ = ["FieldType", "FieldDef", "ConstantDef", "MessageDefinition"]


@dataclass
class FieldType(DataClassJsonMixin):
    """A type reference, optionally an array.

    For arrays:
    - array_size=None: not an array
    - array_size=0: variable length array
    - array_size=N: fixed length array of N elements
    """

    name: str
    array_size: int | None = None

    @property
    def package(self) -> str | None:
        if "/" not in self.name:
            return None
        return self.name.split("/", 1)[0]


@dataclass
class FieldDef(DataClassJsonMixin):
    """A serialized member of a message."""

    type: FieldType
    name: str


@dataclass
class ConstantDef(DataClassJsonMixin):
    """A constant. Constants are part of the definition but never serialized."""

    type: FieldType
    name: str
    value: str


@dataclass
class MessageDefinition(DataClassJsonMixin):
    """One message definition section.

    The first section of a full definition has no name of its own; the
    dependency sections are named by their `MSG:` line.
    """

    name: str | None
    fields: list[FieldDef] = field(default_factory=list)
    constants: list[ConstantDef] = field(default_factory=list)

    @property
    def package(self) -> str | None:
        if self.name is None or "/" not in self.name:
            return None
        return self.name.split("/", 1)[0]
