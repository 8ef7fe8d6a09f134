"""ROS message definition parser using Lark."""

import os
import re
from dataclasses import dataclass
from typing import Any, TypeVar

from lark import Lark
from lark.exceptions import LarkError, VisitError
from lark.visitors import Transformer

from .types import ConstantDef, FieldDef, FieldType, MessageDefinition

_g_parser: Lark | None = None

# A line made only of "=" separates a definition from its dependencies
_SEPARATOR = re.compile(r"^=+[ \t]*\r?$", re.MULTILINE)
_MSG_HEADER = re.compile(r"^[ \t]*MSG:[ \t]*(\S+)[ \t]*\r?$", re.MULTILINE)


class DefinitionError(RuntimeError):
    """Raised when a message definition is invalid or cannot be resolved."""


@dataclass
class _Array:
    value: int


TFilter = TypeVar("TFilter", bound=object)


def _find_many(args: list[Any], class_type: type[TFilter]) -> list[TFilter]:
    return [v for v in args if isinstance(v, class_type)]


class TreeTransformer(Transformer):
    """Transform parse tree into definition descriptors."""

    def array(self, args: list[Any]) -> _Array:
        if args[0] is None:
            return _Array(value=0)
        size = int(args[0])
        if size == 0:
            raise DefinitionError("Fixed array size must be positive, use [] for variable arrays")
        return _Array(value=size)

    def type(self, args: list[Any]) -> FieldType:
        array = args[1] if len(args) > 1 else None
        return FieldType(name=str(args[0]), array_size=array.value if array else None)

    def field(self, args: list[Any]) -> FieldDef:
        return FieldDef(type=args[0], name=str(args[1]))

    def constant(self, args: list[Any]) -> ConstantDef:
        field_type, name, raw = args
        value = str(raw).strip()
        # String constants keep everything after "=", comment markers included
        if field_type.name != "string":
            value = value.split("#", 1)[0].strip()
        return ConstantDef(type=field_type, name=str(name), value=value)

    def definition(self, args: list[Any]) -> list[Any]:
        return list(args)


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/rosmsg.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, start=["definition", "type"], parser="lalr", lexer="contextual")

    return _g_parser


def _parse(text: str, start: str) -> Any:
    if start == "definition":
        text += "\n"
    try:
        tree = _get_parser().parse(text, start=start)
        return TreeTransformer().transform(tree)
    except VisitError as err:
        if isinstance(err.orig_exc, DefinitionError):
            raise err.orig_exc from err
        raise
    except LarkError as err:
        raise DefinitionError(f"Invalid message definition: {err}") from err


def parse_type(text: str) -> FieldType:
    """Parse a single type expression such as `int16[4]` or `std_msgs/Header`."""
    return _parse(text.strip(), "type")


def validate(definitions: list[MessageDefinition]) -> None:
    """Validate parsed message definitions."""
    seen: set[str] = set()

    for definition in definitions:
        label = definition.name or "message"
        if definition.name is not None:
            if definition.name in seen:
                raise DefinitionError(f"{definition.name} is defined more than once")
            seen.add(definition.name)

        names: set[str] = set()
        for member in [*definition.fields, *definition.constants]:
            if member.name in names:
                raise DefinitionError(f"{label} declares {member.name} more than once")
            names.add(member.name)

        for constant in definition.constants:
            if constant.type.array_size is not None:
                raise DefinitionError(f"{label} constant {constant.name} cannot be an array")


def parse(text: str, name: str | None = None) -> list[MessageDefinition]:
    """Parse a full message definition, dependencies included.

    Args:
        text: The definition text, as found in `.msg` files or in the
            `message_definition` connection header field.
        name: Type name of the first (main) definition.

    Returns:
        The main definition followed by its dependencies.
    """
    definitions: list[MessageDefinition] = []

    for index, section in enumerate(_SEPARATOR.split(text)):
        section_name = name
        if index > 0:
            match = _MSG_HEADER.search(section)
            if not match:
                raise DefinitionError("Dependency section is missing its 'MSG: <type>' line")
            section_name = match.group(1)
            section = section[: match.start()] + section[match.end() :]

        members = _parse(section, "definition")
        definitions.append(
            MessageDefinition(
                name=section_name,
                fields=_find_many(members, FieldDef),
                constants=_find_many(members, ConstantDef),
            )
        )

    validate(definitions)

    return definitions
