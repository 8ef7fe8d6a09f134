"""Build runtime type descriptors from parsed message definitions."""

import logging
from collections.abc import Iterable

from rosmsg.proto.types import (
    SCALAR_TYPES,
    TEXT,
    RosType,
    ScalarKind,
    SequenceType,
    StructField,
    StructType,
    TupleType,
)

from .parser import DefinitionError, parse, parse_type
from .types import FieldType, MessageDefinition

logger = logging.getLogger(__name__)

TIME = StructType(
    "time",
    fields=(
        StructField("secs", SCALAR_TYPES[ScalarKind.UINT32]),
        StructField("nsecs", SCALAR_TYPES[ScalarKind.UINT32]),
    ),
)

DURATION = StructType(
    "duration",
    fields=(
        StructField("secs", SCALAR_TYPES[ScalarKind.INT32]),
        StructField("nsecs", SCALAR_TYPES[ScalarKind.INT32]),
    ),
)

BUILTIN_TYPES: dict[str, RosType] = {
    **SCALAR_TYPES,
    "string": TEXT,
    "time": TIME,
    "duration": DURATION,
    # Deprecated ROS1 aliases
    "byte": SCALAR_TYPES[ScalarKind.INT8],
    "char": SCALAR_TYPES[ScalarKind.UINT8],
}


class TypeCompiler:
    """Resolve message definitions into `StructType` descriptors.

    Decoded structs built by this compiler are plain dicts keyed by field
    name.
    """

    def __init__(self, definitions: Iterable[MessageDefinition] = ()) -> None:
        self._definitions: dict[str, MessageDefinition] = {}
        self._cache: dict[str, StructType] = {}
        self._building: set[str] = set()
        for definition in definitions:
            self.register(definition)

    def register(self, definition: MessageDefinition) -> None:
        if definition.name is None:
            raise DefinitionError("Only named definitions can be registered")
        logger.debug("Registering message definition %s", definition.name)
        self._definitions[definition.name] = definition

    def resolve_name(self, name: str, package: str | None = None) -> str:
        """Find the full name a field type refers to."""
        if name in self._definitions:
            return name
        if "/" in name:
            raise DefinitionError(f"Unknown message type {name}")

        if name == "Header" and "std_msgs/Header" in self._definitions:
            return "std_msgs/Header"
        if package and f"{package}/{name}" in self._definitions:
            return f"{package}/{name}"

        matches = [n for n in self._definitions if n.rsplit("/", 1)[-1] == name]
        if len(matches) == 1:
            return matches[0]
        if matches:
            raise DefinitionError(f"Type {name} is ambiguous: {', '.join(sorted(matches))}")
        raise DefinitionError(f"Unknown message type {name}")

    def field_type(self, field_type: FieldType, package: str | None = None) -> RosType:
        """Build the descriptor for one field type."""
        base = BUILTIN_TYPES.get(field_type.name)
        if base is None:
            base = self.message_type(self.resolve_name(field_type.name, package))

        if field_type.array_size is None:
            return base
        if field_type.array_size == 0:
            return SequenceType(base)
        return TupleType((base,) * field_type.array_size)

    def message_type(self, name: str) -> StructType:
        """Build the descriptor for a registered message."""
        if name in self._cache:
            return self._cache[name]
        if name not in self._definitions:
            raise DefinitionError(f"Unknown message type {name}")
        if name in self._building:
            raise DefinitionError(f"{name} contains itself")

        definition = self._definitions[name]
        self._building.add(name)
        try:
            fields = tuple(
                StructField(f.name, self.field_type(f.type, definition.package))
                for f in definition.fields
            )
        finally:
            self._building.discard(name)

        struct = StructType(name, fields=fields)
        self._cache[name] = struct
        return struct


def compile_type(text: str, definitions: Iterable[MessageDefinition] = ()) -> RosType:
    """Build a descriptor from a type expression such as `uint16[]`."""
    return TypeCompiler(definitions).field_type(parse_type(text))


def compile_definition(text: str, name: str) -> StructType:
    """Build the descriptor of a full message definition.

    Args:
        text: The definition text including any dependency sections.
        name: Full type name of the main message, e.g. `std_msgs/String`.
    """
    return TypeCompiler(parse(text, name=name)).message_type(name)
