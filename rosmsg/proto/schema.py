"""Map Python types and annotations to ROSMSG type descriptors."""

import dataclasses
import functools
import threading
import types
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType, Union, get_args, get_origin, get_type_hints

from rosmsg.msgdef.compiler import compile_type

from .types import (
    BYTES,
    SCALAR_TYPES,
    TEXT,
    UNIT,
    AnyType,
    CharType,
    EnumType,
    MapType,
    OptionalType,
    RosType,
    ScalarKind,
    SequenceType,
    StructField,
    StructType,
    TupleType,
)

# Annotation for single characters, which ROSMSG cannot represent
Char = NewType("Char", str)


@dataclass(frozen=True)
class RosmsgFieldInfo:
    """Metadata for a struct field."""

    rosmsg_type: str | RosType


# Sentinel for missing default
_MISSING: Any = object()


def rosmsg_field(
    type: str | RosType,
    *,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
) -> Any:
    """Define a dataclass field with an explicit wire type.

    Args:
        type: The ROSMSG type, as a type expression (e.g. "uint8",
            "int16[4]", "string[]") or a descriptor.
        default: Default value for the field.
        default_factory: Factory function for default value.

    Returns:
        A dataclass field with rosmsg metadata attached.
    """
    metadata = {"rosmsg": RosmsgFieldInfo(type)}

    if default is not _MISSING:
        return field(default=default, metadata=metadata)
    if default_factory is not _MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(metadata=metadata)


_struct_cache: dict[type, StructType] = {}
# Descriptors of the build in progress, published together once it succeeds
_pending: dict[type, StructType] = {}
_struct_lock = threading.RLock()


def struct_type(cls: type) -> StructType:
    """Build (once) the descriptor of a dataclass.

    Fields are serialized in declaration order. Fields declared with
    `init=False` are not part of the wire format.
    """
    with _struct_lock:
        if cls in _struct_cache:
            return _struct_cache[cls]
        if cls in _pending:
            return _pending[cls]
        if not dataclasses.is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a dataclass")

        outermost = not _pending
        try:
            struct = _build_struct(cls)
        except Exception:
            if outermost:
                _pending.clear()
            raise
        if outermost:
            _struct_cache.update(_pending)
            _pending.clear()
        return struct


def _build_struct(cls: type) -> StructType:
    # Registered before the fields are resolved so recursive types terminate
    struct = StructType(cls.__name__, factory=cls)
    _pending[cls] = struct
    hints = get_type_hints(cls)
    fields = []
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        info = f.metadata.get("rosmsg")
        msg_type = info.rosmsg_type if info else hints[f.name]
        fields.append(StructField(f.name, type_for(msg_type)))
    struct.fields = tuple(fields)
    return struct


def _union_type(annotation: Any, args: tuple[Any, ...]) -> RosType:
    others = [a for a in args if a is not type(None)]
    if len(others) == 1 and len(others) != len(args):
        return OptionalType(type_for(others[0]))
    return EnumType(str(annotation))


@functools.cache
def _type_from_string(text: str) -> RosType:
    return compile_type(text)


def type_for(msg_type: Any) -> RosType:
    """Resolve the descriptor for a Python annotation, type expression or descriptor.

    Raises:
        TypeError: if the annotation has no ROSMSG representation. Bare
            `int` is rejected because it carries no width.
    """
    if isinstance(msg_type, RosType):
        return msg_type
    if isinstance(msg_type, str):
        return _type_from_string(msg_type)

    if msg_type is Char:
        return CharType()
    if msg_type is typing.Any:
        return AnyType()
    if msg_type is None or msg_type is type(None):
        return UNIT
    if msg_type is bool:
        return SCALAR_TYPES[ScalarKind.BOOL]
    if msg_type is float:
        return SCALAR_TYPES[ScalarKind.FLOAT64]
    if msg_type is int:
        raise TypeError('int has no fixed width, declare it with rosmsg_field(type="int32")')
    if msg_type is str:
        return TEXT
    if msg_type in (bytes, bytearray):
        return BYTES
    if isinstance(msg_type, type) and issubclass(msg_type, Enum):
        return EnumType(msg_type.__name__)
    if isinstance(msg_type, type) and dataclasses.is_dataclass(msg_type):
        return struct_type(msg_type)

    origin = get_origin(msg_type)
    args = get_args(msg_type)

    if origin is list and len(args) == 1:
        return SequenceType(type_for(args[0]))
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceType(type_for(args[0]))
        return TupleType(tuple(type_for(a) for a in args))
    if origin is dict and len(args) == 2:
        return MapType(type_for(args[0]), type_for(args[1]))
    if origin in (Union, types.UnionType):
        return _union_type(msg_type, args)

    raise TypeError(f"{msg_type!r} has no ROSMSG representation")
