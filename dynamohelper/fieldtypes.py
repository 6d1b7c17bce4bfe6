"""Classification of dataclass field annotations into DynamoDB attribute shapes."""

from __future__ import annotations

import dataclasses
import re
import types
import typing
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

KEY_MARKER = "dynamodb_key"
PARTITION = "partition"
RANGE = "range"

NUMERIC_TYPES = (int, float, Decimal)


class DynamoType(Enum):
    """How a single value is stored."""

    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"


class ScalarType(Enum):
    """Attribute type used in a table's key definitions."""

    S = "S"
    N = "N"
    B = "B"


class Shape(Enum):
    """Whether a field holds one value, a list or a map."""

    SIMPLE = "simple"
    LIST = "list"
    MAP = "map"


@dataclass(frozen=True)
class FieldKind:
    """The shape of a field and the Python types inside it.

    ``value`` is the field's type for simple fields, the element type for
    lists and the value type for maps; ``key`` is the key type of maps.
    """

    shape: Shape
    value: Any
    key: Any = None
    optional: bool = False

    @property
    def value_type(self) -> DynamoType:
        return dynamo_type(self.value)

    @property
    def key_type(self) -> DynamoType | None:
        return None if self.key is None else dynamo_type(self.key)


def dynamo_type(tp: Any) -> DynamoType:
    """Numbers for numeric types, booleans for bool, strings for everything else."""
    if tp is bool:
        return DynamoType.BOOLEAN
    if isinstance(tp, type) and issubclass(tp, NUMERIC_TYPES) and not issubclass(tp, bool):
        return DynamoType.NUMBER
    return DynamoType.STRING


_SCALARS = {
    DynamoType.NUMBER: ScalarType.N,
    DynamoType.STRING: ScalarType.S,
    DynamoType.BOOLEAN: ScalarType.B,
}


def scalar_type(tp: Any) -> ScalarType:
    """The key attribute type for a Python type."""
    return _SCALARS[dynamo_type(tp)]


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    origin = typing.get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = typing.get_args(tp)
        others = [arg for arg in args if arg is not type(None)]
        if len(others) == 1 and len(args) == 2:
            return others[0], True
        raise TypeError(f"Unsupported union type: {tp!r}")
    return tp, False


def field_kind(tp: Any) -> FieldKind:
    """Classify an annotation; raises TypeError for unsupported containers."""
    inner, optional = _unwrap_optional(tp)
    origin = typing.get_origin(inner)
    args = typing.get_args(inner)

    if origin is list or inner is list:
        if len(args) != 1:
            raise TypeError(f"List fields need exactly one element type: {tp!r}")
        element = args[0]
        if dynamo_type(element) is DynamoType.BOOLEAN or typing.get_origin(element) is not None:
            raise TypeError("Only lists with strings or numbers are currently supported")
        return FieldKind(Shape.LIST, element, optional=optional)

    if origin is dict or inner is dict:
        if len(args) != 2:
            raise TypeError(f"Map fields need a key and a value type: {tp!r}")
        key, value = args
        if (
            dynamo_type(key) is not DynamoType.STRING
            or dynamo_type(value) is not DynamoType.STRING
            or typing.get_origin(value) is not None
        ):
            raise TypeError("Only maps with strings are currently supported")
        return FieldKind(Shape.MAP, value, key, optional)

    return FieldKind(Shape.SIMPLE, inner, optional=optional)


# Names understood in annotations written as text (``from __future__ import annotations``).
_NAMES: dict[str, Any] = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "Decimal": Decimal,
    "decimal.Decimal": Decimal,
    "None": type(None),
    "NoneType": type(None),
    "list": list,
    "List": list,
    "typing.List": list,
    "dict": dict,
    "Dict": dict,
    "typing.Dict": dict,
    "Optional": Optional,
    "typing.Optional": Optional,
    "Union": Union,
    "typing.Union": Union,
}

_LEXEME_PATTERN = re.compile(r"\s*(?P<piece>[A-Za-z_][\w.]*|'[^']*'|\"[^\"]*\"|[\[\],|])")


def _split_annotation(text: str) -> deque[str]:
    text = text.strip()
    pieces: deque[str] = deque()
    pos = 0
    while pos < len(text):
        match = _LEXEME_PATTERN.match(text, pos)
        if match is None:
            raise TypeError(f"Cannot read annotation: {text!r}")
        pieces.append(match.group("piece"))
        pos = match.end()
    return pieces


class _AnnotationReader:
    """Reads the small annotation language that field types are written in."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pieces = _split_annotation(text)

    def read(self) -> Any:
        result = self._union()
        if self.pieces:
            raise TypeError(f"Cannot read annotation: {self.text!r}")
        return result

    def _peek(self) -> str | None:
        return self.pieces[0] if self.pieces else None

    def _take(self) -> str:
        if not self.pieces:
            raise TypeError(f"Cannot read annotation: {self.text!r}")
        return self.pieces.popleft()

    def _union(self) -> Any:
        members = [self._primary()]
        while self._peek() == "|":
            self._take()
            members.append(self._primary())
        if len(members) == 1:
            return members[0]
        return Union[tuple(members)]

    def _primary(self) -> Any:
        piece = self._take()
        if piece[0] in "'\"":
            return _AnnotationReader(piece[1:-1]).read()
        if not (piece[0].isalpha() or piece[0] == "_"):
            raise TypeError(f"Cannot read annotation: {self.text!r}")
        base = _NAMES.get(piece, piece)
        if self._peek() != "[":
            return base
        self._take()
        args = [self._union()]
        while self._peek() == ",":
            self._take()
            args.append(self._union())
        if self._take() != "]":
            raise TypeError(f"Cannot read annotation: {self.text!r}")
        return self._subscript(base, args)

    def _subscript(self, base: Any, args: list[Any]) -> Any:
        if base is Optional:
            if len(args) != 1:
                raise TypeError(f"Optional takes one type: {self.text!r}")
            return Optional[args[0]]
        if base is Union:
            return Union[tuple(args)]
        if base is list or base is dict:
            return base[tuple(args)]
        if isinstance(base, str):
            return base
        raise TypeError(f"Cannot subscript {base!r} in {self.text!r}")


def field_types(cls: type) -> dict[str, Any]:
    """Field names of dataclass ``cls`` mapped to their annotated types."""
    return {
        field.name: _AnnotationReader(field.type).read() if isinstance(field.type, str) else field.type
        for field in dataclasses.fields(cls)
    }


def _key_field(marker: str, kwargs: dict[str, Any]) -> Any:
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[KEY_MARKER] = marker
    return dataclasses.field(metadata=metadata, **kwargs)


def partition(**kwargs: Any) -> Any:
    """A dataclass field marked as the partition key."""
    return _key_field(PARTITION, kwargs)


def range_key(**kwargs: Any) -> Any:
    """A dataclass field marked as the range (sort) key."""
    return _key_field(RANGE, kwargs)


def annotated_field(cls: type, marker: str) -> tuple[str, Any] | None:
    """Name and type of the first field of ``cls`` carrying ``marker``."""
    hints = field_types(cls)
    for field in dataclasses.fields(cls):
        if field.metadata.get(KEY_MARKER) == marker:
            return field.name, hints[field.name]
    return None