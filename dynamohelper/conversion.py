"""Conversion between dataclass instances and DynamoDB attribute-value maps."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from functools import lru_cache
from typing import Any

from .errors import ParseError
from .fieldtypes import DynamoType, FieldKind, Shape, dynamo_type, field_kind, field_types

AttributeValue = dict[str, Any]
Item = dict[str, AttributeValue]


@lru_cache(maxsize=None)
def _schema(cls: type) -> tuple[tuple[str, FieldKind], ...]:
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(f"{cls!r} is not a dataclass")
    hints = field_types(cls)
    return tuple((field.name, field_kind(hints[field.name])) for field in dataclasses.fields(cls))


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def key_value(tp: Any, value: Any) -> AttributeValue:
    """The attribute value for a single value of Python type ``tp``."""
    kind = dynamo_type(tp)
    if kind is DynamoType.NUMBER:
        return {"N": _format_number(value)}
    if kind is DynamoType.BOOLEAN:
        return {"BOOL": bool(value)}
    return {"S": value if isinstance(value, str) else str(value)}


def _encode(kind: FieldKind, value: Any) -> AttributeValue:
    if kind.shape is Shape.LIST:
        return {"L": [key_value(kind.value, element) for element in value]}
    if kind.shape is Shape.MAP:
        return {"M": {str(key): key_value(kind.value, element) for key, element in value.items()}}
    return key_value(kind.value, value)


def to_item(instance: Any) -> Item:
    """Attribute-value map for a dataclass instance; ``None`` optionals are left out."""
    if isinstance(instance, type) or not dataclasses.is_dataclass(instance):
        raise TypeError(f"{instance!r} is not a dataclass instance")
    item: Item = {}
    for name, kind in _schema(type(instance)):
        value = getattr(instance, name)
        if value is None:
            if kind.optional:
                continue
            raise ValueError(f"Required attribute {name} is None")
        item[name] = _encode(kind, value)
    return item


_MISSING = object()


def _variant(attribute: Any, tag: str) -> Any:
    if isinstance(attribute, Mapping) and tag in attribute:
        return attribute[tag]
    return _MISSING


def _parse_number(tp: Any, text: Any, message: str) -> Any:
    if not isinstance(text, str):
        raise ParseError(message)
    try:
        return tp(text)
    except (TypeError, ValueError, ArithmeticError):
        raise ParseError(message) from None


def _from_string(tp: Any, text: Any, name: str) -> Any:
    if not isinstance(text, str):
        raise ParseError(f"Could not convert {name} from Dynamo String")
    if not isinstance(tp, type) or issubclass(tp, str):
        return text
    try:
        return tp(text)
    except (TypeError, ValueError, ArithmeticError):
        raise ParseError(f"Could not parse {name}") from None


def _decode_element(name: str, tp: Any, attribute: Any) -> Any:
    if dynamo_type(tp) is DynamoType.NUMBER:
        text = _variant(attribute, "N")
        if text is _MISSING:
            raise ParseError(f"Could not convert list element from DynamoDB number for '{name}'")
        return _parse_number(tp, text, f"Could not convert string to number for {name}")
    text = _variant(attribute, "S")
    if text is _MISSING:
        raise ParseError(f"Could not convert list element from DynamoDB string for '{name}'")
    return _from_string(tp, text, name)


def _decode(name: str, kind: FieldKind, attribute: Any) -> Any:
    if kind.shape is Shape.LIST:
        elements = _variant(attribute, "L")
        if elements is _MISSING:
            raise ParseError(f"Could not convert {name} from Dynamo List")
        return [_decode_element(name, kind.value, element) for element in elements]

    if kind.shape is Shape.MAP:
        entries = _variant(attribute, "M")
        if entries is _MISSING or not isinstance(entries, Mapping):
            raise ParseError(f"Could not convert {name} from Dynamo Map")
        result = {}
        for key, element in entries.items():
            text = _variant(element, "S")
            if text is _MISSING:
                raise ParseError(f"Could not convert from Dynamo String for {name}")
            result[key] = _from_string(kind.value, text, name)
        return result

    value_type = kind.value_type
    if value_type is DynamoType.NUMBER:
        text = _variant(attribute, "N")
        if text is _MISSING:
            raise ParseError(f"Could not convert {name} from Dynamo Number")
        return _parse_number(kind.value, text, f"Could not parse number for {name}")
    if value_type is DynamoType.BOOLEAN:
        flag = _variant(attribute, "BOOL")
        if flag is _MISSING or not isinstance(flag, bool):
            raise ParseError(f"Could not convert {name} from Dynamo Boolean")
        return flag
    text = _variant(attribute, "S")
    if text is _MISSING:
        raise ParseError(f"Could not convert {name} from Dynamo String")
    return _from_string(kind.value, text, name)


def from_item(cls: type, item: Mapping[str, Any]) -> Any:
    """Build an instance of dataclass ``cls`` from an attribute-value map.

    Raises ParseError when a required attribute is missing or has the wrong type.
    Attributes that are not fields of ``cls`` are ignored.
    """
    values = {}
    for name, kind in _schema(cls):
        if name not in item:
            if kind.optional:
                values[name] = None
                continue
            raise ParseError(f"Did not find required attribute {name}")
        values[name] = _decode(name, kind, item[name])
    return cls(**values)