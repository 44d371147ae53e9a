# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Declarative shape descriptors for request slices.

A descriptor states what a value must look like. The set of variants is closed:

  - Record  - mapping with named fields, each checked by a sub-descriptor
  - Literal - exact primitive value ("bar", 1, True, None)
  - Union   - ordered alternatives, first match wins
  - Guard   - arbitrary predicate, value -> bool

Descriptors are immutable and shared by every request; checking them is done
by shapegate.validation.validate().

Example:
    >>> Payload = Record({"email": Guard(lambda v: isinstance(v, str))})
    >>> describe(Payload)
    '{ email: unknown; }'
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Tuple, Union as TypingUnion

Primitive = TypingUnion[str, int, float, bool, None]


@dataclass(frozen=True)
class Record:
    """
    Mapping with required named fields.

    Attributes:
        fields: Field name -> descriptor, in declaration order
        strict: Reject fields that are not declared (default: drop them)
    """

    fields: Mapping[str, "Descriptor"]
    strict: bool = False

    def __post_init__(self) -> None:
        for name, descriptor in self.fields.items():
            _ensure_descriptor(descriptor, f"Record field '{name}'")
        # Freeze the field table so one descriptor can serve every request
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True)
class Literal:
    """Exact primitive value."""

    value: Primitive

    def __post_init__(self) -> None:
        if self.value is not None and not isinstance(self.value, (str, int, float, bool)):
            raise TypeError(
                f"Literal value must be a primitive, got {type(self.value).__name__}"
            )


@dataclass(frozen=True, init=False)
class Union:
    """Ordered alternatives; the first one that accepts the value wins."""

    alternatives: Tuple["Descriptor", ...]

    def __init__(self, *alternatives: "Descriptor") -> None:
        if not alternatives:
            raise ValueError("Union requires at least one alternative")
        for descriptor in alternatives:
            _ensure_descriptor(descriptor, "Union alternative")
        object.__setattr__(self, "alternatives", tuple(alternatives))


@dataclass(frozen=True)
class Guard:
    """
    Arbitrary predicate check.

    Attributes:
        predicate: Callable returning True when the value is acceptable
        propagate_faults: Raise GuardFault when the predicate itself raises,
            instead of treating the error as a failed check
    """

    predicate: Callable[[Any], bool] = field(compare=False)
    propagate_faults: bool = False

    def __post_init__(self) -> None:
        if not callable(self.predicate):
            raise TypeError("Guard predicate must be callable")


Descriptor = TypingUnion[Record, Literal, Union, Guard]

_DESCRIPTOR_TYPES = (Record, Literal, Union, Guard)


def _ensure_descriptor(candidate: Any, where: str) -> None:
    if not isinstance(candidate, _DESCRIPTOR_TYPES):
        raise TypeError(f"{where} must be a descriptor, got {type(candidate).__name__}")


def render_literal(value: Any) -> str:
    """
    Render a primitive the way it appears inside literal messages.

    Follows JavaScript String() conventions so messages stay stable for
    clients written against the original wire format.

    Args:
        value: Any decoded JSON value

    Returns:
        Text form, e.g. True -> "true", None -> "null", 1.0 -> "1"
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None else render_literal(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


def describe(descriptor: Descriptor) -> str:
    """
    Return the type summary of a descriptor used in failure messages.

    Examples:
        Literal("bar")                        -> "bar" (quoted)
        Guard(...)                            -> unknown
        Union(Literal("1"), Literal("2"))     -> "1" | "2"
        Record({"foo": Literal("bar")})       -> { foo: "bar"; }
    """
    if isinstance(descriptor, Literal):
        if isinstance(descriptor.value, str):
            return '"' + descriptor.value.replace("\\", "\\\\").replace('"', '\\"') + '"'
        return render_literal(descriptor.value)
    if isinstance(descriptor, Guard):
        return "unknown"
    if isinstance(descriptor, Union):
        return " | ".join(describe(alt) for alt in descriptor.alternatives)
    if isinstance(descriptor, Record):
        if not descriptor.fields:
            return "{}"
        parts = " ".join(
            f"{name}: {describe(sub)};" for name, sub in descriptor.fields.items()
        )
        return "{ " + parts + " }"
    raise TypeError(f"Unknown descriptor type: {type(descriptor).__name__}")
