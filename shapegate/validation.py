# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Descriptor validation engine.

validate() checks one value against one descriptor and returns an outcome
value instead of raising:

  - Valid(value)        - the value conforms; records are projected onto
                          their declared fields
  - Invalid(key, reason) - the first failure found, keyed by the innermost
                          field name ("" for a top-level atomic check)

Validation is a pure function of (descriptor, value). The only exception it
raises is GuardFault, and only for guards built with propagate_faults=True.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Union as TypingUnion

from loguru import logger

from shapegate.descriptors import (
    Descriptor,
    Guard,
    Literal,
    Record,
    Union,
    describe,
    render_literal,
)


class GuardFault(Exception):
    """Raised when a guard predicate fails internally and faults must propagate."""

    def __init__(self, descriptor: Guard, value: Any):
        self.descriptor = descriptor
        self.value = value
        super().__init__(f"Guard predicate raised while checking a {type_name(value)} value")


@dataclass(frozen=True)
class Valid:
    """Successful check; value is the conforming (projected) input."""

    value: Any


@dataclass(frozen=True)
class Invalid:
    """
    Failed check.

    Attributes:
        key: Field name the failure is attributed to ("" when not in a record)
        reason: Human-readable failure message
    """

    key: str
    reason: str

    @property
    def details(self) -> Dict[str, str]:
        return {self.key: self.reason}


ValidationOutcome = TypingUnion[Valid, Invalid]


def type_name(value: Any) -> str:
    """Name the JSON type family of a decoded value (string, number, array, ...)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__.lower()


def validate(descriptor: Descriptor, value: Any) -> ValidationOutcome:
    """
    Check a value against a descriptor.

    Args:
        descriptor: Record, Literal, Union or Guard
        value: Decoded request data

    Returns:
        Valid with the conforming value, or Invalid with the first failure

    Raises:
        GuardFault: A guard with propagate_faults=True had a failing predicate
        TypeError: descriptor is not one of the known variants
    """
    if isinstance(descriptor, Record):
        return _validate_record(descriptor, value)
    if isinstance(descriptor, Literal):
        return _validate_literal(descriptor, value)
    if isinstance(descriptor, Union):
        return _validate_union(descriptor, value)
    if isinstance(descriptor, Guard):
        return _validate_guard(descriptor, value)
    raise TypeError(f"Unknown descriptor type: {type(descriptor).__name__}")


def _validate_record(descriptor: Record, value: Any) -> ValidationOutcome:
    if not isinstance(value, Mapping):
        return Invalid("", f"Expected {describe(descriptor)}, but was {type_name(value)}")

    projected: Dict[str, Any] = {}
    for name, sub in descriptor.fields.items():
        if name not in value:
            return Invalid(name, f"Expected {describe(sub)}, but was missing")

        outcome = validate(sub, value[name])
        if isinstance(outcome, Invalid):
            # Nested records already carry their innermost field name
            if outcome.key:
                return outcome
            return Invalid(name, outcome.reason)
        projected[name] = outcome.value

    if descriptor.strict:
        for name in value:
            if name not in descriptor.fields:
                return Invalid(
                    str(name),
                    f"Expected {describe(descriptor)}, but had unknown field",
                )

    return Valid(projected)


def _same_family(expected: Any, actual: Any) -> bool:
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool)
    if isinstance(expected, (int, float)):
        return isinstance(actual, (int, float))
    if expected is None:
        return actual is None
    return type(expected) is type(actual)


def _validate_literal(descriptor: Literal, value: Any) -> ValidationOutcome:
    expected = descriptor.value
    if _same_family(expected, value):
        if value == expected:
            return Valid(value)
        return Invalid(
            "",
            f"Expected literal `{render_literal(expected)}`, but was `{render_literal(value)}`",
        )
    return Invalid(
        "",
        f"Expected literal `{render_literal(expected)}`, but was {type_name(value)}",
    )


def _validate_union(descriptor: Union, value: Any) -> ValidationOutcome:
    first_failure = None
    for alternative in descriptor.alternatives:
        outcome = validate(alternative, value)
        if isinstance(outcome, Valid):
            return outcome
        if first_failure is None:
            first_failure = outcome

    # A keyed failure comes from a record alternative and points at a real field
    if first_failure is not None and first_failure.key:
        return first_failure
    return Invalid("", f"Expected {describe(descriptor)}, but was {type_name(value)}")


def _validate_guard(descriptor: Guard, value: Any) -> ValidationOutcome:
    try:
        accepted = bool(descriptor.predicate(value))
    except Exception as e:
        if descriptor.propagate_faults:
            raise GuardFault(descriptor, value) from e
        logger.opt(exception=e).debug(
            "[Validation] Guard predicate raised on {} value, treating as failed check",
            type_name(value),
        )
        accepted = False

    if accepted:
        return Valid(value)
    return Invalid("", f"Failed constraint check for {describe(descriptor)}")
