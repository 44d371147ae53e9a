# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Pipeline stages and the per-request context they operate on.

A stage binds one request slice (body, query or path parameters) to one
descriptor. Running a stage validates that slice and either lets the pipeline
continue, after storing the validated value in the context, or halts it with
the failure. Stages are created once at route registration and shared by all
requests; the context belongs to a single request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Union as TypingUnion

from shapegate.descriptors import Descriptor
from shapegate.validation import Invalid, Valid, validate


class SliceSelector(str, Enum):
    """Independently validated part of a request."""

    BODY = "body"
    QUERY = "query"
    PATH_PARAMS = "path_params"


@dataclass
class RequestContext:
    """
    Raw and validated slices of one in-flight request.

    Attributes:
        body: Decoded JSON body
        query: Query parameters; repeated keys hold a list of strings
        path_params: Route placeholder name -> string
        validated: Slices written by stages that passed, keyed by selector
    """

    body: Any = None
    query: Dict[str, Any] = field(default_factory=dict)
    path_params: Dict[str, str] = field(default_factory=dict)
    validated: Dict[SliceSelector, Any] = field(default_factory=dict)

    def raw(self, selector: SliceSelector) -> Any:
        if selector is SliceSelector.BODY:
            return self.body
        if selector is SliceSelector.QUERY:
            return self.query
        if selector is SliceSelector.PATH_PARAMS:
            return self.path_params
        raise ValueError(f"Unknown slice selector: {selector!r}")

    @property
    def payload(self) -> Any:
        """Validated body."""
        return self.validated[SliceSelector.BODY]

    @property
    def params(self) -> Any:
        """Validated query parameters."""
        return self.validated[SliceSelector.QUERY]

    @property
    def path(self) -> Any:
        """Validated path parameters."""
        return self.validated[SliceSelector.PATH_PARAMS]


@dataclass(frozen=True)
class PipelineStage:
    """One slice checked against one descriptor."""

    selector: SliceSelector
    descriptor: Descriptor


@dataclass(frozen=True)
class Continue:
    """Stage passed; the next stage may run."""


@dataclass(frozen=True)
class Halt:
    """Stage failed; the pipeline stops here."""

    failure: Invalid


StageOutcome = TypingUnion[Continue, Halt]


def run_stage(stage: PipelineStage, context: RequestContext) -> StageOutcome:
    """
    Validate the stage's slice of the request.

    On success the projected value is stored in context.validated under the
    stage's selector. On failure the context is left untouched.

    Args:
        stage: Stage to run
        context: Context of the current request

    Returns:
        Continue or Halt with the failure
    """
    outcome = validate(stage.descriptor, context.raw(stage.selector))
    if isinstance(outcome, Valid):
        context.validated[stage.selector] = outcome.value
        return Continue()
    return Halt(outcome)
