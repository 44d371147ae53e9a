# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Validation pipeline orchestrator.

Runs the stages attached to a route in attachment order and stops at the
first one that fails. Later stages never run after a failure, so their errors
are never reported even when their slice is invalid too.

Typical order:
  1. Body stage        - errors here win over everything else
  2. Query stage
  3. Path params stage
"""

from dataclasses import dataclass
from typing import Iterable, Tuple, Union as TypingUnion

from loguru import logger

from shapegate.descriptors import Descriptor
from shapegate.middleware.stage import (
    Halt,
    PipelineStage,
    RequestContext,
    SliceSelector,
    run_stage,
)
from shapegate.validation import Invalid


@dataclass(frozen=True)
class AllPassed:
    """Every stage passed; all validated slices are in the context."""


@dataclass(frozen=True)
class Rejected:
    """
    A stage failed.

    Attributes:
        failure: Failure reported by the stage
        at: Index of the failing stage in attachment order
    """

    failure: Invalid
    at: int


PipelineOutcome = TypingUnion[AllPassed, Rejected]


def dispatch(stages: Iterable[PipelineStage], context: RequestContext) -> PipelineOutcome:
    """
    Run stages in order, short-circuiting on the first failure.

    Args:
        stages: Stages in attachment order
        context: Context of the current request

    Returns:
        AllPassed, or Rejected with the failure and index of the first failing stage
    """
    for index, stage in enumerate(stages):
        outcome = run_stage(stage, context)
        if isinstance(outcome, Halt):
            logger.debug(
                "[ValidationPipeline] Rejected at stage {} ({}): {}",
                index,
                stage.selector.value,
                outcome.failure.details,
            )
            return Rejected(outcome.failure, at=index)
    return AllPassed()


@dataclass(frozen=True)
class ValidationPipeline:
    """
    Immutable, ordered set of stages attached to a route.

    Builder methods return a new pipeline and leave the original untouched,
    so one pipeline value can be shared by any number of routes and requests.

    Example:
        >>> pipeline = ValidationPipeline().body(Payload).query(Query).path_params(Params)
        >>> outcome = pipeline.dispatch(context)
    """

    stages: Tuple[PipelineStage, ...] = ()

    def then(self, selector: SliceSelector, descriptor: Descriptor) -> "ValidationPipeline":
        return ValidationPipeline(self.stages + (PipelineStage(selector, descriptor),))

    def body(self, descriptor: Descriptor) -> "ValidationPipeline":
        return self.then(SliceSelector.BODY, descriptor)

    def query(self, descriptor: Descriptor) -> "ValidationPipeline":
        return self.then(SliceSelector.QUERY, descriptor)

    def path_params(self, descriptor: Descriptor) -> "ValidationPipeline":
        return self.then(SliceSelector.PATH_PARAMS, descriptor)

    def dispatch(self, context: RequestContext) -> PipelineOutcome:
        return dispatch(self.stages, context)
