# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Request validation middleware pipeline for Shapegate.

Architecture:
    Each stage binds one request slice to one descriptor. The pipeline runs
    the stages of a route in the order they were attached and stops at the
    first failure, so the handler only ever sees fully validated data.

Stage execution order (demo routes):
    1. Body        - JSON payload
    2. Query       - query string parameters
    3. Path params - route placeholders

The FastAPI boundary (request reading, error responses) lives in
shapegate.middleware.request_adapter.
"""

from shapegate.middleware.pipeline import (
    AllPassed,
    PipelineOutcome,
    Rejected,
    ValidationPipeline,
    dispatch,
)
from shapegate.middleware.stage import (
    Continue,
    Halt,
    PipelineStage,
    RequestContext,
    SliceSelector,
    run_stage,
)

__all__ = [
    "AllPassed",
    "PipelineOutcome",
    "Rejected",
    "ValidationPipeline",
    "dispatch",
    "Continue",
    "Halt",
    "PipelineStage",
    "RequestContext",
    "SliceSelector",
    "run_stage",
]
