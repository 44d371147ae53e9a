# -*- coding: utf-8 -*-

# Shapegate
# Copyright (C) 2025 Jwadow
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Shapegate - request validation pipeline for FastAPI.

Validates the body, query parameters and path parameters of incoming
requests against declarative descriptors before route handlers run.

Modules:
    - config: Configuration and constants
    - descriptors: Record / Literal / Union / Guard shape descriptors
    - validation: Descriptor validation engine and outcomes
    - middleware: Pipeline stages, pipeline orchestrator, FastAPI adapter
    - errors: Error envelopes and outcome -> response translation
    - routes: FastAPI routes
"""

# Version is imported from config.py - the single source of truth
from shapegate.config import APP_VERSION as __version__

__author__ = "Jwadow"

# Descriptors
from shapegate.descriptors import Guard, Literal, Record, Union, describe

# Validation engine
from shapegate.validation import GuardFault, Invalid, Valid, validate

# Pipeline
from shapegate.middleware import (
    AllPassed,
    Rejected,
    RequestContext,
    SliceSelector,
    ValidationPipeline,
)
from shapegate.middleware.request_adapter import validated

# Errors
from shapegate.errors import ValidationErrorInfo, to_response

__all__ = [
    # Version
    "__version__",

    # Descriptors
    "Guard",
    "Literal",
    "Record",
    "Union",
    "describe",

    # Validation engine
    "GuardFault",
    "Invalid",
    "Valid",
    "validate",

    # Pipeline
    "AllPassed",
    "Rejected",
    "RequestContext",
    "SliceSelector",
    "ValidationPipeline",
    "validated",

    # Errors
    "ValidationErrorInfo",
    "to_response",
]
