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
Wire-level error envelopes for rejected requests.

This module turns pipeline outcomes into HTTP status codes and JSON bodies.

Architecture:
- ValidationErrorInfo: Structured error carried in the envelope
- build_error_envelope(): Wraps error info into {"error": {...}}
- to_response(): Pipeline outcome -> (status_code, body)
- rejection_response(): Same envelope as a FastAPI JSONResponse
- body_parse_error_response(): 400 for malformed JSON, 413 for oversized bodies
- guard_fault_response(): 500 envelope for guard predicates that raised

Example:
    >>> status, body = to_response(Rejected(Invalid("foo", "Expected \\"bar\\", but was missing"), at=1))
    >>> status
    400
    >>> body["error"]["code"]
    'CONTENT_INCORRECT'
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from fastapi.responses import JSONResponse

from shapegate.middleware.pipeline import AllPassed, PipelineOutcome, Rejected
from shapegate.validation import GuardFault

VALIDATION_ERROR_NAME = "ValidationError"
CONTENT_INCORRECT = "CONTENT_INCORRECT"

BODY_PARSE_ERROR_NAME = "BodyParseError"
MALFORMED_JSON = "MALFORMED_JSON"

PAYLOAD_TOO_LARGE_NAME = "PayloadTooLargeError"
PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"

GUARD_FAULT_NAME = "GuardFault"
INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ValidationErrorInfo:
    """
    Structured information about a rejected request.

    Attributes:
        details: Field name -> reason for the single failing field
        name: Error kind shown to clients
        code: Machine-readable error code
    """

    details: Dict[str, str] = field(default_factory=dict)
    name: str = VALIDATION_ERROR_NAME
    code: str = CONTENT_INCORRECT

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "code": self.code, "details": dict(self.details)}


class BodyParseError(Exception):
    """Request body is not valid JSON."""

    status_code = 400
    name = BODY_PARSE_ERROR_NAME
    code = MALFORMED_JSON

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_info(self) -> ValidationErrorInfo:
        return ValidationErrorInfo(details={"": self.message}, name=self.name, code=self.code)


class BodyTooLargeError(BodyParseError):
    """Request body exceeds the configured size limit."""

    status_code = 413
    name = PAYLOAD_TOO_LARGE_NAME
    code = PAYLOAD_TOO_LARGE

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"request entity too large (limit: {limit} bytes)")


def build_error_envelope(info: ValidationErrorInfo) -> Dict[str, Any]:
    """Wrap error info into the {"error": {...}} envelope."""
    return {"error": info.to_dict()}


def to_response(
    outcome: PipelineOutcome,
    body: Optional[Any] = None,
    status_code: int = 200,
) -> Tuple[int, Any]:
    """
    Translate a pipeline outcome into a status code and response body.

    Args:
        outcome: AllPassed or Rejected
        body: Handler-produced body, used only when all stages passed
        status_code: Handler-chosen status, used only when all stages passed

    Returns:
        (status_code, body); rejections always map to 400 with the envelope
        of the failing stage only
    """
    if isinstance(outcome, Rejected):
        info = ValidationErrorInfo(details=outcome.failure.details)
        return 400, build_error_envelope(info)
    if isinstance(outcome, AllPassed):
        return status_code, body
    raise TypeError(f"Unknown pipeline outcome: {type(outcome).__name__}")


def rejection_response(outcome: Rejected) -> JSONResponse:
    """Render a rejected pipeline outcome as a 400 JSONResponse."""
    status_code, body = to_response(outcome)
    return JSONResponse(status_code=status_code, content=body)


def body_parse_error_response(error: BodyParseError) -> JSONResponse:
    """Render an unreadable body as a JSONResponse (400 malformed, 413 too large)."""
    return JSONResponse(status_code=error.status_code, content=build_error_envelope(error.to_info()))


def guard_fault_response(fault: GuardFault) -> JSONResponse:
    """Render a propagated guard fault as a 500 JSONResponse without internals."""
    info = ValidationErrorInfo(name=GUARD_FAULT_NAME, code=INTERNAL_ERROR)
    return JSONResponse(status_code=500, content=build_error_envelope(info))
