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
FastAPI routes for Shapegate.

Contains the demo endpoints:
- / and /health: status
- POST /items/{id}: pipeline attached with the @validated decorator
- POST /inline/{id}: same checks dispatched by the handler itself

Both item routes accept the same requests and produce the same responses.
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from shapegate.config import (
    ALLOWED_EMAIL_DOMAIN,
    APP_VERSION,
    GUARD_FAULTS_PROPAGATE,
    STRICT_RECORD_FIELDS,
)
from shapegate.descriptors import Guard, Literal, Record, Union
from shapegate.errors import BodyParseError, to_response
from shapegate.middleware.pipeline import AllPassed, ValidationPipeline
from shapegate.middleware.request_adapter import (
    read_request_context,
    unreadable_body_response,
    validated,
)
from shapegate.middleware.stage import RequestContext


def is_allowed_email(value: Any) -> bool:
    """Accept only addresses on the configured domain (gmail.com by default)."""
    return isinstance(value, str) and value.endswith(f"@{ALLOWED_EMAIL_DOMAIN}")


# --- Descriptors, built once at import time and shared by every request ---

PAYLOAD = Record(
    {"email": Guard(is_allowed_email, propagate_faults=GUARD_FAULTS_PROPAGATE)},
    strict=STRICT_RECORD_FIELDS,
)

QUERY_PARAMS = Record({"foo": Literal("bar")}, strict=STRICT_RECORD_FIELDS)

PATH_PARAMS = Record({"id": Union(Literal("1"), Literal("2"))})

ITEM_PIPELINE = ValidationPipeline().body(PAYLOAD).query(QUERY_PARAMS).path_params(PATH_PARAMS)


router = APIRouter()


def _log_received(context: RequestContext) -> None:
    logger.info("Received payload: {}", context.payload)
    logger.info("Received params: {}", context.params)


def _item_response(context: RequestContext) -> dict:
    return {"payload": context.payload, "query": context.params, "params": context.path}


@router.get("/")
async def root():
    """
    Health check endpoint.

    Returns:
        Status and application version
    """
    return {"status": "ok", "message": "Shapegate is running", "version": APP_VERSION}


@router.get("/health")
async def health():
    """
    Detailed health check.

    Returns:
        Status, version and number of validation stages on the item routes
    """
    return {
        "status": "healthy",
        "version": APP_VERSION,
        "item_stages": len(ITEM_PIPELINE.stages),
    }


@router.post("/items/{id}")
@validated(ITEM_PIPELINE)
async def create_item(context: RequestContext):
    """
    Echo the validated body, query and path parameters.

    Runs only after the body, query and path stages passed.
    """
    _log_received(context)
    return _item_response(context)


@router.post("/inline/{id}")
async def create_item_inline(request: Request):
    """
    Same contract as /items/{id}, with the pipeline dispatched in the handler.
    """
    try:
        context = await read_request_context(request)
    except BodyParseError as e:
        return unreadable_body_response(request, e)

    outcome = ITEM_PIPELINE.dispatch(context)
    body = None
    if isinstance(outcome, AllPassed):
        _log_received(context)
        body = _item_response(context)

    status_code, content = to_response(outcome, body)
    return JSONResponse(status_code=status_code, content=content)
