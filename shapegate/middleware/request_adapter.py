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
FastAPI boundary for the validation pipeline.

Reads the raw slices of a Starlette request into a RequestContext and wraps
route handlers so they run only when every stage passed:

    @router.post("/items/{id}")
    @validated(ITEM_PIPELINE)
    async def create_item(context: RequestContext):
        return {"payload": context.payload}

Rejections never reach the handler; they are answered here with the 400
error envelope of the failing stage.
"""

import inspect
import json
from typing import Any, Awaitable, Callable, Dict, Optional, Union as TypingUnion

from fastapi import Request
from fastapi.responses import JSONResponse
from loguru import logger

from shapegate.config import MAX_BODY_SIZE
from shapegate.errors import (
    BodyParseError,
    BodyTooLargeError,
    body_parse_error_response,
    rejection_response,
)
from shapegate.middleware.pipeline import Rejected, ValidationPipeline
from shapegate.middleware.stage import RequestContext

Handler = Callable[[RequestContext], TypingUnion[Any, Awaitable[Any]]]


def collect_query_params(request: Request) -> Dict[str, Any]:
    """
    Collect query parameters, keeping every value of repeated keys.

    Returns:
        key -> str for single keys, key -> list of str for repeated keys
    """
    query: Dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key not in query:
            query[key] = value
        elif isinstance(query[key], list):
            query[key].append(value)
        else:
            query[key] = [query[key], value]
    return query


def is_json_content_type(content_type: Optional[str]) -> bool:
    """Match application/json and structured +json media types, ignoring parameters."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def read_body(request: Request, limit: int) -> bytes:
    """
    Read the raw body, refusing anything larger than limit bytes.

    The declared Content-Length is checked before reading; the stream is
    counted as it arrives for chunked bodies.

    Raises:
        BodyTooLargeError: Body exceeds limit
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > limit:
        raise BodyTooLargeError(int(declared), limit)

    received = bytearray()
    async for chunk in request.stream():
        received.extend(chunk)
        if len(received) > limit:
            raise BodyTooLargeError(len(received), limit)
    return bytes(received)


async def read_request_context(request: Request, limit: Optional[int] = None) -> RequestContext:
    """
    Build the context of a request from its raw slices.

    Only JSON bodies (application/json or +json) are decoded. Other content
    types and empty bodies are read as an empty object.

    Args:
        request: Incoming Starlette request
        limit: Maximum body size in bytes (default: MAX_BODY_SIZE)

    Raises:
        BodyTooLargeError: Body exceeds the size limit
        BodyParseError: Body is present but is not valid UTF-8 JSON
    """
    body: Any = {}
    if is_json_content_type(request.headers.get("content-type")):
        raw_body = await read_body(request, MAX_BODY_SIZE if limit is None else limit)
        if raw_body.strip():
            try:
                body = json.loads(raw_body)
            except (ValueError, RecursionError) as e:
                # RecursionError: nesting deeper than the decoder can follow
                raise BodyParseError(str(e)) from e

    return RequestContext(
        body=body,
        query=collect_query_params(request),
        path_params=dict(request.path_params),
    )


def unreadable_body_response(request: Request, error: BodyParseError) -> JSONResponse:
    """Log a body that could not be read and render its error envelope."""
    logger.debug(
        "[RequestAdapter] Unreadable body on {} ({}): {}",
        request.url.path,
        error.code,
        error.message,
    )
    return body_parse_error_response(error)


def validated(pipeline: ValidationPipeline) -> Callable[[Handler], Callable[..., Awaitable[Any]]]:
    """
    Attach a validation pipeline to a route handler.

    The wrapped handler receives the RequestContext after all stages passed.
    Sync and async handlers are both supported.

    Args:
        pipeline: Pipeline built at startup for this route

    Returns:
        Decorator producing a FastAPI endpoint that takes the raw Request
    """

    def decorator(handler: Handler) -> Callable[..., Awaitable[Any]]:
        async def endpoint(request: Request):
            try:
                context = await read_request_context(request)
            except BodyParseError as e:
                return unreadable_body_response(request, e)

            outcome = pipeline.dispatch(context)
            if isinstance(outcome, Rejected):
                return rejection_response(outcome)

            result = handler(context)
            if inspect.isawaitable(result):
                result = await result
            return result

        # Not functools.wraps: FastAPI would follow __wrapped__ and read the
        # handler's signature instead of the Request parameter.
        endpoint.__name__ = handler.__name__
        endpoint.__qualname__ = handler.__qualname__
        endpoint.__doc__ = handler.__doc__
        return endpoint

    return decorator
