# -*- coding: utf-8 -*-

"""
Unit tests for the FastAPI boundary (middleware/request_adapter.py).
Tests reading raw slices from a Starlette request and the @validated decorator.
"""

import json
from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from shapegate.descriptors import Literal, Record
from shapegate.errors import BodyParseError, BodyTooLargeError
from shapegate.middleware.pipeline import ValidationPipeline
from shapegate.middleware.request_adapter import read_request_context, validated


def make_request(
    body: bytes = b"",
    query_string: bytes = b"",
    path_params=None,
    content_type: bytes = b"application/json",
    chunk_size: int = 0,
) -> Request:
    """Build a Starlette request from a raw body and query string."""
    headers = [(b"content-type", content_type)] if content_type else []
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/items/1",
        "query_string": query_string,
        "headers": headers,
        "path_params": path_params or {},
    }
    step = chunk_size or len(body) or 1
    chunks = [body[i:i + step] for i in range(0, len(body), step)] or [b""]

    async def receive():
        chunk = chunks.pop(0)
        return {"type": "http.request", "body": chunk, "more_body": bool(chunks)}

    return Request(scope, receive)


class TestReadRequestContext:
    """Tests for read_request_context()."""

    @pytest.mark.asyncio
    async def test_reads_all_slices(self):
        """
        What it does: Verifies body, query and path params are read into the context.
        Purpose: Stages see the raw request data.
        """
        request = make_request(
            body=json.dumps({"email": "test@gmail.com"}).encode(),
            query_string=b"foo=bar",
            path_params={"id": "1"},
        )

        context = await read_request_context(request)

        print(f"Context: {context}")
        assert context.body == {"email": "test@gmail.com"}
        assert context.query == {"foo": "bar"}
        assert context.path_params == {"id": "1"}
        assert context.validated == {}

    @pytest.mark.asyncio
    async def test_repeated_query_keys_become_list(self):
        """
        What it does: Verifies repeated query keys are collected into a list.
        Purpose: Query values are a string or an array of strings.
        """
        request = make_request(query_string=b"foo=bar&foo=baz&foo=qux&x=1")

        context = await read_request_context(request)

        assert context.query == {"foo": ["bar", "baz", "qux"], "x": "1"}

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_object(self):
        """
        What it does: Verifies an empty body is read as {}.
        Purpose: Requests without a body report missing fields, not a type error.
        """
        context = await read_request_context(make_request(body=b""))

        assert context.body == {}

    @pytest.mark.asyncio
    async def test_malformed_json_raises_body_parse_error(self):
        """
        What it does: Verifies undecodable JSON raises BodyParseError.
        Purpose: Decoding errors are reported separately from validation errors.
        """
        with pytest.raises(BodyParseError):
            await read_request_context(make_request(body=b"{not json"))

    @pytest.mark.asyncio
    async def test_deeply_nested_json_raises_body_parse_error(self):
        """
        What it does: Verifies JSON nested beyond the decoder's depth raises BodyParseError.
        Purpose: Valid but pathological bodies get the 400 envelope, not a bare 500.
        """
        depth = 200000
        body = b'{"email": ' + b"[" * depth + b"]" * depth + b"}"

        with pytest.raises(BodyParseError) as exc_info:
            await read_request_context(make_request(body=body), limit=len(body))

        print(f"Error: {exc_info.value.message[:80]}")
        assert exc_info.value.code == "MALFORMED_JSON"

    @pytest.mark.asyncio
    async def test_non_json_content_type_is_empty_object(self):
        """
        What it does: Verifies bodies that are not declared as JSON are not decoded.
        Purpose: Only application/json bodies feed the body stage.
        """
        request = make_request(body=b'{"email": "test@gmail.com"}', content_type=b"text/plain")

        context = await read_request_context(request)

        assert context.body == {}

    @pytest.mark.asyncio
    async def test_missing_content_type_is_empty_object(self):
        request = make_request(body=b'{"email": "test@gmail.com"}', content_type=b"")

        context = await read_request_context(request)

        assert context.body == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content_type",
        [b"application/json; charset=utf-8", b"APPLICATION/JSON", b"application/merge-patch+json"],
    )
    async def test_json_content_type_variants_are_decoded(self, content_type):
        request = make_request(body=b'{"email": "test@gmail.com"}', content_type=content_type)

        context = await read_request_context(request)

        assert context.body == {"email": "test@gmail.com"}

    @pytest.mark.asyncio
    async def test_body_over_limit_raises_body_too_large(self):
        """
        What it does: Verifies a body larger than the limit is refused while streaming.
        Purpose: Request bodies are never buffered without a bound.
        """
        body = json.dumps({"email": "x" * 200}).encode()

        with pytest.raises(BodyTooLargeError) as exc_info:
            await read_request_context(make_request(body=body, chunk_size=16), limit=64)

        assert exc_info.value.limit == 64
        assert exc_info.value.status_code == 413

    @pytest.mark.asyncio
    async def test_declared_content_length_over_limit_is_refused(self):
        """
        What it does: Verifies an oversized Content-Length is refused before reading.
        Purpose: Large uploads are rejected without consuming the stream.
        """

        async def receive():
            raise AssertionError("body must not be read")

        scope = {
            "type": "http",
            "method": "POST",
            "path": "/items/1",
            "query_string": b"",
            "headers": [(b"content-type", b"application/json"), (b"content-length", b"1000")],
            "path_params": {},
        }

        with pytest.raises(BodyTooLargeError) as exc_info:
            await read_request_context(Request(scope, receive), limit=100)

        assert exc_info.value.size == 1000

    @pytest.mark.asyncio
    async def test_body_at_limit_is_accepted(self):
        body = b'{"email": "test@gmail.com"}'

        context = await read_request_context(make_request(body=body, chunk_size=5), limit=len(body))

        assert context.body == {"email": "test@gmail.com"}

    @pytest.mark.asyncio
    async def test_default_limit_comes_from_config(self):
        body = b'{"email": "test@gmail.com"}'

        with patch("shapegate.middleware.request_adapter.MAX_BODY_SIZE", 8):
            with pytest.raises(BodyTooLargeError):
                await read_request_context(make_request(body=body))

    @pytest.mark.asyncio
    async def test_non_object_json_is_kept(self):
        context = await read_request_context(make_request(body=b"[1, 2]"))

        assert context.body == [1, 2]


class TestValidatedDecorator:
    """Tests for the @validated route decorator."""

    @pytest.fixture
    def client(self):
        calls = []
        pipeline = ValidationPipeline().query(Record({"mode": Literal("fast")}))
        app = FastAPI()

        @app.get("/run/{name}")
        @validated(pipeline)
        def run(context):
            """Sync handler."""
            calls.append(context)
            return {"mode": context.params["mode"], "name": context.path_params["name"]}

        with TestClient(app) as test_client:
            test_client.calls = calls
            yield test_client

    def test_handler_runs_after_all_stages_pass(self, client):
        """
        What it does: Verifies the handler receives the validated context.
        Purpose: Success path through the decorator.
        """
        response = client.get("/run/job", params={"mode": "fast", "extra": "1"})

        print(f"Response: {response.status_code} {response.json()}")
        assert response.status_code == 200
        assert response.json() == {"mode": "fast", "name": "job"}
        assert client.calls[0].params == {"mode": "fast"}

    def test_handler_never_sees_rejected_request(self, client):
        """
        What it does: Verifies a rejected request never reaches the handler.
        Purpose: Handlers only run on fully validated data.
        """
        response = client.get("/run/job", params={"mode": "slow"})

        assert response.status_code == 400
        assert response.json()["error"]["details"] == {
            "mode": "Expected literal `fast`, but was `slow`"
        }
        assert client.calls == []

    def test_decorator_keeps_handler_metadata(self):
        """
        What it does: Verifies the endpoint keeps the handler's name and docstring.
        Purpose: OpenAPI operation ids and descriptions stay meaningful.
        """

        async def create_thing(context):
            """Create a thing."""

        endpoint = validated(ValidationPipeline())(create_thing)

        assert endpoint.__name__ == "create_thing"
        assert endpoint.__doc__ == "Create a thing."
        assert not hasattr(endpoint, "__wrapped__")
