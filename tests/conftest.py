# -*- coding: utf-8 -*-

"""
Shared pytest fixtures for Shapegate tests.
"""

import pytest
from fastapi.testclient import TestClient

from shapegate.descriptors import Guard, Literal, Record, Union
from shapegate.middleware.stage import RequestContext


@pytest.fixture
def test_client():
    """FastAPI TestClient bound to the application from main.py."""
    from main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def email_guard():
    """Guard accepting strings ending with @gmail.com."""
    return Guard(lambda value: isinstance(value, str) and value.endswith("@gmail.com"))


@pytest.fixture
def payload_descriptor(email_guard):
    return Record({"email": email_guard})


@pytest.fixture
def query_descriptor():
    return Record({"foo": Literal("bar")})


@pytest.fixture
def path_descriptor():
    return Record({"id": Union(Literal("1"), Literal("2"))})


@pytest.fixture
def valid_context():
    """Context whose three slices all satisfy the demo descriptors."""
    return RequestContext(
        body={"email": "test@gmail.com"},
        query={"foo": "bar"},
        path_params={"id": "1"},
    )
