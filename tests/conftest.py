"""Shared fixtures for orderflow tests."""

from __future__ import annotations

import pytest

from orderflow.pipelines.orders import build_order_definition
from tests.fakes import MemoryOrchestrationBackend, RecordingSleep


@pytest.fixture
def backend():
    return MemoryOrchestrationBackend()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def order_definition():
    return build_order_definition()


@pytest.fixture
def order():
    return {"orderId": "order-1", "items": ["a", "b"], "total": 10.0}
