"""Tests for ShippedOrderPostcondition."""

from __future__ import annotations

import pytest

from orderflow.core.exceptions import PostconditionViolation
from orderflow.orchestration.postconditions import Postcondition, ShippedOrderPostcondition


@pytest.fixture
def check():
    return ShippedOrderPostcondition().check


def test_satisfies_protocol():
    assert isinstance(ShippedOrderPostcondition(), Postcondition)


def test_shipped_with_tracking_passes(check):
    check({"orderId": "o", "status": "SHIPPED", "trackingNumber": "TRACK123"})


@pytest.mark.parametrize(
    "output, field",
    [
        ({"status": "SHIPPED"}, "trackingNumber"),
        ({"status": "SHIPPED", "trackingNumber": ""}, "trackingNumber"),
        ({"status": "SHIPPED", "trackingNumber": "   "}, "trackingNumber"),
        ({"status": "SHIPPED", "trackingNumber": 123}, "trackingNumber"),
        ({"status": "FULFILLED", "trackingNumber": "T"}, "status"),
        ({"trackingNumber": "T"}, "status"),
        ("SHIPPED", "$"),
        (None, "$"),
    ],
)
def test_violations_name_the_field(check, output, field):
    with pytest.raises(PostconditionViolation) as exc_info:
        check(output)
    assert exc_info.value.field == field


def test_custom_fields():
    check = ShippedOrderPostcondition(
        status_field="state", expected_status="DELIVERED", tracking_field="tracking",
    ).check
    check({"state": "DELIVERED", "tracking": "Z9"})
    with pytest.raises(PostconditionViolation):
        check({"status": "SHIPPED", "trackingNumber": "Z9"})
