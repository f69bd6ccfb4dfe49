"""The order-processing pipeline: validate, pay, fulfil, ship."""

from __future__ import annotations

from orderflow.models.workflow import FieldMapping, WorkflowDefinition
from orderflow.orchestration.postconditions import ShippedOrderPostcondition

ORDER_REQUIRED_FIELDS: tuple[str, ...] = ("orderId", "items", "total")
SHIPPED_STATUS = "SHIPPED"
DEFAULT_TRACKING_NUMBER = "TRACK123"


def _forward(**set_fields: object) -> FieldMapping:
    return FieldMapping(pass_through=ORDER_REQUIRED_FIELDS, set_fields=set_fields)


def build_order_definition(tracking_number: str = DEFAULT_TRACKING_NUMBER) -> WorkflowDefinition:
    return WorkflowDefinition.linear(
        [
            ("ValidateOrder", _forward(status="VALIDATED")),
            ("ProcessPayment", _forward(status="PAYMENT_PROCESSED")),
            ("FulfillOrder", _forward(status="FULFILLED")),
            ("ShipOrder", _forward(status=SHIPPED_STATUS, trackingNumber=tracking_number)),
        ],
        required_input_fields=ORDER_REQUIRED_FIELDS,
        comment="Order processing workflow",
    )


def order_postcondition() -> ShippedOrderPostcondition:
    return ShippedOrderPostcondition(
        status_field="status", expected_status=SHIPPED_STATUS, tracking_field="trackingNumber",
    )
