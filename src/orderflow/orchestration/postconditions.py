"""Terminal-stage output checks applied on top of the backend's SUCCEEDED."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from orderflow.core.exceptions import PostconditionViolation


@runtime_checkable
class Postcondition(Protocol):
    def check(self, output: Any) -> None: ...


class ShippedOrderPostcondition:
    """A shipped order must carry the shipped status and a tracking number."""

    def __init__(
        self,
        status_field: str = "status",
        expected_status: str = "SHIPPED",
        tracking_field: str = "trackingNumber",
    ) -> None:
        self.status_field = status_field
        self.expected_status = expected_status
        self.tracking_field = tracking_field

    def check(self, output: Any) -> None:
        if not isinstance(output, dict):
            raise PostconditionViolation("$", f"output is not a JSON object: {output!r}")

        status = output.get(self.status_field)
        if status != self.expected_status:
            raise PostconditionViolation(
                self.status_field, f"expected {self.expected_status!r}, got {status!r}"
            )

        tracking = output.get(self.tracking_field)
        if not isinstance(tracking, str) or not tracking.strip():
            raise PostconditionViolation(self.tracking_field, "missing or empty tracking identifier")
