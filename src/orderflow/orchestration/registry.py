"""DefinitionRegistry: hands workflow definitions to the orchestration backend."""

from __future__ import annotations

import json
import logging
import time
from typing import Callable

from orderflow.core.exceptions import MalformedDefinition, RegistrationFailed
from orderflow.core.protocols import IOrchestrationBackend
from orderflow.models.workflow import RegisteredDefinition, WorkflowDefinition

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Registers definitions with the backend.

    Not idempotent: each ``register`` call creates a new state machine.
    """

    def __init__(
        self,
        backend: IOrchestrationBackend,
        *,
        role_arn: str,
        name_prefix: str = "order-processing",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._role_arn = role_arn
        self._name_prefix = name_prefix
        self._clock = clock

    def register(self, definition: WorkflowDefinition, *, name: str | None = None) -> RegisteredDefinition:
        name = name or f"{self._name_prefix}-{int(self._clock() * 1000)}"
        handle = self._backend.register(name, definition.to_json(), self._role_arn)
        if not handle:
            raise RegistrationFailed(f"Backend returned no handle for definition {name!r}")

        logger.info(
            "Registered workflow definition",
            extra={"definition_name": name, "definition_handle": handle,
                   "stages": len(definition.stages)},
        )
        return RegisteredDefinition(
            handle=handle, name=name, definition=definition, role_arn=self._role_arn,
        )

    def verify(self, registered: RegisteredDefinition) -> None:
        """Check the backend's stored copy matches what was registered."""
        described = self._backend.describe_definition(registered.handle)

        role_arn = described.get("roleArn")
        if role_arn != registered.role_arn:
            raise RegistrationFailed(
                f"Definition {registered.handle} has role {role_arn!r}, expected {registered.role_arn!r}"
            )

        raw = described.get("definition")
        if not raw:
            raise RegistrationFailed(f"Definition {registered.handle} has no stored document")
        try:
            stored = WorkflowDefinition.from_document(
                raw, required_input_fields=registered.definition.required_input_fields,
            )
        except MalformedDefinition as exc:
            raise RegistrationFailed(f"Stored definition {registered.handle} is invalid: {exc}") from exc

        if stored.to_document() != registered.definition.to_document():
            raise RegistrationFailed(
                f"Stored definition {registered.handle} differs from the registered one: "
                f"{json.dumps(stored.to_document(), sort_keys=True)}"
            )
