"""Workflow definition model: stages, field mappings and the linear pipeline.

A definition is a single directed path of ``Pass`` states from ``start_at`` to
exactly one terminal stage. It is validated on construction and immutable
afterwards. ``to_document`` renders it as an Amazon States Language document
and ``from_document`` parses one back.
"""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Any, Iterator, Optional, Sequence

from pydantic import BaseModel, Field, model_validator

from orderflow.core.exceptions import MalformedDefinition
from orderflow.core.types import JsonDict

_PATH_SUFFIX = ".$"


class FieldMapping(BaseModel):
    """Declarative transform: copy some input fields, add literal ones."""

    model_config = {"frozen": True}

    pass_through: tuple[str, ...] = ()
    set_fields: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _freeze_literals(self) -> FieldMapping:
        object.__setattr__(self, "set_fields", MappingProxyType(dict(self.set_fields)))
        return self

    @property
    def produced_fields(self) -> frozenset[str]:
        return frozenset(self.pass_through) | frozenset(self.set_fields)

    def apply(self, record: JsonDict) -> JsonDict:
        out = {name: record[name] for name in self.pass_through if name in record}
        out.update(self.set_fields)
        return out

    def to_parameters(self) -> JsonDict:
        params: JsonDict = {f"{name}{_PATH_SUFFIX}": f"$.{name}" for name in self.pass_through}
        params.update(self.set_fields)
        return params

    @classmethod
    def from_parameters(cls, params: JsonDict) -> FieldMapping:
        pass_through: list[str] = []
        set_fields: JsonDict = {}
        for key, value in params.items():
            if key.endswith(_PATH_SUFFIX):
                name = key[: -len(_PATH_SUFFIX)]
                if value != f"$.{name}":
                    raise MalformedDefinition(
                        f"Unsupported path mapping {key!r}: {value!r} (only same-name copies)"
                    )
                pass_through.append(name)
            else:
                set_fields[key] = value
        return cls(pass_through=tuple(pass_through), set_fields=set_fields)


class Stage(BaseModel):
    """One named step; ``next`` is None for the terminal stage."""

    model_config = {"frozen": True}

    name: str
    transform: FieldMapping = Field(default_factory=FieldMapping)
    next: Optional[str] = None
    comment: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.next is None

    def to_state(self) -> JsonDict:
        state: JsonDict = {"Type": "Pass"}
        if self.comment:
            state["Comment"] = self.comment
        state["Parameters"] = self.transform.to_parameters()
        if self.next is None:
            state["End"] = True
        else:
            state["Next"] = self.next
        return state


class WorkflowDefinition(BaseModel):
    """A validated linear pipeline of stages."""

    model_config = {"frozen": True}

    start_at: str
    stages: dict[str, Stage]
    required_input_fields: tuple[str, ...] = ()
    comment: str = ""

    @model_validator(mode="after")
    def _check_structure(self) -> WorkflowDefinition:
        if not self.stages:
            raise MalformedDefinition("Definition has no stages")

        for key, stage in self.stages.items():
            if key != stage.name:
                raise MalformedDefinition(f"Stage registered as {key!r} is named {stage.name!r}")
            if stage.next == stage.name:
                raise MalformedDefinition(f"Stage {stage.name!r} is its own successor")
            if stage.next is not None and stage.next not in self.stages:
                raise MalformedDefinition(
                    f"Stage {stage.name!r} points to unknown stage {stage.next!r}"
                )

        terminals = [s.name for s in self.stages.values() if s.next is None]
        if len(terminals) > 1:
            raise MalformedDefinition(f"Ambiguous terminal: {', '.join(terminals)} have no successor")

        if self.start_at not in self.stages:
            raise MalformedDefinition(f"Start stage {self.start_at!r} is not defined")

        seen: set[str] = set()
        current: Optional[str] = self.start_at
        while current is not None:
            if current in seen:
                raise MalformedDefinition(f"Cycle detected at stage {current!r}")
            seen.add(current)
            current = self.stages[current].next

        unreachable = [name for name in self.stages if name not in seen]
        if unreachable:
            raise MalformedDefinition(
                f"Stage(s) not reachable from {self.start_at!r}: {', '.join(unreachable)}"
            )

        # Every field a stage receives must survive into its output.
        carried = set(self.required_input_fields)
        for stage in self.walk():
            dropped = sorted(carried - stage.transform.produced_fields)
            if dropped:
                raise MalformedDefinition(
                    f"Stage {stage.name!r} drops field(s) it receives: {', '.join(dropped)}"
                )
            carried |= stage.transform.produced_fields

        # Read-only once validated.
        object.__setattr__(self, "stages", MappingProxyType(dict(self.stages)))
        return self

    # ---- construction ----

    @classmethod
    def build(
        cls,
        stages: Sequence[Stage],
        *,
        start_at: str | None = None,
        required_input_fields: Sequence[str] = (),
        comment: str = "",
    ) -> WorkflowDefinition:
        """Build from declared stages; ``start_at`` defaults to the first one."""
        if not stages:
            raise MalformedDefinition("Definition has no stages")
        by_name: dict[str, Stage] = {}
        for stage in stages:
            if stage.name in by_name:
                raise MalformedDefinition(f"Duplicate stage name {stage.name!r}")
            by_name[stage.name] = stage
        return cls(
            start_at=start_at if start_at is not None else stages[0].name,
            stages=by_name,
            required_input_fields=tuple(required_input_fields),
            comment=comment,
        )

    @classmethod
    def linear(
        cls,
        entries: Sequence[tuple[str, FieldMapping]],
        *,
        required_input_fields: Sequence[str] = (),
        comment: str = "",
    ) -> WorkflowDefinition:
        """Chain ``(name, transform)`` entries in order; the last is terminal."""
        stages = [
            Stage(
                name=name,
                transform=transform,
                next=entries[i + 1][0] if i + 1 < len(entries) else None,
            )
            for i, (name, transform) in enumerate(entries)
        ]
        return cls.build(stages, required_input_fields=required_input_fields, comment=comment)

    # ---- traversal ----

    def walk(self) -> Iterator[Stage]:
        """Yield stages from the start stage to the terminal stage."""
        current: Optional[str] = self.start_at
        while current is not None:
            stage = self.stages[current]
            yield stage
            current = stage.next

    @property
    def terminal_stage(self) -> Stage:
        return next(s for s in self.stages.values() if s.is_terminal)

    def simulate(self, record: JsonDict) -> JsonDict:
        """Run every transform along the path and return the terminal output."""
        out = dict(record)
        for stage in self.walk():
            out = stage.transform.apply(out)
        return out

    # ---- Amazon States Language ----

    def to_document(self) -> JsonDict:
        doc: JsonDict = {}
        if self.comment:
            doc["Comment"] = self.comment
        doc["StartAt"] = self.start_at
        doc["States"] = {name: stage.to_state() for name, stage in self.stages.items()}
        return doc

    def to_json(self) -> str:
        return json.dumps(self.to_document())

    @classmethod
    def from_document(
        cls, doc: JsonDict | str, *, required_input_fields: Sequence[str] = ()
    ) -> WorkflowDefinition:
        if isinstance(doc, str):
            try:
                doc = json.loads(doc)
            except json.JSONDecodeError as exc:
                raise MalformedDefinition(f"Definition is not valid JSON: {exc}") from exc
        if not isinstance(doc, dict) or "StartAt" not in doc or "States" not in doc:
            raise MalformedDefinition("Definition is missing StartAt or States")

        stages: list[Stage] = []
        for name, state in doc["States"].items():
            if state.get("Type") != "Pass":
                raise MalformedDefinition(f"State {name!r} has unsupported type {state.get('Type')!r}")
            if state.get("End") and "Next" in state:
                raise MalformedDefinition(f"State {name!r} declares both Next and End")
            if not state.get("End") and "Next" not in state:
                raise MalformedDefinition(f"State {name!r} declares neither Next nor End")
            stages.append(
                Stage(
                    name=name,
                    transform=FieldMapping.from_parameters(state.get("Parameters", {})),
                    next=state.get("Next"),
                    comment=state.get("Comment", ""),
                )
            )
        return cls.build(
            stages,
            start_at=doc["StartAt"],
            required_input_fields=required_input_fields,
            comment=doc.get("Comment", ""),
        )


class RegisteredDefinition(BaseModel):
    """A definition accepted by the backend, addressed by its handle."""

    model_config = {"frozen": True}

    handle: str
    name: str
    definition: WorkflowDefinition
    role_arn: str = ""
