# Copyright (c) 2023 - 2025 Chair for Design Automation, TUM
# Copyright (c) 2025 Munich Quantum Software Company GmbH
# All rights reserved.
#
# SPDX-License-Identifier: MIT
#
# Licensed under the MIT License

"""Results of solving a mapping problem."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .circuit import Qubit, qubit_key
from .layout import Layout

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping as MappingType

__all__ = [
    "CostSummary",
    "Mapping",
    "MappingResults",
    "Remapping",
    "ScheduledOperation",
]


def __dir__() -> list[str]:
    return __all__


Assignment = tuple[tuple[Qubit, int], ...]


def _freeze(assignment: MappingType[Qubit, int]) -> Assignment:
    return tuple(sorted(assignment.items(), key=lambda item: qubit_key(item[0])))


@dataclass(frozen=True)
class ScheduledOperation:
    """An operation of the routed schedule.

    Attributes:
        kind: ``"gate"`` for an operation of the input circuit, ``"swap"`` for an inserted routing primitive.
        name: The operation name.
        operands: The physical nodes the operation acts on. For swaps, the node whose content moves comes first.
        logical: The logical operands of a gate.
        source_index: Program-order index of a gate in the input circuit.
    """

    kind: str
    name: str
    operands: tuple[int, ...]
    logical: Optional[tuple[Qubit, ...]] = None
    source_index: Optional[int] = None

    @classmethod
    def swap(cls, u: int, v: int) -> ScheduledOperation:
        return cls("swap", "swap", (u, v))

    @property
    def is_swap(self) -> bool:
        return self.kind == "swap"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "name": self.name, "operands": list(self.operands)}
        if self.kind == "gate":
            data["logical"] = list(self.logical or ())
            data["source_index"] = self.source_index
        return data


@dataclass(frozen=True)
class Remapping:
    """The full assignment right after the schedule operation at ``position``."""

    position: int
    assignment: Assignment


@dataclass(frozen=True)
class Mapping:
    """Assignment of logical qubits to physical nodes over the course of the schedule.

    Assignments are stored as ``(logical, physical)`` pairs ordered by logical qubit.
    """

    initial: Assignment
    remappings: tuple[Remapping, ...] = ()
    final: Assignment = ()

    def initial_layout(self) -> dict[Qubit, int]:
        return dict(self.initial)

    def final_layout(self) -> dict[Qubit, int]:
        return dict(self.final)


@dataclass(frozen=True)
class CostSummary:
    """Cost of a routed schedule.

    Attributes:
        schedule_length: Number of operations in the schedule.
        inserted_primitives: Number of inserted routing primitives.
        routing_weight: Sum of the edge weights of all inserted routing primitives.
    """

    schedule_length: int
    inserted_primitives: int
    routing_weight: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule_length": self.schedule_length,
            "inserted_primitives": self.inserted_primitives,
            "routing_weight": self.routing_weight,
        }


@dataclass(frozen=True)
class MappingResults:
    """Mapping, schedule and cost of a solved mapping problem.

    ``statistics`` carries search details (mode, expanded nodes, passes) and is not part of equality.
    """

    mapping: Mapping
    schedule: tuple[ScheduledOperation, ...]
    cost: CostSummary
    statistics: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_schedule(
        cls,
        initial: MappingType[Qubit, int],
        schedule: Iterable[ScheduledOperation],
        routing_weight: float,
        statistics: dict[str, Any] | None = None,
    ) -> MappingResults:
        """Assemble results by replaying the swaps of a schedule from the initial assignment."""
        schedule = tuple(schedule)
        layout = Layout(initial)
        remappings = []
        for position, op in enumerate(schedule):
            if op.is_swap:
                layout.swap(*op.operands)
                remappings.append(Remapping(position, _freeze(layout.as_dict())))
        mapping = Mapping(_freeze(initial), tuple(remappings), _freeze(layout.as_dict()))
        cost = CostSummary(len(schedule), len(remappings), routing_weight)
        return cls(mapping, schedule, cost, dict(statistics or {}))

    @property
    def swaps(self) -> int:
        return self.cost.inserted_primitives
